"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Field widths, shape type codes, file extensions
- exceptions: Conversion exception hierarchy
"""
