"""Conversion driver.

Runs the end-to-end workflow for one GeoJSON document:
1. Parse document → FeatureCollection
2. Infer schema from the first feature → open sinks
3. Per feature → transcode geometry + assemble record → write
4. Close sinks → ConversionResult
"""
