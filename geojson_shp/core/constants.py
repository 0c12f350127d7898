"""Shared conversion constants — single source of truth.

Centralises dBASE field widths, shapefile type codes and output file
extensions used by the schema builder, the sinks and the driver.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# dBASE field layout
# ---------------------------------------------------------------------------

DEFAULT_NUMERIC_FIELD_SIZE: int = 22
"""Total width (characters) of a Numeric column."""

DEFAULT_NUMERIC_FIELD_DECIMALS: int = 20
"""Fractional digits of a Numeric column."""

DEFAULT_TEXT_FIELD_SIZE: int = 255
"""Maximum width (bytes) of a Text column."""

MAX_FIELD_SIZE: int = 255
"""The field length is stored in a single header byte."""

MAX_FIELD_NAME_BYTES: int = 10
"""dBASE field names are at most 10 bytes (11 with the NUL terminator)."""

DEFAULT_ENCODING: str = "utf-8"

# ---------------------------------------------------------------------------
# Shapefile layout
# ---------------------------------------------------------------------------

SHAPE_TYPE_POINT: int = 1
SHAPE_TYPE_POLYLINE: int = 3

MIN_LINE_VERTICES: int = 2

SHP_EXTENSION: str = ".shp"
SHX_EXTENSION: str = ".shx"
DBF_EXTENSION: str = ".dbf"

OUTPUT_EXTENSIONS: tuple[str, str, str] = (SHP_EXTENSION, SHX_EXTENSION, DBF_EXTENSION)
