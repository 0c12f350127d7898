"""pyshp-backed shapefile sinks.

Two independent ``shapefile.Writer`` instances back the two sinks:

- ``ShapefileGeometrySink`` writes the ``.shp`` / ``.shx`` pair.
- ``ShapefileAttributeSink`` writes the ``.dbf`` table.

Keeping them separate lets each stream be finalised (or abandoned) on
its own; pyshp only enforces shape/record balance when one writer owns
both streams.
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import TYPE_CHECKING

import shapefile

from geojson_shp.core.config import ConverterConfig
from geojson_shp.core.constants import (
    DBF_EXTENSION,
    OUTPUT_EXTENSIONS,
    SHP_EXTENSION,
    SHX_EXTENSION,
)
from geojson_shp.core.exceptions import ValidationError
from geojson_shp.models.schema import ColumnKind
from geojson_shp.models.shape import ShapeKind
from geojson_shp.sinks.base import AttributeSink, GeometrySink, SinkIOError

if TYPE_CHECKING:
    from geojson_shp.models.schema import Record, Schema
    from geojson_shp.models.shape import ShapeRecord

logger = logging.getLogger("geojson_shp.sinks.shapefile_writer")


class MixedShapeTypeError(ValidationError):
    """Raised when a shape's kind differs from the kind already in the file.

    A shapefile holds a single shape type, fixed by its first record.
    """

    default_stage = "write_output"
    default_code = "MIXED_SHAPE_TYPES"


class AttributeEncodingError(ValidationError):
    """Raised when a Text value cannot be represented in the table encoding."""

    default_stage = "write_output"
    default_code = "ATTRIBUTE_ENCODING_FAILED"


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def normalize_output_base(output_base: Path | str) -> Path:
    """Strip a trailing ``.shp``/``.shx``/``.dbf`` suffix from *output_base*."""
    base = Path(output_base)
    if base.suffix.lower() in OUTPUT_EXTENSIONS:
        base = base.with_suffix("")
    return base


def output_paths(output_base: Path | str) -> tuple[Path, Path, Path]:
    """Return the ``(.shp, .shx, .dbf)`` paths for *output_base*."""
    base = normalize_output_base(output_base)
    return (
        base.with_name(base.name + SHP_EXTENSION),
        base.with_name(base.name + SHX_EXTENSION),
        base.with_name(base.name + DBF_EXTENSION),
    )


def remove_output(output_base: Path | str) -> list[Path]:
    """Delete whichever of the three output files exist.

    Returns:
        The paths that were removed.
    """
    removed: list[Path] = []
    for path in output_paths(output_base):
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        removed.append(path)
    return removed


def create_shapefile_sinks(
    output_base: Path | str,
    config: ConverterConfig | None = None,
) -> tuple[GeometrySink, AttributeSink]:
    """Build the default geometry/attribute sink pair for *output_base*."""
    config = config or ConverterConfig()
    shp_path, shx_path, dbf_path = output_paths(output_base)
    return (
        ShapefileGeometrySink(shp_path, shx_path),
        ShapefileAttributeSink(dbf_path, encoding=config.encoding),
    )


# Errors pyshp and the file layer raise while writing.
_WRITE_ERRORS: tuple[type[Exception], ...] = (
    shapefile.ShapefileException,
    OSError,
    struct.error,
    ValueError,
)


# ---------------------------------------------------------------------------
# Geometry sink (.shp + .shx)
# ---------------------------------------------------------------------------


class ShapefileGeometrySink(GeometrySink):
    """Writes Point / Polyline records to a ``.shp`` file and its ``.shx`` index."""

    def __init__(self, shp_path: Path, shx_path: Path) -> None:
        self._shp_path = Path(shp_path)
        self._shx_path = Path(shx_path)
        self._writer: shapefile.Writer | None = None
        self._shape_kind: ShapeKind | None = None
        self._count = 0

    @property
    def shapes_written(self) -> int:
        return self._count

    @property
    def paths(self) -> tuple[Path, ...]:
        return (self._shp_path, self._shx_path)

    def open(self) -> None:
        try:
            self._shp_path.parent.mkdir(parents=True, exist_ok=True)
            self._writer = shapefile.Writer(shp=str(self._shp_path), shx=str(self._shx_path))
        except _WRITE_ERRORS as exc:
            msg = f"Cannot create {self._shp_path.name}/{self._shx_path.name}: {exc}"
            raise SinkIOError(msg, details={"path": str(self._shp_path)}) from exc
        logger.debug("Geometry sink opened | shp=%s | shx=%s", self._shp_path, self._shx_path)

    def write_shape(self, shape: ShapeRecord) -> None:
        writer = self._require_writer()

        if self._shape_kind is None:
            self._shape_kind = shape.kind
        elif shape.kind is not self._shape_kind:
            msg = (
                f"Feature {shape.feature_index} is a {shape.kind.name.title()} but "
                f"{self._shp_path.name} already holds {self._shape_kind.name.title()} shapes"
            )
            raise MixedShapeTypeError(
                msg,
                feature_index=shape.feature_index,
                details={
                    "expected": self._shape_kind.name.title(),
                    "actual": shape.kind.name.title(),
                },
            )

        try:
            if shape.kind is ShapeKind.POINT:
                x, y = shape.points[0]
                writer.point(x, y)
            else:
                writer.line([list(shape.points)])
        except _WRITE_ERRORS as exc:
            msg = f"Failed to write shape for feature {shape.feature_index}: {exc}"
            raise SinkIOError(msg, feature_index=shape.feature_index) from exc
        self._count += 1

    def close(self) -> None:
        writer = self._require_writer()
        self._writer = None
        try:
            writer.close()
        except _WRITE_ERRORS as exc:
            msg = f"Failed to finalise {self._shp_path.name}: {exc}"
            raise SinkIOError(msg, details={"path": str(self._shp_path)}) from exc
        logger.debug("Geometry sink closed | shapes=%d", self._count)

    def abort(self) -> None:
        writer, self._writer = self._writer, None
        if writer is None:
            return
        try:
            writer.close()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not finalise %s after failure: %s", self._shp_path.name, exc)

    def _require_writer(self) -> shapefile.Writer:
        if self._writer is None:
            msg = f"Geometry sink for {self._shp_path.name} is not open"
            raise SinkIOError(msg)
        return self._writer


# ---------------------------------------------------------------------------
# Attribute sink (.dbf)
# ---------------------------------------------------------------------------


class ShapefileAttributeSink(AttributeSink):
    """Writes schema-ordered records to a ``.dbf`` table."""

    def __init__(self, dbf_path: Path, *, encoding: str = "utf-8") -> None:
        self._dbf_path = Path(dbf_path)
        self._encoding = encoding
        self._writer: shapefile.Writer | None = None
        self._schema: Schema | None = None
        self._count = 0

    @property
    def records_written(self) -> int:
        return self._count

    @property
    def paths(self) -> tuple[Path, ...]:
        return (self._dbf_path,)

    def open(self, schema: Schema) -> None:
        try:
            self._dbf_path.parent.mkdir(parents=True, exist_ok=True)
            writer = shapefile.Writer(dbf=str(self._dbf_path), encoding=self._encoding)
            for column in schema.columns:
                writer.field(column.name, column.kind.value, size=column.size, decimal=column.decimal)
        except _WRITE_ERRORS as exc:
            msg = f"Cannot create {self._dbf_path.name}: {exc}"
            raise SinkIOError(msg, details={"path": str(self._dbf_path)}) from exc

        self._writer = writer
        self._schema = schema
        logger.debug("Attribute sink opened | dbf=%s | fields=%d", self._dbf_path, len(schema))

    def write_record(self, record: Record) -> None:
        writer = self._require_writer()
        if self._schema is not None and len(record) != len(self._schema):
            msg = (
                f"Record for feature {record.feature_index} has {len(record)} values, "
                f"table has {len(self._schema)} fields"
            )
            raise SinkIOError(msg, feature_index=record.feature_index)

        if self._schema is not None:
            self._check_encodable(self._schema, record)
        try:
            writer.record(*record.values)
        except _WRITE_ERRORS as exc:
            msg = f"Failed to write record for feature {record.feature_index}: {exc}"
            raise SinkIOError(msg, feature_index=record.feature_index) from exc
        self._count += 1

    def close(self) -> None:
        writer = self._require_writer()
        self._writer = None
        try:
            writer.close()
        except _WRITE_ERRORS as exc:
            msg = f"Failed to finalise {self._dbf_path.name}: {exc}"
            raise SinkIOError(msg, details={"path": str(self._dbf_path)}) from exc
        logger.debug("Attribute sink closed | records=%d", self._count)

    def abort(self) -> None:
        writer, self._writer = self._writer, None
        if writer is None:
            return
        try:
            writer.close()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not finalise %s after failure: %s", self._dbf_path.name, exc)

    def _check_encodable(self, schema: Schema, record: Record) -> None:
        for column, value in zip(schema.columns, record.values, strict=True):
            if column.kind is not ColumnKind.TEXT or value is None:
                continue
            try:
                str(value).encode(self._encoding)
            except UnicodeEncodeError as exc:
                msg = (
                    f"Feature {record.feature_index} attribute '{column.name}' cannot be "
                    f"encoded as {self._encoding}: {exc.reason}"
                )
                raise AttributeEncodingError(
                    msg,
                    feature_index=record.feature_index,
                    details={"column": column.name, "encoding": self._encoding},
                ) from exc

    def _require_writer(self) -> shapefile.Writer:
        if self._writer is None:
            msg = f"Attribute sink for {self._dbf_path.name} is not open"
            raise SinkIOError(msg)
        return self._writer
