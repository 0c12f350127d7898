"""Conversion driver — GeoJSON FeatureCollection to shapefile.

Coordinates one conversion run end to end:

1. **Parse** the document into a ``FeatureCollection`` (once).
2. **Infer** the attribute schema from the first feature (once).
3. **Open** the geometry and attribute sinks.
4. **Convert** every feature in order: transcode its geometry and write
   the shape, then assemble its record and write it.
5. **Close** both sinks.

State machine::

    INITIALIZED ──parse + schema + open──▶ CONVERTING ──close──▶ COMPLETED
         │                                      │
         └──────────── any error ───────────────┴──────────────▶ FAILED

The first error of any stage ends the run: sinks are released
best-effort, already written shapes/records stay on disk (unless
``remove_partial_output`` is set) and the error is re-raised.  The
driver is the only place that decides to stop.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from geojson_shp.activities.assemble_record import assemble_record
from geojson_shp.activities.infer_schema import build_schema
from geojson_shp.activities.parse_geojson import load_feature_collection, parse_feature_collection
from geojson_shp.activities.transcode_geometry import transcode_geometry
from geojson_shp.core.config import ConverterConfig
from geojson_shp.core.exceptions import ConversionError, StateError
from geojson_shp.models.feature import FeatureCollection, GeometryKind
from geojson_shp.sinks.shapefile_writer import (
    create_shapefile_sinks,
    normalize_output_base,
    remove_output,
)

if TYPE_CHECKING:
    from geojson_shp.models.schema import Schema
    from geojson_shp.sinks.base import AttributeSink, GeometrySink

logger = logging.getLogger("geojson_shp.orchestrators.converter")

SinkFactory = Callable[[Path, ConverterConfig], "tuple[GeometrySink, AttributeSink]"]


class ConversionState(enum.Enum):
    """Lifecycle state of a conversion run."""

    INITIALIZED = "initialized"
    CONVERTING = "converting"
    COMPLETED = "completed"
    FAILED = "failed"


class ConverterStateError(StateError):
    """Raised when a converter is run more than once."""

    default_stage = "convert"
    default_code = "INVALID_CONVERTER_STATE"


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Summary of a completed conversion run.

    Attributes:
        feature_count: Features in the source collection.
        shapes_written: Shape records written to the ``.shp``.
        records_written: Attribute records written to the ``.dbf``.
        schema: The attribute table schema.
        shape_type: ``"Point"`` or ``"Polyline"``.
        output_paths: Files produced by the run.
    """

    feature_count: int
    shapes_written: int
    records_written: int
    schema: Schema
    shape_type: str
    output_paths: tuple[Path, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "feature_count": self.feature_count,
            "shapes_written": self.shapes_written,
            "records_written": self.records_written,
            "schema": self.schema.to_dict(),
            "shape_type": self.shape_type,
            "output_paths": [str(p) for p in self.output_paths],
        }


class FeatureCollectionConverter:
    """Converts one FeatureCollection into one shapefile triple.

    A converter instance represents a single run: ``run()`` may be
    called once.

    Example usage::

        converter = FeatureCollectionConverter(document, "out/roads")
        result = converter.run()
    """

    def __init__(
        self,
        document: str | bytes | FeatureCollection,
        output_base: Path | str,
        *,
        config: ConverterConfig | None = None,
        sink_factory: SinkFactory | None = None,
    ) -> None:
        self._document = document
        self._output_base = normalize_output_base(output_base)
        self._config = config or ConverterConfig()
        self._sink_factory = sink_factory or create_shapefile_sinks
        self._state = ConversionState.INITIALIZED
        self._schema: Schema | None = None
        self._geometry_sink: GeometrySink | None = None
        self._attribute_sink: AttributeSink | None = None
        self._sinks_opened = False

    @property
    def state(self) -> ConversionState:
        return self._state

    @property
    def schema(self) -> Schema | None:
        """The frozen schema, once inferred."""
        return self._schema

    @property
    def output_base(self) -> Path:
        return self._output_base

    def run(self) -> ConversionResult:
        """Execute the conversion.

        Returns:
            A ``ConversionResult`` summarising the written output.

        Raises:
            ConverterStateError: If the converter has already run.
            ConversionError: The first error raised by any stage; the
                converter is left in ``FAILED``.
        """
        if self._state is not ConversionState.INITIALIZED:
            msg = f"Converter for {self._output_base} already ran (state={self._state.value})"
            raise ConverterStateError(msg)

        try:
            collection = self._load_collection()
            schema = build_schema(collection, self._config)
            self._schema = schema
            geometry_sink, attribute_sink = self._open_sinks(schema)
        except Exception as exc:
            self._fail(exc)
            raise

        self._state = ConversionState.CONVERTING
        logger.info(
            "Conversion started | features=%d | columns=%d | output=%s",
            len(collection),
            len(schema),
            self._output_base,
        )

        try:
            for feature in collection:
                shape = transcode_geometry(feature.geometry, feature.index)
                geometry_sink.write_shape(shape)

                record = assemble_record(schema, feature.properties, feature.index)
                attribute_sink.write_record(record)

            self._close_sinks()
        except Exception as exc:
            self._fail(exc)
            raise

        self._state = ConversionState.COMPLETED
        result = ConversionResult(
            feature_count=len(collection),
            shapes_written=geometry_sink.shapes_written,
            records_written=attribute_sink.records_written,
            schema=schema,
            shape_type=_shape_type_name(collection),
            output_paths=(*geometry_sink.paths, *attribute_sink.paths),
        )
        logger.info(
            "Conversion complete | features=%d | shapes=%d | records=%d | type=%s | output=%s",
            result.feature_count,
            result.shapes_written,
            result.records_written,
            result.shape_type,
            self._output_base,
        )
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _load_collection(self) -> FeatureCollection:
        if isinstance(self._document, FeatureCollection):
            return self._document
        return parse_feature_collection(self._document)

    def _open_sinks(self, schema: Schema) -> tuple[GeometrySink, AttributeSink]:
        geometry_sink, attribute_sink = self._sink_factory(self._output_base, self._config)
        self._sinks_opened = True
        self._geometry_sink = geometry_sink
        geometry_sink.open()
        self._attribute_sink = attribute_sink
        attribute_sink.open(schema)
        return geometry_sink, attribute_sink

    def _close_sinks(self) -> None:
        geometry_sink, self._geometry_sink = self._geometry_sink, None
        if geometry_sink is not None:
            geometry_sink.close()
        attribute_sink, self._attribute_sink = self._attribute_sink, None
        if attribute_sink is not None:
            attribute_sink.close()

    def _fail(self, exc: BaseException) -> None:
        """Move to FAILED, release sinks and optionally remove partial output."""
        self._state = ConversionState.FAILED

        for sink in (self._geometry_sink, self._attribute_sink):
            if sink is not None:
                sink.abort()
        self._geometry_sink = None
        self._attribute_sink = None

        if isinstance(exc, ConversionError):
            logger.error(
                "Conversion failed | code=%s | stage=%s | feature=%s | %s",
                exc.code,
                exc.stage,
                exc.feature_index,
                exc.message,
            )
        else:
            logger.error("Conversion failed | unexpected %s: %s", type(exc).__name__, exc)

        if self._sinks_opened and self._config.remove_partial_output:
            removed = remove_output(self._output_base)
            logger.info(
                "Removed partial output | files=%s",
                ", ".join(p.name for p in removed) or "(none)",
            )


def _shape_type_name(collection: FeatureCollection) -> str:
    first = collection.first
    if first is None or first.geometry is None:
        return "Null"
    return "Point" if first.geometry.kind is GeometryKind.POINT else "Polyline"


# ---------------------------------------------------------------------------
# Convenience entry points
# ---------------------------------------------------------------------------


def convert_document(
    document: str | bytes,
    output_base: Path | str,
    *,
    config: ConverterConfig | None = None,
) -> ConversionResult:
    """Convert a GeoJSON document (text or UTF-8 bytes) to a shapefile."""
    return FeatureCollectionConverter(document, output_base, config=config).run()


def convert_file(
    input_path: Path | str,
    output_base: Path | str,
    *,
    config: ConverterConfig | None = None,
) -> ConversionResult:
    """Convert a GeoJSON file to a shapefile at *output_base*.

    Raises:
        ParseError: If the input cannot be read or parsed.
        ConversionError: Any other conversion failure.
    """
    collection = load_feature_collection(input_path)
    return FeatureCollectionConverter(collection, output_base, config=config).run()
