"""Output sinks for shape and attribute records.

Usage::

    geometry_sink, attribute_sink = create_shapefile_sinks("out/roads")
    geometry_sink.open()
    attribute_sink.open(schema)
"""

from geojson_shp.sinks.base import AttributeSink, GeometrySink, SinkIOError
from geojson_shp.sinks.shapefile_writer import (
    AttributeEncodingError,
    MixedShapeTypeError,
    ShapefileAttributeSink,
    ShapefileGeometrySink,
    create_shapefile_sinks,
    normalize_output_base,
    output_paths,
    remove_output,
)

__all__ = [
    "AttributeEncodingError",
    "AttributeSink",
    "GeometrySink",
    "MixedShapeTypeError",
    "ShapefileAttributeSink",
    "ShapefileGeometrySink",
    "SinkIOError",
    "create_shapefile_sinks",
    "normalize_output_base",
    "output_paths",
    "remove_output",
]
