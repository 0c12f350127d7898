"""Data models and schemas.

Defines the data structures used throughout the converter:
- Feature / FeatureCollection / Geometry: parsed GeoJSON tree
- PropertyValue: property value tagged with its JSON kind
- Schema / ColumnDescriptor / Record: attribute table layout and rows
- ShapeRecord: shapefile equivalent of one geometry
- ConversionReport: JSON audit record of one run
"""

from geojson_shp.models.feature import (
    Feature,
    FeatureCollection,
    Geometry,
    GeometryKind,
    PropertyMap,
    PropertyValue,
    ValueKind,
    classify_value,
)
from geojson_shp.models.report import ConversionReport
from geojson_shp.models.schema import ColumnDescriptor, ColumnKind, Record, Schema
from geojson_shp.models.shape import ShapeKind, ShapeRecord

__all__ = [
    "ColumnDescriptor",
    "ColumnKind",
    "ConversionReport",
    "Feature",
    "FeatureCollection",
    "Geometry",
    "GeometryKind",
    "PropertyMap",
    "PropertyValue",
    "Record",
    "Schema",
    "ShapeKind",
    "ShapeRecord",
    "ValueKind",
    "classify_value",
]
