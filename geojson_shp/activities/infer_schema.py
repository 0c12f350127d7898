"""Schema inference activity.

Derives the fixed-width attribute table schema from the *first* feature
of a collection:

- Number properties become Numeric columns (``N(22, 20)`` by default).
- Text properties become Text columns (``C(255)`` by default).
- Array, Object, Boolean and Null properties are rejected.

Columns keep the first feature's property order.  The schema is never
re-derived for later features; a feature whose attributes differ is
rejected by the record assembler instead.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from geojson_shp.core.config import ConverterConfig
from geojson_shp.core.constants import MAX_FIELD_NAME_BYTES
from geojson_shp.core.exceptions import ValidationError
from geojson_shp.models.feature import ValueKind
from geojson_shp.models.schema import ColumnDescriptor, ColumnKind, Schema

if TYPE_CHECKING:
    from geojson_shp.models.feature import FeatureCollection, PropertyMap, PropertyValue

logger = logging.getLogger("geojson_shp.activities.infer_schema")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class SchemaError(ValidationError):
    """Base class for schema inference failures."""

    default_stage = "infer_schema"
    default_code = "SCHEMA_INFERENCE_FAILED"


class EmptyCollectionError(SchemaError):
    """Raised when the collection has no features to derive a schema from."""

    default_code = "EMPTY_COLLECTION"


class MissingPropertiesError(SchemaError):
    """Raised when a feature has no property map."""

    default_code = "MISSING_PROPERTIES"


class UnsupportedAttributeTypeError(SchemaError):
    """Raised when a property value is not a Number or Text."""

    default_code = "UNSUPPORTED_ATTRIBUTE_TYPE"


class InvalidFieldNameError(SchemaError):
    """Raised when an attribute name cannot be stored as a dBASE field name."""

    default_code = "INVALID_FIELD_NAME"


class EmptySchemaError(SchemaError):
    """Raised when the first feature has no attributes to build columns from.

    A dBASE table needs at least one field descriptor.
    """

    default_code = "EMPTY_SCHEMA"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def infer_column(
    name: str,
    value: PropertyValue,
    config: ConverterConfig | None = None,
    *,
    feature_index: int = 0,
) -> ColumnDescriptor:
    """Classify a single property into a column descriptor.

    Args:
        name: Attribute name.
        value: The tagged property value.
        config: Column widths and field-name encoding.
        feature_index: Index of the feature the value came from.

    Raises:
        UnsupportedAttributeTypeError: If the value is an Array, Object,
            Boolean or Null.
        InvalidFieldNameError: If the name is empty or longer than 10
            bytes once encoded.
    """
    config = config or ConverterConfig()

    if value.kind is ValueKind.NUMBER:
        kind = ColumnKind.NUMERIC
    elif value.kind is ValueKind.TEXT:
        kind = ColumnKind.TEXT
    else:
        msg = (
            f"Attribute '{name}' has unsupported type {value.kind.value}; "
            f"only Number and Text values are supported"
        )
        raise UnsupportedAttributeTypeError(
            msg,
            feature_index=feature_index,
            details={"attribute": name, "kind": value.kind.value},
        )

    _validate_field_name(name, config.encoding, feature_index)

    if kind is ColumnKind.NUMERIC:
        return ColumnDescriptor(
            name=name,
            kind=kind,
            size=config.numeric_field_size,
            decimal=config.numeric_field_decimals,
        )
    return ColumnDescriptor(name=name, kind=kind, size=config.text_field_size)


def infer_columns(
    properties: PropertyMap,
    config: ConverterConfig | None = None,
    *,
    feature_index: int = 0,
) -> Schema:
    """Build a schema from one representative property map, in its order."""
    columns = tuple(
        infer_column(name, value, config, feature_index=feature_index)
        for name, value in properties.items()
    )
    return Schema(columns=columns)


def build_schema(collection: FeatureCollection, config: ConverterConfig | None = None) -> Schema:
    """Derive the frozen attribute table schema from the first feature.

    Raises:
        EmptyCollectionError: If the collection has no features.
        MissingPropertiesError: If the first feature has no property map.
        EmptySchemaError: If the first feature's property map is empty.
        UnsupportedAttributeTypeError: If any first-feature property is
            not a Number or Text.
        InvalidFieldNameError: If a property name is not a valid dBASE
            field name.
    """
    first = collection.first
    if first is None:
        msg = "FeatureCollection has no features; cannot derive a schema"
        raise EmptyCollectionError(msg)

    if first.properties is None:
        msg = f"Feature {first.index} has no properties; cannot derive a schema"
        raise MissingPropertiesError(msg, feature_index=first.index)

    schema = infer_columns(first.properties, config, feature_index=first.index)
    if not schema.columns:
        msg = f"Feature {first.index} has an empty property map; cannot derive a schema"
        raise EmptySchemaError(msg, feature_index=first.index)

    logger.info(
        "Schema inferred | columns=%d | %s",
        len(schema),
        ", ".join(f"{c.name}:{c.kind.label}" for c in schema.columns),
    )
    return schema


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _validate_field_name(name: str, encoding: str, feature_index: int) -> None:
    try:
        encoded = name.encode(encoding)
    except UnicodeEncodeError as exc:
        msg = f"Attribute name '{name}' cannot be encoded as {encoding}"
        raise InvalidFieldNameError(
            msg, feature_index=feature_index, details={"attribute": name}
        ) from exc

    if not encoded or len(encoded) > MAX_FIELD_NAME_BYTES:
        msg = (
            f"Attribute name '{name}' is {len(encoded)} bytes; dBASE field names "
            f"must be 1-{MAX_FIELD_NAME_BYTES} bytes"
        )
        raise InvalidFieldNameError(
            msg, feature_index=feature_index, details={"attribute": name}
        )
