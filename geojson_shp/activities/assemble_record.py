"""Record assembly activity.

Maps one feature's properties onto the frozen schema, producing a
column-ordered ``Record``.  Each value is coerced to its column's kind:

- Numeric → ``float``; ``NaN`` becomes ``None``, the dBASE null slot.
  A number whose integer digits do not fit the column width (or that
  does not fit a float at all) is rejected rather than clipped.
- Text    → the string unchanged.  Values longer than the column width
  are *not* truncated here; width handling belongs to the sink.

A missing attribute or a value of the wrong kind fails the run.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from geojson_shp.activities.infer_schema import MissingPropertiesError
from geojson_shp.core.exceptions import ValidationError
from geojson_shp.models.schema import ColumnKind, Record

if TYPE_CHECKING:
    from geojson_shp.models.feature import PropertyMap, PropertyValue
    from geojson_shp.models.schema import ColumnDescriptor, RecordValue, Schema

logger = logging.getLogger("geojson_shp.activities.assemble_record")


class RecordError(ValidationError):
    """Base class for record assembly failures."""

    default_stage = "assemble_record"
    default_code = "RECORD_ASSEMBLY_FAILED"


class MissingAttributeError(RecordError):
    """Raised when a feature lacks an attribute present in the schema."""

    default_code = "MISSING_ATTRIBUTE"


class AttributeTypeMismatchError(RecordError):
    """Raised when a value's kind differs from its column's declared kind."""

    default_code = "ATTRIBUTE_TYPE_MISMATCH"


class AttributeOutOfRangeError(RecordError):
    """Raised when a numeric value cannot be stored in its column's width."""

    default_code = "ATTRIBUTE_OUT_OF_RANGE"


def assemble_record(
    schema: Schema,
    properties: PropertyMap | None,
    feature_index: int,
) -> Record:
    """Build the attribute record for one feature.

    Args:
        schema: The frozen run schema.
        properties: The feature's tagged property map.
        feature_index: Index of the feature, for error context.

    Returns:
        A ``Record`` with one value per schema column, in column order.

    Raises:
        MissingPropertiesError: If *properties* is ``None``.
        MissingAttributeError: If a schema column is absent.
        AttributeTypeMismatchError: If a value's kind does not match its
            column (including Array/Object/Boolean/Null values).
        AttributeOutOfRangeError: If a number does not fit its Numeric
            column.
    """
    if properties is None:
        msg = f"Feature {feature_index} has no properties"
        raise MissingPropertiesError(msg, stage="assemble_record", feature_index=feature_index)

    values = tuple(
        _coerce(column, properties, feature_index) for column in schema.columns
    )

    extra = properties.keys() - set(schema.names)
    if extra:
        logger.debug(
            "Ignoring attributes not in schema | feature=%d | attributes=%s",
            feature_index,
            ", ".join(sorted(extra)),
        )

    return Record(values=values, feature_index=feature_index)


def _coerce(
    column: ColumnDescriptor,
    properties: PropertyMap,
    feature_index: int,
) -> RecordValue:
    value: PropertyValue | None = properties.get(column.name)
    if value is None:
        msg = f"Feature {feature_index} is missing attribute '{column.name}'"
        raise MissingAttributeError(
            msg,
            feature_index=feature_index,
            details={"column": column.name},
        )

    expected = column.kind.source_kind
    if value.kind is not expected:
        msg = (
            f"Feature {feature_index} attribute '{column.name}' is {value.kind.value}, "
            f"expected {expected.value} for {column.kind.label} column"
        )
        raise AttributeTypeMismatchError(
            msg,
            feature_index=feature_index,
            details={
                "column": column.name,
                "expected": column.kind.label,
                "actual": value.kind.value,
            },
        )

    if column.kind is ColumnKind.NUMERIC:
        try:
            number = float(value.value)  # type: ignore[arg-type]
        except OverflowError:
            number = math.inf
        if math.isnan(number):
            return None
        if not _fits_column(number, column):
            msg = (
                f"Feature {feature_index} attribute '{column.name}' value {value.value} "
                f"does not fit Numeric column N({column.size},{column.decimal})"
            )
            raise AttributeOutOfRangeError(
                msg,
                feature_index=feature_index,
                details={
                    "column": column.name,
                    "value": str(value.value),
                    "size": column.size,
                    "decimal": column.decimal,
                },
            )
        return number
    return str(value.value)


def _fits_column(number: float, column: ColumnDescriptor) -> bool:
    """Whether the integer digits of *number* survive the dBASE field width.

    Mirrors the writer's formatting: ``decimal`` fractional digits, then
    the text is cut to ``size`` characters.
    """
    if not math.isfinite(number):
        return False
    if column.decimal:
        text = format(number, f".{column.decimal}f")
    else:
        text = format(int(number), "d")
    return len(text.partition(".")[0]) <= column.size
