"""Attribute table schema and record models.

A ``Schema`` is derived once from the first feature of a collection and
frozen for the whole run.  Each ``Record`` holds one value per schema
column, in column order, ready for the attribute sink.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from geojson_shp.models.feature import ValueKind


class ColumnKind(enum.Enum):
    """Storage kind of a dBASE column.

    The value is the dBASE field type character.
    """

    NUMERIC = "N"
    TEXT = "C"

    @property
    def label(self) -> str:
        """Human-readable kind name used in error messages."""
        return "Numeric" if self is ColumnKind.NUMERIC else "Text"

    @property
    def source_kind(self) -> ValueKind:
        """The JSON value kind a column of this kind accepts."""
        return ValueKind.NUMBER if self is ColumnKind.NUMERIC else ValueKind.TEXT


@dataclass(frozen=True, slots=True)
class ColumnDescriptor:
    """A single attribute table column.

    Attributes:
        name: Attribute name, as it appears in the GeoJSON properties.
        kind: Numeric or Text.
        size: Field width (characters for Numeric, bytes for Text).
        decimal: Fractional digits (always 0 for Text).
    """

    name: str
    kind: ColumnKind
    size: int
    decimal: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "kind": self.kind.label,
            "size": self.size,
            "decimal": self.decimal,
        }


@dataclass(frozen=True, slots=True)
class Schema:
    """Ordered, frozen column list of the attribute table."""

    columns: tuple[ColumnDescriptor, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.columns)

    @property
    def names(self) -> tuple[str, ...]:
        """Column names in column order."""
        return tuple(c.name for c in self.columns)

    def to_dict(self) -> list[dict[str, object]]:
        """Serialise for logging and ``ConversionResult``."""
        return [c.to_dict() for c in self.columns]


RecordValue = float | str | None


@dataclass(frozen=True, slots=True)
class Record:
    """One attribute table row aligned 1:1 with a ``Schema``.

    Attributes:
        values: Column values in schema order. Numeric columns hold a
            ``float`` (or ``None`` for an unparsable source number),
            Text columns hold the untruncated ``str``.
        feature_index: Index of the feature this record was built from.
    """

    values: tuple[RecordValue, ...]
    feature_index: int = 0

    def __len__(self) -> int:
        return len(self.values)

    def as_dict(self, schema: Schema) -> dict[str, RecordValue]:
        """Pair values with the schema's column names."""
        return dict(zip(schema.names, self.values, strict=True))
