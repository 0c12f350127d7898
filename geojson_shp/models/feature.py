"""Data model for a parsed GeoJSON FeatureCollection.

The parser builds this tree once per run; it is read-only afterwards.
Property values keep their JSON kind as an explicit tag so the schema
builder and record assembler can narrow them without re-inspecting raw
Python types.
"""

from __future__ import annotations

import enum
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field


class ValueKind(enum.Enum):
    """JSON kind of a single property value."""

    NUMBER = "Number"
    TEXT = "Text"
    ARRAY = "Array"
    OBJECT = "Object"
    BOOLEAN = "Boolean"
    NULL = "Null"


class GeometryKind(enum.Enum):
    """GeoJSON geometry ``type`` tags recognised by the parser."""

    POINT = "Point"
    LINE_STRING = "LineString"
    MULTI_POINT = "MultiPoint"
    MULTI_LINE_STRING = "MultiLineString"
    POLYGON = "Polygon"
    MULTI_POLYGON = "MultiPolygon"
    GEOMETRY_COLLECTION = "GeometryCollection"


def classify_value(value: object) -> ValueKind:
    """Return the ``ValueKind`` of a decoded JSON value.

    ``bool`` is checked before numbers since it subclasses ``int``.

    Raises:
        TypeError: If *value* is not something ``json`` can produce.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int | float):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, list | tuple):
        return ValueKind.ARRAY
    if isinstance(value, Mapping):
        return ValueKind.OBJECT
    msg = f"Not a JSON value: {type(value).__name__}"
    raise TypeError(msg)


@dataclass(frozen=True, slots=True)
class PropertyValue:
    """A property value tagged with its JSON kind.

    Attributes:
        kind: JSON kind of the value.
        value: The decoded value (``float``/``int``, ``str``, ``list``,
            ``dict``, ``bool`` or ``None``).
    """

    kind: ValueKind
    value: object

    @classmethod
    def of(cls, value: object) -> PropertyValue:
        """Tag a decoded JSON value with its kind."""
        return cls(kind=classify_value(value), value=value)


PropertyMap = dict[str, PropertyValue]


@dataclass(frozen=True, slots=True)
class Geometry:
    """A GeoJSON geometry.

    Attributes:
        kind: The geometry ``type`` tag.
        coordinates: Raw coordinates. For ``Point`` a single position,
            for ``LineString`` a tuple of positions; positions keep any
            Z/M ordinates. Other kinds keep whatever the document held.
    """

    kind: GeometryKind
    coordinates: object = ()

    @property
    def is_supported(self) -> bool:
        """Whether this geometry maps onto a shapefile record."""
        return self.kind in (GeometryKind.POINT, GeometryKind.LINE_STRING)


@dataclass(frozen=True, slots=True)
class Feature:
    """A single GeoJSON feature.

    Attributes:
        index: Zero-based position within the collection.
        geometry: Parsed geometry, or ``None`` for ``"geometry": null``.
        properties: Tagged property map, or ``None`` for
            ``"properties": null``.
    """

    index: int
    geometry: Geometry | None = None
    properties: PropertyMap | None = None


@dataclass(frozen=True, slots=True)
class FeatureCollection:
    """An ordered, immutable sequence of features."""

    features: tuple[Feature, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self.features)

    @property
    def first(self) -> Feature | None:
        """The first feature, or ``None`` for an empty collection."""
        return self.features[0] if self.features else None
