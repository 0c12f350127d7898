"""Shape record model — the shapefile equivalent of one GeoJSON geometry."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from geojson_shp.core.constants import SHAPE_TYPE_POINT, SHAPE_TYPE_POLYLINE


class ShapeKind(enum.Enum):
    """Shapefile shape types emitted by the converter.

    The value is the shapefile shape type code.
    """

    POINT = SHAPE_TYPE_POINT
    POLYLINE = SHAPE_TYPE_POLYLINE


@dataclass(frozen=True, slots=True)
class ShapeRecord:
    """A 2D shape ready for the geometry sink.

    Attributes:
        kind: Point or Polyline.
        points: Vertices as ``(x, y)`` tuples. A Point holds exactly one.
        feature_index: Index of the feature this shape was built from.
    """

    kind: ShapeKind
    points: tuple[tuple[float, float], ...]
    feature_index: int = 0

