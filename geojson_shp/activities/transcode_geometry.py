"""Geometry transcoding activity.

Maps one GeoJSON geometry onto one shapefile shape record:

- ``Point(x, y)``        → Point shape at ``(x, y)``.
- ``LineString(points)`` → single-part Polyline with the same vertices,
  in the same order.

Coordinates pass through unchanged: no reprojection, no rounding.  Z/M
ordinates are dropped.  Every other geometry kind is rejected, as is a
LineString with fewer than two positions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from geojson_shp.core.constants import MIN_LINE_VERTICES
from geojson_shp.core.exceptions import ValidationError
from geojson_shp.models.feature import GeometryKind
from geojson_shp.models.shape import ShapeKind, ShapeRecord

if TYPE_CHECKING:
    from geojson_shp.models.feature import Geometry

logger = logging.getLogger("geojson_shp.activities.transcode_geometry")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class GeometryError(ValidationError):
    """Base class for geometry transcoding failures."""

    default_stage = "transcode_geometry"
    default_code = "GEOMETRY_TRANSCODE_FAILED"


class MissingGeometryError(GeometryError):
    """Raised when a feature has ``"geometry": null``."""

    default_code = "MISSING_GEOMETRY"


class UnsupportedGeometryTypeError(GeometryError):
    """Raised for geometry kinds other than Point and LineString."""

    default_code = "UNSUPPORTED_GEOMETRY_TYPE"


class DegenerateGeometryError(GeometryError):
    """Raised for a LineString with fewer than two positions."""

    default_code = "DEGENERATE_GEOMETRY"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def transcode_geometry(geometry: Geometry | None, feature_index: int) -> ShapeRecord:
    """Convert a parsed geometry into a 2D shape record.

    Args:
        geometry: The feature's geometry, or ``None``.
        feature_index: Index of the feature, for error context.

    Returns:
        A Point or Polyline ``ShapeRecord``.

    Raises:
        MissingGeometryError: If *geometry* is ``None``.
        UnsupportedGeometryTypeError: If the kind is not Point/LineString.
        DegenerateGeometryError: If a LineString has fewer than 2 positions.
    """
    if geometry is None:
        msg = f"Feature {feature_index} has no geometry"
        raise MissingGeometryError(msg, feature_index=feature_index)

    if not geometry.is_supported:
        msg = (
            f"Feature {feature_index} has unsupported geometry type {geometry.kind.value}; "
            f"only Point and LineString are supported"
        )
        raise UnsupportedGeometryTypeError(
            msg,
            feature_index=feature_index,
            details={"geometry_type": geometry.kind.value},
        )

    if geometry.kind is GeometryKind.POINT:
        return _point_to_shape(geometry.coordinates, feature_index)
    return _line_to_shape(geometry.coordinates, feature_index)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _point_to_shape(position: object, feature_index: int) -> ShapeRecord:
    from shapely.geometry import Point

    x, y = position[0], position[1]  # type: ignore[index]
    point = Point(x, y)
    return ShapeRecord(
        kind=ShapeKind.POINT,
        points=((point.x, point.y),),
        feature_index=feature_index,
    )


def _line_to_shape(positions: object, feature_index: int) -> ShapeRecord:
    from shapely.geometry import LineString

    vertices = [(p[0], p[1]) for p in positions]  # type: ignore[attr-defined]
    if len(vertices) < MIN_LINE_VERTICES:
        msg = (
            f"Feature {feature_index} LineString has {len(vertices)} position(s), "
            f"need at least {MIN_LINE_VERTICES}"
        )
        raise DegenerateGeometryError(
            msg,
            feature_index=feature_index,
            details={"vertex_count": len(vertices)},
        )

    line = LineString(vertices)
    if line.length == 0:
        logger.warning(
            "Zero-length LineString in feature %d (%d coincident vertices)",
            feature_index,
            len(vertices),
        )

    return ShapeRecord(
        kind=ShapeKind.POLYLINE,
        points=tuple((x, y) for x, y in line.coords),
        feature_index=feature_index,
    )
