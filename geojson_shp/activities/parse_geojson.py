"""GeoJSON parsing activity.

Decodes a UTF-8 GeoJSON document into the typed ``FeatureCollection``
tree.  Only a ``FeatureCollection`` root is accepted; a bare Feature or
bare geometry document is rejected.

Decoding goes through the ``geojson`` codec, which rejects the
non-standard ``NaN`` / ``Infinity`` literals.  Point and LineString
geometries are built as ``geojson`` geometry objects and checked with
their ``errors()`` validation before being narrowed into the model.
Missing geometry or properties are kept as ``None`` so the downstream
stages can reject them with the feature context they need.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

import geojson

from geojson_shp.core.exceptions import ValidationError
from geojson_shp.models.feature import (
    Feature,
    FeatureCollection,
    Geometry,
    GeometryKind,
    PropertyMap,
    PropertyValue,
)

logger = logging.getLogger("geojson_shp.activities.parse_geojson")

_GEOMETRY_KINDS = {kind.value: kind for kind in GeometryKind}

# round() returns a float unchanged past its decimal range, so geometries
# built with this precision keep their coordinates exactly.
_EXACT_PRECISION = 400


class ParseError(ValidationError):
    """Raised when the document is malformed or has the wrong root type."""

    default_stage = "parse_geojson"
    default_code = "GEOJSON_PARSE_FAILED"


def load_feature_collection(path: Path | str) -> FeatureCollection:
    """Read and parse a GeoJSON file.

    Raises:
        ParseError: If the file cannot be read or is not a valid
            FeatureCollection document.
    """
    path = Path(path)
    try:
        content = path.read_bytes()
    except OSError as exc:
        msg = f"Cannot read GeoJSON file {path}: {exc}"
        raise ParseError(msg, details={"path": str(path)}) from exc

    logger.info("Parsing GeoJSON file: %s (%d bytes)", path.name, len(content))
    return parse_feature_collection(content)


def parse_feature_collection(document: str | bytes) -> FeatureCollection:
    """Parse a GeoJSON document into a ``FeatureCollection``.

    Args:
        document: The document text, or its UTF-8 encoded bytes.

    Returns:
        The parsed collection, features in document order.

    Raises:
        ParseError: If the document is not UTF-8, not valid JSON, not a
            FeatureCollection, or contains a malformed feature/geometry.
    """
    if isinstance(document, bytes | bytearray):
        try:
            document = bytes(document).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            msg = f"Document is not valid UTF-8: {exc}"
            raise ParseError(msg) from exc
    else:
        document = document.removeprefix("\ufeff")

    if not document.strip():
        msg = "Document is empty"
        raise ParseError(msg)

    try:
        # Plain mappings; geometry objects are built per feature below.
        root = geojson.loads(document, object_hook=None)
    except RecursionError as exc:
        msg = "Document is nested too deeply to decode"
        raise ParseError(msg) from exc
    except ValueError as exc:
        msg = f"Not valid JSON: {exc}"
        raise ParseError(msg) from exc

    if not isinstance(root, dict):
        msg = f"Root must be a JSON object, got {_json_type_name(root)}"
        raise ParseError(msg)

    root_type = root.get("type")
    if root_type != "FeatureCollection":
        msg = f"Root must be a FeatureCollection, got type={root_type!r}"
        raise ParseError(msg, details={"root_type": root_type})

    raw_features = root.get("features")
    if not isinstance(raw_features, list):
        msg = f"FeatureCollection.features must be an array, got {_json_type_name(raw_features)}"
        raise ParseError(msg)

    features = tuple(_parse_feature(raw, idx) for idx, raw in enumerate(raw_features))
    logger.debug("Parsed FeatureCollection | features=%d", len(features))
    return FeatureCollection(features=features)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _parse_feature(raw: object, idx: int) -> Feature:
    if not isinstance(raw, dict):
        msg = f"Feature {idx} must be a JSON object, got {_json_type_name(raw)}"
        raise ParseError(msg, feature_index=idx)

    if raw.get("type") != "Feature":
        msg = f"Feature {idx} has type={raw.get('type')!r}, expected 'Feature'"
        raise ParseError(msg, feature_index=idx)

    raw_geometry = raw.get("geometry")
    geometry = None if raw_geometry is None else _parse_geometry(raw_geometry, idx)

    raw_properties = raw.get("properties")
    properties: PropertyMap | None = None
    if raw_properties is not None:
        if not isinstance(raw_properties, dict):
            msg = (
                f"Feature {idx} properties must be a JSON object or null, "
                f"got {_json_type_name(raw_properties)}"
            )
            raise ParseError(msg, feature_index=idx)
        properties = {str(k): PropertyValue.of(v) for k, v in raw_properties.items()}

    return Feature(index=idx, geometry=geometry, properties=properties)


def _parse_geometry(raw: object, idx: int) -> Geometry:
    if not isinstance(raw, dict):
        msg = f"Feature {idx} geometry must be a JSON object or null, got {_json_type_name(raw)}"
        raise ParseError(msg, feature_index=idx)

    tag = raw.get("type")
    kind = _GEOMETRY_KINDS.get(tag) if isinstance(tag, str) else None
    if kind is None:
        msg = f"Feature {idx} has unknown geometry type {tag!r}"
        raise ParseError(msg, feature_index=idx, details={"geometry_type": tag})

    if kind is GeometryKind.POINT:
        point = _build_geometry(geojson.Point, raw, idx)
        _check_position(point, idx, "Point")
        coords: object = _to_position(point["coordinates"], idx, "Point")
    elif kind is GeometryKind.LINE_STRING:
        line = _build_geometry(geojson.LineString, raw, idx)
        # Vertex count is left to the transcoder; only positions are checked here.
        vertices = []
        for v, position in enumerate(line["coordinates"]):
            context = f"LineString vertex {v}"
            if not isinstance(position, list):
                msg = f"Feature {idx} {context}: each position must be a list, got {position!r}"
                raise ParseError(msg, feature_index=idx)
            _check_position(geojson.Point(position, precision=_EXACT_PRECISION), idx, context)
            vertices.append(_to_position(position, idx, context))
        coords = tuple(vertices)
    elif kind is GeometryKind.GEOMETRY_COLLECTION:
        coords = raw.get("geometries", ())
    else:
        # Unsupported kinds are rejected by the transcoder with full context.
        coords = raw.get("coordinates", ())

    return Geometry(kind=kind, coordinates=coords)


def _build_geometry(
    geometry_cls: type[geojson.geometry.Geometry],
    raw: dict[str, object],
    idx: int,
) -> geojson.geometry.Geometry:
    """Construct a ``geojson`` geometry from its raw mapping, keeping exact coordinates."""
    name = geometry_cls.__name__
    raw_coords = raw.get("coordinates")
    if not isinstance(raw_coords, list):
        msg = (
            f"Feature {idx} {name} coordinates must be an array, "
            f"got {_json_type_name(raw_coords)}"
        )
        raise ParseError(msg, feature_index=idx)

    try:
        return geometry_cls(raw_coords, precision=_EXACT_PRECISION)
    except RecursionError as exc:
        msg = f"Feature {idx} {name} coordinates are nested too deeply"
        raise ParseError(msg, feature_index=idx) from exc
    except (TypeError, ValueError) as exc:
        msg = f"Feature {idx} {name}: {exc}"
        raise ParseError(msg, feature_index=idx) from exc


def _check_position(point: geojson.Point, idx: int, context: str) -> None:
    problem = point.errors()
    if problem:
        msg = f"Feature {idx} {context}: {problem}, got {point['coordinates']!r}"
        raise ParseError(msg, feature_index=idx)


def _to_position(raw: list[object], idx: int, context: str) -> tuple[float, ...]:
    """Narrow a validated position to a tuple of floats, keeping any Z ordinate."""
    ordinates: list[float] = []
    for value in raw:
        if isinstance(value, bool):
            msg = f"Feature {idx} {context}: non-numeric ordinate {value!r}"
            raise ParseError(msg, feature_index=idx)
        try:
            ordinates.append(float(value))  # type: ignore[arg-type]
        except OverflowError:
            ordinates.append(math.inf)

    if not all(math.isfinite(o) for o in ordinates[:2]):
        msg = f"Feature {idx} {context}: non-finite coordinate {raw!r}"
        raise ParseError(msg, feature_index=idx)
    return tuple(ordinates)


def _json_type_name(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int | float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
