"""Tests for the pyshp-backed geometry and attribute sinks.

Written files are read back with ``shapefile.Reader``.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import shapefile

from geojson_shp.core.config import ConverterConfig
from geojson_shp.models.schema import ColumnDescriptor, ColumnKind, Record, Schema
from geojson_shp.models.shape import ShapeKind, ShapeRecord
from geojson_shp.sinks import (
    AttributeEncodingError,
    MixedShapeTypeError,
    ShapefileAttributeSink,
    ShapefileGeometrySink,
    SinkIOError,
    create_shapefile_sinks,
    normalize_output_base,
    output_paths,
    remove_output,
)

SCHEMA = Schema(
    columns=(
        ColumnDescriptor("name", ColumnKind.TEXT, 255),
        ColumnDescriptor("pop", ColumnKind.NUMERIC, 22, 20),
    )
)


def _point(x: float, y: float, idx: int = 0) -> ShapeRecord:
    return ShapeRecord(ShapeKind.POINT, ((x, y),), idx)


def _line(*points: tuple[float, float], idx: int = 0) -> ShapeRecord:
    return ShapeRecord(ShapeKind.POLYLINE, tuple(points), idx)


def _write(
    output_base: Path,
    shapes: list[ShapeRecord],
    records: list[Record],
    schema: Schema = SCHEMA,
) -> None:
    geometry_sink, attribute_sink = create_shapefile_sinks(output_base)
    geometry_sink.open()
    attribute_sink.open(schema)
    for shape in shapes:
        geometry_sink.write_shape(shape)
    for record in records:
        attribute_sink.write_record(record)
    geometry_sink.close()
    attribute_sink.close()


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


class TestOutputPaths:
    def test_normalize_strips_shapefile_suffix(self) -> None:
        assert normalize_output_base("out/roads.shp") == Path("out/roads")
        assert normalize_output_base("out/roads.DBF") == Path("out/roads")

    def test_normalize_keeps_other_suffix(self) -> None:
        assert normalize_output_base("out/roads.v2") == Path("out/roads.v2")

    def test_output_paths(self) -> None:
        shp, shx, dbf = output_paths("out/roads")
        assert shp == Path("out/roads.shp")
        assert shx == Path("out/roads.shx")
        assert dbf == Path("out/roads.dbf")

    def test_remove_output(self, tmp_path: Path) -> None:
        base = tmp_path / "roads"
        shp, _, dbf = output_paths(base)
        shp.write_bytes(b"x")
        dbf.write_bytes(b"x")
        removed = remove_output(base)
        assert removed == [shp, dbf]
        assert not shp.exists()
        assert not dbf.exists()

    def test_remove_output_nothing_to_remove(self, tmp_path: Path) -> None:
        assert remove_output(tmp_path / "missing") == []


# ---------------------------------------------------------------------------
# Round trips
# ---------------------------------------------------------------------------


class TestShapefileRoundTrip:
    def test_points_and_attributes(self, output_base: Path) -> None:
        _write(
            output_base,
            [_point(1, 2, 0), _point(3, 4, 1)],
            [Record(("A", 10.0), 0), Record(("B", 20.0), 1)],
        )

        with shapefile.Reader(str(output_base)) as reader:
            assert reader.shapeType == shapefile.POINT
            assert len(reader) == 2
            assert [tuple(reader.shape(i).points[0]) for i in range(2)] == [(1, 2), (3, 4)]
            fields = reader.fields[1:]
            assert [f[0] for f in fields] == ["name", "pop"]
            assert [f[1] for f in fields] == ["C", "N"]
            assert [(f[2], f[3]) for f in fields] == [(255, 0), (22, 20)]
            assert reader.record(0)["name"] == "A"
            assert reader.record(0)["pop"] == 10.0
            assert reader.record(1)["name"] == "B"
            assert reader.record(1)["pop"] == 20.0

    def test_polyline_vertices(self, output_base: Path) -> None:
        vertices = ((0.0, 0.0), (1.5, 2.5), (3.0, -1.0))
        _write(output_base, [_line(*vertices)], [Record(("road", 1.0), 0)])

        with shapefile.Reader(str(output_base)) as reader:
            assert reader.shapeType == shapefile.POLYLINE
            shape = reader.shape(0)
            assert [tuple(p) for p in shape.points] == list(vertices)
            assert list(shape.parts) == [0]

    def test_null_numeric_reads_back_as_none(self, output_base: Path) -> None:
        _write(output_base, [_point(0, 0)], [Record(("A", None), 0)])
        with shapefile.Reader(str(output_base)) as reader:
            assert reader.record(0)["pop"] is None

    def test_long_text_truncated_to_field_width(self, output_base: Path) -> None:
        schema = Schema(columns=(ColumnDescriptor("name", ColumnKind.TEXT, 10),))
        _write(output_base, [_point(0, 0)], [Record(("abcdefghijklmnop",), 0)], schema)
        with shapefile.Reader(str(output_base)) as reader:
            assert reader.record(0)["name"] == "abcdefghij"

    def test_non_ascii_text(self, output_base: Path) -> None:
        _write(output_base, [_point(0, 0)], [Record(("Zürich", 1.0), 0)])
        with shapefile.Reader(str(output_base)) as reader:
            assert reader.record(0)["name"] == "Zürich"

    def test_empty_files(self, output_base: Path) -> None:
        _write(output_base, [], [])
        with shapefile.Reader(str(output_base)) as reader:
            assert len(reader) == 0
            assert [f[0] for f in reader.fields[1:]] == ["name", "pop"]


# ---------------------------------------------------------------------------
# Geometry sink behaviour
# ---------------------------------------------------------------------------


class TestGeometrySink:
    def test_counts_and_paths(self, output_base: Path) -> None:
        shp, shx, _ = output_paths(output_base)
        sink = ShapefileGeometrySink(shp, shx)
        sink.open()
        sink.write_shape(_point(1, 1))
        sink.write_shape(_point(2, 2, 1))
        assert sink.shapes_written == 2
        assert sink.paths == (shp, shx)
        sink.close()
        assert shp.exists()
        assert shx.exists()

    def test_mixed_shape_kinds_rejected(self, output_base: Path) -> None:
        shp, shx, _ = output_paths(output_base)
        sink = ShapefileGeometrySink(shp, shx)
        sink.open()
        sink.write_shape(_point(1, 1))
        with pytest.raises(MixedShapeTypeError) as exc_info:
            sink.write_shape(_line((0, 0), (1, 1), idx=1))
        assert exc_info.value.feature_index == 1
        assert exc_info.value.details == {"expected": "Point", "actual": "Polyline"}
        assert sink.shapes_written == 1
        sink.abort()

    def test_write_before_open(self, output_base: Path) -> None:
        shp, shx, _ = output_paths(output_base)
        sink = ShapefileGeometrySink(shp, shx)
        with pytest.raises(SinkIOError, match="not open"):
            sink.write_shape(_point(0, 0))

    def test_close_twice(self, output_base: Path) -> None:
        shp, shx, _ = output_paths(output_base)
        sink = ShapefileGeometrySink(shp, shx)
        sink.open()
        sink.close()
        with pytest.raises(SinkIOError):
            sink.close()

    def test_abort_is_idempotent(self, output_base: Path) -> None:
        shp, shx, _ = output_paths(output_base)
        sink = ShapefileGeometrySink(shp, shx)
        sink.abort()
        sink.open()
        sink.write_shape(_point(0, 0))
        sink.abort()
        sink.abort()
        assert shp.exists()

    def test_open_failure_is_sink_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        shp, shx, _ = output_paths(blocker / "result")
        sink = ShapefileGeometrySink(shp, shx)
        with pytest.raises(SinkIOError) as exc_info:
            sink.open()
        assert exc_info.value.category == "io"


# ---------------------------------------------------------------------------
# Attribute sink behaviour
# ---------------------------------------------------------------------------


class TestAttributeSink:
    def test_record_width_must_match_schema(self, output_base: Path) -> None:
        _, _, dbf = output_paths(output_base)
        sink = ShapefileAttributeSink(dbf)
        sink.open(SCHEMA)
        with pytest.raises(SinkIOError, match="2 fields"):
            sink.write_record(Record(("A",), 4))
        assert sink.records_written == 0
        sink.abort()

    def test_write_before_open(self, output_base: Path) -> None:
        _, _, dbf = output_paths(output_base)
        sink = ShapefileAttributeSink(dbf)
        with pytest.raises(SinkIOError, match="not open"):
            sink.write_record(Record(("A", 1.0), 0))

    def test_counts_and_paths(self, output_base: Path) -> None:
        _, _, dbf = output_paths(output_base)
        sink = ShapefileAttributeSink(dbf)
        sink.open(SCHEMA)
        sink.write_record(Record(("A", 1.0), 0))
        assert sink.records_written == 1
        assert sink.paths == (dbf,)
        sink.close()
        assert dbf.exists()

    def test_encoding_from_config(self, output_base: Path) -> None:
        _, attribute_sink = create_shapefile_sinks(
            output_base, ConverterConfig(encoding="latin-1")
        )
        assert isinstance(attribute_sink, ShapefileAttributeSink)
        attribute_sink.open(SCHEMA)
        attribute_sink.write_record(Record(("Zürich", 1.0), 0))
        attribute_sink.close()

        _, _, dbf = output_paths(output_base)
        raw = dbf.read_bytes()
        assert "Zürich".encode("latin-1") in raw
        assert "Zürich".encode("utf-8") not in raw

    def test_unencodable_text_is_validation_error(self, output_base: Path) -> None:
        _, _, dbf = output_paths(output_base)
        sink = ShapefileAttributeSink(dbf, encoding="latin-1")
        sink.open(SCHEMA)
        sink.write_record(Record(("Zürich", 1.0), 0))
        with pytest.raises(AttributeEncodingError) as exc_info:
            sink.write_record(Record(("東京", 2.0), 1))
        err = exc_info.value
        assert err.category == "validation"
        assert err.feature_index == 1
        assert err.details == {"column": "name", "encoding": "latin-1"}
        assert sink.records_written == 1
        sink.abort()
