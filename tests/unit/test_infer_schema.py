"""Tests for the schema inference activity.

Covers:
- Number → Numeric / Text → Text classification
- Rejection of Array, Object, Boolean and Null values
- Column order and widths
- First-feature-only inference
- dBASE field-name validation
"""

from __future__ import annotations

import logging

import pytest

from geojson_shp.activities.infer_schema import (
    EmptyCollectionError,
    EmptySchemaError,
    InvalidFieldNameError,
    MissingPropertiesError,
    UnsupportedAttributeTypeError,
    build_schema,
    infer_column,
    infer_columns,
)
from geojson_shp.activities.parse_geojson import parse_feature_collection
from geojson_shp.core.config import ConverterConfig
from geojson_shp.models.feature import PropertyValue
from geojson_shp.models.schema import ColumnKind
from tests.builders import document, feature, point


class TestInferColumn:
    """Single-value classification."""

    @pytest.mark.parametrize("value", [0, -7, 3.25, 1e300])
    def test_number_is_numeric(self, value: float) -> None:
        column = infer_column("pop", PropertyValue.of(value))
        assert column.kind is ColumnKind.NUMERIC
        assert column.size == 22
        assert column.decimal == 20

    def test_text_is_text(self) -> None:
        column = infer_column("name", PropertyValue.of("A"))
        assert column.kind is ColumnKind.TEXT
        assert column.size == 255
        assert column.decimal == 0

    def test_empty_string_is_text(self) -> None:
        assert infer_column("name", PropertyValue.of("")).kind is ColumnKind.TEXT

    @pytest.mark.parametrize(
        ("value", "kind_name"),
        [([1, 2], "Array"), ({"a": 1}, "Object"), (True, "Boolean"), (None, "Null")],
    )
    def test_unsupported_kinds(self, value: object, kind_name: str) -> None:
        with pytest.raises(UnsupportedAttributeTypeError) as exc_info:
            infer_column("tags", PropertyValue.of(value), feature_index=0)
        assert exc_info.value.details == {"attribute": "tags", "kind": kind_name}
        assert exc_info.value.feature_index == 0

    def test_widths_follow_config(self) -> None:
        cfg = ConverterConfig(numeric_field_size=12, numeric_field_decimals=4, text_field_size=40)
        assert infer_column("n", PropertyValue.of(1), cfg).size == 12
        assert infer_column("n", PropertyValue.of(1), cfg).decimal == 4
        assert infer_column("t", PropertyValue.of("x"), cfg).size == 40


class TestFieldNames:
    """dBASE field names must be 1-10 bytes in the configured encoding."""

    def test_ten_byte_name_accepted(self) -> None:
        assert infer_column("abcdefghij", PropertyValue.of(1)).name == "abcdefghij"

    def test_long_name_rejected(self) -> None:
        with pytest.raises(InvalidFieldNameError) as exc_info:
            infer_column("population_2020", PropertyValue.of(1))
        assert exc_info.value.details == {"attribute": "population_2020"}

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(InvalidFieldNameError):
            infer_column("", PropertyValue.of(1))

    def test_multibyte_name_counted_in_bytes(self) -> None:
        # 4 characters, 12 bytes in UTF-8
        with pytest.raises(InvalidFieldNameError):
            infer_column("名前名前", PropertyValue.of("x"))

    def test_unencodable_name_rejected(self) -> None:
        cfg = ConverterConfig(encoding="ascii")
        with pytest.raises(InvalidFieldNameError, match="cannot be encoded"):
            infer_column("prix€", PropertyValue.of(1), cfg)


class TestInferColumns:
    """Property-map level inference."""

    def test_column_order_matches_properties(self) -> None:
        props = {name: PropertyValue.of(v) for name, v in [("z", 1), ("a", "x"), ("m", 2)]}
        schema = infer_columns(props)
        assert schema.names == ("z", "a", "m")
        assert [c.kind for c in schema.columns] == [
            ColumnKind.NUMERIC,
            ColumnKind.TEXT,
            ColumnKind.NUMERIC,
        ]


class TestBuildSchema:
    """Collection-level schema building."""

    def test_two_points_schema(self, two_points_document: str) -> None:
        schema = build_schema(parse_feature_collection(two_points_document))
        assert schema.names == ("name", "pop")
        assert schema.columns[0].kind is ColumnKind.TEXT
        assert schema.columns[1].kind is ColumnKind.NUMERIC

    def test_only_first_feature_used(self) -> None:
        doc = document(
            feature(point(0, 0), {"a": 1}),
            feature(point(1, 1), {"a": 2, "b": [1, 2]}),
        )
        schema = build_schema(parse_feature_collection(doc))
        assert schema.names == ("a",)

    def test_empty_collection(self) -> None:
        with pytest.raises(EmptyCollectionError):
            build_schema(parse_feature_collection(document()))

    def test_first_feature_without_properties(self) -> None:
        doc = document(feature(point(0, 0), None), feature(point(1, 1), {"a": 1}))
        with pytest.raises(MissingPropertiesError) as exc_info:
            build_schema(parse_feature_collection(doc))
        assert exc_info.value.feature_index == 0

    def test_first_feature_with_empty_properties(self) -> None:
        doc = document(feature(point(0, 0), {}))
        with pytest.raises(EmptySchemaError):
            build_schema(parse_feature_collection(doc))

    def test_unsupported_value_in_first_feature(self) -> None:
        doc = document(feature(point(0, 0), {"name": "A", "tags": ["x"]}))
        with pytest.raises(UnsupportedAttributeTypeError) as exc_info:
            build_schema(parse_feature_collection(doc))
        assert exc_info.value.details["attribute"] == "tags"

    def test_logs_inferred_columns(
        self, two_points_document: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="geojson_shp.activities.infer_schema"):
            build_schema(parse_feature_collection(two_points_document))
        assert "Schema inferred | columns=2 | name:Text, pop:Numeric" in caplog.text
