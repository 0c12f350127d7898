"""Pydantic model for the per-run conversion report.

The report is the audit record of one conversion: what was read, which
attribute table was inferred, what was written, and how the run ended.
It is written as JSON next to (or apart from) the shapefile when the
CLI is given ``--report``.

Sections:
- **columns**: The inferred attribute table, in column order.
- **output**: Shape type, counts and produced files.
- **error**: The structured error of a failed run, if any.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from geojson_shp.core.exceptions import ConversionError
    from geojson_shp.models.schema import Schema
    from geojson_shp.orchestrators.converter import ConversionResult

REPORT_SCHEMA_VERSION = "geojson-shp-report-v1"


class ColumnReport(BaseModel):
    """One attribute table column.

    Attributes:
        name: dBASE field name.
        kind: ``"Numeric"`` or ``"Text"``.
        field_type: dBASE type character (``"N"`` or ``"C"``).
        size: Field width.
        decimal: Fractional digits (Numeric only).
    """

    name: str
    kind: str
    field_type: str
    size: int
    decimal: int = 0


class OutputReport(BaseModel):
    """What the run wrote."""

    shape_type: str = ""
    feature_count: int = 0
    shapes_written: int = 0
    records_written: int = 0
    files: list[str] = Field(default_factory=list)


class ConversionReport(BaseModel):
    """Top-level conversion report document.

    Attributes:
        schema_version: Report format identifier.
        input_path: The GeoJSON document that was read.
        output_base: Output path without extension.
        timestamp: Run start (ISO 8601, UTC).
        duration_s: Wall-clock run time in seconds.
        status: ``"completed"`` or ``"failed"``.
        columns: Inferred attribute table (empty if inference failed).
        output: Written shape/record counts and files.
        error: ``to_error_dict()`` of the failure, if any.
    """

    schema_version: str = Field(default=REPORT_SCHEMA_VERSION, alias="$schema")
    input_path: str = ""
    output_base: str = ""
    timestamp: str = ""
    duration_s: float = 0.0
    status: str = "pending"
    columns: list[ColumnReport] = Field(default_factory=list)
    output: OutputReport = Field(default_factory=OutputReport)
    error: dict[str, Any] | None = None

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(
        cls,
        result: ConversionResult,
        *,
        input_path: str = "",
        output_base: str = "",
        timestamp: str = "",
        duration_s: float = 0.0,
    ) -> ConversionReport:
        """Report for a completed run."""
        return cls(
            input_path=input_path,
            output_base=output_base,
            timestamp=timestamp or datetime.now(UTC).isoformat(),
            duration_s=round(duration_s, 3),
            status="completed",
            columns=_columns(result.schema),
            output=OutputReport(
                shape_type=result.shape_type,
                feature_count=result.feature_count,
                shapes_written=result.shapes_written,
                records_written=result.records_written,
                files=[str(p) for p in result.output_paths],
            ),
        )

    @classmethod
    def from_error(
        cls,
        error: ConversionError,
        *,
        schema: Schema | None = None,
        input_path: str = "",
        output_base: str = "",
        timestamp: str = "",
        duration_s: float = 0.0,
    ) -> ConversionReport:
        """Report for a failed run."""
        return cls(
            input_path=input_path,
            output_base=output_base,
            timestamp=timestamp or datetime.now(UTC).isoformat(),
            duration_s=round(duration_s, 3),
            status="failed",
            columns=_columns(schema) if schema is not None else [],
            error={k: _jsonable(v) for k, v in error.to_error_dict().items()},
        )

    def to_json(self, *, indent: int = 2) -> str:
        """Serialise with the ``$schema`` alias."""
        return self.model_dump_json(indent=indent, by_alias=True)

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)  # type: ignore[return-value]


def _columns(schema: Schema) -> list[ColumnReport]:
    return [
        ColumnReport(
            name=column.name,
            kind=column.kind.label,
            field_type=column.kind.value,
            size=column.size,
            decimal=column.decimal,
        )
        for column in schema.columns
    ]


def _jsonable(value: object) -> object:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if value is None or isinstance(value, bool | int | float | str):
        return value
    return str(value)
