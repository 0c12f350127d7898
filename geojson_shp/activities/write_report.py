"""Write report activity — store the JSON conversion report.

Writes a ``ConversionReport`` to a local path.  Overwrites an existing
report so re-running a conversion leaves exactly one report behind.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from geojson_shp.core.exceptions import ResourceError

if TYPE_CHECKING:
    from geojson_shp.models.report import ConversionReport

logger = logging.getLogger("geojson_shp.activities.write_report")


class ReportWriteError(ResourceError):
    """Raised when the report file cannot be written."""

    default_stage = "write_report"
    default_code = "REPORT_WRITE_FAILED"


def write_report(report: ConversionReport, path: Path | str) -> Path:
    """Serialise *report* to *path* as UTF-8 JSON.

    Parent directories are created as needed.

    Returns:
        The path that was written.

    Raises:
        ReportWriteError: If the file cannot be written.
    """
    report_path = Path(path)
    try:
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(report.to_json() + "\n", encoding="utf-8")
    except OSError as exc:
        msg = f"Failed to write report to {report_path}: {exc}"
        raise ReportWriteError(msg, details={"path": str(report_path)}) from exc

    logger.info("Report written | status=%s | path=%s", report.status, report_path)
    return report_path
