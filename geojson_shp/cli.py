"""Command-line entry point: ``geojson-shp INPUT OUTPUT_BASE``.

Exit codes:
    0  conversion completed
    1  conversion failed (the structured error is logged)
    2  bad usage or invalid configuration
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import time
from datetime import UTC, datetime

from geojson_shp import __version__
from geojson_shp.activities.parse_geojson import load_feature_collection
from geojson_shp.activities.write_report import ReportWriteError, write_report
from geojson_shp.core.config import ConfigValidationError, ConverterConfig, validate_config
from geojson_shp.core.exceptions import ConversionError
from geojson_shp.models.report import ConversionReport
from geojson_shp.orchestrators.converter import FeatureCollectionConverter
from geojson_shp.sinks.shapefile_writer import normalize_output_base

logger = logging.getLogger("geojson_shp.cli")

EXIT_OK = 0
EXIT_CONVERSION_FAILED = 1
EXIT_USAGE = 2

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="geojson-shp",
        description="GeoJSON FeatureCollection → ESRI shapefile (.shp/.shx/.dbf).",
    )
    ap.add_argument("input", help="Path to the input GeoJSON document.")
    ap.add_argument(
        "output_base",
        help="Output path without extension (a trailing .shp is accepted).",
    )
    ap.add_argument(
        "--remove-partial-output",
        action="store_true",
        default=None,
        help="Delete files written by a run that fails (default: keep them).",
    )
    ap.add_argument("--encoding", default=None, help="Codec for attribute text (default: utf-8).")
    ap.add_argument(
        "--report",
        default=None,
        metavar="PATH",
        help="Write a JSON conversion report to PATH (also on failure).",
    )
    ap.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=_LOG_LEVELS,
        help="Logging verbosity (default: INFO).",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def load_config(args: argparse.Namespace) -> ConverterConfig:
    """Environment configuration with command-line overrides applied.

    Raises:
        ConfigValidationError: If the merged configuration is invalid.
        ValueError: If a numeric environment variable is malformed.
    """
    config = ConverterConfig.from_env()
    overrides: dict[str, object] = {}
    if args.encoding is not None:
        overrides["encoding"] = args.encoding
    if args.remove_partial_output is not None:
        overrides["remove_partial_output"] = args.remove_partial_output
    if overrides:
        config = dataclasses.replace(config, **overrides)
        validate_config(config)
    return config


def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args)
    except ConfigValidationError as exc:
        logger.error("Invalid configuration | %s", json.dumps(exc.to_error_dict(), default=str))
        return EXIT_USAGE
    except ValueError as exc:
        logger.error("Invalid configuration | %s", exc)
        return EXIT_USAGE

    timestamp = datetime.now(UTC).isoformat()
    started = time.monotonic()
    converter: FeatureCollectionConverter | None = None
    try:
        collection = load_feature_collection(args.input)
        converter = FeatureCollectionConverter(collection, args.output_base, config=config)
        result = converter.run()
    except ConversionError as exc:
        logger.error("Conversion error | %s", json.dumps(exc.to_error_dict(), default=str))
        if args.report:
            report = ConversionReport.from_error(
                exc,
                schema=converter.schema if converter is not None else None,
                input_path=args.input,
                output_base=str(normalize_output_base(args.output_base)),
                timestamp=timestamp,
                duration_s=time.monotonic() - started,
            )
            _write_report_quietly(report, args.report)
        return EXIT_CONVERSION_FAILED

    logger.info("Wrote %s", ", ".join(str(p) for p in result.output_paths))

    if args.report:
        report = ConversionReport.from_result(
            result,
            input_path=args.input,
            output_base=str(converter.output_base),
            timestamp=timestamp,
            duration_s=time.monotonic() - started,
        )
        try:
            write_report(report, args.report)
        except ReportWriteError as exc:
            logger.error("Report error | %s", json.dumps(exc.to_error_dict(), default=str))
            return EXIT_CONVERSION_FAILED
    return EXIT_OK


def _write_report_quietly(report: ConversionReport, path: str) -> None:
    """Write a failure report; a write error is logged, not raised."""
    try:
        write_report(report, path)
    except ReportWriteError as exc:
        logger.warning("Could not write failure report | %s", exc.message)


if __name__ == "__main__":
    raise SystemExit(main())
