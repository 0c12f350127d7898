"""Converter configuration loaded from environment variables.

All configuration values default to the reference layout: Numeric
columns ``N(22, 20)``, Text columns ``C(255)``, UTF-8 attribute text,
partial output left in place after a failed run.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any value is out
    of its valid range, so a bad setting is caught before any output
    file is created.
"""

from __future__ import annotations

import codecs
import os
from dataclasses import dataclass

from geojson_shp.core.constants import (
    DEFAULT_ENCODING,
    DEFAULT_NUMERIC_FIELD_DECIMALS,
    DEFAULT_NUMERIC_FIELD_SIZE,
    DEFAULT_TEXT_FIELD_SIZE,
    MAX_FIELD_SIZE,
)
from geojson_shp.core.exceptions import ConversionError

_TRUE_LITERALS = frozenset({"1", "true", "yes", "on"})
_FALSE_LITERALS = frozenset({"", "0", "false", "no", "off"})


class ConfigValidationError(ConversionError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        reason: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(
            f"Invalid configuration {key}={value!r}: {reason}",
            details={"key": key, "value": value},
        )

    @property
    def category(self) -> str:
        return "config"


@dataclass(frozen=True, slots=True)
class ConverterConfig:
    """Immutable converter configuration.

    Loaded once per process and threaded through the schema builder,
    the sinks and the driver.

    Attributes:
        numeric_field_size: Total width of Numeric columns.
        numeric_field_decimals: Fractional digits of Numeric columns.
        text_field_size: Maximum byte width of Text columns.
        encoding: Codec used for dBASE field names and Text values.
        remove_partial_output: Delete ``.shp``/``.shx``/``.dbf`` written
            by a run that ends in ``FAILED``.
    """

    numeric_field_size: int = DEFAULT_NUMERIC_FIELD_SIZE
    numeric_field_decimals: int = DEFAULT_NUMERIC_FIELD_DECIMALS
    text_field_size: int = DEFAULT_TEXT_FIELD_SIZE
    encoding: str = DEFAULT_ENCODING
    remove_partial_output: bool = False

    @classmethod
    def from_env(cls) -> ConverterConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range, the
                encoding is unknown, or a boolean flag is not a
                recognised literal.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``GEOJSON_SHP_TEXT_SIZE=abc``).
        """
        config = cls(
            numeric_field_size=int(
                os.getenv("GEOJSON_SHP_NUMERIC_SIZE", str(DEFAULT_NUMERIC_FIELD_SIZE))
            ),
            numeric_field_decimals=int(
                os.getenv("GEOJSON_SHP_NUMERIC_DECIMALS", str(DEFAULT_NUMERIC_FIELD_DECIMALS))
            ),
            text_field_size=int(os.getenv("GEOJSON_SHP_TEXT_SIZE", str(DEFAULT_TEXT_FIELD_SIZE))),
            encoding=os.getenv("GEOJSON_SHP_ENCODING", DEFAULT_ENCODING),
            remove_partial_output=_parse_flag(
                "GEOJSON_SHP_REMOVE_PARTIAL_OUTPUT",
                os.getenv("GEOJSON_SHP_REMOVE_PARTIAL_OUTPUT", ""),
            ),
        )
        validate_config(config)
        return config


def _parse_flag(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_LITERALS:
        return True
    if value in _FALSE_LITERALS:
        return False
    raise ConfigValidationError(key, raw, "must be one of true/false, yes/no, on/off, 1/0")


def validate_config(config: ConverterConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not 1 <= config.numeric_field_size <= MAX_FIELD_SIZE:
        raise ConfigValidationError(
            "GEOJSON_SHP_NUMERIC_SIZE",
            config.numeric_field_size,
            f"must be between 1 and {MAX_FIELD_SIZE} (characters)",
        )

    # A non-zero decimal count needs room for the leading digit and the point.
    if config.numeric_field_decimals < 0 or (
        config.numeric_field_decimals > 0
        and config.numeric_field_decimals > config.numeric_field_size - 2
    ):
        raise ConfigValidationError(
            "GEOJSON_SHP_NUMERIC_DECIMALS",
            config.numeric_field_decimals,
            f"must be 0 or between 1 and {config.numeric_field_size - 2} "
            f"for a field size of {config.numeric_field_size}",
        )

    if not 1 <= config.text_field_size <= MAX_FIELD_SIZE:
        raise ConfigValidationError(
            "GEOJSON_SHP_TEXT_SIZE",
            config.text_field_size,
            f"must be between 1 and {MAX_FIELD_SIZE} (bytes)",
        )

    try:
        codecs.lookup(config.encoding)
    except LookupError as exc:
        raise ConfigValidationError(
            "GEOJSON_SHP_ENCODING",
            config.encoding,
            "must name a codec known to Python",
        ) from exc
