"""Unified conversion exception taxonomy.

Every error raised while converting a FeatureCollection inherits from
``ConversionError`` and carries structured context (stage, code, feature
index, offending attribute/column) so a failed run can be diagnosed
from the error alone.

Taxonomy categories
-------------------
- ``ValidationError`` — input document or data-shape violations.
- ``ResourceError``   — underlying file/stream failures.
- ``StateError``      — driver used outside its lifecycle.

No error is retryable: every failure cause is structural, and the
conversion driver stops the run on the first one.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for logging and CLI output.
"""

from __future__ import annotations


class ConversionError(Exception):
    """Base exception for all conversion errors.

    Attributes:
        message: Human-readable error description.
        stage: Component where the error occurred
            (e.g. ``"parse_geojson"``, ``"assemble_record"``).
        code: Machine-readable error code (e.g. ``"MISSING_ATTRIBUTE"``).
        feature_index: Zero-based index of the offending feature, if any.
        details: Extra diagnostic context (attribute name, kinds, ...).
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        feature_index: int | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.feature_index = feature_index
        self.details = dict(details or {})
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        """Conversion failures are never retried."""
        return False

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, ResourceError):
            return "io"
        if isinstance(self, StateError):
            return "state"
        return "internal"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "feature_index": self.feature_index,
            "details": dict(self.details),
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(ConversionError):
    """Input document or data-shape violation."""


class ResourceError(ConversionError):
    """Underlying file or stream failure."""


class StateError(ConversionError):
    """Operation invoked in the wrong lifecycle state."""
