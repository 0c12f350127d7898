"""Output sink abstract base classes.

Defines the contracts the conversion driver writes through.  The driver
never knows which concrete writer is behind a sink.

Lifecycle (both sinks):
    1. ``open()``      — create the output artifact(s).
    2. ``write_*()``   — one call per feature, in feature order.
    3. ``close()``     — finalise headers and release files, exactly once
       after a successful run.
    4. ``abort()``     — best-effort release after a failed run; never
       raises, so the original failure reaches the caller.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from geojson_shp.core.exceptions import ResourceError

if TYPE_CHECKING:
    from pathlib import Path

    from geojson_shp.models.schema import Record, Schema
    from geojson_shp.models.shape import ShapeRecord


class SinkIOError(ResourceError):
    """Raised when an underlying file or stream operation fails."""

    default_stage = "write_output"
    default_code = "SINK_IO_FAILED"


class GeometrySink(abc.ABC):
    """Accepts one shape record at a time, keeping its index in step."""

    @property
    @abc.abstractmethod
    def shapes_written(self) -> int:
        """Number of shape records written so far."""

    @property
    @abc.abstractmethod
    def paths(self) -> tuple[Path, ...]:
        """Files this sink writes."""

    @abc.abstractmethod
    def open(self) -> None:
        """Create the geometry and index files.

        Raises:
            SinkIOError: If the files cannot be created.
        """

    @abc.abstractmethod
    def write_shape(self, shape: ShapeRecord) -> None:
        """Append one shape record.

        Raises:
            SinkIOError: If the write fails.
        """

    @abc.abstractmethod
    def close(self) -> None:
        """Finalise headers and close the files.

        Raises:
            SinkIOError: If finalising fails.
        """

    @abc.abstractmethod
    def abort(self) -> None:
        """Release the files after a failed run without raising."""


class AttributeSink(abc.ABC):
    """Accepts a schema at open time, then one record at a time."""

    @property
    @abc.abstractmethod
    def records_written(self) -> int:
        """Number of attribute records written so far."""

    @property
    @abc.abstractmethod
    def paths(self) -> tuple[Path, ...]:
        """Files this sink writes."""

    @abc.abstractmethod
    def open(self, schema: Schema) -> None:
        """Create the attribute table with the given column layout.

        Raises:
            SinkIOError: If the file cannot be created.
        """

    @abc.abstractmethod
    def write_record(self, record: Record) -> None:
        """Append one record; its values are in schema column order.

        Raises:
            SinkIOError: If the write fails.
        """

    @abc.abstractmethod
    def close(self) -> None:
        """Finalise the header and close the file.

        Raises:
            SinkIOError: If finalising fails.
        """

    @abc.abstractmethod
    def abort(self) -> None:
        """Release the file after a failed run without raising."""
