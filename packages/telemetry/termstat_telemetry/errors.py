"""Telemetry error kinds raised by counter readers."""

from __future__ import annotations


class TelemetryError(Exception):
    """Base class for reader failures. `source` names the path, field, or index involved."""

    kind = "telemetry_error"

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.source = source

    def __str__(self) -> str:
        if self.source and self.source not in self.message:
            return f"{self.message} ({self.source})"
        return self.message


class ResourceUnavailable(TelemetryError):
    """A required pseudo-file or directory could not be opened."""

    kind = "resource_unavailable"


class ReadFailure(TelemetryError):
    """I/O error on a handle that was already open."""

    kind = "read_failure"


class ParseFailure(TelemetryError):
    """Content did not match the expected numeric or text shape."""

    kind = "parse_failure"
