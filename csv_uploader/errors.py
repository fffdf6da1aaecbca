"""
Error taxonomy for the daily CSV export.

Every stage failure is raised as an ExportError subclass carrying the
exported day and the stage that failed, so the run can log both before
exiting non-zero.

Stages:
- query:    streaming rows from PostgreSQL
- encode:   flattening / CSV serialization
- write:    local file output
- upload:   object store transfer
- watchdog: whole-run timeout
"""
from datetime import date
from typing import Optional


class ConfigError(Exception):
    """Raised when run configuration cannot be parsed at startup."""
    pass


class ExportError(Exception):
    """Base class for failures of a day's export task."""

    stage = "export"

    def __init__(self, message: str, day: Optional[date] = None):
        super().__init__(message)
        self.day = day

    def __str__(self) -> str:
        message = super().__str__()
        if self.day is not None:
            return f"[{self.day.isoformat()}][{self.stage}] {message}"
        return f"[{self.stage}] {message}"


class StoreQueryError(ExportError):
    """Connection loss or query failure while streaming records."""
    stage = "query"


class EncodingError(ExportError):
    """A malformed record blocked CSV serialization."""
    stage = "encode"


class FileIOError(ExportError):
    """Local file could not be written (disk full, permissions, ...)."""
    stage = "write"


class UploadError(ExportError):
    """Object store upload failed."""
    stage = "upload"


class WatchdogTimeoutError(ExportError, TimeoutError):
    """The whole run did not finish within the configured duration."""
    stage = "watchdog"
