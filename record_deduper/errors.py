"""
Exception types raised by the record deduper.

Configuration problems and unusable sources are raised to the caller at the
point of the offending call. Short records are data-quality signals and are
only raised when strict mode asks for it.
"""

from pathlib import Path


class DeduperError(Exception):
    """Base class for all deduper errors."""
    pass


class ConfigurationError(DeduperError):
    """Raised when a key descriptor or separator is invalid or incompatible."""

    def __init__(self, message: str, option: str | None = None):
        super().__init__(message)
        self.option = option


class SourceUnavailable(DeduperError):
    """Raised when an input cannot be read or an output cannot be created."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


class SourceExhaustionMismatch(DeduperError):
    """Raised when a record is requested beyond the end of an in-memory source."""

    def __init__(self, record_number: int, available: int):
        super().__init__(
            f"Record {record_number} requested but the source only holds {available} records"
        )
        self.record_number = record_number
        self.available = available


class ShortRecordError(DeduperError):
    """Raised in strict mode when a record lacks a configured key field."""

    def __init__(self, short_record):
        super().__init__(str(short_record))
        self.short_record = short_record
