"""
Separate complete, partial and near duplicate text records.

Records are split into unique and duplicate partitions. What counts as a
duplicate is defined by key fields, optionally ignoring case and
surrounding whitespace, and by alias tables such as ``{"Bob": "Robert"}``.
"""

from record_deduper.deduper import Deduper, FileDedupeResult
from record_deduper.deduplication import Classification, DedupeResult, DuplicateKind
from record_deduper.errors import (
    ConfigurationError,
    DeduperError,
    ShortRecordError,
    SourceExhaustionMismatch,
    SourceUnavailable,
)
from record_deduper.extraction import ShortRecord
from record_deduper.keyspec import KeyDescriptor, KeySpec, KeySpecBuilder, load_keyspec_file

__version__ = "0.5.0"

__all__ = [
    "Classification",
    "ConfigurationError",
    "DedupeResult",
    "Deduper",
    "DeduperError",
    "DuplicateKind",
    "FileDedupeResult",
    "KeyDescriptor",
    "KeySpec",
    "KeySpecBuilder",
    "ShortRecord",
    "ShortRecordError",
    "SourceExhaustionMismatch",
    "SourceUnavailable",
    "load_keyspec_file",
]
