"""Utility modules for the record deduper."""

from record_deduper.utils.logging import setup_logging
from record_deduper.utils.text import (
    decode_separator,
    derive_output_paths,
    format_full_key,
    split_base_and_extension,
)

__all__ = [
    # Logging
    "setup_logging",
    # Text utilities
    "decode_separator",
    "derive_output_paths",
    "format_full_key",
    "split_base_and_extension",
]
