"""
Key normalization: case folding, whitespace trimming and key assembly.
"""

from record_deduper.extraction import Extraction, extract
from record_deduper.keyspec import KeySpec

# Composite comparison key: field values in ascending key-index order
FullKey = tuple[str, ...]


def transform_key(record_key: dict[int, str], spec: KeySpec) -> dict[int, str]:
    """Apply each key's ignore_whitespace and ignore_case settings.

    Only keys present in ``record_key`` are touched, so a partial key from a
    short record stays partial.

    Args:
        record_key: Extracted values keyed by key index
        spec: The key specification

    Returns:
        New mapping with normalized values
    """
    transformed = {}
    for key_index, value in record_key.items():
        descriptor = spec.descriptor(key_index)
        if descriptor is not None:
            if descriptor.ignore_whitespace:
                value = value.strip()
            if descriptor.ignore_case:
                value = value.upper()
        transformed[key_index] = value
    return transformed


def assemble_key(record_key: dict[int, str]) -> FullKey:
    """Build the composite key used for equality comparison."""
    return tuple(record_key[key_index] for key_index in sorted(record_key))


def normalized_key(record: str, spec: KeySpec) -> Extraction:
    """Extract a record's key fields and normalize them in one step."""
    extraction = extract(record, spec)
    return Extraction(
        key=transform_key(extraction.key, spec),
        short_record=extraction.short_record,
    )
