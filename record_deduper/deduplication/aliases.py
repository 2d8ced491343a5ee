"""
Alias resolution: finding records that use a nickname for a value seen elsewhere.

Pass 1 collects the keys of records that already use only canonical alias
values. Pass 2 rewrites a record's alias values to their canonical form and
checks the rewritten key against that collection.
"""

from collections.abc import Iterable

from loguru import logger

from record_deduper.keyspec import KeySpec
from record_deduper.normalizers import FullKey, assemble_key, normalized_key

# Canonical-form key -> record number that first produced it
AliasCandidates = dict[FullKey, int]


def candidate_key(record_key: dict[int, str], targets: dict[int, set[str]]) -> FullKey | None:
    """Return the record's key if every aliased field holds a canonical value.

    Args:
        record_key: Normalized key values by key index
        targets: Canonical alias values allowed for each aliased key index

    Returns:
        The assembled key, or None if the record is not a candidate
    """
    if not record_key:
        return None

    for key_index in sorted(record_key):
        allowed = targets.get(key_index)
        if allowed is not None and record_key[key_index] not in allowed:
            return None
    return assemble_key(record_key)


def collect_candidates(records: Iterable[str], spec: KeySpec) -> AliasCandidates:
    """First pass: gather the canonical-form keys present in the data."""
    candidates: AliasCandidates = {}
    if not spec.has_aliases:
        return candidates

    targets = {index: set(values) for index, values in spec.alias_targets.items()}

    record_number = 0
    for record_number, record in enumerate(records, start=1):
        key = candidate_key(normalized_key(record, spec).key, targets)
        if key is not None:
            candidates.setdefault(key, record_number)

    logger.debug(f"Alias pass: {len(candidates)} candidate keys from {record_number} records")
    return candidates


def substitute_aliases(record_key: dict[int, str], spec: KeySpec) -> dict[int, str] | None:
    """Replace alias values with their canonical form.

    Returns:
        The rewritten key, or None when no field held an alias value
    """
    substituted = dict(record_key)
    changed = False

    for key_index, table in spec.alias_tables.items():
        value = record_key.get(key_index)
        if value is not None and value in table:
            substituted[key_index] = table[value]
            changed = True

    return substituted if changed else None


def find_alias_match(
    record_key: dict[int, str],
    candidates: AliasCandidates,
    spec: KeySpec,
) -> int | None:
    """Record number of the canonical record this one is an alias of, if any."""
    if not candidates:
        return None

    substituted = substitute_aliases(record_key, spec)
    if substituted is None:
        return None
    return candidates.get(assemble_key(substituted))


def is_alias_duplicate(
    record_key: dict[int, str],
    candidates: AliasCandidates,
    spec: KeySpec,
) -> bool:
    """Second pass: does this record spell a canonical record with aliases?"""
    return find_alias_match(record_key, candidates, spec) is not None
