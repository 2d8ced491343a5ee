"""
Deduplication pipeline components.

These modules handle detecting exact and alias duplicates in an ordered
sequence of records.
"""

from .aliases import collect_candidates, is_alias_duplicate, substitute_aliases
from .classifier import (
    Classification,
    DedupeResult,
    DuplicateKind,
    classify,
    dedupe_records,
)

__all__ = [
    'Classification',
    'DedupeResult',
    'DuplicateKind',
    'classify',
    'collect_candidates',
    'dedupe_records',
    'is_alias_duplicate',
    'substitute_aliases',
]
