"""
Duplicate classification over a sequence of records.

Records are classified in their original order. The first record bearing a
key is unique; later records with the same key are exact duplicates, and
records that spell a canonical record's key with aliases are alias
duplicates. Alias duplicates take precedence over exact duplicates.
"""

import dataclasses
from collections import Counter
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from record_deduper.deduplication.aliases import collect_candidates, find_alias_match
from record_deduper.errors import ShortRecordError
from record_deduper.extraction import ShortRecord
from record_deduper.keyspec import KeySpec
from record_deduper.normalizers import FullKey, assemble_key, normalized_key
from record_deduper.utils.text import format_full_key


class DuplicateKind(str, Enum):
    """How a record relates to the records before it."""

    UNIQUE = "unique"
    EXACT_DUPLICATE = "exact_duplicate"
    ALIAS_DUPLICATE = "alias_duplicate"

    @property
    def is_duplicate(self) -> bool:
        return self is not DuplicateKind.UNIQUE


@dataclass(frozen=True)
class Classification:
    """Outcome for one record."""
    record_number: int          # 1-based position in the source
    record: str
    kind: DuplicateKind
    full_key: FullKey

    # Record number of the unique record this one duplicates
    duplicate_of: int | None = None

    # Set when the record could not supply every key field
    short_record: ShortRecord | None = None


@dataclass
class DedupeResult:
    """All classifications of one run, in original record order."""
    classifications: list[Classification] = field(default_factory=list)

    @property
    def unique(self) -> list[str]:
        return [c.record for c in self.classifications if not c.kind.is_duplicate]

    @property
    def duplicates(self) -> list[str]:
        return [c.record for c in self.classifications if c.kind.is_duplicate]

    @property
    def short_records(self) -> list[ShortRecord]:
        return [c.short_record for c in self.classifications if c.short_record]

    @property
    def counts(self) -> Counter:
        """Number of records of each kind."""
        counts = Counter({kind: 0 for kind in DuplicateKind})
        counts.update(c.kind for c in self.classifications)
        return counts

    def __len__(self) -> int:
        return len(self.classifications)


def ensure_reiterable(records: Iterable[str]) -> Iterable[str]:
    """Materialize one-shot iterators so the records can be read twice.

    Files and sequences are re-read for each pass; a generator can only be
    read once, so it is buffered into memory first.
    """
    if iter(records) is records:
        logger.debug("Buffering one-shot record iterator in memory")
        return list(records)
    return records


def classify(
    records: Iterable[str],
    spec: KeySpec,
    strict: bool = False,
) -> Iterator[Classification]:
    """
    Classify each record as unique, exact duplicate or alias duplicate.

    When the KeySpec defines aliases the records are read twice: once to collect
    canonical-form keys, then once to classify.

    Args:
        records: Re-iterable source of records
        spec: Key specification
        strict: Raise ShortRecordError instead of warning on short records

    Yields:
        One Classification per record, in original order
    """
    records = ensure_reiterable(records)
    candidates = collect_candidates(records, spec) if spec.has_aliases else {}

    seen: dict[FullKey, int] = {}

    for record_number, record in enumerate(records, start=1):
        extraction = normalized_key(record, spec)
        full_key = assemble_key(extraction.key)

        short_record = extraction.short_record
        if short_record:
            short_record = dataclasses.replace(short_record, record_number=record_number)
            if strict:
                raise ShortRecordError(short_record)
            logger.warning(f"{short_record}; classifying on partial key")

        alias_of = find_alias_match(extraction.key, candidates, spec)
        if alias_of is not None:
            kind, duplicate_of = DuplicateKind.ALIAS_DUPLICATE, alias_of
        elif full_key in seen:
            kind, duplicate_of = DuplicateKind.EXACT_DUPLICATE, seen[full_key]
        else:
            kind, duplicate_of = DuplicateKind.UNIQUE, None
            seen[full_key] = record_number

        logger.debug(f"Record {record_number}: {kind.value} [{format_full_key(full_key)}]")

        yield Classification(
            record_number=record_number,
            record=record,
            kind=kind,
            full_key=full_key,
            duplicate_of=duplicate_of,
            short_record=short_record,
        )


def dedupe_records(
    records: Iterable[str],
    spec: KeySpec,
    sink: Callable[[Classification], None] | None = None,
    strict: bool = False,
) -> DedupeResult:
    """Classify all records, forwarding each classification to ``sink``."""
    result = DedupeResult()

    for classification in classify(records, spec, strict=strict):
        result.classifications.append(classification)
        if sink is not None:
            sink(classification)

    counts = result.counts
    logger.info(
        f"Deduplication: {len(result)} records, {counts[DuplicateKind.UNIQUE]} unique, "
        f"{counts[DuplicateKind.EXACT_DUPLICATE]} exact duplicates, "
        f"{counts[DuplicateKind.ALIAS_DUPLICATE]} alias duplicates"
    )
    return result
