"""
High-level deduper: configure keys, then dedupe files or in-memory records.

    deduper = Deduper()
    deduper.field_separator(",")
    deduper.add_key(field_number=1, ignore_case=True)
    deduper.add_key(field_number=2, alias={"Bob": "Robert", "Rob": "Robert"})
    result = deduper.dedupe_file("names.txt")
    unique, duplicates = deduper.dedupe_array(records)
"""

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from record_deduper.config import settings
from record_deduper.deduplication import DedupeResult, dedupe_records
from record_deduper.keyspec import KeySpec, KeySpecBuilder
from record_deduper.sources import FileSink, FileSource, ListSink, SequenceSource
from record_deduper.utils.text import derive_output_paths


@dataclass
class FileDedupeResult(DedupeResult):
    """Result of deduping a file, with the paths that were written."""
    input_path: Path | None = None
    unique_path: Path | None = None
    duplicate_path: Path | None = None


class Deduper:
    """
    Splits records into unique and duplicate partitions.

    Keys are configured with ``field_separator`` and ``add_key`` before any
    deduping; every dedupe call works on a frozen snapshot of that
    configuration and keeps no state between calls.
    """

    def __init__(
        self,
        spec: KeySpec | None = None,
        unique_suffix: str | None = None,
        duplicate_suffix: str | None = None,
        strict: bool | None = None,
    ):
        self._builder = KeySpecBuilder()
        if spec is not None:
            if spec.field_separator:
                self._builder.field_separator(spec.field_separator)
            for descriptor in spec.descriptors:
                self._builder.add_key(**descriptor.model_dump(exclude_none=True))

        self.unique_suffix = unique_suffix or settings.unique_suffix
        self.duplicate_suffix = duplicate_suffix or settings.duplicate_suffix
        self.strict = settings.strict_short_records if strict is None else strict

    def field_separator(self, separator: str) -> "Deduper":
        """Treat records as delimited by ``separator`` (matched literally)."""
        self._builder.field_separator(separator)
        return self

    def add_key(self, **options) -> "Deduper":
        """Add a field to the definition of a duplicate.

        See ``KeyDescriptor`` for the recognised options.

        Raises:
            ConfigurationError: if the options are invalid; the existing
                keys are kept
        """
        self._builder.add_key(**options)
        return self

    @property
    def spec(self) -> KeySpec:
        return self._builder.build()

    def dedupe_records(self, records: Iterable[str]) -> DedupeResult:
        """Classify any re-iterable collection of records."""
        return dedupe_records(records, self.spec, strict=self.strict)

    def dedupe_array(self, records: Iterable[str]) -> tuple[list[str], list[str]]:
        """
        Dedupe an in-memory list of records.

        Args:
            records: Ordered records

        Returns:
            (unique_records, duplicate_records), each in original order
        """
        if not isinstance(records, (list, tuple)):
            records = list(records)

        sink = ListSink()
        dedupe_records(SequenceSource(records), self.spec, sink=sink, strict=self.strict)
        return sink.unique, sink.duplicates

    def output_paths(self, input_path: Path) -> tuple[Path, Path]:
        """Where ``dedupe_file`` writes the unique and duplicate records."""
        return derive_output_paths(input_path, self.unique_suffix, self.duplicate_suffix)

    def dedupe_file(self, input_path: Path) -> FileDedupeResult:
        """
        Dedupe a text file of newline-separated records.

        ``names.txt`` produces ``names_uniqs.txt`` and ``names_dupes.txt``
        beside it (suffixes configurable). Existing outputs are overwritten
        and the input is left intact.

        Raises:
            SourceUnavailable: if the input cannot be read or the outputs
                cannot be created; nothing is written in that case
        """
        source = FileSource(input_path, encoding=settings.encoding)
        source.check()

        unique_path, duplicate_path = self.output_paths(source.path)
        sink = FileSink(
            unique_path,
            duplicate_path,
            encoding=settings.encoding,
            warn_on_overwrite=settings.warn_on_overwrite,
        )
        sink.check()

        logger.info(f"Deduping {source.path}")
        with sink:
            result = dedupe_records(source, self.spec, sink=sink, strict=self.strict)

        logger.info(f"Wrote {unique_path.name} and {duplicate_path.name}")
        return FileDedupeResult(
            classifications=result.classifications,
            input_path=source.path,
            unique_path=unique_path,
            duplicate_path=duplicate_path,
        )
