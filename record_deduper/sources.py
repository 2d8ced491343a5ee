"""
Record sources and sinks.

Sources must be readable more than once, since alias detection needs a
pass over the records before classification starts. File sources re-open
the file for each pass; sequence sources re-index the sequence.

File sinks write through temporary files that only replace the real
outputs once every record has been written.
"""

import codecs
import os
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from pathlib import Path

from loguru import logger

from record_deduper.deduplication import Classification
from record_deduper.errors import SourceExhaustionMismatch, SourceUnavailable

# Bytes inspected when deciding whether a file holds text
TEXT_CHECK_SIZE = 4096


class RecordSource(ABC):
    """A re-iterable supply of records."""

    @abstractmethod
    def __iter__(self) -> Iterator[str]:
        """Yield records from the beginning."""
        pass


class SequenceSource(RecordSource):
    """Records held in an in-memory sequence."""

    def __init__(self, records: Sequence[str]):
        self._records = records

    def __len__(self) -> int:
        return len(self._records)

    def read(self, record_number: int) -> str:
        """Return the record at 1-based ``record_number``."""
        if record_number < 1 or record_number > len(self._records):
            raise SourceExhaustionMismatch(record_number, len(self._records))
        return self._records[record_number - 1]

    def __iter__(self) -> Iterator[str]:
        expected = len(self._records)
        for record_number in range(1, expected + 1):
            try:
                yield self.read(record_number)
            except SourceExhaustionMismatch as e:
                logger.warning(f"{e}; treating as end of input")
                return


def _looks_like_text(path: Path, encoding: str) -> bool:
    with open(path, "rb") as f:
        head = f.read(TEXT_CHECK_SIZE)
    if b"\x00" in head:
        return False
    try:
        codecs.getincrementaldecoder(encoding)().decode(head, final=False)
    except UnicodeDecodeError:
        return False
    return True


class FileSource(RecordSource):
    """Newline-delimited records read from a text file."""

    def __init__(self, path: Path, encoding: str = "utf-8"):
        self.path = Path(path)
        self.encoding = encoding

    def check(self) -> None:
        """
        Verify the file can be used as input.

        Raises:
            SourceUnavailable: if the file is missing, empty, not a regular
                text file, or unreadable
        """
        path = self.path
        if not path.exists():
            raise SourceUnavailable(f"Input file not found: {path}", path=path)
        if not path.is_file():
            raise SourceUnavailable(f"Input is not a regular file: {path}", path=path)
        if not os.access(path, os.R_OK):
            raise SourceUnavailable(f"Input file is not readable: {path}", path=path)

        try:
            if path.stat().st_size == 0:
                raise SourceUnavailable(f"Input file is empty: {path}", path=path)
            if not _looks_like_text(path, self.encoding):
                raise SourceUnavailable(f"Input is not a text file: {path}", path=path)
        except OSError as e:
            raise SourceUnavailable(f"Could not open input file: {path}: {e}", path=path) from e

    def __iter__(self) -> Iterator[str]:
        """Yield lines without their newline.

        Raises:
            SourceUnavailable: if bytes past the inspected prefix do not
                decode in the configured encoding
        """
        with open(self.path, encoding=self.encoding) as f:
            try:
                for line in f:
                    yield line[:-1] if line.endswith("\n") else line
            except UnicodeDecodeError as e:
                raise SourceUnavailable(
                    f"Input is not a text file: {self.path}: {e}", path=self.path
                ) from e


class RecordSink(ABC):
    """Receives each classified record in original order."""

    @abstractmethod
    def write(self, classification: Classification) -> None:
        pass

    def __call__(self, classification: Classification) -> None:
        self.write(classification)


class ListSink(RecordSink):
    """Collects unique and duplicate records into two lists."""

    def __init__(self):
        self.unique: list[str] = []
        self.duplicates: list[str] = []

    def write(self, classification: Classification) -> None:
        if classification.kind.is_duplicate:
            self.duplicates.append(classification.record)
        else:
            self.unique.append(classification.record)


class FileSink(RecordSink):
    """
    Writes unique and duplicate records to two files.

    Use as a context manager. Records go to ``.tmp`` files next to the
    targets; on a clean exit they are renamed over the targets, and on an
    error they are removed so no half-written output is left behind.
    """

    def __init__(
        self,
        unique_path: Path,
        duplicate_path: Path,
        encoding: str = "utf-8",
        warn_on_overwrite: bool = True,
    ):
        self.unique_path = Path(unique_path)
        self.duplicate_path = Path(duplicate_path)
        self.encoding = encoding
        self.warn_on_overwrite = warn_on_overwrite
        self._handles = {}

    @property
    def paths(self) -> tuple[Path, Path]:
        return self.unique_path, self.duplicate_path

    @staticmethod
    def _temp_path(path: Path) -> Path:
        return path.with_suffix(path.suffix + ".tmp")

    def check(self) -> None:
        """
        Verify both outputs can be created.

        Raises:
            SourceUnavailable: if an output directory is missing or not
                writable, or an output path is not a regular file
        """
        for path in self.paths:
            directory = path.parent
            if not directory.is_dir():
                raise SourceUnavailable(f"Output directory does not exist: {directory}", path=path)
            if not os.access(directory, os.W_OK):
                raise SourceUnavailable(f"Could not create output file: {path}", path=path)
            if path.exists():
                if not path.is_file():
                    raise SourceUnavailable(f"Output path is not a regular file: {path}", path=path)
                if self.warn_on_overwrite:
                    logger.warning(f"Overwriting existing output file: {path}")

    def __enter__(self) -> "FileSink":
        try:
            for name, path in zip(("unique", "duplicate"), self.paths):
                self._handles[name] = open(self._temp_path(path), "w", encoding=self.encoding)
        except OSError as e:
            self._discard()
            raise SourceUnavailable(f"Could not create output file: {e}") from e
        return self

    def write(self, classification: Classification) -> None:
        name = "duplicate" if classification.kind.is_duplicate else "unique"
        self._handles[name].write(f"{classification.record}\n")

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self._discard()
            return

        self._close_handles()
        for path in self.paths:
            # Atomic rename (overwrites existing)
            os.replace(self._temp_path(path), path)

    def _close_handles(self) -> None:
        for handle in self._handles.values():
            handle.close()
        self._handles = {}

    def _discard(self) -> None:
        self._close_handles()
        for path in self.paths:
            temp_path = self._temp_path(path)
            if temp_path.exists():
                temp_path.unlink()
