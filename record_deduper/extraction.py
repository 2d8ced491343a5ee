"""
Field extraction: turn a raw record into the values of its configured keys.

Delimited records are split with shell-style quoting rules on a literal
separator; fixed width records are sliced by character position.
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache

from record_deduper.keyspec import KeyDescriptor, KeySpec

# Key index -> field value, in key-index order
RecordKey = dict[int, str]

# Apostrophe inside a word, as in O'Reilly
_INNER_APOSTROPHE = re.compile(r"(\w)'(\w)")
_BACKSLASH_ESCAPE = re.compile(r"\\(.)", re.DOTALL)


@dataclass(frozen=True)
class ShortRecord:
    """A record that ran out of data before all key fields were extracted."""

    record: str
    key_index: int
    descriptor: KeyDescriptor
    fields: tuple[str, ...] = ()
    record_number: int | None = None

    def __str__(self) -> str:
        where = (
            f"field {self.descriptor.field_number}"
            if self.descriptor.field_number is not None
            else f"start_pos {self.descriptor.start_pos}, key_length {self.descriptor.key_length}"
        )
        number = f"record {self.record_number}" if self.record_number is not None else "record"
        return f"Short {number} for key {self.key_index} ({where}): {self.record!r}"


@dataclass
class Extraction:
    """Result of extracting key fields from one record."""

    key: RecordKey = field(default_factory=dict)
    short_record: ShortRecord | None = None


@lru_cache(maxsize=32)
def _field_pattern(separator: str) -> re.Pattern:
    return re.compile(
        r"""
        (?:
            (")((?:[^\\"]|\\.)*)"          # double quoted
          | (')((?:[^\\']|\\.)*)'          # single quoted
          | ((?:\\.|[^\\"'])*?)            # unquoted, followed by
            (\Z|""" + re.escape(separator) + r"""|(?!^)(?=["']))   # end, separator or quote
        )
        """,
        re.VERBOSE | re.DOTALL,
    )


def parse_line(line: str, separator: str) -> list[str]:
    """Split a line into fields on ``separator``, honouring quotes.

    Quoted sections keep any separators they contain and lose their quotes.
    A backslash escapes the following character. A line with an unbalanced
    quote cannot be parsed and yields no fields.

    Args:
        line: The raw record
        separator: Literal separator text

    Returns:
        List of field values
    """
    pattern = _field_pattern(separator)
    pieces: list[str] = []
    word: str | None = None

    while line:
        match = pattern.match(line)
        if not match:
            return []

        if match.group(1):
            quote, quoted = match.group(1), match.group(2)
        else:
            quote, quoted = match.group(3), match.group(4)
        unquoted, delimiter = match.group(5), match.group(6)

        if quote is None and not unquoted and not delimiter:
            return []

        line = line[match.end():]

        if quote == '"':
            value = _BACKSLASH_ESCAPE.sub(r"\1", quoted)
        elif quote == "'":
            value = quoted
        else:
            value = _BACKSLASH_ESCAPE.sub(r"\1", unquoted)

        word = (word or "") + value
        if delimiter:
            pieces.append(word)
            word = None
        if not line and word is not None:
            pieces.append(word)

    return pieces


def split_fields(record: str, separator: str) -> list[str]:
    """Split a delimited record, protecting apostrophes inside words."""
    if "'" in record:
        record = _INNER_APOSTROPHE.sub(r"\1\\'\2", record)
    return parse_line(record, separator)


def _extract_delimited(record: str, spec: KeySpec) -> Extraction:
    fields = split_fields(record, spec.field_separator)
    extraction = Extraction()

    for key_index, descriptor in spec.keys():
        position = descriptor.field_number - 1
        if position >= len(fields):
            extraction.short_record = ShortRecord(
                record=record,
                key_index=key_index,
                descriptor=descriptor,
                fields=tuple(fields),
            )
            break

        value = fields[position]
        if descriptor.key_length is not None:
            value = value[:descriptor.key_length]
        extraction.key[key_index] = value

    return extraction


def _extract_fixed_width(record: str, spec: KeySpec) -> Extraction:
    extraction = Extraction()

    for key_index, descriptor in spec.keys():
        start = descriptor.start_pos - 1
        value = record[start:start + descriptor.key_length]

        if value:
            extraction.key[key_index] = value
        if len(value) < descriptor.key_length:
            extraction.short_record = ShortRecord(
                record=record,
                key_index=key_index,
                descriptor=descriptor,
            )
            break

    return extraction


def extract(record: str, spec: KeySpec) -> Extraction:
    """Extract the configured key fields from a record.

    Extraction stops at the first key the record cannot fully supply. The
    returned ``Extraction`` then holds the partial key and a ``ShortRecord``
    describing what was missing.
    """
    if spec.uses_whole_line:
        return Extraction(key={1: record})

    if spec.is_delimited:
        return _extract_delimited(record, spec)
    return _extract_fixed_width(record, spec)
