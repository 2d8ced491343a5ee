"""
Key specifications: which parts of a record decide whether it is a duplicate.

Descriptors are accumulated with a ``KeySpecBuilder`` and frozen into a
``KeySpec`` that is passed explicitly to extraction and classification.
"""

import json
from functools import cached_property
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from record_deduper.errors import ConfigurationError, SourceUnavailable
from record_deduper.utils.text import decode_separator


class KeyDescriptor(BaseModel):
    """
    One field of a record that takes part in the comparison key.

    In delimited mode the field is chosen by ``field_number``; in fixed-width
    mode by ``start_pos`` and ``key_length``. Positions are 1-based.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    field_number: PositiveInt | None = None
    start_pos: PositiveInt | None = None
    key_length: PositiveInt | None = None
    ignore_case: bool = False
    ignore_whitespace: bool = False
    alias: dict[str, str] | None = None

    @field_validator("alias")
    @classmethod
    def fold_alias_case(cls, alias: dict[str, str] | None, info: ValidationInfo) -> dict[str, str] | None:
        """Upper-case the alias table when case is ignored and drop identity entries.

        A canonical value mapped to itself would make the canonical record an
        alias duplicate of itself.
        """
        if alias is None:
            return None
        if info.data.get("ignore_case"):
            alias = {k.upper(): v.upper() for k, v in alias.items()}
        return {k: v for k, v in alias.items() if k != v}

    @property
    def is_fixed_width(self) -> bool:
        return self.start_pos is not None


class KeySpec(BaseModel):
    """Immutable, ordered set of key descriptors plus the field separator."""

    model_config = ConfigDict(frozen=True)

    field_separator: str | None = None
    descriptors: tuple[KeyDescriptor, ...] = ()

    @property
    def is_delimited(self) -> bool:
        return bool(self.field_separator)

    @property
    def uses_whole_line(self) -> bool:
        """With no descriptors the entire record is the key."""
        return not self.descriptors

    def keys(self) -> list[tuple[int, KeyDescriptor]]:
        """Descriptors paired with their 1-based key index, in definition order."""
        return list(enumerate(self.descriptors, start=1))

    def descriptor(self, key_index: int) -> KeyDescriptor | None:
        if 1 <= key_index <= len(self.descriptors):
            return self.descriptors[key_index - 1]
        return None

    @cached_property
    def alias_tables(self) -> dict[int, dict[str, str]]:
        """Non-empty alias tables keyed by key index."""
        return {
            index: descriptor.alias
            for index, descriptor in self.keys()
            if descriptor.alias
        }

    @property
    def has_aliases(self) -> bool:
        return bool(self.alias_tables)

    @cached_property
    def alias_targets(self) -> dict[int, list[str]]:
        """Distinct canonical alias values per key index, first-seen order."""
        targets = {}
        for index, table in self.alias_tables.items():
            targets[index] = list(dict.fromkeys(table.values()))
        return targets


class KeySpecBuilder:
    """
    Accumulates key descriptors and produces an immutable ``KeySpec``.

    Every call validates immediately. A rejected call raises
    ``ConfigurationError`` and leaves the builder unchanged, so callers may
    carry on with the descriptors accepted so far.
    """

    def __init__(self, field_separator: str | None = None):
        self._field_separator = None
        self._descriptors: list[KeyDescriptor] = []
        if field_separator:
            self.field_separator(field_separator)

    def field_separator(self, separator: str) -> "KeySpecBuilder":
        """Switch to delimited mode, splitting records on ``separator``.

        The separator is always matched literally, so ``|`` or ``.`` are
        plain characters here.
        """
        if not separator:
            raise ConfigurationError("Field separator must not be empty", option="field_separator")
        if any(d.is_fixed_width for d in self._descriptors):
            raise ConfigurationError(
                "Cannot set a field separator after fixed width keys were added",
                option="field_separator",
            )
        self._field_separator = separator
        return self

    def add_key(self, **options: Any) -> "KeySpecBuilder":
        """Add one key descriptor.

        Recognised options: field_number, start_pos, key_length, ignore_case,
        ignore_whitespace, alias.

        Raises:
            ConfigurationError: if an option is unknown, malformed, or does
                not fit the current delimited / fixed width mode
        """
        try:
            descriptor = KeyDescriptor(**options)
        except ValidationError as exc:
            first = exc.errors()[0]
            option = ".".join(str(part) for part in first["loc"]) or None
            raise ConfigurationError(f"Invalid key option: {first['msg']}", option=option) from exc

        self._check_mode(descriptor)
        self._descriptors.append(descriptor)
        logger.debug(f"Added key {len(self._descriptors)}: {descriptor.model_dump(exclude_none=True)}")
        return self

    def _check_mode(self, descriptor: KeyDescriptor) -> None:
        delimited = bool(self._field_separator)

        if descriptor.field_number is not None and descriptor.start_pos is not None:
            raise ConfigurationError(
                "Use either field_number or start_pos, not both", option="start_pos"
            )
        if descriptor.field_number is not None:
            if not delimited:
                raise ConfigurationError(
                    "Cannot use field_number on fixed width records", option="field_number"
                )
        elif descriptor.start_pos is not None:
            if delimited:
                raise ConfigurationError(
                    "Cannot use start_pos on character separated records", option="start_pos"
                )
            if descriptor.key_length is None:
                raise ConfigurationError(
                    f"No key_length defined for start_pos: {descriptor.start_pos}",
                    option="key_length",
                )
        elif delimited:
            raise ConfigurationError(
                "field_number is required for character separated records", option="field_number"
            )
        else:
            raise ConfigurationError(
                "start_pos and key_length are required for fixed width records", option="start_pos"
            )

    def __len__(self) -> int:
        return len(self._descriptors)

    def build(self) -> KeySpec:
        """Freeze the accumulated configuration."""
        return KeySpec(
            field_separator=self._field_separator,
            descriptors=tuple(self._descriptors),
        )


class KeySpecFile(BaseModel):
    """On-disk layout of a key specification used for batch runs."""

    model_config = ConfigDict(extra="forbid")

    field_separator: str | None = None
    keys: list[dict[str, Any]] = Field(default_factory=list)


def load_keyspec_file(path: Path) -> KeySpec:
    """
    Load a key specification from a JSON file.

    Example file::

        {
            "field_separator": ",",
            "keys": [
                {"field_number": 2, "alias": {"Bob": "Robert"}},
                {"field_number": 3, "ignore_case": true}
            ]
        }

    Raises:
        SourceUnavailable: if the file cannot be read
        ConfigurationError: if the file content is not a valid specification
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise SourceUnavailable(f"Could not open key file: {path}: {e}", path=path) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Key file {path} is not valid JSON: {e}") from e

    try:
        layout = KeySpecFile.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Key file {path} is malformed: {e.errors()[0]['msg']}") from e

    builder = KeySpecBuilder(decode_separator(layout.field_separator) if layout.field_separator else None)
    for options in layout.keys:
        builder.add_key(**options)

    logger.info(f"Loaded {len(builder)} keys from {path}")
    return builder.build()
