#!/usr/bin/env python3
"""
Record Deduper - command line entry point.

Usage:
    python -m record_deduper.main dedupe names.txt
    python -m record_deduper.main dedupe --separator , --key field=2,ignore_case --key field=3 names.csv
    python -m record_deduper.main dedupe --keys-file keys.json *.txt
    python -m record_deduper.main show-keys --keys-file keys.json
"""

import sys
from pathlib import Path

import click
from loguru import logger
from rich.console import Console
from rich.table import Table

from record_deduper.deduper import Deduper
from record_deduper.deduplication import DuplicateKind
from record_deduper.errors import ConfigurationError, DeduperError
from record_deduper.keyspec import KeySpec, KeySpecBuilder, load_keyspec_file
from record_deduper.utils.logging import setup_logging
from record_deduper.utils.text import decode_separator


console = Console()

# --key shorthand -> add_key option
KEY_OPTION_NAMES = {
    "field": "field_number",
    "field_number": "field_number",
    "start": "start_pos",
    "start_pos": "start_pos",
    "length": "key_length",
    "key_length": "key_length",
    "ignore_case": "ignore_case",
    "ignore_whitespace": "ignore_whitespace",
}

FLAG_OPTIONS = {"ignore_case", "ignore_whitespace"}


def parse_key_option(text: str) -> dict:
    """
    Parse a --key value such as ``field=2,length=5,ignore_case``.

    Raises:
        ConfigurationError: on an unknown or malformed option
    """
    options = {}
    for part in filter(None, (p.strip() for p in text.split(","))):
        name, _, value = part.partition("=")
        option = KEY_OPTION_NAMES.get(name.strip())
        if option is None:
            raise ConfigurationError(f"Unknown key option '{name}' in '{text}'", option=name)

        if option in FLAG_OPTIONS:
            options[option] = value.strip().lower() not in ("0", "false", "no") if value else True
        else:
            try:
                options[option] = int(value)
            except ValueError:
                raise ConfigurationError(
                    f"Key option '{name}' needs a whole number, got '{value}'", option=option
                ) from None
    return options


def build_spec(separator: str | None, keys: tuple[str, ...], keys_file: Path | None) -> KeySpec:
    """Combine the --keys-file and --separator/--key options into a KeySpec."""
    builder = KeySpecBuilder()

    if keys_file:
        file_spec = load_keyspec_file(keys_file)
        if file_spec.field_separator:
            builder.field_separator(file_spec.field_separator)
        for descriptor in file_spec.descriptors:
            builder.add_key(**descriptor.model_dump(exclude_none=True))

    if separator:
        builder.field_separator(decode_separator(separator))
    for key in keys:
        builder.add_key(**parse_key_option(key))

    return builder.build()


def print_spec(spec: KeySpec) -> None:
    """Print the key definition as a table."""
    separator = repr(spec.field_separator) if spec.field_separator else "[dim]fixed width[/dim]"
    console.print(f"Separator: {separator}")

    if spec.uses_whole_line:
        console.print("[dim]No keys defined: whole records are compared[/dim]")
        return

    table = Table()
    table.add_column("Key")
    table.add_column("Position")
    table.add_column("Length")
    table.add_column("Ignore case")
    table.add_column("Ignore whitespace")
    table.add_column("Aliases")

    for key_index, descriptor in spec.keys():
        if descriptor.field_number is not None:
            position = f"field {descriptor.field_number}"
        else:
            position = f"char {descriptor.start_pos}"
        aliases = ", ".join(f"{k}→{v}" for k, v in (descriptor.alias or {}).items())

        table.add_row(
            str(key_index),
            position,
            str(descriptor.key_length) if descriptor.key_length else "-",
            "yes" if descriptor.ignore_case else "-",
            "yes" if descriptor.ignore_whitespace else "-",
            aliases or "-",
        )

    console.print(table)


key_options = [
    click.option("--separator", "-s", help="Field separator; escapes like \\t are accepted. Omit for fixed width records."),
    click.option("--key", "-k", "keys", multiple=True, help="Key field, e.g. field=2,length=5,ignore_case or start=1,length=3"),
    click.option("--keys-file", type=click.Path(path_type=Path), help="JSON file with field_separator and keys"),
]


def with_key_options(func):
    for option in reversed(key_options):
        func = option(func)
    return func


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--log-file", type=click.Path(path_type=Path), help="Also write the run log to this file")
def cli(debug, log_file):
    """Record Deduper - split text records into unique and duplicate files"""
    setup_logging(level="DEBUG" if debug else None, log_file=log_file)


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=Path))
@with_key_options
@click.option("--unique-suffix", help="Suffix for the unique records file (default _uniqs)")
@click.option("--duplicate-suffix", help="Suffix for the duplicate records file (default _dupes)")
@click.option("--strict", is_flag=True, help="Fail on records missing key fields")
def dedupe(files, separator, keys, keys_file, unique_suffix, duplicate_suffix, strict):
    """
    Dedupe one or more text files.

    Each FILE such as names.txt produces names_uniqs.txt and names_dupes.txt.
    """
    try:
        spec = build_spec(separator, keys, keys_file)
    except DeduperError as e:
        console.print(f"[red]Invalid key definition: {e}[/red]")
        sys.exit(2)

    deduper = Deduper(
        spec,
        unique_suffix=unique_suffix,
        duplicate_suffix=duplicate_suffix,
        strict=strict or None,
    )

    table = Table()
    table.add_column("File")
    table.add_column("Status")
    table.add_column("Records")
    table.add_column("Unique")
    table.add_column("Exact")
    table.add_column("Alias")
    table.add_column("Short")

    failed = 0
    for path in files:
        try:
            result = deduper.dedupe_file(path)
        except DeduperError as e:
            failed += 1
            logger.error(f"Failed to dedupe {path}: {e}")
            table.add_row(str(path), f"[red]{e}[/red]", "-", "-", "-", "-", "-")
            continue

        counts = result.counts
        table.add_row(
            str(path),
            "[green]OK[/green]",
            str(len(result)),
            str(counts[DuplicateKind.UNIQUE]),
            str(counts[DuplicateKind.EXACT_DUPLICATE]),
            str(counts[DuplicateKind.ALIAS_DUPLICATE]),
            str(len(result.short_records)),
        )

    console.print("\n[bold]Deduplication Summary[/bold]")
    console.print(table)

    if failed:
        sys.exit(1)


@cli.command("show-keys")
@with_key_options
def show_keys(separator, keys, keys_file):
    """Show how the given options define a duplicate."""
    try:
        spec = build_spec(separator, keys, keys_file)
    except DeduperError as e:
        console.print(f"[red]Invalid key definition: {e}[/red]")
        sys.exit(2)

    print_spec(spec)


if __name__ == "__main__":
    cli()
