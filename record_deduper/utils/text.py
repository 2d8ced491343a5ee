"""Text and file-name helpers for the record deduper."""

from pathlib import Path


def decode_separator(token: str) -> str:
    """Turn an escaped separator such as ``\\t`` into the character it names.

    Tokens without a backslash are returned unchanged.

    Args:
        token: Separator as typed by a user or read from a config file

    Returns:
        The literal separator text
    """
    if "\\" not in token:
        return token
    try:
        return token.encode("latin-1", "backslashreplace").decode("unicode_escape")
    except UnicodeDecodeError:
        return token


def split_base_and_extension(file_name: str) -> tuple[str, str]:
    """Split a file name at its first dot.

    ``names.txt`` gives ``("names", ".txt")`` and ``data.tar.gz`` gives
    ``("data", ".tar.gz")``. A leading dot belongs to the base, so
    ``.records`` has no extension.
    """
    dot = file_name.find(".", 1)
    if dot == -1:
        return file_name, ""
    return file_name[:dot], file_name[dot:]


def derive_output_paths(
    input_path: Path,
    unique_suffix: str = "_uniqs",
    duplicate_suffix: str = "_dupes",
) -> tuple[Path, Path]:
    """Build the unique and duplicate output paths beside an input file.

    Args:
        input_path: The file being deduplicated
        unique_suffix: Appended to the base name of the unique partition
        duplicate_suffix: Appended to the base name of the duplicate partition

    Returns:
        (unique_path, duplicate_path)
    """
    input_path = Path(input_path)
    base, extension = split_base_and_extension(input_path.name)
    return (
        input_path.with_name(f"{base}{unique_suffix}{extension}"),
        input_path.with_name(f"{base}{duplicate_suffix}{extension}"),
    )


def format_full_key(full_key: tuple[str, ...]) -> str:
    """Render a composite key for log messages."""
    return " | ".join(repr(value) for value in full_key)
