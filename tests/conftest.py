# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for record deduper tests."""

import os
import sys

import pytest
from loguru import logger

# Keep settings independent of any local .env or environment overrides
for _name in list(os.environ):
    if _name.startswith("DEDUPER_"):
        del os.environ[_name]


@pytest.fixture(autouse=True)
def reset_logging():
    """Route loguru to the real stderr after each test.

    CLI tests reconfigure loguru onto the runner's temporary streams.
    """
    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


@pytest.fixture
def caplog(caplog):
    """Make loguru messages visible to pytest's caplog."""
    handler_id = logger.add(caplog.handler, format="{message}", level="DEBUG")
    yield caplog
    logger.remove(handler_id)


@pytest.fixture
def name_records() -> list[str]:
    """Space separated records with nickname duplicates."""
    return [
        "100 Bob Smith",
        "101 Robert Smith",
        "102 John Brown",
        "103 Jack White",
        "104 Bob Smythe",
        "105 Robert Smith",
    ]


@pytest.fixture
def nick_names() -> dict[str, str]:
    """Alias table mapping nicknames to given names."""
    return {"Bob": "Robert", "Rob": "Robert"}


@pytest.fixture
def names_file(tmp_path, name_records):
    """names.txt holding the name records."""
    path = tmp_path / "names.txt"
    path.write_text("\n".join(name_records) + "\n", encoding="utf-8")
    return path
