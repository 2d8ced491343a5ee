# SPDX-License-Identifier: MIT
"""Tests for alias candidate collection and alias duplicate detection."""

import pytest

from record_deduper.deduplication.aliases import (
    candidate_key,
    collect_candidates,
    find_alias_match,
    is_alias_duplicate,
    substitute_aliases,
)
from record_deduper.keyspec import KeySpecBuilder


@pytest.fixture
def name_spec(nick_names):
    """Given name (aliased) and surname from space separated records."""
    return (
        KeySpecBuilder(" ")
        .add_key(field_number=2, alias=nick_names)
        .add_key(field_number=3)
        .build()
    )


class TestCandidateKey:
    """Test the canonical-form check for a single record."""

    def test_canonical_value_accepted(self):
        assert candidate_key({1: "Robert", 2: "Smith"}, {1: {"Robert"}}) == ("Robert", "Smith")

    def test_alias_value_rejected(self):
        assert candidate_key({1: "Bob", 2: "Smith"}, {1: {"Robert"}}) is None

    def test_unrelated_value_rejected(self):
        assert candidate_key({1: "John", 2: "Smith"}, {1: {"Robert"}}) is None

    def test_empty_key_rejected(self):
        assert candidate_key({}, {1: {"Robert"}}) is None


class TestCollectCandidates:
    """Test the first pass over the records."""

    def test_collects_canonical_records(self, name_records, name_spec):
        candidates = collect_candidates(name_records, name_spec)
        assert candidates == {("Robert", "Smith"): 2}

    def test_no_aliases_no_candidates(self, name_records):
        spec = KeySpecBuilder(" ").add_key(field_number=2).build()
        assert collect_candidates(name_records, spec) == {}

    def test_case_folded_aliases(self):
        spec = (
            KeySpecBuilder(" ")
            .add_key(field_number=2, ignore_case=True, alias={"Bob": "Robert"})
            .add_key(field_number=3)
            .build()
        )
        records = ["1 bob smith", "2 ROBERT smith"]

        candidates = collect_candidates(records, spec)

        assert candidates == {("ROBERT", "smith"): 2}
        assert is_alias_duplicate({1: "BOB", 2: "smith"}, candidates, spec)


class TestSubstituteAliases:
    def test_replaces_alias_values(self, name_spec):
        assert substitute_aliases({1: "Bob", 2: "Smith"}, name_spec) == {1: "Robert", 2: "Smith"}

    def test_none_without_alias_values(self, name_spec):
        assert substitute_aliases({1: "Robert", 2: "Smith"}, name_spec) is None

    def test_missing_field_ignored(self, name_spec):
        assert substitute_aliases({}, name_spec) is None


class TestIsAliasDuplicate:
    """Test the second pass check for a single record."""

    @pytest.fixture
    def candidates(self, name_records, name_spec):
        return collect_candidates(name_records, name_spec)

    def test_alias_of_canonical_record(self, candidates, name_spec):
        assert is_alias_duplicate({1: "Bob", 2: "Smith"}, candidates, name_spec)
        assert find_alias_match({1: "Rob", 2: "Smith"}, candidates, name_spec) == 2

    def test_alias_without_canonical_record(self, candidates, name_spec):
        """Bob Smythe has no Robert Smythe to be a duplicate of."""
        assert not is_alias_duplicate({1: "Bob", 2: "Smythe"}, candidates, name_spec)

    def test_canonical_spelling_is_not_alias_duplicate(self, candidates, name_spec):
        assert not is_alias_duplicate({1: "Robert", 2: "Smith"}, candidates, name_spec)

    def test_no_candidates(self, name_spec):
        assert not is_alias_duplicate({1: "Bob", 2: "Smith"}, {}, name_spec)
