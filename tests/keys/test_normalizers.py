# SPDX-License-Identifier: MIT
"""Tests for key normalization and assembly."""

from record_deduper.keyspec import KeySpec, KeySpecBuilder
from record_deduper.normalizers import assemble_key, normalized_key, transform_key


class TestTransformKey:
    """Test case folding and whitespace trimming."""

    def test_trims_whitespace(self):
        spec = KeySpecBuilder(",").add_key(field_number=1, ignore_whitespace=True).build()
        assert transform_key({1: "  X "}, spec) == transform_key({1: "X"}, spec) == {1: "X"}

    def test_folds_case(self):
        spec = KeySpecBuilder(",").add_key(field_number=1, ignore_case=True).build()
        assert transform_key({1: "Smith"}, spec) == {1: "SMITH"}

    def test_settings_are_per_key(self):
        spec = (
            KeySpecBuilder(",")
            .add_key(field_number=1, ignore_case=True)
            .add_key(field_number=2, ignore_whitespace=True)
            .build()
        )
        assert transform_key({1: " ab ", 2: " Cd "}, spec) == {1: " AB ", 2: "Cd"}

    def test_partial_key_stays_partial(self):
        spec = (
            KeySpecBuilder(",")
            .add_key(field_number=1)
            .add_key(field_number=2, ignore_case=True)
            .build()
        )
        assert transform_key({1: "a"}, spec) == {1: "a"}

    def test_whole_line_key_untouched(self):
        assert transform_key({1: " Line "}, KeySpec()) == {1: " Line "}

    def test_input_not_modified(self):
        spec = KeySpecBuilder(",").add_key(field_number=1, ignore_case=True).build()
        record_key = {1: "abc"}
        transform_key(record_key, spec)
        assert record_key == {1: "abc"}


class TestAssembleKey:
    """Test composite key assembly."""

    def test_ascending_key_order(self):
        assert assemble_key({2: "b", 1: "a"}) == ("a", "b")

    def test_values_containing_join_token_do_not_collide(self):
        assert assemble_key({1: "a:b", 2: "c"}) != assemble_key({1: "a", 2: "b:c"})


class TestNormalizedKey:
    def test_extracts_and_transforms(self):
        spec = KeySpecBuilder(",").add_key(field_number=2, ignore_case=True, ignore_whitespace=True).build()
        extraction = normalized_key("1, smith ,x", spec)
        assert extraction.key == {1: "SMITH"}
        assert extraction.short_record is None
