# SPDX-License-Identifier: MIT
"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner
from loguru import logger

from record_deduper.errors import ConfigurationError
from record_deduper.main import build_spec, cli, parse_key_option


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestParseKeyOption:
    """Test the --key shorthand."""

    def test_field_with_flags(self):
        assert parse_key_option("field=2,length=5,ignore_case") == {
            "field_number": 2,
            "key_length": 5,
            "ignore_case": True,
        }

    def test_fixed_width(self):
        assert parse_key_option("start=1, length=3") == {"start_pos": 1, "key_length": 3}

    def test_explicit_false_flag(self):
        assert parse_key_option("field=1,ignore_whitespace=no") == {
            "field_number": 1,
            "ignore_whitespace": False,
        }

    def test_unknown_option(self):
        with pytest.raises(ConfigurationError):
            parse_key_option("field=1,colour=red")

    def test_non_numeric_position(self):
        with pytest.raises(ConfigurationError):
            parse_key_option("field=two")


class TestBuildSpec:
    def test_options_extend_keys_file(self, tmp_path):
        keys_file = tmp_path / "keys.json"
        keys_file.write_text(json.dumps({
            "field_separator": ",",
            "keys": [{"field_number": 1, "alias": {"Bob": "Robert"}}],
        }))

        spec = build_spec(None, ("field=3",), keys_file)

        assert spec.field_separator == ","
        assert [d.field_number for d in spec.descriptors] == [1, 3]
        assert spec.has_aliases

    def test_escaped_separator(self):
        assert build_spec("\\t", ("field=1",), None).field_separator == "\t"


class TestDedupeCommand:
    """Test the dedupe command."""

    def test_dedupe_with_keys_file(self, runner, names_file, nick_names, tmp_path):
        keys_file = tmp_path / "keys.json"
        keys_file.write_text(json.dumps({
            "field_separator": " ",
            "keys": [{"field_number": 2, "alias": nick_names}, {"field_number": 3}],
        }))

        result = runner.invoke(cli, ["dedupe", "--keys-file", str(keys_file), str(names_file)])

        assert result.exit_code == 0, result.output
        assert "Deduplication Summary" in result.output
        assert (tmp_path / "names_dupes.txt").read_text() == "100 Bob Smith\n105 Robert Smith\n"

    def test_dedupe_with_key_options(self, runner, tmp_path):
        path = tmp_path / "people.csv"
        path.write_text("1,Ann\n2,ANN\n3,Bea\n")

        result = runner.invoke(
            cli, ["dedupe", "-s", ",", "-k", "field=2,ignore_case", str(path)]
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "people_uniqs.csv").read_text() == "1,Ann\n3,Bea\n"
        assert (tmp_path / "people_dupes.csv").read_text() == "2,ANN\n"

    def test_whole_line_with_custom_suffixes(self, runner, tmp_path):
        path = tmp_path / "lines.txt"
        path.write_text("a\nb\na\n")

        result = runner.invoke(
            cli, ["dedupe", "--unique-suffix", ".u", "--duplicate-suffix", ".d", str(path)]
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "lines.u.txt").read_text() == "a\nb\n"
        assert (tmp_path / "lines.d.txt").read_text() == "a\n"

    def test_invalid_key_exits_with_usage_error(self, runner, names_file):
        result = runner.invoke(cli, ["dedupe", "-k", "field=2", str(names_file)])
        assert result.exit_code == 2
        assert "Invalid key definition" in result.output

    def test_missing_file_fails(self, runner, tmp_path, names_file):
        missing = tmp_path / "missing.txt"
        result = runner.invoke(cli, ["dedupe", str(missing), str(names_file)])

        assert result.exit_code == 1
        assert (tmp_path / "names_uniqs.txt").exists()
        assert not (tmp_path / "missing_uniqs.txt").exists()

    def test_undecodable_file_reported_in_summary(self, runner, tmp_path, names_file):
        bad = tmp_path / "late.txt"
        bad.write_bytes(b"a\n" * 3000 + b"\xff\xfe bad\n")

        result = runner.invoke(cli, ["dedupe", str(bad), str(names_file)])

        assert result.exit_code == 1
        assert not isinstance(result.exception, UnicodeDecodeError)
        assert "Deduplication Summary" in result.output
        assert (tmp_path / "names_uniqs.txt").exists()
        assert not (tmp_path / "late_uniqs.txt").exists()

    def test_strict_short_record_fails(self, runner, tmp_path):
        path = tmp_path / "short.csv"
        path.write_text("a,b\nc\n")

        result = runner.invoke(cli, ["dedupe", "--strict", "-s", ",", "-k", "field=2", str(path)])

        assert result.exit_code == 1
        assert not (tmp_path / "short_uniqs.csv").exists()


class TestShowKeysCommand:
    def test_lists_keys(self, runner):
        result = runner.invoke(
            cli, ["show-keys", "-s", ",", "-k", "field=2,ignore_case", "-k", "field=4,length=3"]
        )
        assert result.exit_code == 0, result.output
        assert "field 2" in result.output
        assert "field 4" in result.output

    def test_whole_line(self, runner):
        result = runner.invoke(cli, ["show-keys"])
        assert result.exit_code == 0
        assert "whole records are compared" in result.output


class TestLogFileOption:
    def test_run_log_written(self, runner, names_file, tmp_path):
        log_file = tmp_path / "logs" / "run.log"

        result = runner.invoke(cli, ["--log-file", str(log_file), "dedupe", str(names_file)])
        logger.remove()

        assert result.exit_code == 0, result.output
        assert "Deduplication: 6 records" in log_file.read_text()
