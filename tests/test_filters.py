# tests/test_filters.py
"""Tests for the name, extension and hidden-entry filters."""

import os
from pathlib import Path
from types import SimpleNamespace

import pytest

from bfsfind.core.discovery.filters import (
    FILE_ATTRIBUTE_HIDDEN,
    file_matches,
    is_hidden,
    match_extension,
    match_name,
)


class TestMatchName:
    @pytest.mark.parametrize("name", ["", "a", "data.bin", ".hidden", "with space.txt", "ünïcode.md"])
    def test_universal_wildcard_matches_everything(self, name):
        assert match_name(name, "*")

    @pytest.mark.parametrize(
        "name,pattern",
        [
            ("report.txt", "port"),
            ("report.txt", "report.txt"),
            ("report.txt", "xyz"),
            ("Report.txt", "report"),
            ("", "a"),
            ("abc", ""),
        ],
    )
    def test_wildcard_free_pattern_is_plain_substring(self, name, pattern):
        assert match_name(name, pattern) == (pattern in name)

    def test_wildcards_are_stripped_not_interpreted(self):
        # "abc*" is a substring search for "abc", not a prefix match.
        assert match_name("xabc", "abc*")
        assert match_name("abcx", "abc*")
        assert match_name("xabcx", "*abc*")
        # "a*c" looks for the literal "ac".
        assert not match_name("abc", "a*c")
        assert match_name("xacx", "a*c")

    def test_match_is_case_sensitive(self):
        assert not match_name("README.md", "readme")
        assert match_name("README.md", "README")

    def test_only_wildcards_matches_everything(self):
        assert match_name("anything", "**")


class TestMatchExtension:
    def test_no_allowed_set_matches_everything(self):
        assert match_extension(Path("Makefile"), None)
        assert match_extension(Path("a.txt"), None)

    def test_file_without_extension_never_matches_a_restriction(self):
        assert not match_extension(Path("Makefile"), {"txt"})
        assert not match_extension(Path(".bashrc"), {"bashrc"})

    @pytest.mark.parametrize("file_name", ["a.txt", "a.TXT", "a.Txt"])
    def test_extension_comparison_ignores_case(self, file_name):
        assert match_extension(Path(file_name), {"txt"})
        assert match_extension(Path(file_name), {"TXT"})

    def test_allowed_entries_may_carry_a_dot(self):
        assert match_extension(Path("main.rs"), {".rs"})

    def test_only_last_extension_counts(self):
        assert match_extension(Path("archive.tar.gz"), {"gz"})
        assert not match_extension(Path("archive.tar.gz"), {"tar"})

    def test_empty_allowed_set_matches_nothing(self):
        assert not match_extension(Path("a.txt"), frozenset())


class TestFileMatches:
    def test_both_filters_must_pass(self):
        assert file_matches(Path("dir/notes.txt"), "note", {"txt"})
        assert not file_matches(Path("dir/notes.txt"), "note", {"md"})
        assert not file_matches(Path("dir/notes.txt"), "todo", {"txt"})

    def test_pattern_applies_to_file_name_only(self):
        # the directory part of the path is not searched.
        assert not file_matches(Path("notes/readme.md"), "notes", None)


class TestIsHidden:
    def test_leading_dot_is_hidden(self):
        assert is_hidden(".git")
        assert is_hidden(".env.local")

    def test_regular_names_are_not_hidden(self):
        assert not is_hidden("visible.txt")
        assert not is_hidden("dot.in.middle")

    def test_hidden_attribute_bit_marks_entry_hidden(self):
        fake_stat = SimpleNamespace(st_file_attributes=FILE_ATTRIBUTE_HIDDEN)
        assert is_hidden("visible.txt", fake_stat)

    def test_other_attribute_bits_do_not_hide(self):
        fake_stat = SimpleNamespace(st_file_attributes=0x20)  # archive bit
        assert not is_hidden("visible.txt", fake_stat)

    def test_real_stat_without_attributes(self, tmp_path: Path):
        target = tmp_path / "plain.txt"
        target.write_text("x")
        assert not is_hidden(target.name, os.stat(target))
