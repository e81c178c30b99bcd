# tests/test_ignore_matcher.py
"""Tests for the root-level .gitignore matcher."""

from pathlib import Path

import pathspec
import pytest

from bfsfind.core.discovery.ignore_matcher import IgnoreMatcher, load_gitignore_spec


@pytest.fixture
def ignore_root(tmp_path: Path) -> Path:
    root = tmp_path / "ignore_proj"
    root.mkdir()
    (root / ".gitignore").write_text(
        "# build output\n"
        "\n"
        "build/\n"
        "*.log\n"
        "!keep.log\n"
        "docs/**/draft.md\n"
    )
    return root


def test_missing_gitignore_means_nothing_is_ignored(tmp_path: Path):
    matcher = IgnoreMatcher.from_root(tmp_path)
    assert not matcher.has_rules
    assert not matcher.is_ignored(tmp_path / "debug.log", False)


def test_gitignore_that_is_a_directory_is_not_loaded(tmp_path: Path):
    (tmp_path / ".gitignore").mkdir()
    matcher = IgnoreMatcher.from_root(tmp_path)
    assert not matcher.has_rules


def test_parse_failure_falls_back_to_no_rules(ignore_root: Path, monkeypatch):
    def _broken_from_lines(cls, *args, **kwargs):
        raise ValueError("bad pattern")

    monkeypatch.setattr(pathspec.GitIgnoreSpec, "from_lines", classmethod(_broken_from_lines))
    assert load_gitignore_spec(ignore_root / ".gitignore") is None
    matcher = IgnoreMatcher.from_root(ignore_root)
    assert not matcher.has_rules
    assert not matcher.is_ignored(ignore_root / "debug.log", False)


def test_glob_rule_ignores_matching_files(ignore_root: Path):
    matcher = IgnoreMatcher.from_root(ignore_root)
    assert matcher.has_rules
    assert matcher.is_ignored(ignore_root / "debug.log", False)
    assert matcher.is_ignored(ignore_root / "nested" / "deeper" / "trace.log", False)
    assert not matcher.is_ignored(ignore_root / "notes.txt", False)


def test_negation_re_includes(ignore_root: Path):
    matcher = IgnoreMatcher.from_root(ignore_root)
    assert not matcher.is_ignored(ignore_root / "keep.log", False)


def test_directory_only_rule(ignore_root: Path):
    matcher = IgnoreMatcher.from_root(ignore_root)
    assert matcher.is_ignored(ignore_root / "build", True)
    # a plain file called "build" is not covered by "build/".
    assert not matcher.is_ignored(ignore_root / "build", False)


def test_ancestor_match_ignores_descendants(ignore_root: Path):
    matcher = IgnoreMatcher.from_root(ignore_root)
    assert matcher.is_ignored(ignore_root / "build" / "out" / "app.bin", False)
    assert matcher.is_ignored(ignore_root / "src" / "build" / "gen.c", False)


def test_double_star_rule(ignore_root: Path):
    matcher = IgnoreMatcher.from_root(ignore_root)
    assert matcher.is_ignored(ignore_root / "docs" / "a" / "b" / "draft.md", False)
    assert not matcher.is_ignored(ignore_root / "docs" / "a" / "final.md", False)


def test_paths_outside_root_are_never_ignored(ignore_root: Path, tmp_path: Path):
    matcher = IgnoreMatcher.from_root(ignore_root)
    assert not matcher.is_ignored(tmp_path / "elsewhere" / "debug.log", False)


def test_root_itself_is_never_ignored(ignore_root: Path):
    matcher = IgnoreMatcher.from_root(ignore_root)
    assert not matcher.is_ignored(ignore_root, True)


def test_nested_gitignore_files_are_not_consulted(ignore_root: Path):
    sub = ignore_root / "sub"
    sub.mkdir()
    (sub / ".gitignore").write_text("*.txt\n")
    matcher = IgnoreMatcher.from_root(ignore_root)
    assert not matcher.is_ignored(sub / "readme.txt", False)
