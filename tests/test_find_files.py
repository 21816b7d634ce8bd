"""Tests for matching cases against test files on disk (find_tests)."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from testrail_utils.errors import OptionConflictError
from testrail_utils.find.files import (
    FileMatchOptions,
    MatchMode,
    find_tests,
    scan_directory,
)
from testrail_utils.find.models import Case, RunTest

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _tree(root: Path, files: list[str]) -> Path:
    for rel in files:
        fp = root / rel
        fp.parent.mkdir(parents=True, exist_ok=True)
        fp.write_text("ok 1\n", encoding="utf-8")
    return root


def _cases(*titles: str) -> list[Case]:
    return [Case(id=i, title=t) for i, t in enumerate(titles, start=1)]


def _opts(mode: MatchMode | None, directory: Path | None, **kw) -> FileMatchOptions:
    return FileMatchOptions(
        mode=mode, directory=str(directory) if directory else None, **kw
    )


@pytest.fixture
def files_dir(tmp_path):
    """Directory with a.t and c.t."""
    return _tree(tmp_path / "t", ["a.t", "c.t"])


# ---------------------------------------------------------------------------
# Option validation
# ---------------------------------------------------------------------------


class TestOptions:
    @pytest.mark.parametrize(
        "flags, message",
        [
            ({"match": "t", "no_match": "t"}, "match and no-match"),
            ({"match": "t", "orphans": "t"}, "match and orphans"),
            ({"no_match": "t", "orphans": "t"}, "no-match and orphans"),
        ],
    )
    def test_conflicting_flags_rejected(self, flags, message):
        with pytest.raises(OptionConflictError, match=message):
            FileMatchOptions.from_flags(**flags)

    def test_from_flags_sets_mode_and_directory(self):
        options = FileMatchOptions.from_flags(
            orphans="t/", names_only=True, extension=".t"
        )

        assert options.mode == MatchMode.ORPHANS
        assert options.directory == "t/"
        assert options.names_only
        assert options.extension == ".t"

    def test_from_flags_without_mode(self):
        options = FileMatchOptions.from_flags()

        assert options.mode is None
        assert options.directory is None

    def test_mode_requires_directory(self):
        with pytest.raises(ValidationError, match="directory is required"):
            FileMatchOptions(mode=MatchMode.MATCH)

    def test_directory_cannot_be_a_file(self, files_dir):
        with pytest.raises(ValidationError, match="is a file"):
            _opts(MatchMode.MATCH, files_dir / "a.t")

    def test_extension_cannot_contain_separator(self, files_dir):
        with pytest.raises(ValidationError, match="path separator"):
            _opts(MatchMode.MATCH, files_dir, extension="sub/.t")


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestModes:
    def test_pass_through_without_mode(self):
        cases = _cases("a.t", "b.t")

        assert find_tests(FileMatchOptions(), cases) == cases

    def test_pass_through_names_only(self):
        result = find_tests(
            FileMatchOptions(names_only=True), _cases("a.t", "b.t")
        )

        assert result == ["a.t", "b.t"]

    def test_match_returns_cases_with_files(self, files_dir):
        result = find_tests(
            _opts(MatchMode.MATCH, files_dir), _cases("a.t", "b.t")
        )

        assert [c.title for c in result] == ["a.t"]
        assert result[0].full_title == str((files_dir / "a.t").resolve())
        assert result[0].path == os.path.join(str(files_dir), "a.t")

    def test_match_names_only_returns_absolute_paths(self, files_dir):
        result = find_tests(
            _opts(MatchMode.MATCH, files_dir, names_only=True),
            _cases("a.t", "b.t"),
        )

        assert result == [str((files_dir / "a.t").resolve())]

    def test_orphans_returns_cases_without_files(self, files_dir):
        result = find_tests(
            _opts(MatchMode.ORPHANS, files_dir), _cases("a.t", "b.t")
        )

        # c.t has no case, but orphans only reports cases lacking files
        assert [c.title for c in result] == ["b.t"]
        assert result[0].id == 2
        assert result[0].path is None

    def test_orphans_names_only(self, files_dir):
        result = find_tests(
            _opts(MatchMode.ORPHANS, files_dir, names_only=True),
            _cases("a.t", "b.t"),
        )

        assert result == ["b.t"]

    def test_no_match_returns_files_without_cases(self, files_dir):
        result = find_tests(
            _opts(MatchMode.NO_MATCH, files_dir), _cases("a.t", "b.t")
        )

        assert [c.title for c in result] == [
            os.path.join(str(files_dir), "c.t")
        ]
        assert result[0].id is None

    def test_no_match_names_only(self, files_dir):
        result = find_tests(
            _opts(MatchMode.NO_MATCH, files_dir, names_only=True),
            _cases("a.t", "b.t"),
        )

        assert result == [os.path.join(str(files_dir), "c.t")]

    def test_run_tests_keep_their_type(self, files_dir):
        tests = [RunTest(id=5, title="a.t", status_id=4, assignedto_id=9)]
        result = find_tests(_opts(MatchMode.MATCH, files_dir), tests)

        assert isinstance(result[0], RunTest)
        assert result[0].status_id == 4

    def test_inputs_are_not_modified(self, files_dir):
        cases = _cases("a.t")
        find_tests(_opts(MatchMode.MATCH, files_dir), cases)

        assert cases[0].path is None
        assert cases[0].full_title is None

    def test_empty_directory_yields_empty_results(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()

        assert find_tests(_opts(MatchMode.MATCH, empty), _cases("a.t")) == []
        assert find_tests(_opts(MatchMode.NO_MATCH, empty), _cases("a.t")) == []

    def test_missing_directory_yields_empty_results(self, tmp_path):
        result = find_tests(
            _opts(MatchMode.ORPHANS, tmp_path / "nope"), _cases("a.t")
        )

        assert [c.title for c in result] == ["a.t"]


# ---------------------------------------------------------------------------
# Title/file name comparison
# ---------------------------------------------------------------------------


class TestNameMatching:
    def test_title_must_equal_full_base_name(self, tmp_path):
        _tree(tmp_path, ["login.t"])
        result = find_tests(
            _opts(MatchMode.MATCH, tmp_path, extension=".t"),
            _cases("login", "login.t"),
        )

        # The extension is never stripped before comparing
        assert [c.title for c in result] == ["login.t"]

    def test_extension_narrows_considered_files(self, tmp_path):
        _tree(tmp_path, ["a.t", "b.pl"])
        result = find_tests(
            _opts(MatchMode.MATCH, tmp_path, extension=".t"),
            _cases("a.t", "b.pl"),
        )

        assert [c.title for c in result] == ["a.t"]

    def test_first_file_in_walk_order_wins(self, tmp_path):
        _tree(tmp_path, ["a/dup.t", "b/dup.t"])
        result = find_tests(
            _opts(MatchMode.MATCH, tmp_path), _cases("dup.t")
        )

        assert len(result) == 1
        assert result[0].path == os.path.join(str(tmp_path), "a", "dup.t")

    def test_recursive_scan_finds_nested_files(self, tmp_path):
        _tree(tmp_path, ["top.t", "sub/deep/nested.t"])
        result = find_tests(
            _opts(MatchMode.MATCH, tmp_path), _cases("top.t", "nested.t")
        )

        assert [c.title for c in result] == ["top.t", "nested.t"]

    def test_flat_scan_ignores_subdirectories(self, tmp_path):
        _tree(tmp_path, ["top.t", "sub/nested.t"])
        result = find_tests(
            _opts(MatchMode.MATCH, tmp_path, recursive=False),
            _cases("top.t", "nested.t"),
        )

        assert [c.title for c in result] == ["top.t"]


# ---------------------------------------------------------------------------
# scan_directory
# ---------------------------------------------------------------------------


class TestScanDirectory:
    def test_recursive_sorted(self, tmp_path):
        _tree(tmp_path, ["b.t", "a.t", "sub/c.t", "x.pl"])

        assert scan_directory(str(tmp_path), ".t") == [
            os.path.join(str(tmp_path), "a.t"),
            os.path.join(str(tmp_path), "b.t"),
            os.path.join(str(tmp_path), "sub", "c.t"),
        ]

    def test_flat_scan_skips_directories(self, tmp_path):
        _tree(tmp_path, ["a.t", "dir.t/inner.t"])

        assert scan_directory(str(tmp_path), ".t", recursive=False) == [
            os.path.join(str(tmp_path), "a.t")
        ]

    def test_special_characters_taken_literally(self, tmp_path):
        weird = _tree(tmp_path / "[t]", ["a.t", "b[1].t", "b1.t"])

        assert scan_directory(str(weird), ".t", recursive=False) == [
            os.path.join(str(weird), "a.t"),
            os.path.join(str(weird), "b1.t"),
            os.path.join(str(weird), "b[1].t"),
        ]
        assert scan_directory(str(weird), "[1].t") == [
            os.path.join(str(weird), "b[1].t")
        ]

    def test_sorted_by_path_components(self, tmp_path):
        _tree(tmp_path, ["c.t", "b/x.t", "b/a/y.t", "a.t"])

        assert scan_directory(str(tmp_path), ".t") == [
            os.path.join(str(tmp_path), "a.t"),
            os.path.join(str(tmp_path), "b", "a", "y.t"),
            os.path.join(str(tmp_path), "b", "x.t"),
            os.path.join(str(tmp_path), "c.t"),
        ]

    def test_missing_directory_is_empty(self, tmp_path):
        assert scan_directory(str(tmp_path / "nope"), ".t") == []

    def test_no_extension_lists_everything(self, tmp_path):
        _tree(tmp_path, ["a.t", "b.pl"])

        assert len(scan_directory(str(tmp_path))) == 2
