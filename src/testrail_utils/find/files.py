"""Match TestRail cases against test files on disk.

A case corresponds to a file when the case title equals the file's base
name exactly (the extension filter only narrows which files are looked
at; it is never stripped from titles).  Three modes are supported:

- ``MATCH``    -- cases that have a file; ``full_title`` is set to the
  file's absolute path.
- ``ORPHANS``  -- cases that have no file.
- ``NO_MATCH`` -- files that have no case, returned as stand-in cases
  whose title is the file path.

With no mode the cases are passed through unchanged, which is what the
pure TestRail queries use.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, model_validator

from ..errors import OptionConflictError
from ..validators import validate_directory, validate_extension
from .models import Case

logger = logging.getLogger(__name__)


class MatchMode(str, Enum):
    """How cases are compared with the files in a directory."""

    MATCH = "match"
    NO_MATCH = "no-match"
    ORPHANS = "orphans"


class FileMatchOptions(BaseModel):
    """Options for ``find_tests``.

    Attributes:
        mode: Comparison mode, or ``None`` to pass cases through.
        directory: Directory to scan; required when a mode is set.
        recursive: Walk subdirectories (default) or list one level only.
        names_only: Return names/paths instead of case records.
        extension: Only consider files ending with this suffix.
    """

    mode: MatchMode | None = None
    directory: str | None = None
    recursive: bool = True
    names_only: bool = False
    extension: str = ""

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_directory(self) -> FileMatchOptions:
        if self.mode is not None:
            if self.directory is None:
                raise ValueError(
                    f"A directory is required in {self.mode.value} mode"
                )
            ok, reason = validate_directory(self.directory)
            if not ok:
                raise ValueError(reason)
        ok, reason = validate_extension(self.extension)
        if not ok:
            raise ValueError(reason)
        return self

    @classmethod
    def from_flags(
        cls,
        match: str | None = None,
        no_match: str | None = None,
        orphans: str | None = None,
        *,
        recursive: bool = True,
        names_only: bool = False,
        extension: str = "",
    ) -> FileMatchOptions:
        """Build options from the three match/no-match/orphans flags.

        Each flag carries the directory to scan.  At most one may be set.

        Raises:
            OptionConflictError: If more than one flag is set.
        """
        if match and no_match:
            raise OptionConflictError(
                "match and no-match options are mutually exclusive."
            )
        if match and orphans:
            raise OptionConflictError(
                "match and orphans options are mutually exclusive."
            )
        if no_match and orphans:
            raise OptionConflictError(
                "no-match and orphans options are mutually exclusive."
            )

        mode, directory = None, None
        if match:
            mode, directory = MatchMode.MATCH, match
        elif orphans:
            mode, directory = MatchMode.ORPHANS, orphans
        elif no_match:
            mode, directory = MatchMode.NO_MATCH, no_match

        return cls(
            mode=mode,
            directory=directory,
            recursive=recursive,
            names_only=names_only,
            extension=extension,
        )


def scan_directory(
    directory: str, extension: str = "", recursive: bool = True
) -> list[str]:
    """List the regular files in *directory* ending with *extension*.

    Paths are joined onto *directory* (not made absolute) and sorted
    component by component, so ``b/x.t`` sorts before ``c.t``.  The
    extension is compared literally, never as a glob pattern.  A missing
    directory yields an empty list.
    """
    root = Path(directory)
    if not root.is_dir():
        return []

    entries = root.rglob("*") if recursive else root.glob("*")
    return [
        str(path)
        for path in sorted(entries)
        if path.is_file() and path.name.endswith(extension)
    ]


def find_tests(
    options: FileMatchOptions, cases: Sequence[Case]
) -> list[Case] | list[str]:
    """Filter *cases* against the test files in ``options.directory``.

    Args:
        options: Mode, directory and output options.
        cases: Cases (or run tests) to compare with the files on disk.

    Returns:
        In ``MATCH`` mode, the matched cases with ``full_title`` set, or
        just their absolute paths when ``names_only``.  Otherwise the
        selected cases, or just their titles when ``names_only``.
    """
    tests: list[Case] = list(cases)

    if options.mode is not None:
        files = scan_directory(
            options.directory, options.extension, options.recursive
        )
        logger.debug(
            "Found %d test files under %s", len(files), options.directory
        )
        matched = _match_files(cases, files)

        if options.mode == MatchMode.MATCH:
            tests = matched
        elif options.mode == MatchMode.ORPHANS:
            matched_titles = {case.title for case in matched}
            tests = [
                case for case in cases if case.title not in matched_titles
            ]
        else:
            matched_titles = {case.title for case in matched}
            tests = [
                Case(title=path)
                for path in files
                if os.path.basename(path) not in matched_titles
            ]

    if options.mode == MatchMode.MATCH:
        if options.names_only:
            return [_absolute(case.path) for case in tests]
        return [
            case.model_copy(update={"full_title": _absolute(case.path)})
            for case in tests
        ]
    if options.names_only:
        return [case.title for case in tests]
    return tests


def _match_files(cases: Sequence[Case], files: Sequence[str]) -> list[Case]:
    """Pair each case with the first file whose base name is its title."""
    by_name: dict[str, str] = {}
    for path in files:
        by_name.setdefault(os.path.basename(path), path)
    return [
        case.model_copy(update={"path": by_name[case.title]})
        for case in cases
        if case.title in by_name
    ]


def _absolute(path: str) -> str:
    return str(Path(path).resolve())
