"""Pydantic models for TestRail records and finder options.

Records mirror the objects returned by the TestRail API.  Only the
fields the finders rely on are declared; everything else the server
sends is kept as extra data so nothing is lost on the way through.

- ``Project``, ``Plan``, ``Run``, ``Milestone``: run discovery.
- ``Suite``, ``Section``, ``Case``, ``RunTest``: case and test lookups.
- ``Reconciliation``: output of ``find_cases``, input of the synchronizer.
- ``RunQuery``, ``TestQuery``, ``CaseQuery``, ``CaseSyncOptions``:
  explicit option sets for each finder operation.

All models are frozen.  Operations that attach data to a record
(plan inheritance, ``due_on``, ``run_status``, ``path``) return an
updated copy via ``model_copy(update=...)``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from ..validators import validate_name


class Record(BaseModel):
    """Base for TestRail records: frozen, extra fields preserved."""

    model_config = ConfigDict(frozen=True, extra="allow")


class Project(Record):
    id: int
    name: str


class Plan(Record):
    """A test plan.  ``entries`` is only populated by a by-id fetch."""

    id: int
    name: str = ""
    created_on: int = 0
    milestone_id: int | None = None
    entries: list[dict[str, Any]] = []


class Run(Record):
    """A test run, standalone or a child of a plan.

    Attributes:
        config_ids: Configuration ids the run was created for.
        created_on: Creation timestamp (the plan's, for plan children).
        milestone_id: Milestone the run (or its plan) belongs to.
        plan_id: Owning plan, ``None`` for standalone runs.
        due_on: Milestone due date, filled in for milestone sorting.
        run_status: Status label to result count, filled in only when
            status filtering is requested.
    """

    id: int
    name: str = ""
    config_ids: list[int] = []
    created_on: int = 0
    milestone_id: int | None = None
    plan_id: int | None = None
    due_on: int = 0
    run_status: dict[str, int] | None = None


class Milestone(Record):
    id: int
    name: str = ""
    due_on: int | None = None


class Suite(Record):
    id: int
    name: str


class Section(Record):
    id: int
    name: str
    suite_id: int | None = None
    parent_id: int | None = None


class Case(Record):
    """A test case, or a file standing in for one.

    Attributes:
        title: Case title; matched against test file base names.
        path: File the case was matched to, as enumerated.
        full_title: Absolute path of the matched file.
    """

    id: int | None = None
    title: str
    section_id: int | None = None
    type_id: int | None = None
    path: str | None = None
    full_title: str | None = None


class RunTest(Case):
    """A case instantiated inside a run (carries status and assignee)."""

    case_id: int | None = None
    run_id: int | None = None
    status_id: int | None = None
    assignedto_id: int | None = None


# ---------------------------------------------------------------------------
# Finder options
# ---------------------------------------------------------------------------


class _Query(BaseModel):
    model_config = ConfigDict(frozen=True)

    @field_validator("project", check_fields=False)
    @classmethod
    def _project_not_empty(cls, value: str) -> str:
        ok, reason = validate_name("Project name", value)
        if not ok:
            raise ValueError(reason)
        return value


class RunQuery(_Query):
    """Options for ``find_runs``.

    Attributes:
        project: Project name (required).
        statuses: Status names every returned run must have results in.
        configs: Configuration names a plan run must match exactly.
            When set, standalone runs are not considered.
        lifo: Sort newest first instead of oldest first.
        sort_by_milestone: Sort by milestone due date instead of
            creation date.
    """

    project: str
    statuses: list[str] | None = None
    configs: list[str] | None = None
    lifo: bool = False
    sort_by_milestone: bool = False


class TestQuery(_Query):
    """Options for ``get_tests``.

    Attributes:
        project: Project name.
        run: Run name.
        plan: Plan the run belongs to, if any.
        configs: Configuration names of the plan run.
        users: Only tests assigned to these users.
        statuses: Only tests in these statuses.
    """

    __test__ = False

    project: str
    run: str
    plan: str | None = None
    configs: list[str] | None = None
    users: list[str] | None = None
    statuses: list[str] | None = None


class CaseQuery(_Query):
    """Options for ``get_cases``."""

    project: str
    testsuite: str
    section: str | None = None
    types: list[str] | None = None


class CaseSyncOptions(BaseModel):
    """Options for ``find_cases``: which reconciliation lists to build.

    Attributes:
        directory: Directory holding the test files.
        extension: Only consider files ending with this suffix.
        recursive: Scan subdirectories (default) or the top level only.
        missing: Report files with no case (on by default).
        orphans: Report cases with no file.
        update: Report cases with a file (to refresh their description).
    """

    directory: str
    extension: str = ""
    recursive: bool = True
    missing: bool = True
    orphans: bool = False
    update: bool = False

    model_config = ConfigDict(frozen=True)


class Reconciliation(BaseModel):
    """Result of comparing a testsuite's cases with test files on disk.

    Attributes:
        testsuite_id: Testsuite the cases came from.
        missing: Paths of test files that have no case (to create).
        orphans: Cases that have no test file (to delete).
        update: Cases that have a test file, with ``full_title`` set to
            the file's absolute path (to update).
        dry_run: Report what would be done without changing anything.
    """

    testsuite_id: int | None = None
    missing: list[str] | None = None
    orphans: list[Case] | None = None
    update: list[Case] | None = None
    dry_run: bool = False

    model_config = ConfigDict(frozen=True)
