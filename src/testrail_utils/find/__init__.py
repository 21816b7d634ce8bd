"""Finders for runs, tests and cases, and matching cases to test files.

- ``runs``  -- ``find_runs``: runs of a project, filtered and ordered.
- ``tests`` -- ``resolve_run``, ``get_tests``: tests of a named run.
- ``cases`` -- ``get_cases``: cases of a testsuite; ``find_cases``:
  reconcile cases with test files.
- ``files`` -- ``find_tests``: match cases against files on disk.
- ``models`` -- TestRail records and finder options.

Usage example
-------------
::

    from testrail_utils.find import RunQuery, find_runs

    runs = find_runs(
        RunQuery(project="Widgets", statuses=["retest"], lifo=True),
        client,
    )
"""

from .models import (
    Case,
    CaseQuery,
    CaseSyncOptions,
    Milestone,
    Plan,
    Project,
    Reconciliation,
    Run,
    RunQuery,
    RunTest,
    Section,
    Suite,
    TestQuery,
)
from .files import FileMatchOptions, MatchMode, find_tests, scan_directory
from .runs import find_runs
from .tests import get_tests, resolve_run
from .cases import find_cases, get_cases

__all__ = [
    "Case",
    "CaseQuery",
    "CaseSyncOptions",
    "FileMatchOptions",
    "MatchMode",
    "Milestone",
    "Plan",
    "Project",
    "Reconciliation",
    "Run",
    "RunQuery",
    "RunTest",
    "Section",
    "Suite",
    "TestQuery",
    "find_cases",
    "find_runs",
    "find_tests",
    "get_cases",
    "get_tests",
    "resolve_run",
    "scan_directory",
]
