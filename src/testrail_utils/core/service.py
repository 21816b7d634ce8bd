"""The capability set the finders and the synchronizer need from TestRail.

``TestRailService`` is a structural ``Protocol``: ``TestRailClient``
satisfies it against a live server, and the test suite satisfies it with
an in-memory fake.  Every finder receives the service explicitly; there
is no module-level client.

Lookup methods return ``None`` when nothing matches so the caller can
raise a ``ResolutionError`` naming what it was looking for.  Translation
methods raise ``TranslationError`` themselves when any name is unknown.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from ..find.models import (
    Case,
    Milestone,
    Plan,
    Project,
    Run,
    RunTest,
    Section,
    Suite,
)


class TestRailService(Protocol):
    """Protocol that TestRail clients must satisfy."""

    __test__ = False

    # Projects, plans and runs

    def get_project_by_name(self, name: str) -> Project | None: ...

    def get_plans(self, project_id: int) -> list[Plan]: ...

    def get_plan_by_id(self, plan_id: int) -> Plan: ...

    def get_plan_by_name(
        self, project_id: int, name: str
    ) -> Plan | None: ...

    def get_child_runs(self, plan: Plan) -> list[Run]: ...

    def get_child_run_by_name(
        self,
        plan: Plan,
        name: str,
        config_ids: Sequence[int] | None = None,
    ) -> Run | None: ...

    def get_runs(self, project_id: int) -> list[Run]: ...

    def get_run_by_name(
        self, project_id: int, name: str
    ) -> Run | None: ...

    def get_run_summary(self, runs: Sequence[Run]) -> list[Run]: ...

    def get_milestone_by_id(
        self, milestone_id: int
    ) -> Milestone | None: ...

    # Name translation

    def status_names_to_labels(
        self, names: Sequence[str]
    ) -> list[str]: ...

    def status_names_to_ids(self, names: Sequence[str]) -> list[int]: ...

    def translate_config_names_to_ids(
        self, project_id: int, names: Sequence[str]
    ) -> list[int]: ...

    def user_names_to_ids(self, names: Sequence[str]) -> list[int]: ...

    def type_names_to_ids(self, names: Sequence[str]) -> list[int]: ...

    # Tests and cases

    def get_tests(
        self,
        run_id: int,
        status_ids: Sequence[int] | None = None,
        user_ids: Sequence[int] | None = None,
    ) -> list[RunTest]: ...

    def get_test_suite_by_name(
        self, project_id: int, name: str
    ) -> Suite | None: ...

    def get_section_by_name(
        self, project_id: int, suite_id: int, name: str
    ) -> Section | None: ...

    def get_cases(
        self,
        project_id: int,
        suite_id: int,
        section_id: int | None = None,
        type_ids: Sequence[int] | None = None,
    ) -> list[Case]: ...

    def create_case(
        self,
        section_id: int,
        title: str,
        fields: dict[str, Any] | None = None,
    ) -> Case: ...

    def update_case(
        self, case_id: int, fields: dict[str, Any]
    ) -> Case: ...

    def delete_case(self, case_id: int) -> None: ...
