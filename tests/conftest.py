"""Shared pytest fixtures for testrail-utils tests."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from unittest.mock import MagicMock

import pytest

from testrail_utils.config import Config
from testrail_utils.errors import TranslationError
from testrail_utils.find.models import (
    Case,
    Milestone,
    Plan,
    Project,
    Run,
    RunTest,
    Section,
    Suite,
)


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require a live TestRail instance",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a live TestRail instance"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


class FakeTestRailService:
    """In-memory TestRail replacement for finder and sync tests.

    Records every call in ``calls`` as ``(method, args)`` so tests can
    check what was (or was not) requested.
    """

    __test__ = False

    def __init__(
        self,
        projects: list[Project] | None = None,
        runs: dict[int, list[Run]] | None = None,
        plans: dict[int, list[Plan]] | None = None,
        milestones: dict[int, Milestone] | None = None,
        statuses: list[dict[str, Any]] | None = None,
        configs: dict[str, int] | None = None,
        users: dict[str, int] | None = None,
        case_types: dict[str, int] | None = None,
        tests: dict[int, list[RunTest]] | None = None,
        suites: dict[int, list[Suite]] | None = None,
        sections: dict[int, list[Section]] | None = None,
        cases: list[Case] | None = None,
        summaries: dict[int, dict[str, int] | None] | None = None,
    ) -> None:
        self.projects = projects or [Project(id=1, name="Widgets")]
        self.runs = runs or {}
        self.plans = plans or {}
        self.milestones = milestones or {}
        self.statuses = statuses or [
            {"id": 1, "name": "passed", "label": "Passed"},
            {"id": 2, "name": "blocked", "label": "Blocked"},
            {"id": 4, "name": "retest", "label": "Retest"},
            {"id": 5, "name": "failed", "label": "Failed"},
        ]
        self.configs = configs or {}
        self.users = users or {}
        self.case_types = case_types or {}
        self.tests = tests or {}
        self.suites = suites or {}
        self.sections = sections or {}
        self.cases = cases or []
        self.summaries = summaries or {}
        self.calls: list[tuple[str, tuple]] = []
        self._next_case_id = 1000

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))

    def called(self, method: str) -> list[tuple]:
        return [args for name, args in self.calls if name == method]

    # Projects, plans and runs

    def get_project_by_name(self, name: str) -> Project | None:
        self._record("get_project_by_name", name)
        return next((p for p in self.projects if p.name == name), None)

    def get_plans(self, project_id: int) -> list[Plan]:
        self._record("get_plans", project_id)
        return [
            plan.model_copy(update={"entries": []})
            for plan in self.plans.get(project_id, [])
        ]

    def get_plan_by_id(self, plan_id: int) -> Plan:
        self._record("get_plan_by_id", plan_id)
        for plans in self.plans.values():
            for plan in plans:
                if plan.id == plan_id:
                    return plan
        raise KeyError(plan_id)

    def get_plan_by_name(self, project_id: int, name: str) -> Plan | None:
        self._record("get_plan_by_name", project_id, name)
        return next(
            (p for p in self.plans.get(project_id, []) if p.name == name),
            None,
        )

    def get_child_runs(self, plan: Plan) -> list[Run]:
        self._record("get_child_runs", plan.id)
        return [
            Run(**run)
            for entry in plan.entries
            for run in entry.get("runs", [])
        ]

    def get_child_run_by_name(
        self,
        plan: Plan,
        name: str,
        config_ids: Sequence[int] | None = None,
    ) -> Run | None:
        self._record("get_child_run_by_name", plan.id, name, config_ids)
        for run in self.get_child_runs(plan):
            if run.name != name:
                continue
            if sorted(run.config_ids) != sorted(config_ids or []):
                continue
            return run
        return None

    def get_runs(self, project_id: int) -> list[Run]:
        self._record("get_runs", project_id)
        return list(self.runs.get(project_id, []))

    def get_run_by_name(self, project_id: int, name: str) -> Run | None:
        self._record("get_run_by_name", project_id, name)
        return next(
            (r for r in self.runs.get(project_id, []) if r.name == name),
            None,
        )

    def get_run_summary(self, runs: Sequence[Run]) -> list[Run]:
        self._record("get_run_summary", [r.id for r in runs])
        return [
            run.model_copy(
                update={"run_status": self.summaries.get(run.id)}
            )
            for run in runs
        ]

    def get_milestone_by_id(self, milestone_id: int) -> Milestone | None:
        self._record("get_milestone_by_id", milestone_id)
        return self.milestones.get(milestone_id)

    # Name translation

    def _translate(self, kind: str, names, lookup: dict) -> list:
        unknown = [n for n in names if n not in lookup]
        if unknown:
            raise TranslationError(kind, unknown)
        return [lookup[n] for n in names]

    def status_names_to_labels(self, names: Sequence[str]) -> list[str]:
        self._record("status_names_to_labels", list(names))
        return self._translate(
            "status",
            names,
            {s["name"]: s["label"] for s in self.statuses},
        )

    def status_names_to_ids(self, names: Sequence[str]) -> list[int]:
        self._record("status_names_to_ids", list(names))
        return self._translate(
            "status", names, {s["name"]: s["id"] for s in self.statuses}
        )

    def translate_config_names_to_ids(
        self, project_id: int, names: Sequence[str]
    ) -> list[int]:
        self._record("translate_config_names_to_ids", project_id, list(names))
        return self._translate("config", names, self.configs)

    def user_names_to_ids(self, names: Sequence[str]) -> list[int]:
        self._record("user_names_to_ids", list(names))
        return self._translate("user", names, self.users)

    def type_names_to_ids(self, names: Sequence[str]) -> list[int]:
        self._record("type_names_to_ids", list(names))
        return self._translate("case type", names, self.case_types)

    # Tests and cases

    def get_tests(
        self,
        run_id: int,
        status_ids: Sequence[int] | None = None,
        user_ids: Sequence[int] | None = None,
    ) -> list[RunTest]:
        self._record("get_tests", run_id, status_ids, user_ids)
        tests = self.tests.get(run_id, [])
        if status_ids:
            tests = [t for t in tests if t.status_id in status_ids]
        if user_ids:
            tests = [t for t in tests if t.assignedto_id in user_ids]
        return tests

    def get_test_suite_by_name(
        self, project_id: int, name: str
    ) -> Suite | None:
        self._record("get_test_suite_by_name", project_id, name)
        return next(
            (s for s in self.suites.get(project_id, []) if s.name == name),
            None,
        )

    def get_section_by_name(
        self, project_id: int, suite_id: int, name: str
    ) -> Section | None:
        self._record("get_section_by_name", project_id, suite_id, name)
        return next(
            (s for s in self.sections.get(suite_id, []) if s.name == name),
            None,
        )

    def get_cases(
        self,
        project_id: int,
        suite_id: int,
        section_id: int | None = None,
        type_ids: Sequence[int] | None = None,
    ) -> list[Case]:
        self._record("get_cases", project_id, suite_id, section_id, type_ids)
        cases = self.cases
        if section_id is not None:
            cases = [c for c in cases if c.section_id == section_id]
        if type_ids:
            cases = [c for c in cases if c.type_id in type_ids]
        return list(cases)

    def create_case(
        self,
        section_id: int,
        title: str,
        fields: dict[str, Any] | None = None,
    ) -> Case:
        self._record("create_case", section_id, title, fields)
        self._next_case_id += 1
        case = Case(
            id=self._next_case_id, title=title, section_id=section_id
        )
        self.cases.append(case)
        return case

    def update_case(self, case_id: int, fields: dict[str, Any]) -> Case:
        self._record("update_case", case_id, fields)
        return Case(id=case_id, title="updated", **fields)

    def delete_case(self, case_id: int) -> None:
        self._record("delete_case", case_id)
        self.cases = [c for c in self.cases if c.id != case_id]


@pytest.fixture
def mock_config():
    """Create a Config instance for testing."""
    return Config(
        testrail_url="https://testrail.example.com",
        username="qa@example.com",
        password="api-key",
        insecure=False,
    )


@pytest.fixture
def mock_testrail_client(mock_config):
    """Create a mock TestRailClient instance for testing."""
    from testrail_utils.core.client import TestRailClient

    client = MagicMock(spec=TestRailClient)
    client.config = mock_config
    return client


@pytest.fixture
def fake_service():
    """Empty in-memory service with a single 'Widgets' project."""
    return FakeTestRailService()


@pytest.fixture
def mock_response():
    """Factory fixture for creating requests response mocks."""

    def _create_response(payload=None, status_code=200, reason="OK"):
        import json
        from unittest.mock import Mock

        response = Mock()
        response.status_code = status_code
        response.reason = reason
        response.content = (
            json.dumps(payload).encode() if payload is not None else b""
        )
        response.json.return_value = payload
        if payload is None:
            response.json.side_effect = ValueError("no JSON")
        return response

    return _create_response
