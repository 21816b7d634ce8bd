import logging
from collections.abc import Sequence
from typing import Any

import requests

from ..config import Config
from ..errors import ServiceError, TranslationError
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

logger = logging.getLogger(__name__)

# Ids of TestRail's built-in statuses; custom statuses start after these.
_LAST_SYSTEM_STATUS_ID = 5


class TestRailClient:
    """TestRail REST API (v2) client.

    Implements ``TestRailService`` on top of a ``requests.Session``.
    Status, user and case type catalogs, and configs per project, are
    fetched once and cached for the lifetime of the client.
    """

    __test__ = False

    def __init__(self, config: Config):
        self.config = config
        self.api_url = self._get_api_url()
        self._session: requests.Session | None = None
        self._statuses: list[dict[str, Any]] | None = None
        self._users: list[dict[str, Any]] | None = None
        self._case_types: list[dict[str, Any]] | None = None
        self._configs: dict[int, list[dict[str, Any]]] = {}

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = self._create_session()
        return self._session

    def _get_api_url(self) -> str:
        return f"{self.config.testrail_url.rstrip('/')}/index.php?/api/v2/"

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.auth = (self.config.username, self.config.password)
        session.verify = not self.config.insecure
        session.headers.update({"Content-Type": "application/json"})
        return session

    def _request(
        self,
        method: str,
        endpoint: str,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """
        Call an API endpoint and return the decoded JSON body.
        """
        url = self.api_url + endpoint
        logger.debug("%s %s", method, endpoint)
        try:
            response = self.session.request(
                method,
                url,
                json=payload if method == "POST" else None,
                timeout=(10, self.config.timeout),
            )
        except requests.RequestException as e:
            raise ServiceError(None, str(e)) from e

        if response.status_code >= 400:
            message = response.reason or "request failed"
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("error"):
                message = body["error"]
            raise ServiceError(response.status_code, message)

        if not response.content:
            return None
        return response.json()

    def _get(self, endpoint: str) -> Any:
        return self._request("GET", endpoint)

    def _post(
        self, endpoint: str, payload: dict[str, Any] | None = None
    ) -> Any:
        return self._request("POST", endpoint, payload or {})

    def _get_paginated(self, endpoint: str, key: str) -> list[dict]:
        """
        Collect every item of a list endpoint.

        Older servers return a bare list; newer ones wrap a page of items
        under *key* and link to the next page via ``_links.next``.
        """
        items: list[dict] = []
        next_endpoint: str | None = endpoint
        while next_endpoint:
            data = self._get(next_endpoint)
            if isinstance(data, list):
                items.extend(data)
                break
            items.extend(data.get(key) or [])
            next_link = (data.get("_links") or {}).get("next")
            next_endpoint = (
                next_link.split("/api/v2/", 1)[-1] if next_link else None
            )
        return items

    def validate_connection(self) -> int:
        """
        Validate credentials by listing projects.
        Returns the number of visible projects.
        """
        return len(self._get_paginated("get_projects", "projects"))

    # ------------------------------------------------------------------
    # Projects, plans, runs, milestones
    # ------------------------------------------------------------------

    def get_projects(self) -> list[Project]:
        return [
            Project(**p)
            for p in self._get_paginated("get_projects", "projects")
        ]

    def get_project_by_name(self, name: str) -> Project | None:
        for project in self.get_projects():
            if project.name == name:
                return project
        return None

    def get_plans(self, project_id: int) -> list[Plan]:
        return [
            Plan(**p)
            for p in self._get_paginated(
                f"get_plans/{project_id}", "plans"
            )
        ]

    def get_plan_by_id(self, plan_id: int) -> Plan:
        return Plan(**self._get(f"get_plan/{plan_id}"))

    def get_plan_by_name(self, project_id: int, name: str) -> Plan | None:
        for plan in self.get_plans(project_id):
            if plan.name == name:
                return self.get_plan_by_id(plan.id)
        return None

    def get_child_runs(self, plan: Plan) -> list[Run]:
        """
        Flatten the runs of every entry of a fully fetched plan.
        """
        return [
            Run(**run)
            for entry in plan.entries
            for run in entry.get("runs") or []
        ]

    def get_child_run_by_name(
        self,
        plan: Plan,
        name: str,
        config_ids: Sequence[int] | None = None,
    ) -> Run | None:
        """
        Find a plan run by name whose configuration set equals
        *config_ids* exactly.

        Every run of a plan entry shares the entry's name, so without
        config ids only a run that has no configurations matches.
        """
        requested = list(config_ids or [])
        wanted = set(requested)
        for run in self.get_child_runs(plan):
            if run.name != name:
                continue
            if len(run.config_ids) != len(requested):
                continue
            if not all(cid in wanted for cid in run.config_ids):
                continue
            return run
        return None

    def get_runs(self, project_id: int) -> list[Run]:
        return [
            Run(**r)
            for r in self._get_paginated(f"get_runs/{project_id}", "runs")
        ]

    def get_run_by_name(self, project_id: int, name: str) -> Run | None:
        for run in self.get_runs(project_id):
            if run.name == name:
                return run
        return None

    def get_run_summary(self, runs: Sequence[Run]) -> list[Run]:
        """
        Attach ``run_status`` (status label to result count) to each run.

        Counts come from the run's ``<status>_count`` fields.  A run
        carrying none of them gets ``run_status=None``.
        """
        count_fields = {
            self._count_field(status): status["label"]
            for status in self._get_statuses()
        }
        summarized = []
        for run in runs:
            data = run.model_dump()
            summary = {
                label: int(data[field] or 0)
                for field, label in count_fields.items()
                if field in data
            }
            summarized.append(
                run.model_copy(update={"run_status": summary or None})
            )
        return summarized

    @staticmethod
    def _count_field(status: dict[str, Any]) -> str:
        if status.get("is_system", True):
            return f"{status['name']}_count"
        return f"custom_status{status['id'] - _LAST_SYSTEM_STATUS_ID}_count"

    def get_milestone_by_id(self, milestone_id: int) -> Milestone | None:
        data = self._get(f"get_milestone/{milestone_id}")
        return Milestone(**data) if data else None

    # ------------------------------------------------------------------
    # Name translation
    # ------------------------------------------------------------------

    def _get_statuses(self) -> list[dict[str, Any]]:
        if self._statuses is None:
            self._statuses = self._get("get_statuses") or []
        return self._statuses

    def _get_users(self) -> list[dict[str, Any]]:
        if self._users is None:
            self._users = self._get_paginated("get_users", "users")
        return self._users

    def _get_case_types(self) -> list[dict[str, Any]]:
        if self._case_types is None:
            self._case_types = self._get("get_case_types") or []
        return self._case_types

    def _get_project_configs(self, project_id: int) -> list[dict[str, Any]]:
        if project_id not in self._configs:
            groups = self._get(f"get_configs/{project_id}") or []
            self._configs[project_id] = [
                config
                for group in groups
                for config in group.get("configs") or []
            ]
        return self._configs[project_id]

    @staticmethod
    def _translate(
        kind: str,
        names: Sequence[str],
        catalog: list[dict[str, Any]],
        source: str,
        target: str,
    ) -> list[Any]:
        lookup: dict[str, Any] = {}
        for item in catalog:
            lookup.setdefault(item[source], item[target])
        unknown = [name for name in names if name not in lookup]
        if unknown:
            raise TranslationError(kind, unknown)
        return [lookup[name] for name in names]

    def status_names_to_labels(self, names: Sequence[str]) -> list[str]:
        return self._translate(
            "status", names, self._get_statuses(), "name", "label"
        )

    def status_names_to_ids(self, names: Sequence[str]) -> list[int]:
        return self._translate(
            "status", names, self._get_statuses(), "name", "id"
        )

    def translate_config_names_to_ids(
        self, project_id: int, names: Sequence[str]
    ) -> list[int]:
        return self._translate(
            "config",
            names,
            self._get_project_configs(project_id),
            "name",
            "id",
        )

    def user_names_to_ids(self, names: Sequence[str]) -> list[int]:
        return self._translate(
            "user", names, self._get_users(), "name", "id"
        )

    def type_names_to_ids(self, names: Sequence[str]) -> list[int]:
        return self._translate(
            "case type", names, self._get_case_types(), "name", "id"
        )

    # ------------------------------------------------------------------
    # Tests, suites, sections, cases
    # ------------------------------------------------------------------

    def get_tests(
        self,
        run_id: int,
        status_ids: Sequence[int] | None = None,
        user_ids: Sequence[int] | None = None,
    ) -> list[RunTest]:
        """
        Get tests of a run, optionally filtered by status and assignee.

        Statuses are filtered by the server; get_tests has no assignee
        filter, so assignees are filtered here.
        """
        endpoint = f"get_tests/{run_id}"
        if status_ids:
            endpoint += "&status_id=" + ",".join(str(s) for s in status_ids)
        tests = [
            RunTest(**t) for t in self._get_paginated(endpoint, "tests")
        ]
        if user_ids:
            wanted = set(user_ids)
            tests = [t for t in tests if t.assignedto_id in wanted]
        return tests

    def get_test_suite_by_name(
        self, project_id: int, name: str
    ) -> Suite | None:
        for suite in self._get_paginated(
            f"get_suites/{project_id}", "suites"
        ):
            if suite["name"] == name:
                return Suite(**suite)
        return None

    def get_section_by_name(
        self, project_id: int, suite_id: int, name: str
    ) -> Section | None:
        for section in self._get_paginated(
            f"get_sections/{project_id}&suite_id={suite_id}", "sections"
        ):
            if section["name"] == name:
                return Section(**section)
        return None

    def get_cases(
        self,
        project_id: int,
        suite_id: int,
        section_id: int | None = None,
        type_ids: Sequence[int] | None = None,
    ) -> list[Case]:
        endpoint = f"get_cases/{project_id}&suite_id={suite_id}"
        if section_id is not None:
            endpoint += f"&section_id={section_id}"
        if type_ids:
            endpoint += "&type_id=" + ",".join(str(t) for t in type_ids)
        return [
            Case(**c) for c in self._get_paginated(endpoint, "cases")
        ]

    def create_case(
        self,
        section_id: int,
        title: str,
        fields: dict[str, Any] | None = None,
    ) -> Case:
        payload = {"title": title, **(fields or {})}
        return Case(**self._post(f"add_case/{section_id}", payload))

    def update_case(self, case_id: int, fields: dict[str, Any]) -> Case:
        return Case(**self._post(f"update_case/{case_id}", fields))

    def delete_case(self, case_id: int) -> None:
        self._post(f"delete_case/{case_id}")
