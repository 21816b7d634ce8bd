"""Test lookup: resolve a run by name and fetch its tests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..errors import ResolutionError
from .models import Plan, Project, Run, RunTest, TestQuery

if TYPE_CHECKING:
    from ..core.service import TestRailService

logger = logging.getLogger(__name__)


def resolve_run(
    query: TestQuery, service: TestRailService
) -> tuple[Project, Plan | None, Run]:
    """Resolve the project, plan (if named) and run described by *query*.

    A run inside a plan is looked up among the plan's runs and must have
    exactly the requested configurations; with none requested, only a
    run without configurations matches.

    Raises:
        ResolutionError: If the project, plan or run does not exist.
        TranslationError: If a config name is unknown.
    """
    project = service.get_project_by_name(query.project)
    if project is None:
        raise ResolutionError("project", query.project)

    if not query.plan:
        run = service.get_run_by_name(project.id, query.run)
        if run is None:
            raise ResolutionError("run", query.run)
        return project, None, run

    plan = service.get_plan_by_name(project.id, query.plan)
    if plan is None:
        raise ResolutionError("plan", query.plan)

    config_ids = None
    if query.configs:
        config_ids = service.translate_config_names_to_ids(
            project.id, query.configs
        )

    run = service.get_child_run_by_name(plan, query.run, config_ids)
    if run is None:
        scope = f"plan '{query.plan}'"
        if query.configs:
            scope += f" with configs {', '.join(query.configs)}"
        raise ResolutionError("run", query.run, scope)
    return project, plan, run


def get_tests(
    query: TestQuery, service: TestRailService
) -> tuple[list[RunTest], Run]:
    """Get the tests of the run described by *query*.

    Status and user names are translated to ids before the tests are
    fetched, so an unknown name fails before any test is retrieved.

    Returns:
        The matching tests and the run they belong to.
    """
    _, _, run = resolve_run(query, service)

    status_ids = None
    if query.statuses:
        status_ids = service.status_names_to_ids(query.statuses)

    user_ids = None
    if query.users:
        user_ids = service.user_names_to_ids(query.users)

    tests = service.get_tests(run.id, status_ids, user_ids)
    logger.debug("Run '%s': %d tests", run.name, len(tests))
    return tests, run
