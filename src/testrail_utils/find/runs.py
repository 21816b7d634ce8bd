"""Run discovery: collect, filter and order the runs of a project.

``find_runs`` gathers standalone runs and the runs nested in every plan
of a project, then narrows them down:

1. **Configs** -- when configuration names are requested, standalone
   runs are left out and a plan run is kept only if its configuration
   set equals the requested set.  Without a config filter only plan
   runs that have no configurations qualify.
2. **Statuses** -- a run must have results in *every* requested status;
   runs without a status summary are dropped.
3. **Order** -- ascending (FIFO) or descending (LIFO) by creation date,
   or by milestone due date when milestone sorting is requested.

Plan runs take ``created_on`` and ``milestone_id`` from their plan.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..errors import ResolutionError
from .models import Plan, Run, RunQuery

if TYPE_CHECKING:
    from ..core.service import TestRailService

logger = logging.getLogger(__name__)


def find_runs(query: RunQuery, service: TestRailService) -> list[Run]:
    """Find the runs of a project matching *query*.

    Args:
        query: Project name and filter/sort options.
        service: TestRail service to query.

    Returns:
        Matching runs, ordered as requested.

    Raises:
        ResolutionError: If the project does not exist.
        TranslationError: If a status or config name is unknown.
    """
    project = service.get_project_by_name(query.project)
    if project is None:
        raise ResolutionError("project", query.project)

    status_labels: list[str] = []
    if query.statuses:
        status_labels = service.status_names_to_labels(query.statuses)

    config_ids: list[int] = []
    if query.configs:
        config_ids = service.translate_config_names_to_ids(
            project.id, query.configs
        )

    runs: list[Run] = []
    if not query.configs:
        runs = service.get_runs(project.id)

    for plan in service.get_plans(project.id):
        plan = service.get_plan_by_id(plan.id)
        runs.extend(
            _matching_plan_runs(plan, service.get_child_runs(plan), config_ids)
        )

    logger.debug(
        "Project '%s': %d candidate runs", project.name, len(runs)
    )

    if query.statuses:
        runs = _filter_by_status(
            service.get_run_summary(runs), status_labels
        )

    sort_key = "created_on"
    if query.sort_by_milestone:
        runs = [_with_due_date(run, service) for run in runs]
        sort_key = "due_on"

    return sorted(
        runs, key=lambda run: getattr(run, sort_key), reverse=query.lifo
    )


def _matching_plan_runs(
    plan: Plan, child_runs: Sequence[Run], config_ids: Sequence[int]
) -> list[Run]:
    """Keep plan runs whose config set equals *config_ids*.

    Kept runs inherit the plan's creation date and milestone.
    """
    wanted = set(config_ids)
    matched = []
    for run in child_runs:
        if len(run.config_ids) != len(config_ids):
            continue
        found = sum(1 for cid in run.config_ids if cid in wanted)
        if found != len(run.config_ids):
            continue
        matched.append(
            run.model_copy(
                update={
                    "created_on": plan.created_on,
                    "milestone_id": plan.milestone_id,
                    "plan_id": plan.id,
                }
            )
        )
    return matched


def _filter_by_status(
    runs: Sequence[Run], status_labels: Sequence[str]
) -> list[Run]:
    """Keep runs that have results in every one of *status_labels*."""
    summarized = [run for run in runs if run.run_status is not None]
    if len(summarized) != len(runs):
        logger.debug(
            "Dropped %d runs without a status summary",
            len(runs) - len(summarized),
        )
    return [
        run
        for run in summarized
        if all(run.run_status.get(label) for label in status_labels)
    ]


def _with_due_date(run: Run, service: TestRailService) -> Run:
    due_on = 0
    if run.milestone_id:
        milestone = service.get_milestone_by_id(run.milestone_id)
        if milestone is not None and milestone.due_on:
            due_on = milestone.due_on
    return run.model_copy(update={"due_on": due_on})
