"""Case lookup and reconciliation of cases with test files on disk."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..errors import ResolutionError
from .files import FileMatchOptions, MatchMode, find_tests
from .models import Case, CaseQuery, CaseSyncOptions, Reconciliation, Suite

if TYPE_CHECKING:
    from ..core.service import TestRailService

logger = logging.getLogger(__name__)


def get_cases(
    query: CaseQuery, service: TestRailService
) -> tuple[list[Case], Suite]:
    """Get the cases of a testsuite, optionally narrowed to a section
    and to case types.

    Returns:
        The cases and the resolved testsuite.

    Raises:
        ResolutionError: If the project, testsuite or section does not exist.
        TranslationError: If a case type name is unknown.
    """
    project = service.get_project_by_name(query.project)
    if project is None:
        raise ResolutionError("project", query.project)

    suite = service.get_test_suite_by_name(project.id, query.testsuite)
    if suite is None:
        raise ResolutionError(
            "testsuite", query.testsuite, f"project '{project.name}'"
        )

    section_id = None
    if query.section:
        section = service.get_section_by_name(
            project.id, suite.id, query.section
        )
        if section is None:
            raise ResolutionError(
                "section", query.section, f"testsuite '{suite.name}'"
            )
        section_id = section.id

    type_ids = None
    if query.types:
        type_ids = service.type_names_to_ids(query.types)

    cases = service.get_cases(project.id, suite.id, section_id, type_ids)
    logger.debug("Testsuite '%s': %d cases", suite.name, len(cases))
    return cases, suite


def find_cases(
    options: CaseSyncOptions,
    cases: Sequence[Case],
    testsuite_id: int | None = None,
) -> Reconciliation:
    """Compare *cases* with the test files in ``options.directory``.

    Builds up to three lists:

    - ``missing``: paths of files that have no case (unless disabled).
    - ``orphans``: cases that have no file (when requested).
    - ``update``: cases that have a file, with ``full_title`` set to its
      absolute path (when requested).

    Lists that were not requested are ``None``.
    """

    def _pass(mode: MatchMode, names_only: bool = False) -> list:
        return find_tests(
            FileMatchOptions(
                mode=mode,
                directory=options.directory,
                recursive=options.recursive,
                extension=options.extension,
                names_only=names_only,
            ),
            cases,
        )

    return Reconciliation(
        testsuite_id=testsuite_id,
        missing=(
            _pass(MatchMode.NO_MATCH, names_only=True)
            if options.missing
            else None
        ),
        orphans=_pass(MatchMode.ORPHANS) if options.orphans else None,
        update=_pass(MatchMode.MATCH) if options.update else None,
    )
