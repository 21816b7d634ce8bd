"""Apply a case/file reconciliation to TestRail.

The ``Synchronizer`` walks the three lists of a ``Reconciliation`` in
order:

1. ``missing`` -- create a case titled after each file's base name, in
   the section chosen by the section resolver.
2. ``orphans`` -- delete each case.
3. ``update``  -- point each case's description at its test file.

Every entry is logged before it is acted on.  In a dry run nothing is
sent to TestRail, but every entry is still logged and reported.

Errors are not caught: the first failing call aborts the remaining
entries and propagates to the caller.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from testrail_utils.sync.models import (
    Reconciliation,
    SyncAction,
    SyncReport,
    SyncResult,
)
from testrail_utils.sync.resolver import SectionResolver, create_resolver

if TYPE_CHECKING:
    from testrail_utils.core.service import TestRailService

logger = logging.getLogger(__name__)

DESCRIPTION_TEMPLATE = "Automated test found in {path}\n"


class Synchronizer:
    """Create, delete and update cases from a reconciliation.

    Args:
        service: TestRail service used for case mutations.
        section_resolver: Chooses the section of newly created cases.
            Defaults to a resolver that refuses, so creating cases
            fails unless a section is configured.
    """

    def __init__(
        self,
        service: TestRailService,
        section_resolver: SectionResolver | None = None,
    ) -> None:
        self.service = service
        self.section_resolver = section_resolver or create_resolver()

    def run(self, reconciliation: Reconciliation) -> SyncReport:
        """Apply *reconciliation*.

        Returns:
            A ``SyncReport`` listing every create, delete and update
            (planned only, when ``reconciliation.dry_run`` is set).
        """
        started_at = datetime.now(timezone.utc).isoformat()
        dry_run = reconciliation.dry_run
        results: list[SyncResult] = []

        for path in reconciliation.missing or []:
            results.append(
                self._create(path, reconciliation.testsuite_id, dry_run)
            )

        for case in reconciliation.orphans or []:
            logger.info("Deleting test %s...", case.title)
            if not dry_run:
                self.service.delete_case(case.id)
            results.append(
                SyncResult(
                    action=SyncAction.DELETE,
                    title=case.title,
                    case_id=case.id,
                    applied=not dry_run,
                )
            )

        for case in reconciliation.update or []:
            logger.info("Updating test %s...", case.title)
            if not dry_run:
                self.service.update_case(
                    case.id,
                    {
                        "description": DESCRIPTION_TEMPLATE.format(
                            path=case.full_title
                        )
                    },
                )
            results.append(
                SyncResult(
                    action=SyncAction.UPDATE,
                    title=case.title,
                    case_id=case.id,
                    applied=not dry_run,
                )
            )

        return SyncReport(
            testsuite_id=reconciliation.testsuite_id,
            dry_run=dry_run,
            results=results,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )

    def _create(
        self, path: str, testsuite_id: int | None, dry_run: bool
    ) -> SyncResult:
        logger.info("Adding test %s...", path)
        if dry_run:
            return SyncResult(
                action=SyncAction.CREATE, title=path, applied=False
            )
        section_id = self.section_resolver.resolve_section(
            path, testsuite_id
        )
        case = self.service.create_case(
            section_id, os.path.basename(path)
        )
        return SyncResult(
            action=SyncAction.CREATE, title=path, case_id=case.id
        )


def synchronize(
    reconciliation: Reconciliation,
    service: TestRailService,
    section_resolver: SectionResolver | None = None,
) -> bool:
    """Apply *reconciliation* and return True.

    Any failure raises instead of returning False; there is no partial
    failure reporting.
    """
    report = Synchronizer(service, section_resolver).run(reconciliation)
    logger.debug(report.summary())
    return True
