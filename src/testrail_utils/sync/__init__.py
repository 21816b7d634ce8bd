"""Push case/file reconciliations back to TestRail.

Modules:

- ``models``   -- ``Reconciliation``, ``SyncAction``, ``SyncResult``,
  ``SyncReport``: core data contracts.
- ``resolver`` -- section resolvers for newly created cases.
- ``engine``   -- ``Synchronizer`` and ``synchronize()``.
- ``reporter`` -- human-readable and JSON formatting.

Usage example
-------------
::

    from testrail_utils.find import CaseQuery, CaseSyncOptions, find_cases, get_cases
    from testrail_utils.sync import FixedSectionResolver, Synchronizer, format_sync_report

    cases, suite = get_cases(CaseQuery(project="Widgets", testsuite="Master"), client)
    plan = find_cases(
        CaseSyncOptions(directory="t/", extension=".t", orphans=True),
        cases,
        testsuite_id=suite.id,
    )

    # Dry-run first to preview changes
    preview = Synchronizer(client).run(plan.model_copy(update={"dry_run": True}))
    print(format_sync_report(preview))

    report = Synchronizer(client, FixedSectionResolver(42)).run(plan)
"""

from .models import (
    Reconciliation,
    SyncAction,
    SyncReport,
    SyncResult,
)
from .resolver import (
    FixedSectionResolver,
    SectionResolver,
    UnmappedSectionResolver,
    create_resolver,
)
from .engine import Synchronizer, synchronize
from .reporter import (
    format_reconciliation,
    format_sync_report,
    reconciliation_to_json,
    report_to_json,
)

__all__ = [
    "FixedSectionResolver",
    "Reconciliation",
    "SectionResolver",
    "SyncAction",
    "SyncReport",
    "SyncResult",
    "Synchronizer",
    "UnmappedSectionResolver",
    "create_resolver",
    "format_reconciliation",
    "format_sync_report",
    "reconciliation_to_json",
    "report_to_json",
    "synchronize",
]
