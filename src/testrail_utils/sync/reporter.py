"""Reconciliation and sync report formatting functions.

Provides human-readable and machine-readable output:

- ``format_reconciliation`` -- what a sync would create/delete/update.
- ``format_sync_report`` -- post-sync summary.
- ``reconciliation_to_json`` / ``report_to_json`` -- structured dicts
  for ``--json`` output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import Reconciliation, SyncReport


# ------------------------------------------------------------------
# Human-readable output
# ------------------------------------------------------------------


def format_reconciliation(reconciliation: Reconciliation) -> str:
    """Format a reconciliation grouped by list.

    Sections are only included for lists that were requested; a
    requested but empty list is shown as ``(none)``.

    Args:
        reconciliation: Output of ``find_cases()``.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    if reconciliation.missing is not None:
        lines.append(
            f"Missing from TestRail ({len(reconciliation.missing)}):"
        )
        lines.extend(f"  {path}" for path in reconciliation.missing)
        if not reconciliation.missing:
            lines.append("  (none)")
        lines.append("")

    if reconciliation.orphans is not None:
        lines.append(
            f"Orphaned in TestRail ({len(reconciliation.orphans)}):"
        )
        lines.extend(
            f"  C{case.id} {case.title}" for case in reconciliation.orphans
        )
        if not reconciliation.orphans:
            lines.append("  (none)")
        lines.append("")

    if reconciliation.update is not None:
        lines.append(f"To update ({len(reconciliation.update)}):")
        lines.extend(
            f"  C{case.id} {case.title} -> {case.full_title}"
            for case in reconciliation.update
        )
        if not reconciliation.update:
            lines.append("  (none)")
        lines.append("")

    return "\n".join(lines).rstrip()


def format_sync_report(report: SyncReport) -> str:
    """Format a complete sync report as human-readable text.

    Args:
        report: The completed sync report.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    header = "Sync report"
    if report.testsuite_id is not None:
        header += f" for testsuite {report.testsuite_id}"
    if report.dry_run:
        header += " (DRY RUN)"
    lines.append(header)
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    lines.append("")

    lines.append(
        f"{len(report.created)} created, {len(report.deleted)} deleted, "
        f"{len(report.updated)} updated"
        + (" (not applied)" if report.dry_run else "")
    )
    lines.append("")

    if report.created:
        lines.append("Created:")
        for r in report.created:
            suffix = f" (C{r.case_id})" if r.case_id is not None else ""
            lines.append(f"  {r.title}{suffix}")
        lines.append("")

    if report.deleted:
        lines.append("Deleted:")
        for r in report.deleted:
            lines.append(f"  C{r.case_id} {r.title}")
        lines.append("")

    if report.updated:
        lines.append("Updated:")
        for r in report.updated:
            lines.append(f"  C{r.case_id} {r.title}")
        lines.append("")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def reconciliation_to_json(reconciliation: Reconciliation) -> dict[str, Any]:
    """Convert a reconciliation to a JSON-serializable dict."""
    return reconciliation.model_dump(mode="json", exclude_none=True)


def report_to_json(report: SyncReport) -> dict[str, Any]:
    """Convert a ``SyncReport`` to a structured dict.

    Returns:
        Dict with ``testsuite_id``, ``dry_run``, ``summary`` counts and a
        ``results`` list.
    """
    return {
        "testsuite_id": report.testsuite_id,
        "dry_run": report.dry_run,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "summary": {
            "created": len(report.created),
            "deleted": len(report.deleted),
            "updated": len(report.updated),
            "total": len(report.results),
        },
        "results": [
            {
                "action": r.action.value,
                "title": r.title,
                "case_id": r.case_id,
                "applied": r.applied,
            }
            for r in report.results
        ],
    }
