"""Pydantic models for pushing case/file reconciliations to TestRail.

- ``Reconciliation``: what to create, delete and update (built by
  ``find_cases``, defined with the other finder models).
- ``SyncAction``: Enum of possible sync operations.
- ``SyncResult``: Outcome of one create/delete/update.
- ``SyncReport``: Aggregate results for a full sync run.

All models are frozen (immutable).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from ..find.models import Reconciliation

__all__ = ["Reconciliation", "SyncAction", "SyncReport", "SyncResult"]


class SyncAction(str, Enum):
    """Possible sync operations for a case."""

    CREATE = "create"
    DELETE = "delete"
    UPDATE = "update"


class SyncResult(BaseModel):
    """Result of one sync operation.

    Attributes:
        action: Operation performed (or planned).
        title: Case title, or file path for created cases.
        case_id: Id of the affected case (the new id for creates).
        applied: False when the operation was only reported (dry run).
    """

    action: SyncAction
    title: str
    case_id: int | None = None
    applied: bool = True

    model_config = {"frozen": True}


class SyncReport(BaseModel):
    """Aggregate report for a full sync run.

    Attributes:
        testsuite_id: Testsuite that was synchronized.
        dry_run: Whether this was a dry run (no changes applied).
        results: Individual sync results, in processing order.
        started_at: ISO 8601 timestamp when sync started.
        completed_at: ISO 8601 timestamp when sync completed.
    """

    testsuite_id: int | None = None
    dry_run: bool = False
    results: list[SyncResult] = []
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    @property
    def created(self) -> list[SyncResult]:
        """Results where action is CREATE."""
        return [r for r in self.results if r.action == SyncAction.CREATE]

    @property
    def deleted(self) -> list[SyncResult]:
        """Results where action is DELETE."""
        return [r for r in self.results if r.action == SyncAction.DELETE]

    @property
    def updated(self) -> list[SyncResult]:
        """Results where action is UPDATE."""
        return [r for r in self.results if r.action == SyncAction.UPDATE]

    def summary(self) -> str:
        """Format a human-readable summary of the sync run.

        Returns:
            Multi-line summary string with counts by action.
        """
        lines = [
            "Sync report"
            + (f" for testsuite {self.testsuite_id}" if self.testsuite_id else "")
            + (" (dry run)" if self.dry_run else ""),
            f"  Created: {len(self.created)}",
            f"  Deleted: {len(self.deleted)}",
            f"  Updated: {len(self.updated)}",
            f"  Total:   {len(self.results)}",
        ]
        return "\n".join(lines)
