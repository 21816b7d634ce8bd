"""Error types raised by the finders, the synchronizer and the client.

Every error derives from ``TestRailError`` so callers (the CLI in
particular) can catch the whole family at the top level.  Nothing in
the finders or the synchronizer catches these: a failed lookup aborts
the whole call and no partial result is returned.
"""

from __future__ import annotations

from collections.abc import Iterable


class TestRailError(Exception):
    """Base class for all testrail-utils errors."""

    __test__ = False


class ResolutionError(TestRailError):
    """A project, plan, run, testsuite or section could not be found by name.

    Attributes:
        kind: Entity type that was looked up (e.g. ``"project"``).
        name: The name that did not resolve.
        scope: Where it was looked up, e.g. ``"plan 'Release 2'"``.
    """

    def __init__(
        self, kind: str, name: str, scope: str | None = None
    ) -> None:
        self.kind = kind
        self.name = name
        self.scope = scope
        where = f" in {scope}" if scope else ""
        super().__init__(f"No such {kind} '{name}'{where}.")


class TranslationError(TestRailError):
    """One or more status, config, user or case type names are unknown.

    Attributes:
        kind: Catalog that was searched (e.g. ``"status"``).
        names: The names that had no match, in request order.
    """

    def __init__(self, kind: str, names: Iterable[str]) -> None:
        self.kind = kind
        self.names = list(names)
        super().__init__(
            f"Unknown {kind} name(s): {', '.join(self.names)}"
        )


class OptionConflictError(ValueError, TestRailError):
    """Mutually exclusive or incomplete options were supplied."""


class ServiceError(TestRailError):
    """The TestRail API returned an error or could not be reached.

    Attributes:
        status_code: HTTP status code, or ``None`` for transport failures.
        message: Error text reported by the server.
    """

    def __init__(self, status_code: int | None, message: str) -> None:
        self.status_code = status_code
        self.message = message
        if status_code is None:
            super().__init__(f"TestRail request failed: {message}")
        else:
            super().__init__(
                f"TestRail API error ({status_code}): {message}"
            )


class SectionResolutionError(TestRailError):
    """No section could be chosen for a case that is about to be created."""
