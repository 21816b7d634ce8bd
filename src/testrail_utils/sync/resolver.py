"""Section resolvers: decide where a newly created case is filed.

A test file that has no case yet must be created inside some section of
the testsuite.  How directories map to sections is left to the caller;
the synchronizer only asks a ``SectionResolver``.

- ``UnmappedSectionResolver``: refuses every file (the default).
- ``FixedSectionResolver``: files every new case under one section.

The ``create_resolver()`` factory picks one from an optional section id.
"""

from __future__ import annotations

import logging
from typing import Protocol

from testrail_utils.errors import SectionResolutionError

logger = logging.getLogger(__name__)


class SectionResolver(Protocol):
    """Protocol that all section resolvers must satisfy."""

    def resolve_section(
        self, path: str, testsuite_id: int | None
    ) -> int:
        """Return the id of the section a case for *path* belongs in.

        Raises:
            SectionResolutionError: If no section can be chosen.
        """
        ...  # pragma: no cover


class UnmappedSectionResolver:
    """Resolver used when no section mapping is configured."""

    def resolve_section(
        self, path: str, testsuite_id: int | None
    ) -> int:
        raise SectionResolutionError(
            f"No section configured for new case '{path}'. "
            "Pass --section-id or set finder.section_id in config.yml."
        )


class FixedSectionResolver:
    """Put every new case in the same section."""

    def __init__(self, section_id: int) -> None:
        self.section_id = section_id

    def resolve_section(
        self, path: str, testsuite_id: int | None
    ) -> int:
        logger.debug("Filing %s under section %d", path, self.section_id)
        return self.section_id


def create_resolver(section_id: int | None = None) -> SectionResolver:
    """Return a fixed resolver for *section_id*, or the unmapped one."""
    if section_id is None:
        return UnmappedSectionResolver()
    return FixedSectionResolver(section_id)
