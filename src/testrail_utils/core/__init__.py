"""TestRail service protocol and its REST client implementation."""

from .client import TestRailClient
from .service import TestRailService

__all__ = ["TestRailClient", "TestRailService"]
