"""Configuration file schema for testrail_utils.

Defines Pydantic models for the YAML config structure with dedicated
sections for the TestRail connection, file-finder defaults and logging.

Usage:
    from testrail_utils.config_schema import build_config

    raw = load_config_files()
    unified = build_config(raw)
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class TestRailConfig(BaseModel):
    """TestRail server connection settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    __test__ = False

    url: str | None = Field(default=None, description="TestRail server URL")
    username: str | None = Field(
        default=None, description="TestRail user (login email)"
    )
    password: str | None = Field(
        default=None, description="TestRail password or API key"
    )
    insecure: bool = Field(
        default=False,
        description="Disable SSL verification (development only)",
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    timeout: int = Field(
        default=60,
        ge=1,
        le=600,
        description="Read timeout for API requests in seconds (1-600)",
    )

    model_config = {"frozen": True}


class FinderConfig(BaseModel):
    """Defaults for scanning test files on disk.

    Attributes:
        extension: Only consider files ending with this suffix.
        recursive: Walk subdirectories when scanning.
        section_id: Section that newly created cases are filed under.
    """

    extension: str = Field(default="", description="Test file suffix")
    recursive: bool = Field(
        default=True, description="Scan directories recursively"
    )
    section_id: int | None = Field(
        default=None,
        description="Section id used when creating missing cases",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level configuration.

    Every section has sensible defaults, so ``UnifiedConfig()``
    (zero-config) is always valid.
    """

    testrail: TestRailConfig = Field(default_factory=TestRailConfig)
    finder: FinderConfig = Field(default_factory=FinderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_config_files()``.

    Missing sections get defaults.

    Args:
        raw_data: Merged configuration dictionary.

    Returns:
        Validated ``UnifiedConfig`` instance.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
