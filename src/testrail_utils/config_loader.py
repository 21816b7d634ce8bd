"""
Config file discovery and merging for testrail-utils.

Files are looked up in a fixed order (see ``discover_config_files``) and
merged section by section, so a project file only has to name the keys
it changes::

    # ~/.config/testrail_utils/config.yml
    testrail:
      url: https://testrail.example.com
    finder:
      extension: .t

    # ./.testrail/config.yml
    finder:
      recursive: false

gives ``finder: {extension: .t, recursive: false}``.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TESTRAIL_UTILS_CONFIG"
PROJECT_CONFIG = Path(".testrail") / "config.yml"
USER_CONFIG = Path(".config") / "testrail_utils" / "config.yml"

_STARTER_CONFIG = """\
# testrail-utils configuration
#
# Values set here are the lowest-precedence source: TESTRAIL_* environment
# variables (or a .env file) and command line options override them.
#
# testrail:
#   url: https://example.testrail.io
#   username: qa@example.com
#   password: <api key>
#   insecure: false
#   debug: false
#   timeout: 60
#
# Defaults for matching cases against test files on disk:
#
# finder:
#   extension: .t
#   recursive: true
#   section_id: null
#
# logging:
#   level: INFO
#   file: null
"""


def discover_config_files() -> list[Path]:
    """Return the existing config files, highest precedence first.

    1. the file named by ``TESTRAIL_UTILS_CONFIG``
    2. ``./.testrail/config.yml`` or ``./.testrail/config.yaml``
    3. ``~/.config/testrail_utils/config.yml``
    """
    candidates = []
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        candidates.append(Path(explicit).expanduser().resolve())
    project = Path.cwd() / PROJECT_CONFIG
    candidates += [project, project.with_suffix(".yaml")]
    candidates.append(Path.home() / USER_CONFIG)
    return [path for path in candidates if path.is_file()]


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Config file {path} must contain a mapping of sections, "
            f"not {type(data).__name__}"
        )
    return data


def load_config_files(paths: list[Path] | None = None) -> dict[str, Any]:
    """Read and merge config files into one raw dict for ``build_config``.

    *paths* defaults to ``discover_config_files()``.  Keys inside a
    section are merged, with the earlier (higher precedence) file
    winning; a section given as anything but a mapping replaces the
    section outright.
    """
    if paths is None:
        paths = discover_config_files()

    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        for section, values in _read_config_file(path).items():
            current = merged.get(section)
            if isinstance(current, dict) and isinstance(values, dict):
                merged[section] = {**current, **values}
            else:
                merged[section] = values
    return merged


def ensure_config(target: Path | None = None) -> Path:
    """Return the active config file, writing a starter file if none exists.

    The starter goes to *target*, or ``./.testrail/config.yml``.
    """
    existing = discover_config_files()
    if existing:
        logger.debug("Config file already exists: %s", existing[0])
        return existing[0]

    path = target or Path.cwd() / PROJECT_CONFIG
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_STARTER_CONFIG, encoding="utf-8")
    logger.info("Created starter config: %s", path)
    return path
