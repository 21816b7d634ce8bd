"""Connection configuration for the TestRail client.

Reads TestRail connection settings from CLI args, environment variables,
.env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    TESTRAIL_URL: TestRail instance URL (required)
    TESTRAIL_USERNAME: TestRail user (login email) (required)
    TESTRAIL_PASSWORD: TestRail password or API key (required)
    TESTRAIL_INSECURE: Skip SSL verification (optional, default: false)
    TESTRAIL_DEBUG: Enable debug logging (optional, default: false)
    TESTRAIL_TIMEOUT: Read timeout in seconds (optional, default: 60)
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


@dataclass
class Config:
    testrail_url: str
    username: str
    password: str
    insecure: bool = False
    debug: bool = False
    timeout: int = 60


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If URL format is invalid or credentials are empty.
    """
    config.testrail_url = config.testrail_url.strip()

    if not config.testrail_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid TestRail URL '{config.testrail_url}': must start with http:// or https://"
        )

    parsed = urlparse(config.testrail_url)
    if not parsed.hostname:
        raise ValueError(
            f"Invalid TestRail URL '{config.testrail_url}': URL must include a hostname"
        )

    config.testrail_url = config.testrail_url.removesuffix("/")

    if not config.username.strip():
        raise ValueError(
            "TestRail username cannot be empty. Set TESTRAIL_USERNAME environment variable."
        )

    if not config.password.strip():
        raise ValueError(
            "TestRail password cannot be empty. Set TESTRAIL_PASSWORD environment variable."
        )

    if config.insecure:
        logger.warning(
            "WARNING: SSL verification disabled (insecure=True). Use only for development."
        )


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def resolve_flag(cli_value: bool, env_key: str, fallback: bool = False) -> bool:
    """Resolve a boolean setting: CLI flag > env var / .env > YAML > False.

    A set CLI flag always wins.  An env var that is set, even to a false
    value, beats the YAML *fallback*.
    """
    if cli_value:
        return True
    env_value = _get_bool_env(env_key)
    if env_value is not None:
        return env_value
    return bool(fallback)


def load_config(
    url: str | None = None,
    username: str | None = None,
    password: str | None = None,
    insecure: bool = False,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        url: Override TestRail URL.
        username: Override username.
        password: Override password or API key.
        insecure: Skip SSL verification (CLI flag).
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Dict of values from the YAML ``testrail`` section.
            Used as fallback when CLI arg and env var are both unset.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If required config (URL, username, password) is missing
            after checking all sources, or a numeric value is out of range.
    """
    fb = yaml_fallbacks or {}

    # --- String fields: CLI > env > YAML > error ---

    testrail_url = url or os.getenv("TESTRAIL_URL") or fb.get("url")
    if not testrail_url:
        raise ValueError(
            "TestRail URL not found. Set TESTRAIL_URL environment variable, "
            "pass --url CLI argument, or add 'url' to config.yml."
        )

    testrail_username = (
        username or os.getenv("TESTRAIL_USERNAME") or fb.get("username")
    )
    if not testrail_username:
        raise ValueError(
            "TestRail username not found. Set TESTRAIL_USERNAME environment variable, "
            "pass --username CLI argument, or add 'username' to config.yml."
        )

    testrail_password = (
        password or os.getenv("TESTRAIL_PASSWORD") or fb.get("password")
    )
    if not testrail_password:
        raise ValueError(
            "TestRail password not found. Set TESTRAIL_PASSWORD environment variable, "
            "pass --password CLI argument, or add 'password' to config.yml."
        )

    final_insecure = resolve_flag(
        insecure, "TESTRAIL_INSECURE", fb.get("insecure", False)
    )
    final_debug = resolve_flag(debug, "TESTRAIL_DEBUG", fb.get("debug", False))

    # --- Numeric fields: env > YAML > default ---

    timeout_raw = os.getenv("TESTRAIL_TIMEOUT")
    if timeout_raw is not None:
        try:
            final_timeout = int(timeout_raw)
        except ValueError:
            raise ValueError(
                f"Invalid TESTRAIL_TIMEOUT '{timeout_raw}': must be a number between 1 and 600"
            ) from None
        if not (1 <= final_timeout <= 600):
            raise ValueError(
                f"Invalid TESTRAIL_TIMEOUT '{timeout_raw}': must be a number between 1 and 600"
            )
    elif "timeout" in fb:
        final_timeout = int(fb["timeout"])
    else:
        final_timeout = 60

    config = Config(
        testrail_url=testrail_url.strip(),
        username=testrail_username.strip(),
        password=testrail_password.strip(),
        insecure=final_insecure,
        debug=final_debug,
        timeout=final_timeout,
    )

    validate_config(config)

    return config
