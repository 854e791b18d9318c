"""Configuration management for dangit."""

import logging
import math
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Use tomllib on Python 3.11+, fall back to tomli for 3.10
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TRANSITION_DURATION = 0.6  # seconds the reveal effect plays after loading
DEFAULT_TICK_INTERVAL = 0.016
DEFAULT_NOTIFICATIONS_PER_PAGE = 50
MAX_TRANSITION_DURATION = 10.0


@dataclass
class Config:
    """dangit configuration."""

    organization: str | None = None  # Restrict searches to one org
    debug_logging: bool = field(default=False)  # Enable debug logging to file (opt-in)
    transition_duration: float = field(default=DEFAULT_TRANSITION_DURATION)
    tick_interval: float = field(default=DEFAULT_TICK_INTERVAL)
    notifications_per_page: int = field(default=DEFAULT_NOTIFICATIONS_PER_PAGE)
    api_url: str = field(default=DEFAULT_API_URL)


DEFAULT_CONFIG = Config()

# Config file path
CONFIG_DIR = Path.home() / ".dangit"
CONFIG_FILE = CONFIG_DIR / "config.toml"


def _env_flag(name: str) -> bool | None:
    value = os.getenv(name)
    if value is None:
        return None
    return value.lower() in ("true", "1", "yes")


def _env_float(name: str) -> float | None:
    value = os.getenv(name)
    if value is None:
        return None
    try:
        number = float(value)
    except ValueError:
        logger.warning(f"Ignoring {name}={value!r}: not a number")
        return None
    if not math.isfinite(number):
        logger.warning(f"Ignoring {name}={value!r}: not a finite number")
        return None
    return number


def _file_value(data: dict[str, Any], key: str, expected: type, default: Any) -> Any:
    """Read ``key`` from the parsed file, keeping ``default`` when it has the wrong type."""
    if key not in data:
        return default
    value = data[key]
    # TOML booleans are ints in Python, and ints are fine where a float is expected
    if expected is float and isinstance(value, int) and not isinstance(value, bool):
        value = float(value)
    if expected is not bool and isinstance(value, bool):
        valid = False
    elif expected is float:
        valid = isinstance(value, float) and math.isfinite(value)
    else:
        valid = isinstance(value, expected)
    if not valid:
        logger.warning(
            f"Ignoring {key}={value!r} in config file {CONFIG_FILE}: expected {expected.__name__}"
        )
        return default
    return value


def load_config() -> Config:
    """Load configuration from environment, file, or defaults.

    Priority (highest to lowest):
    1. Environment variables (DANGIT_*)
    2. Config file (~/.dangit/config.toml)
    3. Hardcoded defaults
    """
    config = Config()

    data: dict[str, Any] | None = None
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Ignoring unreadable config file {CONFIG_FILE}: {e}")

    if data is not None:
        config.organization = _file_value(data, "organization", str, config.organization)
        config.debug_logging = _file_value(data, "debug_logging", bool, config.debug_logging)
        config.transition_duration = _file_value(data, "transition_duration", float, config.transition_duration)
        config.tick_interval = _file_value(data, "tick_interval", float, config.tick_interval)
        config.notifications_per_page = _file_value(data, "notifications_per_page", int, config.notifications_per_page)
        config.api_url = _file_value(data, "api_url", str, config.api_url)

    # Environment variables override everything
    config.organization = os.getenv("DANGIT_ORG", config.organization) or None
    config.api_url = os.getenv("DANGIT_API_URL", config.api_url)
    debug_logging = _env_flag("DANGIT_DEBUG_LOGGING")
    if debug_logging is not None:
        config.debug_logging = debug_logging
    transition_duration = _env_float("DANGIT_TRANSITION_DURATION")
    if transition_duration is not None:
        config.transition_duration = transition_duration

    return config


def save_config(config: Config) -> None:
    """Save configuration to file.

    Note: tokens are never saved to the config file.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "debug_logging": config.debug_logging,
        "transition_duration": config.transition_duration,
    }

    # TOML has no null, so unset optional keys are left out
    if config.organization:
        data["organization"] = config.organization
    if config.tick_interval != DEFAULT_CONFIG.tick_interval:
        data["tick_interval"] = config.tick_interval
    if config.notifications_per_page != DEFAULT_CONFIG.notifications_per_page:
        data["notifications_per_page"] = config.notifications_per_page
    if config.api_url != DEFAULT_CONFIG.api_url:
        data["api_url"] = config.api_url

    with open(CONFIG_FILE, "wb") as f:
        tomli_w.dump(data, f)
