"""Runtime configuration registry for the navigation core.

Provides centralized configuration for the preview API, logging, the
hydration runtime, and route defaults. Environment variables take
precedence over YAML config.

Usage:
    from scrumnav.config.runtime_config import get_max_redirect_hops, get_log_level

    hops = get_max_redirect_hops()  # Returns 4 unless overridden
    level = get_log_level()  # Returns "INFO" unless overridden

Route defaults:
    from scrumnav.config.runtime_config import (
        get_default_config_section,
        get_default_org_section,
    )

    section = get_default_config_section()  # AdminSection.MEMBERS
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from scrumnav.runtime.types import AdminSection

logger = logging.getLogger(__name__)

_CONFIG_PATH = Path(__file__).parent / "navigation.yaml"
_cached_config: Optional[Dict[str, Any]] = None

# =============================================================================
# Redirect hop guardrails
# =============================================================================

# A redirect chain longer than this is a routing bug, not navigation
REDIRECT_HOPS_MIN = 1
REDIRECT_HOPS_MAX = 16

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _clamp_hops(value: int, name: str) -> int:
    """Clamp a hop limit to sanity bounds with logging."""
    if value < REDIRECT_HOPS_MIN:
        logger.warning(
            "Config '%s' value %d is below minimum %d. Clamping to %d.",
            name,
            value,
            REDIRECT_HOPS_MIN,
            REDIRECT_HOPS_MIN,
        )
        return REDIRECT_HOPS_MIN
    if value > REDIRECT_HOPS_MAX:
        logger.warning(
            "Config '%s' value %d exceeds maximum %d. Clamping to %d.",
            name,
            value,
            REDIRECT_HOPS_MAX,
            REDIRECT_HOPS_MAX,
        )
        return REDIRECT_HOPS_MAX
    return value


def _load_config() -> Dict[str, Any]:
    """Load navigation.yaml configuration, with caching."""
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            _cached_config = yaml.safe_load(f) or {}
    else:
        _cached_config = _default_config()

    return _cached_config


def _default_config() -> Dict[str, Any]:
    """Return default configuration if navigation.yaml doesn't exist."""
    return {
        "version": "1.0",
        "api": {
            "host": "127.0.0.1",
            "port": 5002,
        },
        "logging": {
            "level": "INFO",
        },
        "runtime": {
            "max_redirect_hops": 4,
        },
        "defaults": {
            "config_section": AdminSection.MEMBERS.value,
            "org_section": AdminSection.INVITES.value,
        },
    }


def reset_config() -> None:
    """Reset cached config (for testing)."""
    global _cached_config
    _cached_config = None


def _config_value(group: str, key: str) -> Any:
    """Look up ``group.key`` in the YAML config, then in the defaults."""
    config = _load_config()
    value = (config.get(group) or {}).get(key)
    if value is None:
        value = _default_config()[group][key]
    return value


def get_log_level() -> str:
    """Get the log level name.

    Precedence: SCRUMNAV_LOG_LEVEL, then logging.level, then "INFO".
    Unknown level names fall back to INFO.
    """
    value = os.environ.get("SCRUMNAV_LOG_LEVEL") or _config_value("logging", "level")
    level = str(value).upper()
    if level not in _VALID_LOG_LEVELS:
        logger.warning("Unknown log level '%s', using INFO", value)
        return "INFO"
    return level


def get_api_host() -> str:
    """Get the preview API bind host (SCRUMNAV_API_HOST overrides api.host)."""
    return os.environ.get("SCRUMNAV_API_HOST") or str(_config_value("api", "host"))


def get_api_port() -> int:
    """Get the preview API port (SCRUMNAV_API_PORT overrides api.port).

    Non-numeric values fall back to the YAML/default port.
    """
    env_value = os.environ.get("SCRUMNAV_API_PORT")
    if env_value:
        try:
            return int(env_value)
        except ValueError:
            logger.warning("Ignoring non-numeric SCRUMNAV_API_PORT '%s'", env_value)
    return int(_config_value("api", "port"))


def get_max_redirect_hops() -> int:
    """Get the redirect chain limit for the hydration runtime.

    Precedence (highest to lowest):
    1. SCRUMNAV_MAX_REDIRECT_HOPS
    2. runtime.max_redirect_hops in navigation.yaml
    3. Default: 4

    The value is clamped to [REDIRECT_HOPS_MIN, REDIRECT_HOPS_MAX].
    """
    env_value = os.environ.get("SCRUMNAV_MAX_REDIRECT_HOPS")
    if env_value:
        try:
            return _clamp_hops(int(env_value), "SCRUMNAV_MAX_REDIRECT_HOPS")
        except ValueError:
            logger.warning("Ignoring non-numeric SCRUMNAV_MAX_REDIRECT_HOPS '%s'", env_value)
    return _clamp_hops(int(_config_value("runtime", "max_redirect_hops")), "max_redirect_hops")


def _get_section(env_var: str, key: str) -> AdminSection:
    value = os.environ.get(env_var) or _config_value("defaults", key)
    try:
        return AdminSection(str(value).strip().lower())
    except ValueError:
        fallback = AdminSection(_default_config()["defaults"][key])
        logger.warning(
            "Unknown section '%s' for %s, using '%s'",
            value,
            key,
            fallback.value,
        )
        return fallback


def get_default_config_section() -> AdminSection:
    """Section opened by a bare ``/config`` path."""
    return _get_section("SCRUMNAV_DEFAULT_CONFIG_SECTION", "config_section")


def get_default_org_section() -> AdminSection:
    """Section opened by a bare ``/org`` path."""
    return _get_section("SCRUMNAV_DEFAULT_ORG_SECTION", "org_section")
