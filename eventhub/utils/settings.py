"""Environment-backed runtime configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

logger = logging.getLogger(__name__)


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_float(name: str, default: float) -> float:
    """Return a float sourced from the environment when available."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", name, raw)
        return default


def _env_int(name: str, default: int) -> int:
    """Return an integer sourced from the environment when available."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return default


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for search, import and date queries."""

    search_engine: str
    search_limit: int
    import_timeout: float
    import_user_agent: str
    overview_days: int
    timezone: Optional[str]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read configuration from the environment with caching."""
    search_limit = _env_int("EVENTHUB_SEARCH_LIMIT", 50)
    overview_days = _env_int("EVENTHUB_OVERVIEW_DAYS", 14)
    return Settings(
        search_engine=_env_str("EVENTHUB_SEARCH_ENGINE", "sql").lower(),
        search_limit=search_limit if search_limit > 0 else 50,
        import_timeout=_env_float("EVENTHUB_IMPORT_TIMEOUT", 30.0),
        import_user_agent=_env_str("EVENTHUB_IMPORT_USER_AGENT", "eventhub-importer/1.0"),
        overview_days=overview_days if overview_days > 0 else 14,
        timezone=os.getenv("EVENTHUB_TIMEZONE") or None,
    )


def refresh_settings() -> None:
    """Clear cached configuration (useful for tests)."""
    get_settings.cache_clear()
