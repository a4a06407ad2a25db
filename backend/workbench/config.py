"""
Settings: immutable backend configuration read from the environment.

Loaded once at startup; runtime state lives in the Workspace, never here.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

from .logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_CORS_ORIGINS = ("http://localhost:5173", "http://127.0.0.1:5173")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default


def _env_float(name: str) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, raw)
        return None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    logger.warning("Ignoring %s=%r: not a boolean", name, raw)
    return default


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./workbench.db"
    cors_origins: Tuple[str, ...] = DEFAULT_CORS_ORIGINS
    history_limit: int = 50
    default_collection: str = "Default"
    # None leaves httpx's own default in place
    request_timeout: Optional[float] = None
    clear_env_on_new_tab: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.environ.get("WORKBENCH_CORS_ORIGINS")
        if origins:
            cors = tuple(o.strip() for o in origins.split(",") if o.strip())
        else:
            cors = DEFAULT_CORS_ORIGINS

        history_limit = _env_int("WORKBENCH_HISTORY_LIMIT", 50)
        if history_limit < 1:
            logger.warning("WORKBENCH_HISTORY_LIMIT must be positive, using 50")
            history_limit = 50

        return cls(
            database_url=os.environ.get("WORKBENCH_DATABASE_URL", cls.database_url),
            cors_origins=cors,
            history_limit=history_limit,
            default_collection=os.environ.get("WORKBENCH_DEFAULT_COLLECTION", "").strip() or "Default",
            request_timeout=_env_float("WORKBENCH_REQUEST_TIMEOUT"),
            clear_env_on_new_tab=_env_bool("WORKBENCH_CLEAR_ENV_ON_NEW_TAB", True),
            log_level=os.environ.get("WORKBENCH_LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
