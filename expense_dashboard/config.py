"""Configuration management for the expense dashboard.

This module centralizes all configuration values: the hosted store
endpoint and access key, request timeout, log level and the naming
conventions shared by the aggregation code. Values come from environment
variables, optionally seeded from a ``.env`` file in the project root.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv

# Base project root - assumes this file is in expense_dashboard/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

load_dotenv(_PROJECT_ROOT / ".env")

STORE_URL_ENV = "SUPABASE_URL"
STORE_KEY_ENVS = ("SUPABASE_PUBLISHABLE_DEFAULT_KEY", "SUPABASE_ANON_KEY")
LOG_LEVEL_ENV = "EXPENSE_DASHBOARD_LOG_LEVEL"
REQUEST_TIMEOUT_ENV = "EXPENSE_DASHBOARD_REQUEST_TIMEOUT"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_REQUEST_TIMEOUT = 20.0

# Category naming conventions
INCOME_CATEGORY_LABEL = "inntekter"
UNCATEGORIZED_LABEL = "Uncategorized"


class MissingConfigError(RuntimeError):
    """Raised when a required store setting is absent."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required settings: {', '.join(self.missing)}")


@dataclass(frozen=True)
class Settings:
    store_url: str
    store_key: str
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL


def _first_set(environ: Mapping[str, str], names) -> str:
    for name in names:
        value = (environ.get(name) or "").strip()
        if value:
            return value
    return ""


def _parse_timeout(raw: Optional[str]) -> float:
    if not raw:
        return DEFAULT_REQUEST_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_REQUEST_TIMEOUT
    return value if value > 0 else DEFAULT_REQUEST_TIMEOUT


def missing_settings(environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """List the required environment variables that are not set."""
    env = os.environ if environ is None else environ
    missing: List[str] = []
    if not _first_set(env, (STORE_URL_ENV,)):
        missing.append(STORE_URL_ENV)
    if not _first_set(env, STORE_KEY_ENVS):
        missing.append(STORE_KEY_ENVS[0])
    return missing


def has_store_env(environ: Optional[Mapping[str, str]] = None) -> bool:
    return not missing_settings(environ)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from the environment.

    Args:
        environ: Mapping to read instead of ``os.environ`` (used by tests)

    Returns:
        Settings with the store URL stripped of trailing slashes

    Raises:
        MissingConfigError: If the store URL or access key is missing
    """
    env = os.environ if environ is None else environ
    missing = missing_settings(env)
    if missing:
        raise MissingConfigError(missing)

    return Settings(
        store_url=_first_set(env, (STORE_URL_ENV,)).rstrip("/"),
        store_key=_first_set(env, STORE_KEY_ENVS),
        request_timeout=_parse_timeout(env.get(REQUEST_TIMEOUT_ENV)),
        log_level=(env.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper(),
    )
