"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (e.g.
KV_DEFAULT_TIMEOUT, KV_REFRESH_ON_READ, list limits and log level).
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# Timeout (seconds) applied to new keys when set_value gets none; 0 disables
KV_DEFAULT_TIMEOUT = _env_float("KV_DEFAULT_TIMEOUT", 0.0)

# Whether get_value refreshes the entry's timer by default
KV_REFRESH_ON_READ = _env_bool("KV_REFRESH_ON_READ", True)

# Limits / output
KV_MAX_LIST_ITEMS = _env_int("KV_MAX_LIST_ITEMS", 100)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING").strip().upper()
