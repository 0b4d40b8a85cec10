"""
app/config.py

Application-level configuration helpers.

The metrics engine takes its targets as plain parameters; this module is
the only place they are read from the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from visits.types import DEFAULT_TOTAL_AREA_TARGET, DEFAULT_TOTAL_TARGET

_PROJECT_ROOT = Path(__file__).resolve().parents[1]


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    for filename in (".env", ".env.local"):
        env_path = _PROJECT_ROOT / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class VisitMetricsSettings:
    """
    Denominators and limits used when deriving visit metrics.
    """

    total_target: int = DEFAULT_TOTAL_TARGET
    total_area_target: float = DEFAULT_TOTAL_AREA_TARGET
    feedback_digest_limit: int = 100


@dataclass(frozen=True)
class UploadSettings:
    """
    Limits applied to uploaded spreadsheets.
    """

    max_upload_bytes: int = 10 * 1024 * 1024


@lru_cache(maxsize=1)
def get_visit_metrics_settings() -> VisitMetricsSettings:
    """
    Return cached metrics settings from environment variables.
    """

    return VisitMetricsSettings(
        total_target=max(1, _get_int_env("VISIT_TOTAL_TARGET", DEFAULT_TOTAL_TARGET)),
        total_area_target=max(0.01, _get_float_env("VISIT_TOTAL_AREA_TARGET", DEFAULT_TOTAL_AREA_TARGET)),
        feedback_digest_limit=max(1, _get_int_env("VISIT_FEEDBACK_DIGEST_LIMIT", 100)),
    )


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """
    Return cached upload settings from environment variables.
    """

    return UploadSettings(
        max_upload_bytes=max(1024, _get_int_env("VISIT_MAX_UPLOAD_BYTES", 10 * 1024 * 1024)),
    )


def get_log_level() -> str:
    """
    Return the configured root log level name.
    """

    return _get_str_env("LOG_LEVEL", "INFO").upper()
