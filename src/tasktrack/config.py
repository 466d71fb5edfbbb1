# src/tasktrack/config.py

"""Settings for the task tracker, read from TASKTRACK_* environment variables.

A local .env file is loaded first when python-dotenv is installed; values
already present in the environment win. Library code never calls
get_settings(): the composition root passes the settings object down, and
tests build their own.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_PREFIX = "TASKTRACK"

STORAGE_BACKENDS = ("sqlite", "json", "memory")
LOCALES = ("en", "zh")
DEFAULT_DATA_DIR = Path(".local/tasktrack")
DEFAULT_STORAGE_KEY = "todoTasks"
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024
DEFAULT_CONFIRM_TTL_SECONDS = 600

_TRUE = {"1", "true", "yes", "y", "on"}


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    try:
        from dotenv import load_dotenv  # type: ignore
    except ImportError:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(suffix: str, default: str) -> str:
    """Stripped value of TASKTRACK_<suffix>; blank counts as unset."""
    raw = (os.getenv(_k(suffix)) or "").strip()
    return raw or default


def _env_bool(suffix: str, default: bool) -> bool:
    raw = os.getenv(_k(suffix))
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE


def _env_int(suffix: str, default: int, *, minimum: int = 0) -> int:
    try:
        value = int(_env(suffix, str(default)))
    except ValueError:
        return default
    return max(minimum, value)


def _env_choice(suffix: str, choices: tuple[str, ...], default: str) -> str:
    value = _env(suffix, default).lower()
    if value not in choices:
        raise ValueError(f"{_k(suffix)} must be one of {', '.join(choices)}, got {value!r}")
    return value


def _storage_file_name(backend: str) -> str:
    return "tasks.json" if backend == "json" else "tasks.sqlite3"


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    locale: str

    # ---- Console ----
    console_enabled: bool
    # Lifetime of /delete and /edit confirmation tokens.
    confirm_ttl_seconds: int

    # ---- Storage ----
    data_dir: Path
    storage_backend: str
    storage_path: Path
    storage_key: str
    # 0 disables the size check.
    storage_quota_bytes: int
    rollback_on_save_error: bool

    @staticmethod
    def from_env() -> "Settings":
        backend = _env_choice("STORAGE_BACKEND", STORAGE_BACKENDS, "sqlite")
        data_dir = Path(_env("DATA_DIR", str(DEFAULT_DATA_DIR))).expanduser()
        storage_path = Path(
            _env("STORAGE_PATH", str(data_dir / _storage_file_name(backend)))
        ).expanduser()

        return Settings(
            app_name=_env("APP_NAME", "tasktrack"),
            log_level=_env("LOG_LEVEL", "WARNING").upper(),
            locale=_env_choice("LOCALE", LOCALES, "en"),
            console_enabled=_env_bool("CONSOLE_ENABLED", True),
            confirm_ttl_seconds=_env_int("CONFIRM_TTL_SECONDS", DEFAULT_CONFIRM_TTL_SECONDS, minimum=1),
            data_dir=data_dir,
            storage_backend=backend,
            storage_path=storage_path,
            storage_key=_env("STORAGE_KEY", DEFAULT_STORAGE_KEY),
            storage_quota_bytes=_env_int("STORAGE_QUOTA_BYTES", DEFAULT_QUOTA_BYTES),
            rollback_on_save_error=_env_bool("ROLLBACK_ON_SAVE_ERROR", True),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
