# src/dice_todo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time; every value has a default.
- Local overrides via an optional, gitignored config_local.py.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "DICE"

STORAGE_BACKENDS = ("json", "sqlite", "memory")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_opt_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage ----
    data_dir: Path
    storage_backend: str
    storage_path: Path
    storage_key: str

    # ---- Persistence writer ----
    write_queue_size: int
    write_retries: int
    write_retry_delay_seconds: float

    # ---- Dice roll ----
    roll_tick_seconds: float
    roll_settle_seconds: float
    random_seed: Optional[int]

    # ---- Console ----
    confirm_delete: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "dice-todo").strip() or "dice-todo"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/dice_todo"))

        storage_backend = _env(_k("STORAGE_BACKEND"), "json").strip().lower()
        if storage_backend not in STORAGE_BACKENDS:
            storage_backend = "json"
        default_file = "tasks.sqlite3" if storage_backend == "sqlite" else "tasks.json"
        storage_path = _env_path(_k("STORAGE_PATH"), data_dir / default_file)
        storage_key = _env(_k("STORAGE_KEY"), "@dice_todo_tasks_v1").strip() or "@dice_todo_tasks_v1"

        write_queue_size = max(1, _env_int(_k("WRITE_QUEUE_SIZE"), 64))
        write_retries = max(0, _env_int(_k("WRITE_RETRIES"), 2))
        write_retry_delay_seconds = max(0, _env_int(_k("WRITE_RETRY_DELAY_MS"), 100)) / 1000.0

        roll_tick_seconds = max(1, _env_int(_k("ROLL_TICK_MS"), 80)) / 1000.0
        roll_settle_seconds = max(0, _env_int(_k("ROLL_SETTLE_MS"), 1200)) / 1000.0
        random_seed = _env_opt_int(_k("RANDOM_SEED"))

        confirm_delete = _env_bool(_k("CONFIRM_DELETE"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_backend=storage_backend,
            storage_path=storage_path,
            storage_key=storage_key,
            write_queue_size=write_queue_size,
            write_retries=write_retries,
            write_retry_delay_seconds=write_retry_delay_seconds,
            roll_tick_seconds=roll_tick_seconds,
            roll_settle_seconds=roll_settle_seconds,
            random_seed=random_seed,
            confirm_delete=confirm_delete,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env; use config_local.py only for safe overrides.
try:
    import config_local as _config_local  # type: ignore

    # Keep it explicit: only these names are honoured.
    if hasattr(_config_local, "CONFIRM_DELETE"):
        object.__setattr__(SETTINGS, "confirm_delete", bool(_config_local.CONFIRM_DELETE))  # type: ignore[misc]
    if hasattr(_config_local, "RANDOM_SEED"):
        object.__setattr__(SETTINGS, "random_seed", _config_local.RANDOM_SEED)  # type: ignore[misc]
except Exception:
    pass


def get_settings() -> Settings:
    return SETTINGS
