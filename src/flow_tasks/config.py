# src/flow_tasks/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Paths default to the per-user XDG data directory.
- Tests build Settings directly instead of reading the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_PREFIX = "FLOW"
APP_DIR_NAME = "flow"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except ImportError:
        return
    load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def default_data_dir() -> Path:
    """
    Per-user data directory: $XDG_DATA_HOME/flow, falling back to
    ~/.local/share/flow. Not created here.
    """
    data_home = os.getenv("XDG_DATA_HOME")
    if data_home is None or data_home.strip() == "":
        base = Path.home() / ".local" / "share"
    else:
        base = Path(data_home).expanduser()
    return base / APP_DIR_NAME


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths ----
    data_dir: Path
    db_path: Path
    log_dir: Path

    # ---- Console ----
    color: bool

    @staticmethod
    def from_env() -> "Settings":
        _load_dotenv_if_available()

        app_name = _env(_k("APP_NAME"), "flow") or "flow"
        log_level = _env(_k("LOG_LEVEL"), "WARNING")

        data_dir = _env_path(_k("DATA_DIR"), default_data_dir())
        db_path = _env_path(_k("DB_PATH"), data_dir / "flow.db")
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        # NO_COLOR (https://no-color.org) wins over the default.
        color = _env_bool(_k("COLOR"), os.getenv("NO_COLOR") is None)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            db_path=db_path,
            log_dir=log_dir,
            color=color,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
