# src/flow_tasks/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local data directory exists,
- opens the TaskStore (running schema migrations) and wires it into AppState.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_store import TaskStore, ensure_dir

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    ensure_dir(Path(settings.data_dir))
    ensure_dir(Path(settings.db_path).parent)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings(). Raises StorageError
    when the database cannot be opened or migrated.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    return AppState(
        settings=settings,
        store=TaskStore(settings.db_path),
        color=bool(getattr(settings, "color", True)),
    )
