# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from flow_tasks.core.state import AppState
from flow_tasks.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than Settings.from_env(),
    to keep unit tests isolated from the developer's environment.
    """
    return SimpleNamespace(
        app_name="flow",
        log_level="WARNING",
        data_dir=tmp_path,
        db_path=tmp_path / "flow.db",
        log_dir=tmp_path,
        color=False,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> Iterator[TaskStore]:
    s = TaskStore(settings.db_path)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    """AppState wired to a real SQLite store in tmp_path, colours off."""
    return AppState(settings=settings, store=store, color=False)
