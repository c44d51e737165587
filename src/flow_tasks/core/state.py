# src/flow_tasks/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings object (config.Settings in the app, SimpleNamespace in tests).
    settings: Any
    store: TaskStore

    # Render ANSI colours (tag badges, strike-through, markers).
    color: bool = True
