# src/flow_tasks/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the collaborators around the store.

The importer and the prompt command depend on these Protocols instead of
TaskStore, which keeps them testable with in-memory fakes.
"""

from typing import Protocol

from ..tasks.task_models import Tag, Task


class TaskImportRepo(Protocol):
    """What the YAML importer needs to bulk-create a subtree with tags."""

    def add(self, title: str, parent_id: int | None = None) -> Task: ...
    def update_description(self, task_id: int, description: str | None) -> None: ...
    def set_due_date(self, task_id: int, due_date: str | None) -> None: ...
    def list_tags(self) -> list[Tag]: ...
    def create_tag(self, name: str, color: str = "") -> Tag: ...
    def assign_tag(self, task_id: int, tag_id: int) -> None: ...


class TaskReadRepo(Protocol):
    """Read-only access used for summaries and prompts."""

    def list(self) -> list[Task]: ...
    def get_by_id(self, task_id: int) -> Task: ...
    def tags_for_task(self, task_id: int) -> list[Tag]: ...
    def children_of(self, task_id: int) -> list[Task]: ...
