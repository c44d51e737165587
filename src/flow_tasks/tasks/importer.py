# src/flow_tasks/tasks/importer.py

"""
YAML import of task hierarchies.

Input format:

    tasks:
      - title: "Task"
        description: "optional"
        due_date: "YYYY-MM-DD"
        tags: ["name", ...]
        children:
          - title: "Child"

Tags are matched by name; unknown names are created with the next palette
colour. The import is not transactional: tasks created before an error
stay in the store.
"""

from __future__ import annotations

import logging
from typing import Any

import yaml

from ..core.ports import TaskImportRepo
from ..errors import ValidationError
from .task_models import next_tag_color

logger = logging.getLogger(__name__)

_FENCE_OPENERS = {"```yaml", "```yml", "```"}


def strip_code_block(text: str) -> str:
    """
    Return the contents of markdown code fences, or `text` unchanged if
    there are none (AI assistants like to wrap YAML in ```yaml blocks).
    """
    out: list[str] = []
    in_block = False
    for line in text.splitlines():
        trimmed = line.strip()
        if not in_block and trimmed in _FENCE_OPENERS:
            in_block = True
            continue
        if in_block and trimmed == "```":
            in_block = False
            continue
        if in_block:
            out.append(line)
    if not out:
        return text
    return "\n".join(out)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _parse_document(text: str) -> list[dict[str, Any]]:
    try:
        data = yaml.safe_load(strip_code_block(text))
    except yaml.YAMLError as e:
        raise ValidationError(f"YAML parse error: {e}") from e

    tasks = data.get("tasks") if isinstance(data, dict) else None
    if not tasks:
        raise ValidationError("no tasks found in YAML")
    if not isinstance(tasks, list):
        raise ValidationError("'tasks' must be a list")
    return tasks


class _TagResolver:
    """Name -> id lookup that creates missing tags on first use."""

    def __init__(self, store: TaskImportRepo) -> None:
        self._store = store
        self._ids = {t.name: t.id for t in store.list_tags()}

    def resolve(self, name: str) -> int:
        tag_id = self._ids.get(name)
        if tag_id is None:
            tag = self._store.create_tag(name, next_tag_color(len(self._ids)))
            tag_id = tag.id
            self._ids[name] = tag_id
        return tag_id


def _import_task(
    store: TaskImportRepo,
    tags: _TagResolver,
    node: Any,
    parent_id: int | None,
) -> int:
    if not isinstance(node, dict):
        raise ValidationError(f"task entry must be a mapping, got {type(node).__name__}")

    title = _as_text(node.get("title"))
    if not title:
        raise ValidationError("task title is required")

    task = store.add(title, parent_id)
    count = 1

    description = _as_text(node.get("description"))
    if description:
        store.update_description(task.id, description)

    # yaml parses bare 2025-01-31 into a date; str() gives back ISO form.
    due_date = _as_text(node.get("due_date"))
    if due_date:
        store.set_due_date(task.id, due_date)

    tag_names = node.get("tags") or []
    if isinstance(tag_names, str):
        tag_names = [tag_names]
    for raw in tag_names:
        name = _as_text(raw)
        if name:
            store.assign_tag(task.id, tags.resolve(name))

    for child in node.get("children") or []:
        count += _import_task(store, tags, child, task.id)

    return count


def import_yaml(store: TaskImportRepo, text: str, parent_id: int | None = None) -> int:
    """
    Create the tasks described by `text` under `parent_id` (root when None).

    Returns the number of tasks created.
    """
    nodes = _parse_document(text)
    tags = _TagResolver(store)

    count = 0
    for node in nodes:
        count += _import_task(store, tags, node, parent_id)

    logger.info("Imported %d tasks (parent_id=%s)", count, parent_id)
    return count
