# src/flow_tasks/tasks/tree.py

"""
Flat task list -> display-ordered tree rows.

Example (A has children B and C, B has child D):

    A
     ├─ B
     │   └─ D
     └─ C

Each row also carries a continuation prefix for a secondary line (such as a
description) under the item: the branch glyph is replaced by a vertical bar
when more siblings follow, or by blanks when the item is the last one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .task_models import Task

logger = logging.getLogger(__name__)

PIPE = " │  "
BLANK = "    "
BRANCH = " ├─ "
LAST = " └─ "


@dataclass(frozen=True, slots=True)
class TreeItem:
    task: Task
    prefix: str
    desc_prefix: str

    @property
    def depth(self) -> int:
        return len(self.prefix) // len(BLANK)


def _prefixes(ancestors: list[bool]) -> tuple[str, str]:
    """
    `ancestors[i]` is True when the ancestor at level i+1 still has following
    siblings. The last entry describes the node itself.
    """
    if not ancestors:
        return "", ""

    head = "".join(PIPE if has_sibling else BLANK for has_sibling in ancestors[:-1])
    if ancestors[-1]:
        return head + BRANCH, head + PIPE
    return head + LAST, head + BLANK


def build_tree(tasks: Iterable[Task]) -> list[TreeItem]:
    """
    Depth-first pre-order over the forest described by parent_id.

    Roots and siblings keep their relative input order (creation order when
    fed from TaskStore.list()). A task whose parent is not in the input is
    treated as a root at its own position, so every task appears exactly
    once. Pure function: no state is kept between calls.
    """
    tasks = list(tasks)
    present = {t.id for t in tasks}

    roots: list[Task] = []
    children: dict[int, list[Task]] = {}
    for t in tasks:
        if t.parent_id is None:
            roots.append(t)
        elif t.parent_id not in present:
            logger.warning("Task %s references missing parent %s; shown as root.", t.id, t.parent_id)
            roots.append(t)
        else:
            children.setdefault(t.parent_id, []).append(t)

    items: list[TreeItem] = []
    # Explicit stack instead of recursion: deep chains must not hit the recursion limit.
    stack: list[tuple[Task, list[bool]]] = [(r, []) for r in reversed(roots)]
    while stack:
        task, ancestors = stack.pop()
        prefix, desc_prefix = _prefixes(ancestors)
        items.append(TreeItem(task=task, prefix=prefix, desc_prefix=desc_prefix))

        kids = children.get(task.id, [])
        last = len(kids) - 1
        for idx in range(last, -1, -1):
            stack.append((kids[idx], [*ancestors, idx != last]))

    return items
