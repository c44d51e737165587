# src/flow_tasks/tasks/prompt.py

"""Prompts for asking an external AI assistant to break tasks down into importable YAML."""

from __future__ import annotations

from collections.abc import Sequence

from .task_models import Task

YAML_FORMAT = """Reply in the YAML format below. Output only the YAML code block, with no other text.

```yaml
tasks:
  - title: "Task title"
    description: "Details of the task"
    due_date: "YYYY-MM-DD"
    tags:
      - "tag name"
    children:
      - title: "Sub-task title"
        description: "Details of the sub-task"
```

Fields:
- title: (required) task title
- description: (optional) detailed description
- due_date: (optional) due date in YYYY-MM-DD format
- tags: (optional) list of tag names
- children: (optional) list of sub-tasks (may nest recursively)"""

_ROLE = "You are a task management assistant."


def generate_new() -> str:
    """Prompt for breaking a brand-new goal into tasks."""
    return (
        f"{_ROLE}\n"
        "Break the user's request down into tasks of a sensible size.\n\n"
        f"{YAML_FORMAT}\n"
    )


def generate_from_task(task: Task, children: Sequence[Task]) -> str:
    """Prompt for breaking an existing task into (more) sub-tasks."""
    lines = [
        _ROLE,
        "Break the existing task below down into more concrete sub-tasks.",
        "",
        "## Target task",
        f"- Title: {task.title}",
    ]
    if task.description:
        lines.append(f"- Description: {task.description}")
    if task.due_date is not None:
        lines.append(f"- Due: {task.due_date}")
    if task.tags:
        lines.append(f"- Tags: {', '.join(t.name for t in task.tags)}")

    if children:
        lines += ["", "## Existing sub-tasks"]
        for c in children:
            lines.append(f"- {c.title} ({'done' if c.completed else 'open'})")
        lines += ["", "Taking the existing sub-tasks into account, add the ones that are missing."]

    lines += ["", YAML_FORMAT, ""]
    return "\n".join(lines)
