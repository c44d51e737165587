# src/flow_tasks/cli/render.py

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from ..tasks.task_models import Tag, Task, TaskStatus
from ..tasks.tree import TreeItem

_RESET = "\033[0m"

TODAY_MARK = "📌 "
DUE_TODAY_MARK = "📅 "
OVERDUE_MARK = "⚠️ "

_CHECKBOX = {
    TaskStatus.NOT_STARTED: "[ ]",
    TaskStatus.IN_PROGRESS: "[~]",
    TaskStatus.COMPLETED: "[x]",
}


def style(
    text: str,
    *,
    fg: str | None = None,
    bold: bool = False,
    dim: bool = False,
    strike: bool = False,
    enabled: bool = True,
) -> str:
    """Wrap text in ANSI SGR codes; `fg` is a 256-colour code such as "205"."""
    if not enabled:
        return text
    codes: list[str] = []
    if bold:
        codes.append("1")
    if dim:
        codes.append("2")
    if strike:
        codes.append("9")
    if fg:
        codes.append(f"38;5;{fg}")
    if not codes:
        return text
    return f"\033[{';'.join(codes)}m{text}{_RESET}"


def tag_badges(tags: Iterable[Tag], *, color: bool = True) -> str:
    return " ".join(style(f"[{t.name}]", fg=t.color, enabled=color) for t in tags)


def task_marks(task: Task, today: date | None = None) -> str:
    due = ""
    if task.is_overdue(today):
        due = OVERDUE_MARK
    elif task.is_due_today(today):
        due = DUE_TODAY_MARK
    pin = TODAY_MARK if task.is_today(today) else ""
    return due + pin


def render_item(item: TreeItem, *, color: bool = True, today: date | None = None) -> str:
    task = item.task
    title = task_marks(task, today) + task.title
    if task.completed:
        title = style(title, strike=True, enabled=color)

    line = f"{item.prefix}{_CHECKBOX[task.status]} {title}"
    if task.tags:
        line += " " + tag_badges(task.tags, color=color)
    return f"{style(f'#{task.id:<4}', dim=True, enabled=color)} {line}"


def render_tree(
    items: list[TreeItem],
    *,
    color: bool = True,
    show_descriptions: bool = False,
    today: date | None = None,
) -> str:
    if not items:
        return "No tasks yet. Use /add <title> to create one."

    # Description lines are aligned under the title, after the "#id  " column.
    pad = " " * 6
    lines: list[str] = []
    for item in items:
        lines.append(render_item(item, color=color, today=today))
        if show_descriptions and item.task.description:
            for desc_line in item.task.description.splitlines():
                lines.append(f"{pad}{item.desc_prefix}    {style(desc_line, dim=True, enabled=color)}")
    return "\n".join(lines)


def render_detail(
    task: Task,
    *,
    has_children: bool = False,
    color: bool = True,
    today: date | None = None,
) -> str:
    lines = [style(f"{task_marks(task, today)}{task.title}", bold=True, enabled=color), ""]
    lines.append(task.description if task.description else style("(no description)", dim=True, enabled=color))
    lines.append("")
    lines.append(f"status:     {task.status.value}")
    if task.tags:
        lines.append(f"tags:       {tag_badges(task.tags, color=color)}")
    lines.append(f"created_at: {task.created_at:%Y-%m-%d %H:%M}")
    if task.scheduled_on is not None:
        lines.append(f"scheduled:  {task.scheduled_on}")
    if task.due_date is not None:
        due = f"due_date:   {task.due_date}"
        if task.is_overdue(today):
            due = style(OVERDUE_MARK + due, fg="196", enabled=color)
        elif task.is_due_today(today):
            due = DUE_TODAY_MARK + due
        lines.append(due)
    if task.parent_id is not None:
        lines.append(f"parent:     #{task.parent_id}")
    if has_children:
        lines.append("has sub-tasks")
    return "\n".join(lines)
