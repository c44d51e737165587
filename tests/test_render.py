# tests/test_render.py

from __future__ import annotations

from datetime import date

from flow_tasks.cli.render import (
    DUE_TODAY_MARK,
    OVERDUE_MARK,
    TODAY_MARK,
    render_detail,
    render_item,
    render_tree,
    style,
    task_marks,
)
from flow_tasks.tasks.task_models import Tag, TaskStatus
from flow_tasks.tasks.tree import build_tree

from .fakes import make_task

TODAY = date(2025, 4, 10)


def test_style_disabled_is_plain() -> None:
    assert style("x", fg="39", bold=True, enabled=False) == "x"
    assert style("x") == "x"
    assert style("x", fg="39") == "\033[38;5;39mx\033[0m"


def test_marks() -> None:
    assert task_marks(make_task(1, due_date="2025-04-09"), TODAY) == OVERDUE_MARK
    assert task_marks(make_task(1, due_date="2025-04-10"), TODAY) == DUE_TODAY_MARK
    assert task_marks(make_task(1, scheduled_on="2025-04-10"), TODAY) == TODAY_MARK
    done_late = make_task(1, due_date="2025-04-01", status=TaskStatus.COMPLETED)
    assert task_marks(done_late, TODAY) == ""


def test_render_item_plain() -> None:
    tasks = [
        make_task(1, title="Root", tags=[Tag(1, "work", "39")]),
        make_task(2, 1, title="Child", status=TaskStatus.COMPLETED),
        make_task(3, 1, title="Other", status=TaskStatus.IN_PROGRESS),
    ]
    lines = [render_item(i, color=False, today=TODAY) for i in build_tree(tasks)]
    assert lines == [
        "#1    [ ] Root [work]",
        "#2     ├─ [x] Child",
        "#3     └─ [~] Other",
    ]


def test_render_tree_descriptions_follow_desc_prefix() -> None:
    tasks = [
        make_task(1, title="Root"),
        make_task(2, 1, title="A", description="first\nsecond"),
        make_task(3, 1, title="B"),
    ]
    out = render_tree(build_tree(tasks), color=False, show_descriptions=True, today=TODAY)
    lines = out.splitlines()
    assert lines[2] == "       │      first"
    assert lines[3] == "       │      second"
    assert lines[4].endswith("└─ [ ] B")


def test_render_tree_empty() -> None:
    assert "No tasks yet" in render_tree([], color=False)


def test_render_detail() -> None:
    task = make_task(4, 1, title="Report", due_date="2025-04-01", tags=[Tag(1, "work", "39")])
    out = render_detail(task, has_children=True, color=False, today=TODAY)
    assert out.splitlines()[0] == OVERDUE_MARK + "Report"
    assert "(no description)" in out
    assert "tags:       [work]" in out
    assert OVERDUE_MARK + "due_date:   2025-04-01" in out
    assert "parent:     #1" in out
    assert "has sub-tasks" in out
