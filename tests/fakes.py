# tests/fakes.py

from __future__ import annotations

from datetime import datetime, timedelta

from flow_tasks.tasks.task_models import Tag, Task, TaskStatus

_EPOCH = datetime(2025, 1, 1, 9, 0, 0)


def make_task(
    task_id: int,
    parent_id: int | None = None,
    *,
    title: str | None = None,
    status: TaskStatus = TaskStatus.NOT_STARTED,
    description: str | None = None,
    due_date: str | None = None,
    scheduled_on: str | None = None,
    tags: list[Tag] | None = None,
) -> Task:
    """Build a Task without touching SQLite; created_at follows the id."""
    return Task(
        id=task_id,
        title=title or f"task {task_id}",
        status=status,
        created_at=_EPOCH + timedelta(minutes=task_id),
        parent_id=parent_id,
        description=description,
        scheduled_on=scheduled_on,
        due_date=due_date,
        tags=list(tags or []),
    )


class FakeImportRepo:
    """
    In-memory TaskImportRepo used for importer unit tests.

    Records every call so tests can assert on the exact sequence the
    importer drives, without SQLite.
    """

    def __init__(self, tags: list[Tag] | None = None) -> None:
        self.tasks: dict[int, Task] = {}
        self.tags: dict[int, Tag] = {t.id: t for t in tags or []}
        self.links: set[tuple[int, int]] = set()
        self.calls: list[str] = []
        self._next_task = 1
        self._next_tag = max(self.tags, default=0) + 1

    def add(self, title: str, parent_id: int | None = None) -> Task:
        self.calls.append(f"add:{title}")
        task = make_task(self._next_task, parent_id, title=title)
        self.tasks[task.id] = task
        self._next_task += 1
        return task

    def update_description(self, task_id: int, description: str | None) -> None:
        self.calls.append(f"desc:{task_id}")
        self.tasks[task_id].description = description

    def set_due_date(self, task_id: int, due_date: str | None) -> None:
        self.calls.append(f"due:{task_id}")
        self.tasks[task_id].due_date = due_date

    def list_tags(self) -> list[Tag]:
        self.calls.append("list_tags")
        return sorted(self.tags.values(), key=lambda t: t.name)

    def create_tag(self, name: str, color: str = "") -> Tag:
        self.calls.append(f"create_tag:{name}")
        tag = Tag(id=self._next_tag, name=name, color=color)
        self.tags[tag.id] = tag
        self._next_tag += 1
        return tag

    def assign_tag(self, task_id: int, tag_id: int) -> None:
        self.calls.append(f"assign:{task_id}:{tag_id}")
        self.links.add((task_id, tag_id))
