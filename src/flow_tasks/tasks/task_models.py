# src/flow_tasks/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum

# 256-colour terminal codes, handed out round-robin to new tags.
TAG_COLOR_PALETTE: tuple[str, ...] = ("39", "205", "148", "214", "141", "81", "203", "227")


def next_tag_color(existing_count: int) -> str:
    return TAG_COLOR_PALETTE[existing_count % len(TAG_COLOR_PALETTE)]


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Notes:
    - databases created before the status column only knew a boolean
      "completed"; the migration maps 1 -> completed and 0 -> not_started.
    """

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.NOT_STARTED
        try:
            return cls(raw)
        except ValueError:
            return cls.NOT_STARTED


@dataclass(frozen=True, slots=True)
class Tag:
    id: int
    name: str
    color: str


def _today_iso(today: date | None) -> str:
    return (today or date.today()).isoformat()


@dataclass(slots=True)
class Task:
    id: int
    title: str
    status: TaskStatus
    created_at: datetime

    parent_id: int | None = None
    description: str | None = None
    scheduled_on: str | None = None
    due_date: str | None = None

    tags: list[Tag] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def is_today(self, today: date | None = None) -> bool:
        """True if the task is scheduled for today."""
        return self.scheduled_on is not None and self.scheduled_on == _today_iso(today)

    def is_due_today(self, today: date | None = None) -> bool:
        return self.due_date is not None and self.due_date == _today_iso(today)

    def is_overdue(self, today: date | None = None) -> bool:
        """True if the due date has passed and the task is not completed."""
        if self.due_date is None or self.completed:
            return False
        # ISO dates compare correctly as strings.
        return self.due_date < _today_iso(today)
