# src/flow_tasks/tasks/task_store.py

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable
from datetime import date, datetime
from pathlib import Path
from typing import Any

from ..config import default_data_dir
from ..errors import ConstraintViolation, NotFound, StorageError, ValidationError
from .dates import validate_iso_date
from .migrations import get_schema_version, migrate
from .task_models import Tag, Task, TaskStatus, next_tag_color

logger = logging.getLogger(__name__)

DB_FILENAME = "flow.db"

_IN_CHUNK = 500

_TASK_COLUMNS = (
    "id, title, status, created_at, parent_id, scheduled_on, due_date, description"
)


def default_db_path() -> Path:
    """<XDG data dir>/flow/flow.db; the directory is created if absent."""
    data_dir = default_data_dir()
    ensure_dir(data_dir)
    return data_dir / DB_FILENAME


def ensure_dir(path: Path) -> None:
    """mkdir -p, with OSError reported as StorageError."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(f"create data dir {path}: {e}") from e


class TaskStore:
    """
    SQLite task store.

    Schema evolution is handled by migrations.py (versioned via
    PRAGMA user_version, additive only) every time the store is opened.

    Connection model:
    - one connection per store, autocommit (every statement is its own
      transaction)
    - WAL journal and foreign keys enabled on open; ON DELETE CASCADE
      removes subtrees and tag links
    - no cache: every read hits the database
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        self._db_path = Path(db_path) if db_path is not None else default_db_path()
        ensure_dir(self._db_path.parent)
        self._conn: sqlite3.Connection | None = None

        try:
            conn = sqlite3.connect(str(self._db_path), timeout=30.0, isolation_level=None)
        except sqlite3.Error as e:
            raise StorageError(f"open db {self._db_path}: {e}") from e
        conn.row_factory = sqlite3.Row

        try:
            self._configure_conn(conn)
            version = migrate(conn)
        except BaseException:
            conn.close()
            raise
        self._conn = conn

        logger.info(
            "TaskStore ready db=%s schema=%s total=%s",
            self._db_path,
            version,
            self.count_tasks(),
        )

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            conn.close()
        except sqlite3.Error:
            logger.debug("TaskStore close failed.", exc_info=True)

    def __enter__(self) -> TaskStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ---- low-level helpers ----

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA foreign_keys=ON")
        except sqlite3.Error as e:
            raise StorageError(f"configure connection: {e}") from e

    def _execute(self, sql: str, params: Iterable[Any] = ()) -> sqlite3.Cursor:
        if self._conn is None:
            raise StorageError("task store is closed")
        try:
            return self._conn.execute(sql, tuple(params))
        except sqlite3.IntegrityError as e:
            raise ConstraintViolation(str(e)) from e
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    @staticmethod
    def _require_row(cur: sqlite3.Cursor, resource: str, resource_id: int) -> None:
        if cur.rowcount == 0:
            raise NotFound(resource, resource_id)

    @staticmethod
    def _parse_created_at(raw: str | None) -> datetime:
        try:
            return datetime.fromisoformat(raw or "")
        except ValueError:
            return datetime.fromtimestamp(0)

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            title=str(row["title"]),
            status=TaskStatus.from_db(row["status"]),
            created_at=self._parse_created_at(row["created_at"]),
            parent_id=int(row["parent_id"]) if row["parent_id"] is not None else None,
            description=row["description"],
            scheduled_on=row["scheduled_on"],
            due_date=row["due_date"],
        )

    @staticmethod
    def _row_to_tag(row: sqlite3.Row) -> Tag:
        return Tag(id=int(row["id"]), name=str(row["name"]), color=str(row["color"]))

    def _load_tags_for_tasks(self, tasks: list[Task]) -> None:
        """Populate Task.tags for the given tasks with one join query per id chunk."""
        if not tasks:
            return
        ids = [t.id for t in tasks]
        # SQLite caps bound parameters per statement; query in chunks.
        rows: list[sqlite3.Row] = []
        for start in range(0, len(ids), _IN_CHUNK):
            chunk = ids[start : start + _IN_CHUNK]
            marks = ",".join("?" * len(chunk))
            rows += self._execute(
                f"""
                SELECT tt.task_id, t.id, t.name, t.color
                FROM task_tags tt
                INNER JOIN tags t ON t.id = tt.tag_id
                WHERE tt.task_id IN ({marks})
                ORDER BY t.name ASC
                """,
                chunk,
            ).fetchall()

        by_task: dict[int, list[Tag]] = {}
        for r in rows:
            by_task.setdefault(int(r["task_id"]), []).append(self._row_to_tag(r))
        for task in tasks:
            task.tags = by_task.get(task.id, [])

    def schema_version(self) -> int:
        if self._conn is None:
            raise StorageError("task store is closed")
        return get_schema_version(self._conn)

    # ---- tasks ----

    def count_tasks(self) -> int:
        (n,) = self._execute("SELECT COUNT(*) FROM tasks").fetchone()
        return int(n)

    def add(self, title: str, parent_id: int | None = None) -> Task:
        """Insert a task (root when parent_id is None) and return it fully populated."""
        if not title or not title.strip():
            raise ValidationError("title is required")

        if parent_id is not None:
            exists = self._execute("SELECT 1 FROM tasks WHERE id = ?", (int(parent_id),)).fetchone()
            if exists is None:
                raise NotFound("parent task", parent_id)
            cur = self._execute(
                "INSERT INTO tasks (title, parent_id) VALUES (?, ?)", (title, int(parent_id))
            )
        else:
            cur = self._execute("INSERT INTO tasks (title) VALUES (?)", (title,))

        rowid = cur.lastrowid
        if rowid is None:
            raise StorageError("SQLite did not return lastrowid for tasks insert")
        logger.debug("Task added id=%s parent_id=%s", rowid, parent_id)
        return self.get_by_id(int(rowid))

    def list(self) -> list[Task]:
        """All tasks in creation order, tags included."""
        rows = self._execute(
            f"SELECT {_TASK_COLUMNS} FROM tasks ORDER BY created_at ASC, id ASC"
        ).fetchall()
        tasks = [self._row_to_task(r) for r in rows]
        self._load_tags_for_tasks(tasks)
        return tasks

    def get_by_id(self, task_id: int) -> Task:
        row = self._execute(
            f"SELECT {_TASK_COLUMNS} FROM tasks WHERE id = ?", (int(task_id),)
        ).fetchone()
        if row is None:
            raise NotFound("task", task_id)
        task = self._row_to_task(row)
        task.tags = self.tags_for_task(task.id)
        return task

    def children_of(self, task_id: int) -> list[Task]:
        rows = self._execute(
            f"SELECT {_TASK_COLUMNS} FROM tasks WHERE parent_id = ? ORDER BY created_at ASC, id ASC",
            (int(task_id),),
        ).fetchall()
        tasks = [self._row_to_task(r) for r in rows]
        self._load_tags_for_tasks(tasks)
        return tasks

    def has_children(self, task_id: int) -> bool:
        row = self._execute(
            "SELECT EXISTS(SELECT 1 FROM tasks WHERE parent_id = ?)", (int(task_id),)
        ).fetchone()
        return bool(row[0])

    def toggle_complete(self, task_id: int) -> None:
        """
        Flip completion in one statement.

        completed -> not_started; not_started / in_progress -> completed.
        The legacy "completed" column is written alongside status.
        """
        cur = self._execute(
            """
            UPDATE tasks
            SET status = CASE WHEN status = 'completed' THEN 'not_started' ELSE 'completed' END,
                completed = CASE WHEN status = 'completed' THEN 0 ELSE 1 END
            WHERE id = ?
            """,
            (int(task_id),),
        )
        self._require_row(cur, "task", task_id)

    def set_status(self, task_id: int, status: TaskStatus | str) -> None:
        try:
            new_status = TaskStatus(status)
        except ValueError as e:
            raise ValidationError(f"unknown status: {status!r}") from e

        cur = self._execute(
            "UPDATE tasks SET status = ?, completed = ? WHERE id = ?",
            (new_status.value, int(new_status is TaskStatus.COMPLETED), int(task_id)),
        )
        self._require_row(cur, "task", task_id)

    def toggle_today(self, task_id: int, today: date | None = None) -> None:
        """
        Schedule the task for today, or clear it if it already is.

        A single conditional UPDATE, so there is no gap between check and set.
        """
        today_s = (today or date.today()).isoformat()
        cur = self._execute(
            """
            UPDATE tasks
            SET scheduled_on = CASE WHEN scheduled_on = ? THEN NULL ELSE ? END
            WHERE id = ?
            """,
            (today_s, today_s, int(task_id)),
        )
        self._require_row(cur, "task", task_id)

    def set_due_date(self, task_id: int, due_date: str | None) -> None:
        """Set (ISO YYYY-MM-DD) or clear (None) the due date."""
        if due_date is not None:
            due_date = validate_iso_date(due_date)
        cur = self._execute(
            "UPDATE tasks SET due_date = ? WHERE id = ?", (due_date, int(task_id))
        )
        self._require_row(cur, "task", task_id)

    def update_description(self, task_id: int, description: str | None) -> None:
        cur = self._execute(
            "UPDATE tasks SET description = ? WHERE id = ?", (description, int(task_id))
        )
        self._require_row(cur, "task", task_id)

    def delete(self, task_id: int) -> None:
        """Delete a task; descendants and tag links go with it (ON DELETE CASCADE)."""
        cur = self._execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
        self._require_row(cur, "task", task_id)
        logger.debug("Task deleted id=%s", task_id)

    # ---- tags ----

    def count_tags(self) -> int:
        (n,) = self._execute("SELECT COUNT(*) FROM tags").fetchone()
        return int(n)

    def create_tag(self, name: str, color: str = "") -> Tag:
        """
        Insert a tag. An empty color picks the next palette entry
        (round-robin by current tag count).

        Duplicate names raise ConstraintViolation; callers that want
        "get or create" should look in list_tags() first.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("tag name is required")
        if not color:
            color = next_tag_color(self.count_tags())

        try:
            cur = self._execute("INSERT INTO tags (name, color) VALUES (?, ?)", (name, color))
        except ConstraintViolation as e:
            raise ConstraintViolation(f"tag {name!r} already exists") from e

        rowid = cur.lastrowid
        if rowid is None:
            raise StorageError("SQLite did not return lastrowid for tags insert")
        logger.debug("Tag created id=%s name=%s color=%s", rowid, name, color)
        return Tag(id=int(rowid), name=name, color=color)

    def list_tags(self) -> list[Tag]:
        rows = self._execute("SELECT id, name, color FROM tags ORDER BY name ASC").fetchall()
        return [self._row_to_tag(r) for r in rows]

    def delete_tag(self, tag_id: int) -> None:
        cur = self._execute("DELETE FROM tags WHERE id = ?", (int(tag_id),))
        self._require_row(cur, "tag", tag_id)

    def assign_tag(self, task_id: int, tag_id: int) -> None:
        """Link a tag to a task. Assigning twice is a no-op."""
        self._execute(
            "INSERT OR IGNORE INTO task_tags (task_id, tag_id) VALUES (?, ?)",
            (int(task_id), int(tag_id)),
        )

    def unassign_tag(self, task_id: int, tag_id: int) -> None:
        self._execute(
            "DELETE FROM task_tags WHERE task_id = ? AND tag_id = ?",
            (int(task_id), int(tag_id)),
        )

    def tags_for_task(self, task_id: int) -> list[Tag]:
        rows = self._execute(
            """
            SELECT t.id, t.name, t.color
            FROM tags t
            INNER JOIN task_tags tt ON t.id = tt.tag_id
            WHERE tt.task_id = ?
            ORDER BY t.name ASC
            """,
            (int(task_id),),
        ).fetchall()
        return [self._row_to_tag(r) for r in rows]
