# tests/test_migrations.py

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from flow_tasks.errors import StorageError
from flow_tasks.tasks.migrations import (
    LATEST_VERSION,
    MIGRATIONS,
    Migration,
    get_schema_version,
    migrate,
    table_columns,
)
from flow_tasks.tasks.task_models import TaskStatus
from flow_tasks.tasks.task_store import TaskStore


def _legacy_db(path: Path) -> None:
    """A database as written before versioned migrations: some columns, user_version 0."""
    conn = sqlite3.connect(path)
    try:
        conn.executescript(
            """
            CREATE TABLE tasks (
                id         INTEGER PRIMARY KEY AUTOINCREMENT,
                title      TEXT    NOT NULL,
                completed  INTEGER NOT NULL DEFAULT 0,
                created_at TEXT    NOT NULL DEFAULT (datetime('now'))
            );
            ALTER TABLE tasks ADD COLUMN parent_id INTEGER REFERENCES tasks(id) ON DELETE CASCADE;
            ALTER TABLE tasks ADD COLUMN scheduled_on TEXT;
            INSERT INTO tasks (title, completed) VALUES ('done already', 1);
            INSERT INTO tasks (title, completed, parent_id) VALUES ('open child', 0, 1);
            """
        )
        conn.commit()
    finally:
        conn.close()


def _memory_conn() -> sqlite3.Connection:
    conn = sqlite3.connect(":memory:", isolation_level=None)
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def test_fresh_database_reaches_latest_version(store: TaskStore) -> None:
    assert store.schema_version() == LATEST_VERSION


def test_versions_are_strictly_increasing() -> None:
    versions = [m.version for m in MIGRATIONS]
    assert versions == sorted(set(versions))
    assert versions[0] == 1


def test_legacy_database_is_upgraded_without_data_loss(tmp_path: Path) -> None:
    db = tmp_path / "legacy.db"
    _legacy_db(db)

    with TaskStore(db) as s:
        assert s.schema_version() == LATEST_VERSION
        tasks = s.list()

    assert [t.title for t in tasks] == ["done already", "open child"]
    assert tasks[0].status is TaskStatus.COMPLETED
    assert tasks[1].status is TaskStatus.NOT_STARTED
    assert tasks[1].parent_id == tasks[0].id
    assert tasks[0].description is None
    assert tasks[0].due_date is None


def test_reopening_is_idempotent(tmp_path: Path) -> None:
    db = tmp_path / "flow.db"
    with TaskStore(db) as s:
        s.add("one")
    with TaskStore(db) as s:
        assert s.schema_version() == LATEST_VERSION
        assert [t.title for t in s.list()] == ["one"]


def test_migrate_adds_all_columns_and_tables() -> None:
    conn = _memory_conn()
    try:
        assert migrate(conn) == LATEST_VERSION
        cols = table_columns(conn, "tasks")
        assert {
            "id",
            "title",
            "completed",
            "created_at",
            "parent_id",
            "scheduled_on",
            "due_date",
            "description",
            "status",
        } <= cols
        assert table_columns(conn, "tags") == {"id", "name", "color"}
        assert table_columns(conn, "task_tags") == {"task_id", "tag_id"}

        # second run applies nothing
        assert migrate(conn) == LATEST_VERSION
    finally:
        conn.close()


def test_failed_migration_rolls_back_and_keeps_version() -> None:
    def boom(conn: sqlite3.Connection) -> None:
        conn.execute("ALTER TABLE tasks ADD COLUMN half_done TEXT")
        conn.execute("SELECT * FROM no_such_table")

    conn = _memory_conn()
    try:
        broken = (*MIGRATIONS[:2], Migration(3, "broken", boom))
        with pytest.raises(StorageError, match="migration 3"):
            migrate(conn, broken)

        assert get_schema_version(conn) == 2
        assert "half_done" not in table_columns(conn, "tasks")
    finally:
        conn.close()


def test_newer_schema_is_rejected(tmp_path: Path) -> None:
    db = tmp_path / "future.db"
    conn = sqlite3.connect(db)
    try:
        conn.execute(f"PRAGMA user_version = {LATEST_VERSION + 1}")
        conn.commit()
    finally:
        conn.close()

    with pytest.raises(StorageError, match="newer"):
        TaskStore(db)
