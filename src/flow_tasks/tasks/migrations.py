# src/flow_tasks/tasks/migrations.py

"""
Versioned, additive schema migrations for the task database.

The on-disk schema version lives in PRAGMA user_version. On startup every
migration newer than that value runs in order, each in its own transaction,
and user_version is advanced together with it.

Databases written before versioning existed sit at user_version 0 but may
already carry some of the columns, so every step still checks PRAGMA
table_info before ALTER TABLE. Migrations never drop or rename anything.

The connection must be in autocommit mode (isolation_level=None); the
runner issues BEGIN/COMMIT itself.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass

from ..errors import StorageError

logger = logging.getLogger(__name__)

BASE_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    title      TEXT    NOT NULL,
    completed  INTEGER NOT NULL DEFAULT 0,
    created_at TEXT    NOT NULL DEFAULT (datetime('now'))
)
"""


@dataclass(frozen=True, slots=True)
class Migration:
    version: int
    name: str
    apply: Callable[[sqlite3.Connection], None]


def table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    return {row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()}


def _add_column(conn: sqlite3.Connection, table: str, name: str, decl: str) -> bool:
    if name in table_columns(conn, table):
        return False
    conn.execute(f"ALTER TABLE {table} ADD COLUMN {name} {decl}")
    logger.info("Schema migration: added column %s.%s", table, name)
    return True


def _add_parent_id(conn: sqlite3.Connection) -> None:
    _add_column(conn, "tasks", "parent_id", "INTEGER REFERENCES tasks(id) ON DELETE CASCADE")


def _add_scheduled_on(conn: sqlite3.Connection) -> None:
    _add_column(conn, "tasks", "scheduled_on", "TEXT")


def _add_due_date(conn: sqlite3.Connection) -> None:
    _add_column(conn, "tasks", "due_date", "TEXT")


def _add_description(conn: sqlite3.Connection) -> None:
    _add_column(conn, "tasks", "description", "TEXT")


def _create_tag_tables(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS tags (
            id    INTEGER PRIMARY KEY AUTOINCREMENT,
            name  TEXT NOT NULL UNIQUE,
            color TEXT NOT NULL DEFAULT '39'
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS task_tags (
            task_id INTEGER NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
            tag_id  INTEGER NOT NULL REFERENCES tags(id)  ON DELETE CASCADE,
            PRIMARY KEY (task_id, tag_id)
        )
        """
    )


def _add_status(conn: sqlite3.Connection) -> None:
    # Tri-state status replaces the boolean; "completed" is kept in sync on writes.
    if _add_column(conn, "tasks", "status", "TEXT NOT NULL DEFAULT 'not_started'"):
        conn.execute("UPDATE tasks SET status = 'completed' WHERE completed != 0")


def _add_indexes(conn: sqlite3.Connection) -> None:
    conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_parent ON tasks(parent_id)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_task_tags_tag ON task_tags(tag_id)")


MIGRATIONS: tuple[Migration, ...] = (
    Migration(1, "add tasks.parent_id", _add_parent_id),
    Migration(2, "add tasks.scheduled_on", _add_scheduled_on),
    Migration(3, "add tasks.due_date", _add_due_date),
    Migration(4, "add tasks.description", _add_description),
    Migration(5, "create tags and task_tags", _create_tag_tables),
    Migration(6, "add tasks.status", _add_status),
    Migration(7, "add lookup indexes", _add_indexes),
)

LATEST_VERSION = MIGRATIONS[-1].version


def get_schema_version(conn: sqlite3.Connection) -> int:
    (version,) = conn.execute("PRAGMA user_version").fetchone()
    return int(version)


def migrate(
    conn: sqlite3.Connection,
    migrations: tuple[Migration, ...] = MIGRATIONS,
) -> int:
    """
    Ensure the base table exists and apply pending migrations.

    Returns the schema version after the run. Raises StorageError if a step
    fails (that step is rolled back; earlier ones stay applied) or if the
    file was written by a newer schema than this code knows.
    """
    try:
        conn.execute(BASE_TASKS_TABLE)
        current = get_schema_version(conn)
    except sqlite3.Error as e:
        raise StorageError(f"create base schema: {e}") from e

    latest = migrations[-1].version if migrations else 0
    if current > latest:
        raise StorageError(
            f"database schema version {current} is newer than supported version {latest}"
        )

    for m in migrations:
        if m.version <= current:
            continue
        try:
            conn.execute("BEGIN")
            m.apply(conn)
            conn.execute(f"PRAGMA user_version = {int(m.version)}")
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise StorageError(f"migration {m.version} ({m.name}) failed: {e}") from e
        current = m.version
        logger.debug("Schema migration %s applied: %s", m.version, m.name)

    return current
