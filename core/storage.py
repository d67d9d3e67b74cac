"""
Persistence for reaction rules.

Uses SQLite. The interface is deliberately row-oriented and synchronous:
select every row, insert-or-update one row by primary key, delete one row.
"""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from .constants import REACTIONS_TABLE, RuleField

logger = logging.getLogger("reactbot.storage")

_DATA_COLUMNS = tuple(col for col in RuleField.ALL if col != RuleField.ID)
_FLAG_COLUMNS = (RuleField.MUST_MENTION, RuleField.INSENSITIVE, RuleField.DO_MENTION)

SCHEMA = f"""
    CREATE TABLE IF NOT EXISTS {REACTIONS_TABLE} (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        type TEXT,
        trigger TEXT,
        must_mention INTEGER NOT NULL DEFAULT 0,
        insensitive INTEGER NOT NULL DEFAULT 0,
        response TEXT,
        emote TEXT,
        do_mention INTEGER NOT NULL DEFAULT 0
    )
"""


class ReactionDatabase:
    """Row store for the reactions table."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> None:
        if self._conn is not None:
            return
        if str(self.path) != ":memory:":
            self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.path))
        conn.row_factory = sqlite3.Row
        conn.execute(SCHEMA)
        conn.commit()
        self._conn = conn
        logger.info("Reaction database opened at %s", self.path)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Cursor]:
        if self._conn is None:
            raise sqlite3.ProgrammingError("reaction database is not open")
        cursor = self._conn.cursor()
        try:
            yield cursor
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise
        finally:
            cursor.close()

    def select_all(self) -> list[dict[str, Any]]:
        with self._transaction() as cursor:
            cursor.execute(f"SELECT * FROM {REACTIONS_TABLE}")
            return [dict(row) for row in cursor.fetchall()]

    def insert_or_update(self, row: dict[str, Any]) -> int:
        """Write a row and return its primary key."""
        values = [
            (1 if row.get(col) else 0) if col in _FLAG_COLUMNS else row.get(col)
            for col in _DATA_COLUMNS
        ]
        columns = ", ".join(_DATA_COLUMNS)
        with self._transaction() as cursor:
            row_id = row.get(RuleField.ID)
            if row_id is None:
                placeholders = ", ".join("?" for _ in _DATA_COLUMNS)
                cursor.execute(
                    f"INSERT INTO {REACTIONS_TABLE} ({columns}) VALUES ({placeholders})",
                    values,
                )
                return int(cursor.lastrowid)

            placeholders = ", ".join("?" for _ in RuleField.ALL)
            updates = ", ".join(f"{col} = excluded.{col}" for col in _DATA_COLUMNS)
            cursor.execute(
                f"INSERT INTO {REACTIONS_TABLE} (id, {columns}) VALUES ({placeholders}) "
                f"ON CONFLICT(id) DO UPDATE SET {updates}",
                [row_id, *values],
            )
            return int(row_id)

    def delete_if_exists(self, row_id: int) -> bool:
        with self._transaction() as cursor:
            cursor.execute(f"DELETE FROM {REACTIONS_TABLE} WHERE id = ?", (row_id,))
            return cursor.rowcount > 0
