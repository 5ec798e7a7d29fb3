"""
Board storage backend (SQLite).

A keyed write-through store: each piece of board state (task list, custom
columns, column visibility, priority filters) is one JSON value under a fixed
key. Keys are written independently; there is no cross-key transaction.

Saves never raise. A failed write is logged and reported as False so the
caller can flag it; in-memory state stays authoritative.
"""
import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .schema import Column, Task

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
COLUMNS_KEY = "custom_columns"
VISIBILITY_KEY = "column_visibility"
PRIORITY_FILTER_KEY = "priority_filters"


def _connect(db_path: str) -> sqlite3.Connection:
    """Open a connection in WAL mode."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


class BoardStore:
    """SQLite-backed key/value store for board state."""

    def __init__(self, db_path: str = None):
        """Initialize store and create the table if needed."""
        if db_path is None:
            db_path = str(Path.home() / ".local" / "share" / "taskboard" / "board.db")
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _init_schema(self):
        with _connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS board_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    # ── raw key/value ───────────────────────────────────────

    def _read(self, key: str) -> Optional[Any]:
        """Decoded JSON value for a key, or None if absent or unreadable."""
        try:
            with _connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT value FROM board_state WHERE key = ? LIMIT 1", (key,)
                ).fetchone()
            if not row:
                return None
            return json.loads(row["value"])
        except (sqlite3.Error, json.JSONDecodeError) as e:
            logger.error(f"Error reading board state '{key}': {e}")
            return None

    def _write(self, key: str, value: Any) -> bool:
        now = datetime.now(timezone.utc).isoformat()
        try:
            payload = json.dumps(value)
            with _connect(self.db_path) as conn:
                conn.execute("""
                    INSERT INTO board_state (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
                """, (key, payload, now))
                conn.commit()
            return True
        except (sqlite3.Error, TypeError, ValueError) as e:
            logger.error(f"Error saving board state '{key}': {e}")
            return False

    # ── tasks ───────────────────────────────────────────────

    def load_tasks(self) -> Optional[List[Task]]:
        data = self._read(TASKS_KEY)
        if not isinstance(data, list):
            return None
        tasks = []
        for raw in data:
            try:
                tasks.append(Task.from_dict(raw))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping unreadable stored task: {e}")
        return tasks

    def save_tasks(self, tasks: List[Task]) -> bool:
        """Persist the full task list in board order."""
        return self._write(TASKS_KEY, [t.to_dict() for t in tasks])

    # ── columns ─────────────────────────────────────────────

    def load_columns(self) -> Optional[List[Column]]:
        data = self._read(COLUMNS_KEY)
        if not isinstance(data, list):
            return None
        columns = []
        for raw in data:
            try:
                columns.append(Column.from_dict(raw))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping unreadable stored column: {e}")
        return columns

    def save_columns(self, columns: List[Column]) -> bool:
        return self._write(COLUMNS_KEY, [c.to_dict() for c in columns])

    def load_column_visibility(self) -> Optional[Dict[str, bool]]:
        data = self._read(VISIBILITY_KEY)
        if not isinstance(data, dict):
            return None
        return {str(k): bool(v) for k, v in data.items()}

    def save_column_visibility(self, visibility: Dict[str, bool]) -> bool:
        return self._write(VISIBILITY_KEY, visibility)

    # ── filters ─────────────────────────────────────────────

    def load_priority_filter(self) -> Optional[Dict[str, bool]]:
        data = self._read(PRIORITY_FILTER_KEY)
        if not isinstance(data, dict):
            return None
        return {str(k): bool(v) for k, v in data.items()}

    def save_priority_filter(self, priority_filter: Dict[str, bool]) -> bool:
        return self._write(PRIORITY_FILTER_KEY, priority_filter)
