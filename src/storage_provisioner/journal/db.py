"""SQLite-backed, insert-only log of project requests."""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path

from storage_provisioner.errors import RequestLogError
from storage_provisioner.journal.models import ProjectRequestRecord

logger = logging.getLogger(__name__)


class RequestLogStore:
    def __init__(self, path: str, wal: bool = True) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._closed = False
        if wal:
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._init_schema()

    def _init_schema(self) -> None:
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS project_requests (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_name TEXT NOT NULL,
                requested_quota_gb REAL,
                created_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_project_requests_user_name
                ON project_requests(user_name);
            """
        )
        self._conn.commit()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._conn.close()
            self._closed = True

    def record_project_request(self, record: ProjectRequestRecord) -> int:
        """Insert *record* and return its row id.

        Raises ``RequestLogError`` if the row could not be written.
        """
        try:
            with self._lock:
                cursor = self._conn.execute(
                    """
                    INSERT INTO project_requests (user_name, requested_quota_gb, created_at)
                    VALUES (:user_name, :requested_quota_gb, :created_at)
                    """,
                    record.to_row(),
                )
                self._conn.commit()
        except (sqlite3.Error, OverflowError) as exc:
            logger.error("Error saving project request for %s: %s", record.user_name, exc)
            raise RequestLogError(f"Failed to save project request: {exc}") from exc
        return int(cursor.lastrowid)

    def list_project_requests(self, user_name: str | None = None) -> list[ProjectRequestRecord]:
        query = "SELECT user_name, requested_quota_gb, created_at FROM project_requests"
        params: tuple[str, ...] = ()
        if user_name is not None:
            query += " WHERE user_name = ?"
            params = (user_name,)
        query += " ORDER BY id"
        with self._lock:
            rows = self._conn.execute(query, params).fetchall()
        return [ProjectRequestRecord(**dict(row)) for row in rows]
