"""Append-only black-box log store backed by SQLite."""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from ecusentinel._constants import format_can_id
from ecusentinel.exceptions import PersistenceWriteError
from ecusentinel.models.log_record import LogRecord

_logger = logging.getLogger(__name__)

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS sensor_logs ("
    "id INTEGER PRIMARY KEY, "
    "sensor_id INTEGER, "
    "message TEXT, "
    "timestamp TEXT DEFAULT CURRENT_TIMESTAMP)"
)

MEMORY_PATH = ":memory:"


class LogSink(Protocol):
    """Structural interface for anything monitoring loops can write to.

    Implementations assign their own write-time timestamp and must accept
    concurrent calls from independent threads.
    """

    def append(self, sensor_id: int, message: str) -> None: ...


def _row_to_record(row: tuple[Any, ...]) -> LogRecord:
    record_id, sensor_id, message, timestamp = row
    return LogRecord(
        id=record_id,
        sensor_id=sensor_id,
        message=message,
        timestamp=datetime.fromisoformat(timestamp),
    )


class SqliteLogSink:
    """Black-box store writing every status report to ``sensor_logs``.

    One connection is shared by all threads and guarded by a single lock.
    """

    def __init__(self, path: str | Path = "blackbox.db") -> None:
        self._path = str(path)
        if self._path != MEMORY_PATH:
            parent = Path(self._path).parent
            parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        try:
            self._conn: sqlite3.Connection | None = sqlite3.connect(self._path, check_same_thread=False)
            self._conn.execute(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceWriteError(f"Cannot open black-box store {self._path}: {exc}") from exc
        _logger.debug("Black-box store ready path=%s", self._path)

    @property
    def path(self) -> str:
        return self._path

    def _connection(self, sensor_id: int | None = None) -> sqlite3.Connection:
        if self._conn is None:
            raise PersistenceWriteError(f"Black-box store {self._path} is closed", sensor_id=sensor_id)
        return self._conn

    def append(self, sensor_id: int, message: str) -> None:
        """Persist one record; the store stamps the write time."""
        with self._lock:
            conn = self._connection(sensor_id)
            try:
                conn.execute(
                    "INSERT INTO sensor_logs (sensor_id, message) VALUES (?, ?)",
                    (sensor_id, message),
                )
                conn.commit()
            except sqlite3.Error as exc:
                raise PersistenceWriteError(
                    f"Write for can_id={format_can_id(sensor_id)} rejected: {exc}",
                    sensor_id=sensor_id,
                ) from exc

    def recent(self, limit: int = 20, *, sensor_id: int | None = None) -> list[LogRecord]:
        """Return up to *limit* newest records, oldest first."""
        query = "SELECT id, sensor_id, message, timestamp FROM sensor_logs"
        params: tuple[Any, ...] = ()
        if sensor_id is not None:
            query += " WHERE sensor_id = ?"
            params = (sensor_id,)
        query += " ORDER BY id DESC LIMIT ?"
        params += (limit,)

        with self._lock:
            rows = self._connection().execute(query, params).fetchall()
        return [_row_to_record(row) for row in reversed(rows)]

    def count(self, *, sensor_id: int | None = None) -> int:
        with self._lock:
            conn = self._connection()
            if sensor_id is None:
                row = conn.execute("SELECT COUNT(*) FROM sensor_logs").fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) FROM sensor_logs WHERE sensor_id = ?", (sensor_id,)).fetchone()
        return int(row[0])

    def close(self) -> None:
        with self._lock:
            conn = self._conn
            self._conn = None
        if conn is not None:
            conn.close()
            _logger.debug("Black-box store closed path=%s", self._path)

    def __enter__(self) -> SqliteLogSink:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
