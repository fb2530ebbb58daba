from __future__ import annotations

import sqlite3
import threading
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from ecusentinel.exceptions import PersistenceWriteError
from ecusentinel.sink import SqliteLogSink


def test_creates_store_and_parent_directory(tmp_path: Path) -> None:
    db = tmp_path / "nested" / "dir" / "blackbox.db"

    with SqliteLogSink(db) as sink:
        sink.append(0x186A, "Cell Voltage: 3.90V (Optimal)")

    assert db.exists()
    with sqlite3.connect(db) as conn:
        columns = [row[1] for row in conn.execute("PRAGMA table_info(sensor_logs)")]
    assert columns == ["id", "sensor_id", "message", "timestamp"]


def test_append_assigns_ids_and_write_time(tmp_path: Path) -> None:
    before = datetime.now(UTC).replace(microsecond=0) - timedelta(seconds=1)
    with SqliteLogSink(tmp_path / "bb.db") as sink:
        sink.append(0x186A, "Cell Voltage: 3.90V (Optimal)")
        sink.append(0x2901, "DTC C1A67: Sensor Blind / Occluded")
        records = sink.recent(10)

    assert [r.id for r in records] == [1, 2]
    assert [r.sensor_id for r in records] == [0x186A, 0x2901]
    assert records[1].is_fault and not records[0].is_fault
    assert records[1].can_id == "0x2901"
    for record in records:
        assert record.timestamp.tzinfo is not None
        assert record.timestamp >= before


def test_recent_filters_and_limits(tmp_path: Path) -> None:
    with SqliteLogSink(tmp_path / "bb.db") as sink:
        for i in range(10):
            sink.append(0x186A if i % 2 else 0x186B, f"msg {i}")

        assert [r.message for r in sink.recent(3)] == ["msg 7", "msg 8", "msg 9"]
        assert [r.message for r in sink.recent(2, sensor_id=0x186B)] == ["msg 6", "msg 8"]
        assert sink.count() == 10
        assert sink.count(sensor_id=0x186A) == 5


def test_records_survive_reopen(tmp_path: Path) -> None:
    db = tmp_path / "bb.db"
    with SqliteLogSink(db) as sink:
        sink.append(0x186A, "first")
    with SqliteLogSink(db) as sink:
        sink.append(0x186A, "second")
        assert [r.message for r in sink.recent()] == ["first", "second"]


def test_concurrent_appends_are_all_persisted(tmp_path: Path) -> None:
    writers = 8
    per_writer = 50
    with SqliteLogSink(tmp_path / "bb.db") as sink:

        def write(sensor_id: int) -> None:
            for i in range(per_writer):
                sink.append(sensor_id, f"reading {i}")

        threads = [threading.Thread(target=write, args=(0x100 + n,)) for n in range(writers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert sink.count() == writers * per_writer
        assert sink.count(sensor_id=0x103) == per_writer


def test_append_after_close_raises_persistence_error(tmp_path: Path) -> None:
    sink = SqliteLogSink(tmp_path / "bb.db")
    sink.close()

    with pytest.raises(PersistenceWriteError) as excinfo:
        sink.append(0x186A, "late")
    assert excinfo.value.sensor_id == 0x186A


def test_rejected_write_is_wrapped(tmp_path: Path) -> None:
    db = tmp_path / "bb.db"
    with SqliteLogSink(db) as sink:
        with sqlite3.connect(db) as conn:
            conn.execute("DROP TABLE sensor_logs")

        with pytest.raises(PersistenceWriteError, match="0x186A"):
            sink.append(0x186A, "Cell Voltage: 3.90V (Optimal)")


def test_unopenable_store_raises(tmp_path: Path) -> None:
    # A directory cannot be opened as a database file.
    with pytest.raises(PersistenceWriteError):
        SqliteLogSink(tmp_path)


def test_in_memory_store() -> None:
    with SqliteLogSink(":memory:") as sink:
        sink.append(1, "hello")
        assert sink.count() == 1
