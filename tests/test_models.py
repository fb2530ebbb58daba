from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from ecusentinel.models import LogRecord, StatusEntry
from ecusentinel.state.events import StatusReport


def test_status_report_classifies_by_marker() -> None:
    assert StatusReport.from_message(1, "DTC P0A80: Cell Imbalance Detected! (2.50V)").is_fault
    assert not StatusReport.from_message(1, "Cell Voltage: 3.90V (Optimal)").is_fault


def test_status_report_naive_time_is_utc() -> None:
    report = StatusReport.from_message(0x186A, "x", observed_at=datetime(2026, 1, 1, 12, 0))
    assert report.observed_at.tzinfo is UTC


def test_status_report_trouble_line() -> None:
    report = StatusReport.from_message(0x186A, "DTC P0A80: Cell Imbalance Detected! (2.50V)")
    assert report.trouble_line == "[CAN ID 0x186A] DTC P0A80: Cell Imbalance Detected! (2.50V)"


def test_status_report_rejects_negative_id() -> None:
    with pytest.raises(ValidationError):
        StatusReport(sensor_id=-1, message="x")


def test_status_entry_is_frozen() -> None:
    entry = StatusEntry(sensor_id=0x186A)
    with pytest.raises(ValidationError):
        entry.message = "changed"  # type: ignore[misc]


def test_log_record_timestamp_is_utc() -> None:
    record = LogRecord(id=1, sensor_id=0x2901, message="DTC C1A67: Sensor Blind / Occluded", timestamp=datetime(2026, 1, 1))
    assert record.timestamp.tzinfo is UTC
    assert record.is_fault
    assert record.can_id == "0x2901"
