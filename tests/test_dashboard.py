from __future__ import annotations

import io
import threading
from datetime import UTC, datetime, timedelta

from ecusentinel.dashboard import (
    STATUS_TITLE,
    TROUBLE_TITLE,
    format_status_lines,
    render_text,
    run_headless,
)
from ecusentinel.state.events import StatusReport
from ecusentinel.state.store import DashboardState


def _dt(seconds: float = 0.0) -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC) + timedelta(seconds=seconds)


def _state(now: list[datetime]) -> DashboardState:
    return DashboardState([0x186A, 0x2901, 0x186B, 0x2902], clock=lambda: now[0])


def test_status_lines_use_hex_ids_and_liveness_markers() -> None:
    now = [_dt(0)]
    state = _state(now)
    state.apply(StatusReport.from_message(0x186A, "Cell Voltage: 3.90V (Optimal)", observed_at=_dt(0)))
    state.apply(StatusReport.from_message(0x2901, "Tracking [Front_Radar]: Confidence 98%", observed_at=_dt(9)))
    state.mark_offline(0x186B)
    state.record_sink_failure(0x2902)
    now[0] = _dt(10)

    lines = format_status_lines(state.snapshot(), stale_after=5.0)

    assert lines == [
        "CAN ID 0x186A: Cell Voltage: 3.90V (Optimal) [stale]",
        "CAN ID 0x2901: Tracking [Front_Radar]: Confidence 98%",
        "CAN ID 0x186B: Initializing... [offline]",
        "CAN ID 0x2902: Initializing... [sink drops: 1]",
    ]


def test_render_text_has_both_panes() -> None:
    state = _state([_dt(0)])
    empty = render_text(state.snapshot())
    assert STATUS_TITLE in empty
    assert TROUBLE_TITLE in empty
    assert empty.endswith("(none)")

    state.apply(StatusReport.from_message(0x2902, "DTC C1A67: Sensor Blind / Occluded", observed_at=_dt(0)))
    text = render_text(state.snapshot())
    assert text.splitlines()[-1] == "[CAN ID 0x2902] DTC C1A67: Sensor Blind / Occluded"


def test_run_headless_prints_single_frame_for_zero_duration() -> None:
    state = _state([_dt(0)])
    stream = io.StringIO()

    run_headless(state, stop_event=threading.Event(), duration=0, stream=stream)

    assert stream.getvalue().count(STATUS_TITLE) == 1


def test_run_headless_stops_on_event() -> None:
    state = _state([_dt(0)])
    stop = threading.Event()
    stop.set()
    stream = io.StringIO()

    run_headless(state, stop_event=stop, duration=60, refresh_interval=30, stream=stream)

    assert stream.getvalue().count(STATUS_TITLE) == 1
