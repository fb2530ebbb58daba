"""Terminal rendering of dashboard snapshots.

The formatting helpers are pure functions of a :class:`DashboardSnapshot`.
:func:`run_curses` and :func:`run_headless` drive them at the dashboard's
own refresh cadence, independent of how often the sensors report.
"""

from __future__ import annotations

import curses
import logging
import threading
from collections.abc import Callable
from typing import Any, TextIO

from ecusentinel._constants import DTC_MARKER
from ecusentinel.models.status import DashboardSnapshot, StatusEntry
from ecusentinel.state.store import DashboardState

_logger = logging.getLogger(__name__)

STATUS_TITLE = "ECU Network Status (CAN Bus)"
TROUBLE_TITLE = "OBD-II Diagnostic Trouble Codes (DTC)"
QUIT_KEYS = frozenset({ord("q"), ord("Q")})


def format_status_line(entry: StatusEntry, snapshot: DashboardSnapshot, stale_after: float) -> str:
    line = f"CAN ID {entry.can_id}: {entry.message}"
    if not entry.online:
        line += " [offline]"
    elif entry.is_stale(snapshot.taken_at, stale_after):
        line += " [stale]"
    if entry.sink_failures:
        line += f" [sink drops: {entry.sink_failures}]"
    return line


def format_status_lines(snapshot: DashboardSnapshot, stale_after: float = 5.0) -> list[str]:
    """One line per ECU, in startup order."""
    return [format_status_line(entry, snapshot, stale_after) for entry in snapshot.entries]


def format_trouble_lines(snapshot: DashboardSnapshot) -> list[str]:
    return list(snapshot.trouble_log)


def render_text(snapshot: DashboardSnapshot, stale_after: float = 5.0) -> str:
    """Plain-text frame with both panes stacked vertically."""
    out: list[str] = [f"== {STATUS_TITLE} =="]
    out.extend(format_status_lines(snapshot, stale_after))
    out.append(f"== {TROUBLE_TITLE} ==")
    out.extend(format_trouble_lines(snapshot) or ["(none)"])
    return "\n".join(out)


def _draw_pane(window: Any, title: str, lines: list[str], attr_for: Callable[[str], int]) -> None:
    window.erase()
    window.box()
    height, width = window.getmaxyx()
    try:
        window.addstr(0, 2, f" {title} "[: max(width - 4, 0)])
    except curses.error:
        pass
    # Newest lines win when the pane is too short.
    visible = lines[-max(height - 2, 0) :] if height > 2 else []
    for row, text in enumerate(visible, start=1):
        try:
            window.addstr(row, 1, text[: max(width - 2, 0)], attr_for(text))
        except curses.error:
            # Writing the bottom-right cell raises even though it succeeds.
            pass
    window.noutrefresh()


def run_curses(
    stdscr: Any,
    state: DashboardState,
    *,
    stop_event: threading.Event,
    refresh_interval: float = 0.1,
    stale_after: float = 5.0,
) -> None:
    """Two-pane dashboard; returns when ``q`` is pressed or *stop_event* is set.

    Intended to be called through :func:`curses.wrapper`.
    """
    curses.curs_set(0)
    stdscr.timeout(max(int(refresh_interval * 1000), 1))
    fault_attr = curses.A_BOLD
    if curses.has_colors():
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(1, curses.COLOR_RED, -1)
        fault_attr = curses.color_pair(1) | curses.A_BOLD

    def attr_for(text: str) -> int:
        return fault_attr if DTC_MARKER in text else curses.A_NORMAL

    while not stop_event.is_set():
        height, width = stdscr.getmaxyx()
        half = max(width // 2, 1)
        snapshot = state.snapshot()

        stdscr.noutrefresh()
        left = stdscr.derwin(height, half, 0, 0)
        right = stdscr.derwin(height, max(width - half, 1), 0, half)
        _draw_pane(left, STATUS_TITLE, format_status_lines(snapshot, stale_after), attr_for)
        _draw_pane(right, TROUBLE_TITLE, format_trouble_lines(snapshot), attr_for)
        curses.doupdate()

        key = stdscr.getch()
        if key in QUIT_KEYS:
            _logger.info("Quit requested from dashboard")
            stop_event.set()
        elif key == curses.KEY_RESIZE:
            stdscr.erase()


def run_headless(
    state: DashboardState,
    *,
    stop_event: threading.Event,
    duration: float,
    refresh_interval: float = 1.0,
    stale_after: float = 5.0,
    stream: TextIO,
) -> None:
    """Print a text frame every *refresh_interval* seconds for *duration* seconds."""
    remaining = duration
    while True:
        print(render_text(state.snapshot(), stale_after), file=stream, flush=True)
        print(file=stream)
        if remaining <= 0:
            break
        wait = min(refresh_interval, remaining)
        remaining -= wait
        if stop_event.wait(wait):
            break
