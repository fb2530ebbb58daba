"""Command-line entry point: run the simulated ECU fleet with a live dashboard.

Usage
-----
::

    ecusentinel                      # curses dashboard, press q to quit
    ecusentinel --headless 10        # print text frames for 10 seconds
    ecusentinel --db /tmp/bb.db --seed 7 -v

Every option can also be set through ``ECU_SENTINEL_*`` environment
variables; command-line flags win.
"""

from __future__ import annotations

import argparse
import curses
import logging
import signal
import sys
from collections.abc import Sequence
from typing import Any

from ecusentinel import __version__
from ecusentinel.config import SentinelConfig
from ecusentinel.dashboard import run_curses, run_headless
from ecusentinel.exceptions import SentinelError
from ecusentinel.monitor import SensorFleet, build_default_fleet
from ecusentinel.sink import SqliteLogSink

_logger = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ecusentinel",
        description="Monitor a simulated fleet of vehicle ECUs over a virtual CAN bus.",
    )
    parser.add_argument("--db", dest="db_path", help="Black-box SQLite path (default: blackbox.db)")
    parser.add_argument("--seed", type=int, help="Seed for reproducible sensor readings")
    parser.add_argument("--poll-min-ms", type=int, help="Lower bound of the polling jitter")
    parser.add_argument("--poll-max-ms", type=int, help="Upper bound of the polling jitter")
    parser.add_argument("--stale-after", type=float, help="Seconds before a silent ECU is shown as stale")
    parser.add_argument("--log-file", help="Log file used while the curses dashboard is active")
    parser.add_argument(
        "--headless",
        type=float,
        metavar="SECONDS",
        help="Print text frames for SECONDS instead of starting the curses dashboard",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> SentinelConfig:
    overrides: dict[str, Any] = {}
    for name in ("db_path", "seed", "poll_min_ms", "poll_max_ms", "stale_after", "log_file"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    return SentinelConfig.from_env(**overrides)


def _setup_logging(config: SentinelConfig, *, verbose: bool, to_file: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    fmt = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"
    if to_file:
        # The dashboard owns the terminal; stderr output would corrupt it.
        logging.basicConfig(filename=config.log_file, level=level, format=fmt)
    else:
        logging.basicConfig(stream=sys.stderr, level=level, format=fmt)


def _install_signal_handlers(fleet: SensorFleet) -> None:
    def _handle_shutdown(signum: int, _frame: Any) -> None:
        _logger.info("Shutdown signal received (%s)", signum)
        fleet.stop_event.set()

    signal.signal(signal.SIGINT, _handle_shutdown)
    signal.signal(signal.SIGTERM, _handle_shutdown)


def run(config: SentinelConfig, *, headless: float | None = None) -> None:
    """Run the fleet until quit, a signal, or the headless duration elapses."""
    with SqliteLogSink(config.db_path) as sink:
        fleet = build_default_fleet(config, sink)
        _install_signal_handlers(fleet)
        _logger.info("Black-box store at %s", sink.path)
        with fleet:
            if headless is not None:
                run_headless(
                    fleet.state,
                    stop_event=fleet.stop_event,
                    duration=headless,
                    refresh_interval=max(config.refresh_interval, 1.0),
                    stale_after=config.stale_after,
                    stream=sys.stdout,
                )
            else:
                curses.wrapper(
                    run_curses,
                    fleet.state,
                    stop_event=fleet.stop_event,
                    refresh_interval=config.refresh_interval,
                    stale_after=config.stale_after,
                )


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        config = _build_config(args)
    except SentinelError as exc:
        print(f"ecusentinel: {exc}", file=sys.stderr)
        return 2

    _setup_logging(config, verbose=args.verbose, to_file=args.headless is None)
    try:
        run(config, headless=args.headless)
    except SentinelError as exc:
        _logger.error("%s", exc)
        print(f"ecusentinel: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
