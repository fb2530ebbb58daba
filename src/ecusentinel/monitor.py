"""Per-sensor polling loops and the fleet that supervises them."""

from __future__ import annotations

import logging
import random
import threading
from collections.abc import Sequence
from typing import Any

from ecusentinel._constants import DEFAULT_FLEET, format_can_id
from ecusentinel.config import SentinelConfig
from ecusentinel.exceptions import PersistenceWriteError, SentinelConfigError
from ecusentinel.sensors import Sensor, SensorComponent, build_sensor
from ecusentinel.sink import LogSink
from ecusentinel.state.events import StatusReport
from ecusentinel.state.store import DashboardState

_logger = logging.getLogger(__name__)


def _derived_rng(seed: int | None, *parts: object) -> random.Random:
    if seed is None:
        return random.Random()
    return random.Random("-".join(str(p) for p in (seed, *parts)))


class MonitoringLoop:
    """Poll one sensor until the shared stop event is set.

    Each iteration waits a jittered interval, evaluates the sensor, merges
    the report into the dashboard state and then writes it to the log
    sink. The state lock is always released before the sink is touched.
    """

    def __init__(
        self,
        sensor: SensorComponent,
        state: DashboardState,
        sink: LogSink,
        *,
        stop_event: threading.Event,
        poll_interval: tuple[float, float] = (0.5, 1.5),
        rng: random.Random | None = None,
        retry_attempts: int = 3,
        retry_backoff: float = 0.1,
    ) -> None:
        low, high = poll_interval
        if low < 0 or high < low:
            raise SentinelConfigError(f"invalid poll interval {poll_interval!r}")
        if retry_attempts < 1:
            raise SentinelConfigError("retry_attempts must be at least 1")
        self._sensor = sensor
        self._state = state
        self._sink = sink
        self._stop = stop_event
        self._poll_interval = (low, high)
        self._rng = rng if rng is not None else random.Random()
        self._retry_attempts = retry_attempts
        self._retry_backoff = retry_backoff
        self._polls = 0
        self._dropped = 0

    @property
    def sensor(self) -> SensorComponent:
        return self._sensor

    @property
    def polls(self) -> int:
        """Completed evaluations."""
        return self._polls

    @property
    def dropped_records(self) -> int:
        """Reports the sink never accepted."""
        return self._dropped

    def next_delay(self) -> float:
        """Draw the next polling delay in seconds."""
        low, high = self._poll_interval
        return self._rng.uniform(low, high)

    def poll_once(self) -> StatusReport:
        """Evaluate the sensor once and publish the result."""
        message = self._sensor.evaluate()
        report = StatusReport.from_message(self._sensor.sensor_id, message)
        self._state.apply(report)
        self._polls += 1
        _logger.debug("Polled can_id=%s fault=%s message=%s", self._sensor.can_id, report.is_fault, message)
        self._persist(report)
        return report

    def _persist(self, report: StatusReport) -> bool:
        last_error: PersistenceWriteError | None = None
        for attempt in range(1, self._retry_attempts + 1):
            try:
                self._sink.append(report.sensor_id, report.message)
                return True
            except PersistenceWriteError as exc:
                last_error = exc
                if attempt == self._retry_attempts:
                    break
                delay = self._retry_backoff * (2 ** (attempt - 1))
                _logger.debug(
                    "Black-box write failed can_id=%s attempt=%d/%d, retrying in %.3fs: %s",
                    self._sensor.can_id,
                    attempt,
                    self._retry_attempts,
                    delay,
                    exc,
                )
                if self._stop.wait(delay):
                    break

        self._dropped += 1
        total = self._state.record_sink_failure(report.sensor_id)
        _logger.warning(
            "Dropped black-box record can_id=%s (%d dropped so far): %s",
            self._sensor.can_id,
            total,
            last_error,
        )
        return False

    def run(self) -> None:
        """Thread body. Returns once the stop event is set."""
        _logger.debug("Monitoring loop started can_id=%s", self._sensor.can_id)
        self._state.mark_online(self._sensor.sensor_id)
        try:
            while not self._stop.wait(self.next_delay()):
                self.poll_once()
        except Exception:
            _logger.exception("Monitoring loop crashed can_id=%s", self._sensor.can_id)
        finally:
            self._state.mark_offline(self._sensor.sensor_id)
            _logger.debug("Monitoring loop stopped can_id=%s polls=%d", self._sensor.can_id, self._polls)


class SensorFleet:
    """Supervise one monitoring thread per sensor.

    Usage::

        with SqliteLogSink(config.db_path) as sink:
            with build_default_fleet(config, sink) as fleet:
                snapshot = fleet.state.snapshot()
    """

    def __init__(
        self,
        sensors: Sequence[SensorComponent],
        sink: LogSink,
        *,
        config: SentinelConfig | None = None,
        state: DashboardState | None = None,
    ) -> None:
        self._config = config or SentinelConfig()
        self._sensors = list(sensors)
        sensor_ids = [s.sensor_id for s in self._sensors]
        if state is None:
            state = DashboardState(sensor_ids, trouble_log_capacity=self._config.trouble_log_capacity)
        elif set(state.sensor_ids) != set(sensor_ids) or len(sensor_ids) != len(set(sensor_ids)):
            raise SentinelConfigError("dashboard state ids do not match the fleet's sensors")
        self._state = state
        self._sink = sink
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []
        self._loops = [
            MonitoringLoop(
                sensor,
                state,
                sink,
                stop_event=self._stop,
                poll_interval=self._config.poll_interval_s,
                rng=_derived_rng(self._config.seed, sensor.sensor_id, "jitter"),
                retry_attempts=self._config.sink_retry_attempts,
                retry_backoff=self._config.sink_retry_backoff,
            )
            for sensor in self._sensors
        ]

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def loops(self) -> tuple[MonitoringLoop, ...]:
        return tuple(self._loops)

    @property
    def stop_event(self) -> threading.Event:
        return self._stop

    @property
    def is_running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def start(self) -> None:
        """Spawn one daemon thread per sensor."""
        if self._threads:
            _logger.debug("Fleet already started")
            return
        if self._stop.is_set():
            raise RuntimeError("a stopped fleet cannot be restarted")
        for loop in self._loops:
            thread = threading.Thread(
                target=loop.run,
                name=f"monitor-{loop.sensor.can_id}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()
        _logger.info("Started %d monitoring loops", len(self._threads))

    def stop(self, timeout: float = 5.0) -> None:
        """Signal every loop to stop and wait for the threads to exit."""
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout)
            if thread.is_alive():
                _logger.warning("Monitoring thread %s did not stop within %.1fs", thread.name, timeout)
        if self._threads:
            _logger.info("Stopped monitoring loops")

    def __enter__(self) -> SensorFleet:
        self.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.stop()


def build_default_fleet(config: SentinelConfig, sink: LogSink) -> SensorFleet:
    """Create the reference fleet: two BMS cells and two ADAS modules."""
    sensors: list[Sensor] = [
        build_sensor(sensor_id, kind, name, rng=_derived_rng(config.seed, sensor_id))
        for sensor_id, kind, name in DEFAULT_FLEET
    ]
    _logger.debug("Built fleet %s", ", ".join(format_can_id(s.sensor_id) for s in sensors))
    return SensorFleet(sensors, sink, config=config)
