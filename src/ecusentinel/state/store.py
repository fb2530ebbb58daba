"""Lock-guarded aggregate of live ECU status and the trouble-code log.

Every public method takes the same lock, so writers are strictly
serialized and readers always see a complete snapshot.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from ecusentinel._constants import format_can_id
from ecusentinel.exceptions import SentinelConfigError
from ecusentinel.models.status import DashboardSnapshot, StatusEntry
from ecusentinel.state.events import StatusReport

_logger = logging.getLogger(__name__)

DEFAULT_TROUBLE_LOG_CAPACITY = 20


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DashboardState:
    """Shared dashboard state for a fixed set of ECUs.

    The identity set is given at construction and never changes: updates
    for unknown ids are ignored rather than inserted.
    """

    def __init__(
        self,
        sensor_ids: Iterable[int],
        *,
        trouble_log_capacity: int = DEFAULT_TROUBLE_LOG_CAPACITY,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        ids = list(sensor_ids)
        if not ids:
            raise SentinelConfigError("at least one sensor id is required")
        duplicates = sorted({sid for sid in ids if ids.count(sid) > 1})
        if duplicates:
            raise SentinelConfigError(
                "duplicate sensor ids: " + ", ".join(format_can_id(sid) for sid in duplicates)
            )
        if trouble_log_capacity < 1:
            raise SentinelConfigError("trouble_log_capacity must be at least 1")

        self._lock = threading.Lock()
        self._clock = clock
        # dicts keep insertion order, so entries render in startup order.
        self._entries: dict[int, StatusEntry] = {sid: StatusEntry(sensor_id=sid) for sid in ids}
        self._trouble_log: deque[str] = deque(maxlen=trouble_log_capacity)

    @property
    def sensor_ids(self) -> tuple[int, ...]:
        return tuple(self._entries)

    @property
    def trouble_log_capacity(self) -> int:
        return self._trouble_log.maxlen or 0

    def _update_locked(self, sensor_id: int, message: str, observed_at: datetime) -> bool:
        entry = self._entries.get(sensor_id)
        if entry is None:
            _logger.debug("Ignoring status for unknown can_id=%s", format_can_id(sensor_id))
            return False
        self._entries[sensor_id] = entry.model_copy(update={"message": message, "updated_at": observed_at})
        return True

    def update(self, sensor_id: int, message: str) -> bool:
        """Replace the status message of *sensor_id*.

        Returns ``False`` (and changes nothing) when the id is not part of
        the startup set.
        """
        with self._lock:
            return self._update_locked(sensor_id, message, self._clock())

    def append_log(self, message: str) -> None:
        """Append a trouble-code line, evicting the oldest beyond capacity."""
        with self._lock:
            self._trouble_log.append(message)

    def apply(self, report: StatusReport) -> bool:
        """Merge one status report.

        The status update and, for faults, the trouble-log append happen
        in a single critical section.
        """
        with self._lock:
            applied = self._update_locked(report.sensor_id, report.message, report.observed_at)
            if applied and report.is_fault:
                self._trouble_log.append(report.trouble_line)
            return applied

    def mark_offline(self, sensor_id: int) -> None:
        """Flag the ECU's monitoring loop as no longer running."""
        with self._lock:
            entry = self._entries.get(sensor_id)
            if entry is not None:
                self._entries[sensor_id] = entry.model_copy(update={"online": False})

    def mark_online(self, sensor_id: int) -> None:
        with self._lock:
            entry = self._entries.get(sensor_id)
            if entry is not None:
                self._entries[sensor_id] = entry.model_copy(update={"online": True})

    def record_sink_failure(self, sensor_id: int) -> int:
        """Count a report that never reached the black box. Returns the new total."""
        with self._lock:
            entry = self._entries.get(sensor_id)
            if entry is None:
                return 0
            failures = entry.sink_failures + 1
            self._entries[sensor_id] = entry.model_copy(update={"sink_failures": failures})
            return failures

    def get(self, sensor_id: int) -> StatusEntry | None:
        with self._lock:
            return self._entries.get(sensor_id)

    @property
    def trouble_log(self) -> list[str]:
        with self._lock:
            return list(self._trouble_log)

    def snapshot(self) -> DashboardSnapshot:
        """Return a consistent copy of all entries and the trouble log."""
        with self._lock:
            entries = tuple(self._entries.values())
            trouble_log = tuple(self._trouble_log)
        return DashboardSnapshot(entries=entries, trouble_log=trouble_log, taken_at=self._clock())
