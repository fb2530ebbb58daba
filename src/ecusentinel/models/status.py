"""Live status models read by the dashboard."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ecusentinel._constants import DTC_MARKER, INITIAL_STATUS, format_can_id


class StatusEntry(BaseModel):
    """Latest known status of one ECU.

    Parameters
    ----------
    sensor_id : int
        CAN bus address of the ECU.
    message : str
        Most recent status text.
    updated_at : datetime or None
        When the most recent evaluation completed. ``None`` until the
        first report arrives.
    online : bool
        ``False`` once the ECU's monitoring loop has exited.
    sink_failures : int
        Reports that could not be written to the black box.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    sensor_id: int
    message: str = INITIAL_STATUS
    updated_at: datetime | None = None
    online: bool = True
    sink_failures: int = 0

    @property
    def can_id(self) -> str:
        return format_can_id(self.sensor_id)

    @property
    def is_fault(self) -> bool:
        return DTC_MARKER in self.message

    def age_seconds(self, now: datetime) -> float | None:
        """Seconds since the last report, or ``None`` if there was none."""
        if self.updated_at is None:
            return None
        return (now - self.updated_at).total_seconds()

    def is_stale(self, now: datetime, stale_after: float) -> bool:
        age = self.age_seconds(now)
        return age is not None and age > stale_after


class DashboardSnapshot(BaseModel):
    """Consistent point-in-time copy of the shared dashboard state."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    entries: tuple[StatusEntry, ...] = Field(default_factory=tuple)
    trouble_log: tuple[str, ...] = Field(default_factory=tuple)
    taken_at: datetime

    def entry(self, sensor_id: int) -> StatusEntry | None:
        for entry in self.entries:
            if entry.sensor_id == sensor_id:
                return entry
        return None

    @property
    def fault_count(self) -> int:
        return sum(1 for entry in self.entries if entry.is_fault)
