"""Persisted black-box record model."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_validator

from ecusentinel._constants import DTC_MARKER, format_can_id


class LogRecord(BaseModel):
    """One row of the black-box store.

    Parameters
    ----------
    id : int
        Auto-increment primary key.
    sensor_id : int
        CAN bus address of the reporting ECU.
    message : str
        Status text exactly as reported.
    timestamp : datetime
        Write time assigned by the store, in UTC.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    sensor_id: int
    message: str
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        # SQLite CURRENT_TIMESTAMP is UTC without an offset.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def can_id(self) -> str:
        return format_can_id(self.sensor_id)

    @property
    def is_fault(self) -> bool:
        return DTC_MARKER in self.message
