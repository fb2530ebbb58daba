"""Status reports published by monitoring loops.

Every evaluation of a sensor becomes one :class:`StatusReport`. Only the
state store is allowed to merge reports into the shared dashboard state.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ecusentinel._constants import format_can_id
from ecusentinel.sensors.base import is_fault_message


class StatusReport(BaseModel):
    """The outcome of a single sensor evaluation."""

    model_config = ConfigDict(frozen=True)

    sensor_id: int = Field(..., ge=0, description="CAN bus address")
    message: str
    is_fault: bool = False
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_message(cls, sensor_id: int, message: str, *, observed_at: datetime | None = None) -> StatusReport:
        """Build a report, classifying *message* by its trouble-code marker."""
        kwargs = {} if observed_at is None else {"observed_at": observed_at}
        return cls(
            sensor_id=sensor_id,
            message=message,
            is_fault=is_fault_message(message),
            **kwargs,
        )

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def trouble_line(self) -> str:
        """Trouble-log form of the message, prefixed with the CAN id."""
        return f"[CAN ID {format_can_id(self.sensor_id)}] {self.message}"
