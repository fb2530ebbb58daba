"""Sensor capability contract shared by every ECU kind."""

from __future__ import annotations

import abc
import random
from enum import StrEnum

from ecusentinel._constants import DTC_MARKER, format_can_id


class SensorKind(StrEnum):
    BMS = "bms"
    ADAS = "adas"


def is_fault_message(message: str) -> bool:
    """Return ``True`` when *message* carries a diagnostic trouble code."""
    return DTC_MARKER in message


class SensorComponent(abc.ABC):
    """An ECU that can be polled for a status message.

    Subclasses implement :meth:`evaluate`. The bus address given at
    construction is the sensor's identity and never changes.
    """

    kind: SensorKind

    def __init__(self, sensor_id: int, *, rng: random.Random | None = None) -> None:
        if sensor_id < 0:
            raise ValueError(f"sensor_id must be a non-negative bus address, got {sensor_id}")
        self._sensor_id = sensor_id
        self._rng = rng if rng is not None else random.Random()

    @property
    def sensor_id(self) -> int:
        """CAN bus address of this ECU."""
        return self._sensor_id

    @property
    def can_id(self) -> str:
        return format_can_id(self._sensor_id)

    @abc.abstractmethod
    def evaluate(self) -> str:
        """Sample the ECU once and return its status message."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.can_id})"
