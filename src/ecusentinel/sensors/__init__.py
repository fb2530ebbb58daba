"""Simulated ECU sensors.

The variant set is closed: every ECU on the simulated bus is either a
:class:`BmsCell` or an :class:`AdasModule`.
"""

from __future__ import annotations

import random

from ecusentinel._constants import format_can_id
from ecusentinel.sensors.adas import OCCLUSION_MESSAGE, AdasModule
from ecusentinel.sensors.base import SensorComponent, SensorKind, is_fault_message
from ecusentinel.sensors.bms import BmsCell, is_thermal_runaway, window_stats

Sensor = BmsCell | AdasModule


def build_sensor(
    sensor_id: int,
    kind: SensorKind | str,
    name: str | None = None,
    *,
    rng: random.Random | None = None,
) -> Sensor:
    """Create a sensor of the given *kind*."""
    kind = SensorKind(kind)
    if kind is SensorKind.BMS:
        return BmsCell(sensor_id, rng=rng)
    if name is None:
        raise ValueError(f"ADAS module {format_can_id(sensor_id)} needs a module name")
    return AdasModule(sensor_id, name, rng=rng)


__all__ = [
    "OCCLUSION_MESSAGE",
    "AdasModule",
    "BmsCell",
    "Sensor",
    "SensorComponent",
    "SensorKind",
    "build_sensor",
    "is_fault_message",
    "is_thermal_runaway",
    "window_stats",
]
