"""ADAS perception computer reporting tracking confidence."""

from __future__ import annotations

import random

from ecusentinel._constants import ADAS_CONFIDENCE_RANGE, ADAS_DTC, ADAS_FAULT_PROBABILITY
from ecusentinel.sensors.base import SensorComponent, SensorKind

OCCLUSION_MESSAGE = f"DTC {ADAS_DTC}: Sensor Blind / Occluded"


class AdasModule(SensorComponent):
    """Perception module (radar, camera) with a display name."""

    kind = SensorKind.ADAS

    def __init__(self, sensor_id: int, module_name: str, *, rng: random.Random | None = None) -> None:
        super().__init__(sensor_id, rng=rng)
        name = module_name.strip()
        if not name:
            raise ValueError("module_name must be non-empty")
        self._module_name = name

    @property
    def module_name(self) -> str:
        return self._module_name

    def evaluate(self) -> str:
        if self._rng.random() < ADAS_FAULT_PROBABILITY:
            return OCCLUSION_MESSAGE
        low, high = ADAS_CONFIDENCE_RANGE
        confidence = self._rng.randrange(low, high)
        return f"Tracking [{self._module_name}]: Confidence {confidence}%"

    def __repr__(self) -> str:
        return f"AdasModule({self.can_id}, {self._module_name!r})"
