"""Battery-management cell with sliding-window thermal-runaway detection."""

from __future__ import annotations

import logging
import math
import random
from collections import deque
from collections.abc import Sequence

from ecusentinel._constants import (
    BMS_ANOMALY_VOLTAGE,
    BMS_DTC,
    BMS_FAULT_PROBABILITY,
    BMS_MIN_SAMPLES,
    BMS_NOMINAL_RANGE,
    BMS_SIGMA_FACTOR,
    BMS_STD_DEV_FLOOR,
    BMS_WINDOW_SIZE,
)
from ecusentinel.sensors.base import SensorComponent, SensorKind

_logger = logging.getLogger(__name__)


def window_stats(window: Sequence[float]) -> tuple[float, float]:
    """Return the mean and population standard deviation of *window*."""
    if not window:
        raise ValueError("window must contain at least one sample")
    mean = sum(window) / len(window)
    variance = sum((mean - v) ** 2 for v in window) / len(window)
    return mean, math.sqrt(variance)


def is_thermal_runaway(
    window: Sequence[float],
    sample: float,
    *,
    min_samples: int = BMS_MIN_SAMPLES,
    std_dev_floor: float = BMS_STD_DEV_FLOOR,
    sigma_factor: float = BMS_SIGMA_FACTOR,
) -> bool:
    """Decide whether *sample* is a statistically significant deviation.

    *window* must already include *sample*. Windows shorter than
    *min_samples* never flag, and neither do near-constant windows whose
    standard deviation is at or below *std_dev_floor*.
    """
    if len(window) < min_samples:
        return False
    mean, std_dev = window_stats(window)
    return std_dev > std_dev_floor and abs(sample - mean) > sigma_factor * std_dev


class BmsCell(SensorComponent):
    """Battery cell voltage monitor.

    Keeps the most recent voltage samples in a fixed-size window and
    reports ``DTC P0A80`` when the latest sample deviates by more than
    two standard deviations from the window mean.
    """

    kind = SensorKind.BMS

    def __init__(
        self,
        sensor_id: int,
        *,
        rng: random.Random | None = None,
        window_size: int = BMS_WINDOW_SIZE,
    ) -> None:
        super().__init__(sensor_id, rng=rng)
        self._history: deque[float] = deque(maxlen=window_size)

    @property
    def history(self) -> tuple[float, ...]:
        """Current sample window, oldest first."""
        return tuple(self._history)

    def sample_voltage(self) -> float:
        if self._rng.random() < BMS_FAULT_PROBABILITY:
            return BMS_ANOMALY_VOLTAGE
        low, high = BMS_NOMINAL_RANGE
        # uniform() may return the upper bound; the nominal range is half-open.
        return min(self._rng.uniform(low, high), math.nextafter(high, low))

    def observe(self, voltage: float) -> bool:
        """Push *voltage* into the window and return ``True`` on an anomaly."""
        self._history.append(voltage)
        anomaly = is_thermal_runaway(self._history, voltage)
        if anomaly:
            _logger.debug(
                "Thermal runaway suspected can_id=%s voltage=%.3f window=%s",
                self.can_id,
                voltage,
                list(self._history),
            )
        return anomaly

    def evaluate(self) -> str:
        voltage = self.sample_voltage()
        if self.observe(voltage):
            return f"DTC {BMS_DTC}: Cell Imbalance Detected! ({voltage:.2f}V)"
        return f"Cell Voltage: {voltage:.2f}V (Optimal)"
