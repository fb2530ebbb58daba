from __future__ import annotations

import random
from collections.abc import Iterable

import pytest


class ScriptedRandom(random.Random):
    """Random source that replays scripted draws.

    ``random()`` decides the fault branch (values below 0.1 inject a fault)
    and ``uniform()`` yields the nominal reading.
    """

    def __init__(self, draws: Iterable[float] = (), readings: Iterable[float] = ()) -> None:
        super().__init__(0)
        self._draws = list(draws)
        self._readings = list(readings)

    def random(self) -> float:
        return self._draws.pop(0)

    def uniform(self, a: float, b: float) -> float:
        return self._readings.pop(0)


def voltages_as_draws(voltages: Iterable[float]) -> ScriptedRandom:
    """Script a BMS cell to sample exactly *voltages* (2.5 V is the injected fault)."""
    draws: list[float] = []
    readings: list[float] = []
    for v in voltages:
        if v == 2.5:
            draws.append(0.05)
        else:
            draws.append(0.5)
            readings.append(v)
    return ScriptedRandom(draws, readings)


@pytest.fixture
def scripted_voltages():
    return voltages_as_draws
