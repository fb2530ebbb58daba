from __future__ import annotations

import random

import pytest

from ecusentinel.sensors import BmsCell, SensorKind, is_fault_message, is_thermal_runaway, window_stats


def test_six_sample_drop_reports_cell_imbalance(scripted_voltages) -> None:
    cell = BmsCell(0x186A, rng=scripted_voltages([4.0, 4.0, 4.0, 4.0, 4.0, 2.5]))

    messages = [cell.evaluate() for _ in range(6)]

    assert messages[:5] == ["Cell Voltage: 4.00V (Optimal)"] * 5
    assert messages[5] == "DTC P0A80: Cell Imbalance Detected! (2.50V)"
    assert is_fault_message(messages[5])


def test_no_fault_before_five_samples() -> None:
    cell = BmsCell(0x186A)

    # Wildly varying samples, but the window is still too short to judge.
    assert [cell.observe(v) for v in (4.0, 2.5, 4.1, 2.5)] == [False] * 4


def test_no_fault_before_five_samples_with_random_draws() -> None:
    for seed in range(200):
        cell = BmsCell(0x186A, rng=random.Random(seed))
        for _ in range(4):
            assert not is_fault_message(cell.evaluate())


def test_tight_window_never_flags_even_past_two_sigma() -> None:
    cell = BmsCell(0x186B)
    for _ in range(9):
        assert cell.observe(4.0) is False

    # std ~0.03: the 0.09 V step exceeds 2 sigma but sits under the dispersion floor.
    mean, std_dev = window_stats([4.0] * 9 + [3.9])
    assert std_dev <= 0.05
    assert abs(3.9 - mean) > 2 * std_dev
    assert cell.observe(3.9) is False


def test_constant_window_never_flags() -> None:
    assert is_thermal_runaway([3.9] * 10, 3.9) is False


def test_history_keeps_ten_most_recent_samples() -> None:
    cell = BmsCell(0x186A)
    samples = [3.70 + i * 0.01 for i in range(11)]
    for v in samples[:10]:
        cell.observe(v)
    assert cell.history == tuple(samples[:10])

    cell.observe(samples[10])

    assert len(cell.history) == 10
    assert cell.history == tuple(samples[1:])


def test_history_is_per_instance() -> None:
    a = BmsCell(0x186A)
    b = BmsCell(0x186B)
    a.observe(4.0)
    a.observe(4.0)

    assert b.history == ()


def test_nominal_samples_stay_in_range() -> None:
    cell = BmsCell(0x186A, rng=random.Random(7))
    for _ in range(2000):
        v = cell.sample_voltage()
        assert v == 2.5 or 3.7 <= v < 4.1


def test_window_stats_population_std_dev() -> None:
    mean, std_dev = window_stats([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])
    assert mean == pytest.approx(5.0)
    assert std_dev == pytest.approx(2.0)


def test_window_stats_rejects_empty_window() -> None:
    with pytest.raises(ValueError):
        window_stats([])


def test_identity_is_constant() -> None:
    cell = BmsCell(0x186A, rng=random.Random(1))
    for _ in range(20):
        cell.evaluate()
    assert cell.sensor_id == 0x186A
    assert cell.can_id == "0x186A"
    assert cell.kind is SensorKind.BMS


def test_negative_bus_address_rejected() -> None:
    with pytest.raises(ValueError):
        BmsCell(-1)
