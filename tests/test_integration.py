from __future__ import annotations

import math

import numpy as np
import pytest

from helpers import raw_df, sine
from liftvibe.integration import integrate


def test_integration_at_rest_is_zero():
    processed = integrate(raw_df(np.full(500, 25.0), 100.0), 100.0)
    assert np.all(processed["az"].to_numpy() == 0.0)
    assert np.all(processed["vz"].to_numpy() == 0.0)
    assert np.all(processed["sz"].to_numpy() == 0.0)


def test_dc_removal_zeroes_axis_means():
    n = 1000
    raw = raw_df(
        sine(3.0, 200.0, n, 20.0) + 981.0,
        200.0,
        ax=sine(7.0, 200.0, n, 4.0) - 3.0,
        ay=np.linspace(-2.0, 6.0, n),
    )
    processed = integrate(raw, 200.0)
    for axis in ("ax", "ay", "az"):
        assert abs(float(processed[axis].mean())) < 1e-9


def test_trapezoidal_steps_match_hand_computation():
    # Mean-free az in Gals -> [-1, 1, 0] m/s^2 at dt = 1 s.
    processed = integrate(raw_df(np.array([-100.0, 100.0, 0.0]), 1.0), 1.0)
    assert processed["vz"].tolist() == pytest.approx([0.0, 0.0, 0.5])
    assert processed["sz"].tolist() == pytest.approx([0.0, 0.0, 0.25])


def test_integration_constants_are_zero_at_start():
    processed = integrate(raw_df(sine(5.0, 1600.0, 800, 50.0) + 10.0, 1600.0), 1600.0)
    assert processed["vz"].iloc[0] == 0.0
    assert processed["sz"].iloc[0] == 0.0


def test_velocity_of_sine_matches_closed_form():
    fs = 1600.0
    f = 5.0
    # 15 full cycles, so the sine is already mean-free.
    processed = integrate(raw_df(sine(f, fs, 4800, 50.0), fs), fs)
    omega = 2 * math.pi * f
    # a = 0.5 sin(wt) m/s^2 -> v = (0.5 / w)(1 - cos(wt)), peaking at 1 / w.
    assert float(processed["vz"].max()) == pytest.approx(1.0 / omega, rel=0.01)
    assert float(processed["vz"].min()) == pytest.approx(0.0, abs=1e-4)


def test_only_z_is_integrated():
    n = 400
    raw = raw_df(np.zeros(n), 100.0, ax=sine(2.0, 100.0, n, 30.0))
    processed = integrate(raw, 100.0)
    assert np.all(processed["vz"].to_numpy() == 0.0)


def test_empty_and_single_sample_series():
    empty = integrate(raw_df(np.array([]), 100.0), 100.0)
    assert len(empty) == 0
    assert list(empty.columns) == ["time", "ax", "ay", "az", "vz", "sz"]

    single = integrate(raw_df(np.array([42.0]), 100.0), 100.0)
    assert len(single) == 1
    assert single["az"].iloc[0] == 0.0
    assert single["vz"].iloc[0] == 0.0
    assert single["sz"].iloc[0] == 0.0


def test_integration_preserves_time_and_input():
    raw = raw_df(sine(5.0, 1600.0, 200, 50.0) + 10.0, 1600.0)
    before = raw.copy()
    processed = integrate(raw, 1600.0)
    assert raw.equals(before)
    assert np.array_equal(processed["time"].to_numpy(), raw["time"].to_numpy())
