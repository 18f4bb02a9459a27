import math

import numpy as np
import pytest

from capmodel.erlangc import (
    average_speed_of_answer,
    erlang_c,
    erlang_c_from_load,
    intensity,
    occupancy,
    service_level,
)


def test_intensity_half_hour_interval():
    # 100 calls per 30 minutes at 180 s each
    assert intensity(rate=100, duration=180, interval=30) == pytest.approx(10.0)


def test_intensity_default_interval_is_one_hour():
    assert intensity(rate=120, duration=300) == pytest.approx(10.0)


def test_intensity_linear_in_rate_and_duration():
    base = intensity(50, 200, 15)
    assert intensity(100, 200, 15) == pytest.approx(2 * base)
    assert intensity(50, 600, 15) == pytest.approx(3 * base)


def test_intensity_inverse_in_interval():
    assert intensity(100, 180, 60) == pytest.approx(intensity(100, 180, 30) / 2)


def test_intensity_zero_interval_is_not_finite():
    assert not math.isfinite(intensity(100, 180, 0))


def test_intensity_elementwise_on_arrays():
    out = intensity(np.array([100.0, 200.0]), np.array([180.0, 90.0]), 30)
    assert isinstance(out, np.ndarray)
    assert out.tolist() == pytest.approx([10.0, 10.0])


def test_erlang_c_bounds_for_stable_queues():
    for agents in range(11, 40):
        pw = erlang_c(agents, 100, 180, 30)
        assert 0.0 <= pw <= 1.0


def test_erlang_c_decreases_with_agents():
    values = [erlang_c(n, 100, 180, 30) for n in range(11, 25)]
    assert all(a > b for a, b in zip(values, values[1:]))


def test_erlang_c_reference_value():
    # a = 10 Erlangs, 15 agents
    assert erlang_c(15, 100, 180, 30) == pytest.approx(0.10204, abs=5e-4)


def test_erlang_c_single_agent_matches_utilisation():
    # M/M/1: probability of wait equals utilisation
    assert erlang_c_from_load(1, 0.4) == pytest.approx(0.4)


def test_erlang_c_zero_load_never_waits():
    assert erlang_c_from_load(5, 0.0) == pytest.approx(0.0)


def test_erlang_c_rejects_non_positive_agents():
    with pytest.raises(ValueError):
        erlang_c(0, 100, 180, 30)
    with pytest.raises(ValueError):
        erlang_c(2.5, 100, 180, 30)


def test_erlang_c_unstable_queue_is_not_a_probability():
    pw = erlang_c(8, 100, 180, 30)
    assert not (0.0 <= pw <= 1.0)


def test_erlang_c_from_load_vectorised_matches_scalar():
    loads = np.array([5.0, 8.0, 10.0])
    vec = erlang_c_from_load(12, loads)
    assert vec.tolist() == pytest.approx([erlang_c_from_load(12, float(a)) for a in loads])


def test_service_level_reference_values():
    assert service_level(15, 100, 180, 20, 30) == pytest.approx(0.9414528, abs=1e-6)
    assert service_level(14, 100, 180, 20, 30) == pytest.approx(0.88835, abs=1e-5)


def test_service_level_zero_target_is_one_minus_erlang_c():
    for agents in (11, 13, 17):
        assert service_level(agents, 100, 180, 0, 30) == pytest.approx(1.0 - erlang_c(agents, 100, 180, 30))


def test_service_level_approaches_one_for_long_targets():
    assert service_level(12, 100, 180, 1e6, 30) == pytest.approx(1.0)


def test_service_level_increases_with_agents():
    sl_12 = service_level(12, 100, 180, 20, 30)
    sl_20 = service_level(20, 100, 180, 20, 30)
    assert sl_20 >= sl_12


def test_asa_decreases_with_agents():
    asa_12 = average_speed_of_answer(12, 100, 180, 30)
    asa_20 = average_speed_of_answer(20, 100, 180, 30)
    assert asa_20 <= asa_12


def test_asa_unstable_is_infinite():
    assert average_speed_of_answer(10, 100, 180, 30) == float("inf")


def test_occupancy():
    assert occupancy(20, 100, 180, 30) == pytest.approx(0.5)
