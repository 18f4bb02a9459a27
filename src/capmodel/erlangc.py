from __future__ import annotations

import logging
from typing import Union

import numpy as np

logger = logging.getLogger(__name__)

FloatOrArray = Union[float, np.ndarray]


def _as_output(x: np.ndarray) -> FloatOrArray:
    # 0-d results go back to the caller as plain floats
    if np.ndim(x) == 0:
        return float(x)
    return x


def intensity(rate: FloatOrArray, duration: FloatOrArray, interval: float = 60) -> FloatOrArray:
    """
    Offered load a (Erlangs).

    rate is calls per interval of `interval` minutes, duration is the mean
    handling time in seconds:
      a = (rate / (60 * interval)) * duration

    Works elementwise on numpy arrays. No validation: a zero interval gives inf/nan.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        load = np.divide(np.asarray(rate, dtype=float), 60.0 * np.asarray(interval, dtype=float))
        load = load * np.asarray(duration, dtype=float)
    return _as_output(load)


def _check_agents(agents: int) -> int:
    n = int(agents)
    if n != agents or n < 1:
        raise ValueError(f"agents must be an integer >= 1 (got {agents!r})")
    return n


def erlang_c_from_load(agents: int, load: FloatOrArray) -> FloatOrArray:
    """
    Erlang C probability of wait (Pw) for `agents` servers and offered load `load`.

    Erlang B through the inverse recursion (no factorials, no overflow):
      inv_0 = 1,  inv_i = 1 + inv_{i-1} * i / a,  B = 1 / inv_n
    then
      Pw = n * B / (n - a * (1 - B))

    Requires n > a for a meaningful probability; unstable loads are not rejected.
    """
    n = _check_agents(agents)
    a = np.asarray(load, dtype=float)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        inv_b = np.ones_like(a)
        for i in range(1, n + 1):
            inv_b = 1.0 + inv_b * i / a
        erlang_b = 1.0 / inv_b
        pw = n * erlang_b / (n - a * (1.0 - erlang_b))

    return _as_output(pw)


def erlang_c(agents: int, rate: float, duration: float, interval: float = 60) -> float:
    """Probability that an arriving call has to queue."""
    a = intensity(rate, duration, interval)
    if a >= agents:
        logger.debug("Unstable queue: load %.4f >= agents %d", a, agents)
    return erlang_c_from_load(agents, a)


def service_level(agents: int, rate: float, duration: float, target: float, interval: float = 60) -> float:
    """
    Share of calls answered within `target` seconds:

    SL(T) = 1 - Pw * exp(-(n - a) * (T / AHT))

    Not clamped to [0, 1].
    """
    a = intensity(rate, duration, interval)
    pw = erlang_c_from_load(agents, a)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        sl = 1.0 - pw * np.exp(-(agents - a) * (target / np.asarray(duration, dtype=float)))
    return _as_output(sl)


def average_speed_of_answer(agents: int, rate: float, duration: float, interval: float = 60) -> float:
    """
    Average Speed of Answer (ASA) in seconds for M/M/n without abandonment.

    ASA = Pw * (AHT / (n - a))
    """
    a = intensity(rate, duration, interval)
    if agents <= a:
        return float("inf")
    pw = erlang_c_from_load(agents, a)
    return float(pw) * float(duration) / float(agents - a)


def occupancy(agents: int, rate: float, duration: float, interval: float = 60) -> float:
    n = _check_agents(agents)
    return float(intensity(rate, duration, interval)) / n


__all__ = [
    "intensity",
    "erlang_c_from_load",
    "erlang_c",
    "service_level",
    "average_speed_of_answer",
    "occupancy",
]
