# src/capmodel/monte_carlo.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .config import Settings
from .erlangc import erlang_c_from_load, intensity
from .staffing import GoalLike, GoalUnreachable, ServiceLevelGoal, resource

logger = logging.getLogger(__name__)


# -----------------------------
# Safety caps
# -----------------------------
SIMS_DEFAULT: int = 1000
MAX_SIMS: int = 1_000_000


# -----------------------------
# Config
# -----------------------------
@dataclass(frozen=True)
class MonteCarloConfig:
    sims: int = SIMS_DEFAULT
    seed: Optional[int] = None
    clip_negative: bool = False
    joint: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> MonteCarloConfig:
        return cls(sims=settings.sims, seed=settings.seed)

    def generator(self) -> np.random.Generator:
        return np.random.default_rng(self.seed)


# -----------------------------
# Random draws
# -----------------------------
def _resolve_rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def _check_sims(sims: int) -> int:
    n = int(sims)
    if n <= 0:
        raise ValueError("sims must be > 0")
    if n > MAX_SIMS:
        raise ValueError(f"sims too high. Max allowed is {MAX_SIMS:,}")
    return n


def _draw_normal(
    mean: float,
    sd: float,
    n: int,
    rng: np.random.Generator,
    clip_negative: bool,
) -> tuple[np.ndarray, int]:
    """Returns the draws and how many of them came out negative."""
    draws = rng.normal(loc=float(mean), scale=float(sd), size=n)
    negative = int(np.count_nonzero(draws < 0))
    if negative and clip_negative:
        draws = np.clip(draws, 0.0, None)
    return draws, negative


def _draw_workload(
    rate_mean: float,
    rate_sd: float,
    duration_mean: float,
    duration_sd: float,
    n: int,
    rng: np.random.Generator,
    clip_negative: bool,
) -> tuple[np.ndarray, np.ndarray, int]:
    # Rates and durations are independent vectors aligned only by index
    rates, neg_rates = _draw_normal(rate_mean, rate_sd, n, rng, clip_negative)
    durations, neg_durations = _draw_normal(duration_mean, duration_sd, n, rng, clip_negative)
    return rates, durations, neg_rates + neg_durations


def _sample_loads(
    rate_mean: float,
    rate_sd: float,
    duration_mean: float,
    duration_sd: float,
    interval: float,
    n: int,
    rng: np.random.Generator,
    clip_negative: bool,
) -> tuple[np.ndarray, int]:
    rates, durations, negative = _draw_workload(
        rate_mean, rate_sd, duration_mean, duration_sd, n, rng, clip_negative
    )
    return np.asarray(intensity(rates, durations, interval)), negative


def _report_negative(negative: int, drawn: int, clip_negative: bool) -> None:
    if not negative:
        return
    if clip_negative:
        logger.debug("Clipped %d of %d negative rate/duration draws to 0", negative, drawn)
    else:
        logger.warning(
            "%d of %d rate/duration draws are negative; results for those samples are ill-defined",
            negative,
            drawn,
        )


# -----------------------------
# Stochastic model
# -----------------------------
def intensity_mc(
    rate_mean: float,
    rate_sd: float,
    duration_mean: float,
    duration_sd: float,
    interval: float = 60,
    sims: int = SIMS_DEFAULT,
    *,
    rng: Optional[np.random.Generator] = None,
    clip_negative: bool = False,
) -> np.ndarray:
    """Offered load for `sims` normally distributed (rate, duration) draws."""
    n = _check_sims(sims)
    loads, negative = _sample_loads(
        rate_mean, rate_sd, duration_mean, duration_sd, interval, n, _resolve_rng(rng), clip_negative
    )
    _report_negative(negative, 2 * n, clip_negative)
    return loads


def erlang_c_mc(
    agents: int,
    rate_mean: float,
    rate_sd: float,
    duration_mean: float,
    duration_sd: float,
    interval: float = 60,
    *,
    sims: int = SIMS_DEFAULT,
    rng: Optional[np.random.Generator] = None,
    clip_negative: bool = False,
) -> np.ndarray:
    """Erlang C probability of wait for each sampled load."""
    n = _check_sims(sims)
    loads, negative = _sample_loads(
        rate_mean, rate_sd, duration_mean, duration_sd, interval, n, _resolve_rng(rng), clip_negative
    )
    _report_negative(negative, 2 * n, clip_negative)
    return np.asarray(erlang_c_from_load(agents, loads))


def service_level_mc(
    agents: int,
    rate_mean: float,
    rate_sd: float,
    duration_mean: float,
    duration_sd: float,
    target: float,
    interval: float = 60,
    sims: int = SIMS_DEFAULT,
    *,
    rng: Optional[np.random.Generator] = None,
    joint: bool = False,
    clip_negative: bool = False,
) -> np.ndarray:
    """
    Distribution of service levels at a fixed agent count.

    Default (marginal) sampling: Pw, the exponent's load and the exponent's
    duration each come from their own independent draw, so index i is not one
    coherent scenario. Treat the output as a marginal distribution.

    joint=True draws rates and durations once and uses them for every term.
    """
    n = _check_sims(sims)
    gen = _resolve_rng(rng)

    if joint:
        rates, durations, negative = _draw_workload(
            rate_mean, rate_sd, duration_mean, duration_sd, n, gen, clip_negative
        )
        loads = np.asarray(intensity(rates, durations, interval))
        pw = np.asarray(erlang_c_from_load(agents, loads))
        drawn = 2 * n
    else:
        pw_loads, neg_pw = _sample_loads(
            rate_mean, rate_sd, duration_mean, duration_sd, interval, n, gen, clip_negative
        )
        pw = np.asarray(erlang_c_from_load(agents, pw_loads))
        loads, neg_loads = _sample_loads(
            rate_mean, rate_sd, duration_mean, duration_sd, interval, n, gen, clip_negative
        )
        durations, neg_durations = _draw_normal(duration_mean, duration_sd, n, gen, clip_negative)
        negative = neg_pw + neg_loads + neg_durations
        drawn = 5 * n

    _report_negative(negative, drawn, clip_negative)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return 1.0 - pw * np.exp(-(agents - loads) * (float(target) / durations))


# -----------------------------
# Summaries
# -----------------------------
def _quantile_label(p: float) -> str:
    return f"{100.0 * p:g}%"


def sample_quantiles(samples: Sequence[float], probs: Sequence[float] = (0.05, 0.5, 0.95)) -> pd.Series:
    """Quantiles indexed like "5%", "50%", "95%"."""
    s = pd.Series(np.asarray(samples, dtype=float))
    q = s.quantile(list(probs))
    q.index = [_quantile_label(p) for p in probs]
    return q


def summarize_samples(samples: Sequence[float]) -> pd.Series:
    """min / q1 / median / mean / q3 / max of a sample vector."""
    s = pd.Series(np.asarray(samples, dtype=float))
    return pd.Series(
        {
            "min": float(s.min()),
            "q1": float(s.quantile(0.25)),
            "median": float(s.median()),
            "mean": float(s.mean()),
            "q3": float(s.quantile(0.75)),
            "max": float(s.max()),
        }
    )


def histogram(samples: Sequence[float], binwidth: float = 0.1) -> pd.DataFrame:
    """
    Bin counts on a fixed-width grid aligned to multiples of binwidth.
    Non-finite samples are dropped.
    """
    if binwidth <= 0:
        raise ValueError("binwidth must be > 0")

    x = np.asarray(samples, dtype=float)
    x = x[np.isfinite(x)]
    if x.size == 0:
        return pd.DataFrame({"bin_start": [], "bin_end": [], "count": []})

    lo = math.floor(float(x.min()) / binwidth) * binwidth
    hi = math.ceil(float(x.max()) / binwidth) * binwidth
    if hi <= lo:
        hi = lo + binwidth
    n_bins = max(1, int(round((hi - lo) / binwidth)))
    edges = np.linspace(lo, hi, n_bins + 1)
    edges[0] = min(edges[0], float(x.min()))
    edges[-1] = max(edges[-1], float(x.max()))
    counts, edges = np.histogram(x, bins=edges)

    return pd.DataFrame({"bin_start": edges[:-1], "bin_end": edges[1:], "count": counts.astype(int)})


def goal_attainment(samples: Sequence[float], goal: GoalLike) -> float:
    """Share of samples with service level at or above the goal."""
    x = np.asarray(samples, dtype=float)
    if x.size == 0:
        raise ValueError("samples is empty")
    g = goal.fraction if isinstance(goal, ServiceLevelGoal) else ServiceLevelGoal(float(goal)).fraction
    return float(np.mean(x >= g))


# -----------------------------
# Risk assessment
# -----------------------------
@dataclass(frozen=True)
class StaffingRisk:
    agents: int
    service_level: float
    samples: np.ndarray
    attainment: float

    def quantiles(self, probs: Sequence[float] = (0.05, 0.5, 0.95)) -> pd.Series:
        return sample_quantiles(self.samples, probs)


def assess_staffing_risk(
    rate_mean: float,
    rate_sd: float,
    duration_mean: float,
    duration_sd: float,
    target: float,
    goal: GoalLike,
    interval: float = 60,
    *,
    config: Optional[MonteCarloConfig] = None,
    settings: Optional[Settings] = None,
) -> StaffingRisk:
    """
    Sizes agents at the mean workload, then simulates the service level at that
    fixed headcount to estimate how likely the goal is met under uncertainty.
    """
    s = settings or Settings()
    cfg = config or MonteCarloConfig.from_settings(s)

    sized = resource(rate_mean, duration_mean, target, goal, interval, max_agents=s.max_agents)
    if isinstance(sized, GoalUnreachable):
        raise RuntimeError(
            f"Service level goal {sized.goal} unreachable at mean workload within max_agents={sized.max_agents}"
        )

    samples = service_level_mc(
        sized.agents,
        rate_mean,
        rate_sd,
        duration_mean,
        duration_sd,
        target,
        interval,
        cfg.sims,
        rng=cfg.generator(),
        joint=cfg.joint,
        clip_negative=cfg.clip_negative,
    )
    attainment = goal_attainment(samples, goal)
    logger.info(
        "agents=%d service_level=%.4f attainment=%.3f over %d sims",
        sized.agents,
        sized.service_level,
        attainment,
        cfg.sims,
    )
    return StaffingRisk(
        agents=sized.agents,
        service_level=sized.service_level,
        samples=samples,
        attainment=attainment,
    )


__all__ = [
    "SIMS_DEFAULT",
    "MAX_SIMS",
    "MonteCarloConfig",
    "intensity_mc",
    "erlang_c_mc",
    "service_level_mc",
    "sample_quantiles",
    "summarize_samples",
    "histogram",
    "goal_attainment",
    "StaffingRisk",
    "assess_staffing_risk",
]
