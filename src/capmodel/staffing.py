# src/capmodel/staffing.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, TypeAlias, Union

import pandas as pd

from .config import Settings
from .erlangc import average_speed_of_answer, intensity, occupancy, service_level
from .validation import validate_scenario_df

logger = logging.getLogger(__name__)

MAX_AGENTS_DEFAULT: int = 5000


# -----------------------------
# Data models
# -----------------------------
@dataclass(frozen=True)
class ServiceLevelGoal:
    """Share of calls to answer within the target wait, as a fraction in (0, 1]."""
    fraction: float

    def __post_init__(self) -> None:
        f = float(self.fraction)
        if not (0.0 < f <= 1.0):
            raise ValueError(
                f"service level goal must be a fraction in (0, 1] (got {self.fraction!r}); "
                "use ServiceLevelGoal.from_percent() for percentages"
            )

    @classmethod
    def from_percent(cls, percent: float) -> ServiceLevelGoal:
        return cls(float(percent) / 100.0)


@dataclass(frozen=True)
class StaffingInputs:
    rate: float
    duration: float
    target: float
    goal: ServiceLevelGoal
    interval: float = 60


@dataclass(frozen=True)
class Staffed:
    agents: int
    service_level: float

    def as_tuple(self) -> tuple[int, float]:
        return self.agents, self.service_level


@dataclass(frozen=True)
class GoalUnreachable:
    goal: float
    max_agents: int
    last_service_level: float


StaffingOutcome: TypeAlias = Union[Staffed, GoalUnreachable]
GoalLike: TypeAlias = Union[ServiceLevelGoal, float]


# -----------------------------
# Internal helpers
# -----------------------------
def _as_goal(gos_target: GoalLike) -> ServiceLevelGoal:
    if isinstance(gos_target, ServiceLevelGoal):
        return gos_target
    return ServiceLevelGoal(float(gos_target))


def _start_agents(a: float) -> int:
    # Smallest count with agents > load; never above round(a + 1)
    if a < 0:
        return 1
    return max(1, int(math.floor(a)) + 1)


# -----------------------------
# Public API
# -----------------------------
def resource(
    rate: float,
    duration: float,
    target: float,
    gos_target: GoalLike,
    interval: float = 60,
    *,
    max_agents: int = MAX_AGENTS_DEFAULT,
) -> StaffingOutcome:
    """
    Minimum number of agents whose service level meets the goal.

    Steps up one agent at a time from the first stable count, stopping at the
    first count with service_level >= goal. Gives up at max_agents and returns
    GoalUnreachable instead of searching forever.
    """
    goal = _as_goal(gos_target)
    a = float(intensity(rate, duration, interval))

    if not math.isfinite(a):
        logger.warning("Offered load is not finite (%s); no agent count can meet the goal", a)
        return GoalUnreachable(goal=goal.fraction, max_agents=max_agents, last_service_level=float("nan"))

    agents = _start_agents(a)
    if agents > max_agents:
        logger.warning("Load %.2f Erlangs needs more than max_agents=%d", a, max_agents)
        return GoalUnreachable(goal=goal.fraction, max_agents=max_agents, last_service_level=float("nan"))

    sl = float(service_level(agents, rate, duration, target, interval))
    while not sl >= goal.fraction:
        if agents >= max_agents or math.isnan(sl):
            logger.warning(
                "Service level goal %.4f unreachable within %d agents (last %.6f)",
                goal.fraction,
                max_agents,
                sl,
            )
            return GoalUnreachable(goal=goal.fraction, max_agents=max_agents, last_service_level=sl)
        agents += 1
        sl = float(service_level(agents, rate, duration, target, interval))
        logger.debug("agents=%d service_level=%.6f", agents, sl)

    return Staffed(agents=agents, service_level=sl)


def compute_required_agents(inputs: StaffingInputs, max_agents: int = MAX_AGENTS_DEFAULT) -> StaffingOutcome:
    return resource(
        inputs.rate,
        inputs.duration,
        inputs.target,
        inputs.goal,
        inputs.interval,
        max_agents=max_agents,
    )


def result_to_dict(result: StaffingOutcome, inputs: Optional[StaffingInputs] = None) -> Dict[str, Any]:
    if isinstance(result, GoalUnreachable):
        return {
            "reachable": False,
            "agents": None,
            "service_level": result.last_service_level,
            "goal": result.goal,
            "max_agents": result.max_agents,
        }

    out: Dict[str, Any] = {
        "reachable": True,
        "agents": result.agents,
        "service_level": result.service_level,
    }
    if inputs is not None:
        out["erlangs"] = float(intensity(inputs.rate, inputs.duration, inputs.interval))
        out["asa_seconds"] = average_speed_of_answer(result.agents, inputs.rate, inputs.duration, inputs.interval)
        out["occupancy"] = occupancy(result.agents, inputs.rate, inputs.duration, inputs.interval)
        out["goal"] = inputs.goal.fraction
    return out


def resource_table(df: pd.DataFrame, *, settings: Optional[Settings] = None) -> pd.DataFrame:
    """
    Runs the resolver for every row of a scenario table.
    Expected columns:
      rate, duration, target, goal (fraction), interval (optional, minutes, default 60)

    Adds erlangs, agents, service_level, asa_seconds, occupancy and reachable columns.
    """
    validate_scenario_df(df)
    max_agents = settings.max_agents if settings is not None else MAX_AGENTS_DEFAULT

    out = df.copy()
    if "interval" not in out.columns:
        out["interval"] = 60.0
    for col in ["rate", "duration", "target", "goal", "interval"]:
        out[col] = pd.to_numeric(out[col]).astype(float)

    rows: list[Dict[str, Any]] = []
    for _, r in out.iterrows():
        inputs = StaffingInputs(
            rate=float(r["rate"]),
            duration=float(r["duration"]),
            target=float(r["target"]),
            goal=ServiceLevelGoal(float(r["goal"])),
            interval=float(r["interval"]),
        )
        res = compute_required_agents(inputs, max_agents=max_agents)
        d = result_to_dict(res, inputs)
        rows.append(
            {
                "erlangs": float(intensity(inputs.rate, inputs.duration, inputs.interval)),
                "agents": d["agents"],
                "service_level": d["service_level"],
                "asa_seconds": d.get("asa_seconds", float("nan")),
                "occupancy": d.get("occupancy", float("nan")),
                "reachable": d["reachable"],
            }
        )

    return pd.concat([out.reset_index(drop=True), pd.DataFrame(rows)], axis=1)


__all__ = [
    "MAX_AGENTS_DEFAULT",
    "ServiceLevelGoal",
    "StaffingInputs",
    "Staffed",
    "GoalUnreachable",
    "StaffingOutcome",
    "resource",
    "compute_required_agents",
    "result_to_dict",
    "resource_table",
]
