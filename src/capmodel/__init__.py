# src/capmodel/__init__.py
from __future__ import annotations

# -----------------------------
# Erlang-C core
# -----------------------------
from .erlangc import (
    intensity,
    erlang_c_from_load,
    erlang_c,
    service_level,
    average_speed_of_answer,
    occupancy,
)

# -----------------------------
# Staffing
# -----------------------------
from .staffing import (
    ServiceLevelGoal,
    StaffingInputs,
    Staffed,
    GoalUnreachable,
    StaffingOutcome,
    resource,
    compute_required_agents,
    result_to_dict,
    resource_table,
)

# -----------------------------
# Monte Carlo
# -----------------------------
from .monte_carlo import (
    MonteCarloConfig,
    intensity_mc,
    erlang_c_mc,
    service_level_mc,
    sample_quantiles,
    summarize_samples,
    histogram,
    goal_attainment,
    StaffingRisk,
    assess_staffing_risk,
    SIMS_DEFAULT,
    MAX_SIMS,
)

from .config import Settings, load_settings_from_env, configure_logging

__all__ = [
    # Erlang-C
    "intensity",
    "erlang_c_from_load",
    "erlang_c",
    "service_level",
    "average_speed_of_answer",
    "occupancy",
    # Staffing
    "ServiceLevelGoal",
    "StaffingInputs",
    "Staffed",
    "GoalUnreachable",
    "StaffingOutcome",
    "resource",
    "compute_required_agents",
    "result_to_dict",
    "resource_table",
    # Monte Carlo
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
    "SIMS_DEFAULT",
    "MAX_SIMS",
    # Config
    "Settings",
    "load_settings_from_env",
    "configure_logging",
]
