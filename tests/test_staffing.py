import math

import pandas as pd
import pytest

from capmodel.config import Settings
from capmodel.erlangc import intensity, service_level
from capmodel.staffing import (
    GoalUnreachable,
    ServiceLevelGoal,
    Staffed,
    StaffingInputs,
    compute_required_agents,
    resource,
    resource_table,
    result_to_dict,
)


def test_resource_ninety_percent_in_twenty_seconds():
    res = resource(rate=100, duration=180, target=20, gos_target=0.90, interval=30)
    assert isinstance(res, Staffed)
    assert res.agents == 15
    assert res.service_level == pytest.approx(0.9414528, abs=1e-6)


def test_resource_eighty_percent_in_twenty_seconds():
    res = resource(100, 180, 20, ServiceLevelGoal.from_percent(80), 30)
    assert res.as_tuple()[0] == 14
    assert res.as_tuple()[1] == pytest.approx(0.88835, abs=1e-5)


@pytest.mark.parametrize(
    "rate,duration,target,goal,interval",
    [
        (100, 180, 20, 0.80, 30),
        (100, 180, 20, 0.90, 30),
        (250, 300, 30, 0.85, 60),
        (40, 420, 60, 0.70, 15),
        (1200, 240, 15, 0.95, 60),
    ],
)
def test_resource_returns_minimal_agents(rate, duration, target, goal, interval):
    res = resource(rate, duration, target, goal, interval)
    assert isinstance(res, Staffed)
    assert res.service_level >= goal
    assert res.agents >= math.ceil(intensity(rate, duration, interval))
    if res.agents - 1 > intensity(rate, duration, interval):
        assert service_level(res.agents - 1, rate, duration, target, interval) < goal


def test_resource_rejects_percentage_as_plain_number():
    with pytest.raises(ValueError):
        resource(100, 180, 20, 90, 30)


def test_goal_must_be_positive_fraction():
    with pytest.raises(ValueError):
        ServiceLevelGoal(0.0)
    with pytest.raises(ValueError):
        ServiceLevelGoal(1.5)
    assert ServiceLevelGoal(1.0).fraction == 1.0


def test_unreachable_goal_is_reported_not_looped():
    res = resource(100, 180, 20, 1.0, 30, max_agents=30)
    assert isinstance(res, GoalUnreachable)
    assert res.max_agents == 30
    assert res.last_service_level < 1.0


def test_load_above_max_agents_is_unreachable():
    res = resource(10_000, 600, 20, 0.8, 30, max_agents=50)
    assert isinstance(res, GoalUnreachable)


def test_compute_required_agents_and_dict():
    inputs = StaffingInputs(
        rate=100,
        duration=180,
        target=20,
        goal=ServiceLevelGoal(0.9),
        interval=30,
    )
    res = compute_required_agents(inputs)
    d = result_to_dict(res, inputs)
    assert d["reachable"]
    assert d["agents"] == 15
    assert d["erlangs"] == pytest.approx(10.0)
    assert d["occupancy"] == pytest.approx(10.0 / 15)
    assert d["asa_seconds"] > 0


def test_result_to_dict_unreachable():
    d = result_to_dict(GoalUnreachable(goal=1.0, max_agents=30, last_service_level=0.99))
    assert not d["reachable"]
    assert d["agents"] is None


def test_resource_table_runs_each_row():
    df = pd.DataFrame(
        {
            "rate": [100, 100, 100],
            "duration": [180, 180, 180],
            "target": [20, 20, 20],
            "goal": [0.80, 0.90, 1.0],
            "interval": [30, 30, 30],
        }
    )

    out = resource_table(df, settings=Settings(max_agents=40))

    assert len(out) == 3
    assert out.loc[0, "agents"] == 14
    assert out.loc[1, "agents"] == 15
    assert out["reachable"].tolist() == [True, True, False]
    assert out.loc[0, "erlangs"] == pytest.approx(10.0)


def test_resource_table_defaults_interval_to_an_hour():
    df = pd.DataFrame({"rate": [200], "duration": [180], "target": [20], "goal": [0.9]})
    out = resource_table(df)
    assert out.loc[0, "interval"] == 60.0
    assert out.loc[0, "agents"] == 15


def test_zero_interval_is_unreachable_without_searching():
    res = resource(100, 180, 20, 0.8, 0)
    assert isinstance(res, GoalUnreachable)
    assert math.isnan(res.last_service_level)


def test_nan_target_stops_the_search():
    res = resource(100, 180, float("nan"), 0.8, 30, max_agents=5000)
    assert isinstance(res, GoalUnreachable)
    assert math.isnan(res.last_service_level)


def test_resource_table_requires_goal_column():
    df = pd.DataFrame({"rate": [100], "duration": [180], "target": [20], "goal": [0.8]})
    with pytest.raises(ValueError, match="missing required columns"):
        resource_table(df.drop(columns=["goal"]))
