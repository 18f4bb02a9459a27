from __future__ import annotations

import pandas as pd


REQUIRED_SCENARIO_COLUMNS = {"rate", "duration", "target", "goal"}
NUMERIC_SCENARIO_COLUMNS = ["rate", "duration", "target", "goal", "interval"]


def validate_scenario_df(df: pd.DataFrame) -> None:
    missing = REQUIRED_SCENARIO_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(
            f"Scenario dataframe missing required columns: {sorted(missing)}. "
            f"Expected: {sorted(REQUIRED_SCENARIO_COLUMNS)} (+ optional 'interval')"
        )

    if df.empty:
        raise ValueError("Scenario dataframe is empty")

    for col in NUMERIC_SCENARIO_COLUMNS:
        if col not in df.columns:
            continue
        if pd.to_numeric(df[col], errors="coerce").isna().any():
            bad = df.index[pd.to_numeric(df[col], errors="coerce").isna()].tolist()[:10]
            raise ValueError(f"{col} must be numeric. Example bad rows: {bad}")

    goal = pd.to_numeric(df["goal"])
    if ((goal <= 0) | (goal > 1)).any():
        bad = df.index[(goal <= 0) | (goal > 1)].tolist()[:10]
        raise ValueError(f"goal must be a fraction in (0, 1]. Example bad rows: {bad}")

    if "interval" in df.columns and (pd.to_numeric(df["interval"]) <= 0).any():
        raise ValueError("interval must be > 0 for all rows")
