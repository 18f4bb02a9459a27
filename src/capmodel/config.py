# config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "CAPMODEL_"


@dataclass(frozen=True)
class Settings:
    # Upper bound for the staffing search
    max_agents: int = 5000
    # Default Monte Carlo sample count
    sims: int = 1000
    # None => fresh unseeded generator per run
    seed: Optional[int] = None
    log_level: str = "WARNING"


def _env(environ: Mapping[str, str], name: str) -> str:
    return environ.get(ENV_PREFIX + name, "").strip()


def _env_int(environ: Mapping[str, str], name: str, default: Optional[int]) -> Optional[int]:
    """
    Return an integer setting, or the default when the variable is unset or blank.
    """
    raw = _env(environ, name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{ENV_PREFIX}{name} must be an integer (got {raw!r})") from None


def load_settings_from_env(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Reads CAPMODEL_MAX_AGENTS, CAPMODEL_SIMS, CAPMODEL_SEED and CAPMODEL_LOG_LEVEL.
    Example: CAPMODEL_SIMS=5000 CAPMODEL_SEED=42
    """
    env = os.environ if environ is None else environ
    defaults = Settings()

    max_agents = _env_int(env, "MAX_AGENTS", defaults.max_agents)
    sims = _env_int(env, "SIMS", defaults.sims)
    seed = _env_int(env, "SEED", None)

    if max_agents is None or max_agents < 1:
        raise RuntimeError(f"{ENV_PREFIX}MAX_AGENTS must be >= 1")
    if sims is None or sims < 1:
        raise RuntimeError(f"{ENV_PREFIX}SIMS must be >= 1")

    log_level = (_env(env, "LOG_LEVEL") or defaults.log_level).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise RuntimeError(f"{ENV_PREFIX}LOG_LEVEL is not a logging level: {log_level!r}")

    return Settings(max_agents=max_agents, sims=sims, seed=seed, log_level=log_level)


def configure_logging(settings: Optional[Settings] = None) -> None:
    """For applications embedding the model; the library itself never configures handlers."""
    s = settings or load_settings_from_env()
    logging.basicConfig(
        level=s.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = [
    "ENV_PREFIX",
    "Settings",
    "load_settings_from_env",
    "configure_logging",
]
