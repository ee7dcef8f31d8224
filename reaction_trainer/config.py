from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from .scheduler import DEFAULT_MAX_DELAY_MS, DEFAULT_MIN_DELAY_MS
from .visuals import DEFAULT_TAU_S

TOTAL_ROUNDS = 5


@dataclass(frozen=True, slots=True)
class GameConfig:
    total_rounds: int = TOTAL_ROUNDS
    min_delay_ms: float = DEFAULT_MIN_DELAY_MS
    max_delay_ms: float = DEFAULT_MAX_DELAY_MS
    smoothing_tau_s: float = DEFAULT_TAU_S
    seed: int | None = None
    target_fps: int = 60
    particle_count: int = 160
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.total_rounds <= 0:
            raise ValueError("total_rounds must be > 0")
        if self.min_delay_ms < 0.0:
            raise ValueError("min_delay_ms must be >= 0")
        if self.max_delay_ms < self.min_delay_ms:
            raise ValueError("max_delay_ms must be >= min_delay_ms")
        if self.smoothing_tau_s <= 0.0:
            raise ValueError("smoothing_tau_s must be > 0")
        if self.target_fps <= 0:
            raise ValueError("target_fps must be > 0")
        if self.particle_count < 0:
            raise ValueError("particle_count must be >= 0")
        level = self.log_level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {self.log_level!r}")
        object.__setattr__(self, "log_level", level)


def _env_value(environ: Mapping[str, str], name: str) -> str | None:
    raw = environ.get(name, "").strip()
    return raw or None


def _parse(environ: Mapping[str, str], name: str, cast: type) -> object | None:
    raw = _env_value(environ, name)
    if raw is None:
        return None
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a valid {cast.__name__}, got {raw!r}") from exc


def load_config(environ: Mapping[str, str] | None = None) -> GameConfig:
    """Build a GameConfig from ``REACTION_*`` environment variables.

    Unset or blank variables keep their defaults.
    """

    env = os.environ if environ is None else environ
    overrides: dict[str, object] = {}

    seed = _parse(env, "REACTION_SEED", int)
    if seed is not None:
        overrides["seed"] = seed
    tau = _parse(env, "REACTION_SMOOTHING_TAU_S", float)
    if tau is not None:
        overrides["smoothing_tau_s"] = tau
    fps = _parse(env, "REACTION_TARGET_FPS", int)
    if fps is not None:
        overrides["target_fps"] = fps
    particles = _parse(env, "REACTION_PARTICLES", int)
    if particles is not None:
        overrides["particle_count"] = particles
    level = _env_value(env, "REACTION_LOG_LEVEL")
    if level is not None:
        overrides["log_level"] = level.upper()

    return GameConfig(**overrides)  # type: ignore[arg-type]
