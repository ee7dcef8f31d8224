from __future__ import annotations

import math
import random
from enum import StrEnum


class GamePhase(StrEnum):
    INTRO = "intro"
    IDLE = "idle"
    WAITING = "waiting"
    GO = "go"
    EARLY = "early"
    RESULT = "result"
    DONE = "done"


# Phases during which a round is in progress (stimulus pending or shown).
ROUND_OPEN_PHASES = frozenset({GamePhase.WAITING, GamePhase.GO})

# Phases showing the outcome of the round that just concluded.
ROUND_CLOSED_PHASES = frozenset({GamePhase.EARLY, GamePhase.RESULT})


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._seed = int(seed)
        self._rng = random.Random(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)


def new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def clamp01(x: float) -> float:
    return 0.0 if x <= 0.0 else 1.0 if x >= 1.0 else float(x)


def round_half_up(x: float) -> int:
    # Ties at .5 ms round up; banker's rounding is not wanted for timings.
    return int(math.floor(x + 0.5))
