from __future__ import annotations

import math
from enum import IntEnum


class RatingTier(IntEnum):
    """Rating tiers ordered fastest first."""

    AMAZING = 0
    VERY_GOOD = 1
    AVERAGE = 2
    BELOW_AVERAGE = 3

    @property
    def upper_bound_ms(self) -> float:
        return _UPPER_BOUNDS_MS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


# Strict-less-than: a value equal to a bound falls into the next (slower) tier.
_UPPER_BOUNDS_MS: dict[RatingTier, float] = {
    RatingTier.AMAZING: 200.0,
    RatingTier.VERY_GOOD: 250.0,
    RatingTier.AVERAGE: 350.0,
    RatingTier.BELOW_AVERAGE: math.inf,
}

_LABELS: dict[RatingTier, str] = {
    RatingTier.AMAZING: "Amazing!",
    RatingTier.VERY_GOOD: "Very good",
    RatingTier.AVERAGE: "Average",
    RatingTier.BELOW_AVERAGE: "Below average",
}


def classify(reaction_ms: float) -> RatingTier:
    for tier in RatingTier:
        if reaction_ms < tier.upper_bound_ms:
            return tier
    return RatingTier.BELOW_AVERAGE
