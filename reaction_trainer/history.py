from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .rating import RatingTier, classify
from .reaction_core import round_half_up


@dataclass(frozen=True, slots=True)
class RoundRecord:
    round_index: int
    delay_ms: float
    stimulus_at_ms: float | None  # None for a false start: nothing was shown
    responded_at_ms: float
    reaction_ms: int | None
    rating: RatingTier | None
    was_early: bool


@dataclass(frozen=True, slots=True)
class SessionSummary:
    """Aggregates over a history.

    When no round produced a reaction the aggregates are all None; callers must
    check ``is_defined`` instead of treating a missing value as zero.
    """

    rounds: int
    early_count: int
    average_ms: int | None
    best_ms: int | None
    worst_ms: int | None
    overall_rating: RatingTier | None

    @property
    def is_defined(self) -> bool:
        return self.average_ms is not None

    @property
    def valid_rounds(self) -> int:
        return self.rounds - self.early_count


class RoundHistory:
    """Append-only ordered log of completed rounds."""

    def __init__(self) -> None:
        self._records: list[RoundRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[RoundRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> RoundRecord:
        return self._records[index]

    def append(self, record: RoundRecord) -> None:
        self._records.append(record)

    def clear(self) -> None:
        self._records.clear()

    def records(self) -> tuple[RoundRecord, ...]:
        return tuple(self._records)

    def last(self) -> RoundRecord | None:
        return self._records[-1] if self._records else None

    def summarize(self) -> SessionSummary:
        return summarize(self._records)


def summarize(records: list[RoundRecord] | tuple[RoundRecord, ...]) -> SessionSummary:
    times = [r.reaction_ms for r in records if not r.was_early and r.reaction_ms is not None]
    early = sum(1 for r in records if r.was_early)

    if not times:
        return SessionSummary(
            rounds=len(records),
            early_count=early,
            average_ms=None,
            best_ms=None,
            worst_ms=None,
            overall_rating=None,
        )

    average = round_half_up(sum(times) / len(times))
    return SessionSummary(
        rounds=len(records),
        early_count=early,
        average_ms=average,
        best_ms=min(times),
        worst_ms=max(times),
        overall_rating=classify(average),
    )
