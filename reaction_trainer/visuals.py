"""Per-frame smoothing of the backdrop parameters toward the phase target.

Each tracked parameter is an independent first-order exponential filter::

    current += (target - current) * k,    k = 1 - exp(-dt / tau)

``tau`` is the time constant in seconds: after ``tau`` seconds about 63% of a
step change has been covered, after ``3 * tau`` about 95%. For any positive
``dt`` the factor ``k`` lies strictly inside (0, 1), so values approach the
target monotonically and never overshoot, and a sudden target change only moves
``current`` by one bounded step per tick.

All state lives in two preallocated ``array('d')`` buffers that are updated in
place; ticking performs no allocation.
"""

from __future__ import annotations

import math
from array import array
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from .phases import VISUAL_TARGETS, VisualStateTarget
from .reaction_core import GamePhase

DEFAULT_TAU_S = 0.25

# Index layout of the parameter buffers.
_R, _G, _B, _SIZE, _SPEED, _SPREAD = range(6)
PARAMETER_COUNT = 6


@dataclass(frozen=True, slots=True)
class VisualSignal:
    """Emitted by the game controller on every phase change."""

    phase: GamePhase
    target: VisualStateTarget


@dataclass(frozen=True, slots=True)
class CurrentVisualState:
    color: tuple[float, float, float]
    size: float
    speed: float
    spread: float


class VisualInterpolator:
    def __init__(
        self,
        *,
        phase: GamePhase = GamePhase.INTRO,
        tau_s: float = DEFAULT_TAU_S,
        targets: Mapping[GamePhase, VisualStateTarget] | None = None,
    ) -> None:
        if tau_s <= 0.0:
            raise ValueError("tau_s must be > 0")
        self._tau_s = float(tau_s)
        self._targets = VISUAL_TARGETS if targets is None else targets
        missing = [p for p in GamePhase if p not in self._targets]
        if missing:
            raise ValueError(f"missing visual targets for: {', '.join(missing)}")

        self._phase = phase
        self._target = array("d", self._targets[phase].as_vector())
        self._current = array("d", self._target)
        self._elapsed_s = 0.0

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def tau_s(self) -> float:
        return self._tau_s

    @property
    def elapsed_s(self) -> float:
        return self._elapsed_s

    @property
    def color(self) -> tuple[float, float, float]:
        c = self._current
        return (c[_R], c[_G], c[_B])

    @property
    def size(self) -> float:
        return self._current[_SIZE]

    @property
    def speed(self) -> float:
        return self._current[_SPEED]

    @property
    def spread(self) -> float:
        return self._current[_SPREAD]

    def value(self, index: int) -> float:
        return self._current[index]

    def target_value(self, index: int) -> float:
        return self._target[index]

    def smoothing_factor(self, dt_s: float) -> float:
        if dt_s <= 0.0:
            return 0.0
        return 1.0 - math.exp(-dt_s / self._tau_s)

    def set_phase(self, phase: GamePhase) -> None:
        if phase is self._phase:
            return
        self._phase = phase
        vec = self._targets[phase].as_vector()
        tgt = self._target
        for i in range(PARAMETER_COUNT):
            tgt[i] = vec[i]

    def on_signal(self, signal: VisualSignal) -> None:
        self.set_phase(signal.phase)

    def tick(self, dt_s: float) -> None:
        k = self.smoothing_factor(dt_s)
        if k == 0.0:
            return
        self._elapsed_s += dt_s
        cur = self._current
        tgt = self._target
        for i in range(PARAMETER_COUNT):
            cur[i] += (tgt[i] - cur[i]) * k

    def frames(self, ticks: Iterable[float]) -> Iterator[VisualInterpolator]:
        """Advance once per externally supplied frame delta, yielding self.

        The generator is as long as ``ticks``; a display refresh source makes
        it effectively infinite. Calling ``frames`` again restarts the stream
        from the current state.
        """

        for dt_s in ticks:
            self.tick(dt_s)
            yield self

    def snap_to_target(self) -> None:
        cur = self._current
        tgt = self._target
        for i in range(PARAMETER_COUNT):
            cur[i] = tgt[i]

    def snapshot(self) -> CurrentVisualState:
        c = self._current
        return CurrentVisualState(
            color=(c[_R], c[_G], c[_B]),
            size=c[_SIZE],
            speed=c[_SPEED],
            spread=c[_SPREAD],
        )
