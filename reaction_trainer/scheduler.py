from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass

from .clock import Clock
from .reaction_core import SeededRng

logger = logging.getLogger(__name__)

DEFAULT_MIN_DELAY_MS = 1500.0
DEFAULT_MAX_DELAY_MS = 4500.0


@dataclass(frozen=True, slots=True)
class TimerToken:
    """Opaque handle for one armed timer. Compared by identity of ``serial``."""

    serial: int
    delay_ms: float
    armed_at_ms: float

    @property
    def due_at_ms(self) -> float:
        return self.armed_at_ms + self.delay_ms


TimerCallback = Callable[[TimerToken], None]


class DelayScheduler:
    """One-shot, cancellable timer with a randomized delay.

    At most one token is live at a time: arming a new timer cancels the
    previous one. Timers are fired from ``poll()``, which the owning loop calls
    once per frame, so callbacks always run on the loop's single thread.
    """

    def __init__(self, *, clock: Clock, rng: SeededRng) -> None:
        self._clock = clock
        self._rng = rng
        self._serials = itertools.count(1)
        self._live: tuple[TimerToken, TimerCallback] | None = None

    @property
    def live_token(self) -> TimerToken | None:
        return None if self._live is None else self._live[0]

    def is_live(self, token: TimerToken) -> bool:
        return self._live is not None and self._live[0].serial == token.serial

    def draw_delay_ms(
        self,
        min_ms: float = DEFAULT_MIN_DELAY_MS,
        max_ms: float = DEFAULT_MAX_DELAY_MS,
    ) -> float:
        if min_ms < 0.0:
            raise ValueError("min_ms must be >= 0")
        if max_ms < min_ms:
            raise ValueError("max_ms must be >= min_ms")
        delay = self._rng.uniform(float(min_ms), float(max_ms))
        # random.uniform may land a hair outside on float rounding.
        return min(float(max_ms), max(float(min_ms), delay))

    def schedule(
        self,
        callback: TimerCallback,
        *,
        min_ms: float = DEFAULT_MIN_DELAY_MS,
        max_ms: float = DEFAULT_MAX_DELAY_MS,
    ) -> TimerToken:
        delay_ms = self.draw_delay_ms(min_ms, max_ms)
        if self._live is not None:
            logger.debug("Superseding live timer #%d", self._live[0].serial)
            self._live = None

        token = TimerToken(serial=next(self._serials), delay_ms=delay_ms, armed_at_ms=self._clock.now())
        self._live = (token, callback)
        logger.debug("Armed timer #%d for %.1f ms", token.serial, delay_ms)
        return token

    def cancel(self, token: TimerToken | None) -> None:
        if token is None or not self.is_live(token):
            return
        self._live = None
        logger.debug("Cancelled timer #%d", token.serial)

    def poll(self) -> bool:
        """Fire the live timer if it is due. Returns True if a callback ran."""

        if self._live is None:
            return False
        token, callback = self._live
        if self._clock.now() < token.due_at_ms:
            return False
        # Disarm before the callback so it may arm the next timer.
        self._live = None
        callback(token)
        return True
