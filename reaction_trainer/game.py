from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .clock import Clock
from .config import GameConfig
from .history import RoundHistory, RoundRecord, SessionSummary
from .phases import PhaseConfig, phase_config
from .rating import classify
from .reaction_core import ROUND_CLOSED_PHASES, GamePhase, SeededRng, new_seed, round_half_up
from .scheduler import DelayScheduler, TimerToken
from .visuals import VisualSignal

logger = logging.getLogger(__name__)

VisualListener = Callable[[VisualSignal], None]


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Read-only view of the session for the renderer (pure data)."""

    phase: GamePhase
    intro_seen: bool
    round_index: int
    total_rounds: int
    pending_stimulus_at_ms: float | None
    history: tuple[RoundRecord, ...]
    last_record: RoundRecord | None
    summary: SessionSummary
    config: PhaseConfig

    @property
    def round_number(self) -> int:
        return self.round_index + 1


class GameController:
    """Reaction-time session: intro -> idle -> (waiting -> go|early -> result)* -> done.

    - Time comes only from the injected Clock.
    - The stimulus delay comes from the DelayScheduler; only the token armed for
      the current waiting period may move the game to GO.
    - Every public event method returns True if it caused a transition and
      False if it was ignored in the current phase.
    """

    def __init__(
        self,
        *,
        clock: Clock,
        scheduler: DelayScheduler,
        config: GameConfig | None = None,
        intro_seen: bool = False,
    ) -> None:
        self._clock = clock
        self._scheduler = scheduler
        self._config = GameConfig() if config is None else config
        self._listeners: list[VisualListener] = []

        self._intro_seen = bool(intro_seen)
        self._phase = GamePhase.IDLE if self._intro_seen else GamePhase.INTRO
        self._round_index = 0
        self._pending_token: TimerToken | None = None
        self._pending_stimulus_at_ms: float | None = None
        self._history = RoundHistory()

    # -- state accessors -------------------------------------------------

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def intro_seen(self) -> bool:
        return self._intro_seen

    @property
    def current_round_index(self) -> int:
        return self._round_index

    @property
    def total_rounds(self) -> int:
        return self._config.total_rounds

    @property
    def pending_stimulus_at_ms(self) -> float | None:
        return self._pending_stimulus_at_ms

    @property
    def pending_token(self) -> TimerToken | None:
        return self._pending_token

    @property
    def history(self) -> tuple[RoundRecord, ...]:
        return self._history.records()

    def summarize(self) -> SessionSummary:
        return self._history.summarize()

    def subscribe(self, listener: VisualListener) -> None:
        self._listeners.append(listener)

    def visual_signal(self) -> VisualSignal:
        return VisualSignal(phase=self._phase, target=phase_config(self._phase).visual)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self._phase,
            intro_seen=self._intro_seen,
            round_index=self._round_index,
            total_rounds=self._config.total_rounds,
            pending_stimulus_at_ms=self._pending_stimulus_at_ms,
            history=self._history.records(),
            last_record=self._history.last(),
            summary=self._history.summarize(),
            config=phase_config(self._phase),
        )

    # -- events ----------------------------------------------------------

    def update(self) -> None:
        """Called once per frame: fires the stimulus timer if it is due."""

        self._scheduler.poll()

    def primary_action(self) -> bool:
        """Pointer-down in the interaction region, or the primary key."""

        phase = self._phase
        if phase is GamePhase.INTRO:
            return self.dismiss_intro()
        if phase is GamePhase.IDLE:
            return self.start()
        if phase is GamePhase.WAITING:
            return self._false_start()
        if phase is GamePhase.GO:
            return self._react()
        if phase in ROUND_CLOSED_PHASES:
            return self.advance()
        return self._ignored("primary_action")

    def dismiss_intro(self) -> bool:
        if self._phase is not GamePhase.INTRO:
            return self._ignored("dismiss_intro")
        self._intro_seen = True
        self._enter(GamePhase.IDLE)
        return True

    def start(self) -> bool:
        if self._phase is not GamePhase.IDLE:
            return self._ignored("start")
        self._history.clear()
        self._round_index = 0
        self._begin_waiting()
        return True

    def advance(self) -> bool:
        if self._phase not in ROUND_CLOSED_PHASES:
            return self._ignored("advance")
        if self._round_index + 1 < self._config.total_rounds:
            self._round_index += 1
            self._begin_waiting()
        else:
            self._enter(GamePhase.DONE)
        return True

    def restart(self) -> bool:
        """Play again from the summary screen."""

        if self._phase is not GamePhase.DONE:
            return self._ignored("restart")
        self._history.clear()
        self._round_index = 0
        self._begin_waiting()
        return True

    def reset(self) -> bool:
        """Abandon the session and return to idle with an empty history."""

        if self._phase in (GamePhase.INTRO, GamePhase.IDLE):
            return self._ignored("reset")
        self._cancel_pending()
        self._history.clear()
        self._round_index = 0
        self._enter(GamePhase.IDLE)
        return True

    def clear(self) -> bool:
        if self._phase is not GamePhase.IDLE:
            return self._ignored("clear")
        self._history.clear()
        logger.info("History cleared")
        return True

    def handle_timer(self, token: TimerToken) -> bool:
        """Scheduler callback: the random delay for this waiting period elapsed."""

        # Capture first so GO is never observable without a stimulus time.
        now = self._clock.now()
        if self._phase is not GamePhase.WAITING or self._pending_token is None:
            logger.debug("Ignoring stale timer #%d in phase %s", token.serial, self._phase)
            return False
        if token.serial != self._pending_token.serial:
            logger.debug(
                "Ignoring stale timer #%d (pending #%d)", token.serial, self._pending_token.serial
            )
            return False

        self._pending_stimulus_at_ms = now
        self._enter(GamePhase.GO)
        return True

    # -- internals -------------------------------------------------------

    def _begin_waiting(self) -> None:
        self._cancel_pending()
        token = self._scheduler.schedule(
            self.handle_timer,
            min_ms=self._config.min_delay_ms,
            max_ms=self._config.max_delay_ms,
        )
        self._pending_token = token
        self._pending_stimulus_at_ms = token.due_at_ms
        self._enter(GamePhase.WAITING)

    def _false_start(self) -> bool:
        token = self._pending_token
        assert token is not None
        now = self._clock.now()
        self._cancel_pending()
        self._history.append(
            RoundRecord(
                round_index=self._round_index,
                delay_ms=token.delay_ms,
                stimulus_at_ms=None,
                responded_at_ms=now,
                reaction_ms=None,
                rating=None,
                was_early=True,
            )
        )
        self._enter(GamePhase.EARLY)
        return True

    def _react(self) -> bool:
        token = self._pending_token
        stimulus_at_ms = self._pending_stimulus_at_ms
        assert token is not None
        assert stimulus_at_ms is not None

        now = self._clock.now()
        reaction_ms = max(0, round_half_up(now - stimulus_at_ms))
        self._pending_token = None
        self._pending_stimulus_at_ms = None
        self._history.append(
            RoundRecord(
                round_index=self._round_index,
                delay_ms=token.delay_ms,
                stimulus_at_ms=stimulus_at_ms,
                responded_at_ms=now,
                reaction_ms=reaction_ms,
                rating=classify(reaction_ms),
                was_early=False,
            )
        )
        self._enter(GamePhase.RESULT)
        return True

    def _cancel_pending(self) -> None:
        if self._pending_token is not None:
            self._scheduler.cancel(self._pending_token)
        self._pending_token = None
        self._pending_stimulus_at_ms = None

    def _enter(self, phase: GamePhase) -> None:
        previous = self._phase
        self._phase = phase
        logger.info(
            "Phase %s -> %s (round %d/%d)",
            previous,
            phase,
            self._round_index + 1,
            self._config.total_rounds,
        )
        signal = self.visual_signal()
        for listener in self._listeners:
            listener(signal)

    def _ignored(self, event: str) -> bool:
        logger.debug("Ignoring %s in phase %s", event, self._phase)
        return False


def build_reaction_game(
    *,
    clock: Clock,
    config: GameConfig | None = None,
    seed: int | None = None,
    intro_seen: bool = False,
) -> GameController:
    cfg = GameConfig() if config is None else config
    if seed is None:
        seed = cfg.seed if cfg.seed is not None else new_seed()
    scheduler = DelayScheduler(clock=clock, rng=SeededRng(seed))
    return GameController(clock=clock, scheduler=scheduler, config=cfg, intro_seen=intro_seen)
