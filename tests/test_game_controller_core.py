from __future__ import annotations

from dataclasses import dataclass

from reaction_trainer.config import GameConfig
from reaction_trainer.game import GameController, build_reaction_game
from reaction_trainer.phases import PHASE_CONFIG
from reaction_trainer.rating import RatingTier
from reaction_trainer.reaction_core import GamePhase
from reaction_trainer.visuals import VisualSignal


@dataclass
class FakeClock:
    t: float = 1000.0

    def now(self) -> float:
        return self.t

    def advance(self, dt_ms: float) -> None:
        self.t += float(dt_ms)


def _game(*, intro_seen: bool = False, seed: int = 5) -> tuple[FakeClock, GameController]:
    clock = FakeClock()
    return clock, build_reaction_game(clock=clock, seed=seed, intro_seen=intro_seen)


def _show_stimulus(clock: FakeClock, game: GameController) -> None:
    token = game.pending_token
    assert token is not None
    clock.advance(token.delay_ms)
    game.update()


def test_starts_in_intro_and_dismiss_is_permanent() -> None:
    _, game = _game()
    assert game.phase is GamePhase.INTRO
    assert game.intro_seen is False

    assert game.start() is False
    assert game.dismiss_intro() is True
    assert game.phase is GamePhase.IDLE
    assert game.intro_seen is True
    assert game.dismiss_intro() is False


def test_intro_seen_session_starts_idle() -> None:
    _, game = _game(intro_seen=True)
    assert game.phase is GamePhase.IDLE


def test_start_arms_timer_and_records_expected_stimulus() -> None:
    clock, game = _game(intro_seen=True)
    assert game.start() is True
    assert game.phase is GamePhase.WAITING
    token = game.pending_token
    assert token is not None
    assert 1500.0 <= token.delay_ms <= 4500.0
    assert game.pending_stimulus_at_ms == clock.t + token.delay_ms
    assert game.current_round_index == 0
    assert game.history == ()


def test_timer_moves_to_go_and_captures_stimulus_time() -> None:
    clock, game = _game(intro_seen=True)
    game.start()
    token = game.pending_token
    assert token is not None

    clock.advance(token.delay_ms - 0.5)
    game.update()
    assert game.phase is GamePhase.WAITING

    clock.advance(3.0)
    game.update()
    assert game.phase is GamePhase.GO
    assert game.pending_stimulus_at_ms == clock.t


def test_reaction_is_rounded_to_whole_ms_and_rated() -> None:
    clock, game = _game(intro_seen=True)
    game.start()
    _show_stimulus(clock, game)

    clock.advance(231.6)
    assert game.primary_action() is True
    assert game.phase is GamePhase.RESULT
    assert game.pending_stimulus_at_ms is None

    (rec,) = game.history
    assert rec.reaction_ms == 232
    assert rec.rating is RatingTier.VERY_GOOD
    assert rec.was_early is False
    assert rec.round_index == 0
    assert rec.stimulus_at_ms is not None


def test_early_click_cancels_timer_and_stale_fire_is_ignored() -> None:
    clock, game = _game(intro_seen=True)
    game.start()
    stale = game.pending_token
    assert stale is not None

    clock.advance(100.0)
    assert game.primary_action() is True
    assert game.phase is GamePhase.EARLY
    assert game.pending_token is None
    assert game.pending_stimulus_at_ms is None

    (rec,) = game.history
    assert rec.was_early is True
    assert rec.reaction_ms is None
    assert rec.rating is None
    assert rec.stimulus_at_ms is None
    assert rec.delay_ms == stale.delay_ms

    # The first timer's due time passes: nothing fires.
    clock.advance(stale.delay_ms)
    game.update()
    assert game.phase is GamePhase.EARLY

    # Even a late delivery of the cancelled token is ignored.
    assert game.handle_timer(stale) is False
    assert game.phase is GamePhase.EARLY

    # And it cannot corrupt the next round either.
    game.advance()
    assert game.phase is GamePhase.WAITING
    assert game.handle_timer(stale) is False
    assert game.phase is GamePhase.WAITING
    assert game.current_round_index == 1


def test_advance_runs_five_rounds_then_done() -> None:
    clock, game = _game(intro_seen=True)
    game.start()
    for i in range(5):
        assert game.current_round_index == i
        _show_stimulus(clock, game)
        clock.advance(200.0)
        game.primary_action()
        assert len(game.history) == i + 1
        assert game.advance() is True

    assert game.phase is GamePhase.DONE
    assert len(game.history) == 5
    assert game.advance() is False
    assert game.primary_action() is False


def test_restart_clears_history_and_begins_waiting() -> None:
    clock, game = _game(intro_seen=True)
    game.start()
    for _ in range(5):
        game.primary_action()  # early
        game.advance()
    assert game.phase is GamePhase.DONE

    assert game.restart() is True
    assert game.phase is GamePhase.WAITING
    assert game.history == ()
    assert game.current_round_index == 0
    assert game.pending_token is not None


def test_reset_from_done_and_mid_round_returns_to_idle() -> None:
    clock, game = _game(intro_seen=True)
    game.start()
    token = game.pending_token
    assert token is not None

    assert game.reset() is True
    assert game.phase is GamePhase.IDLE
    assert game.pending_token is None
    assert game.pending_stimulus_at_ms is None
    assert game.history == ()

    clock.advance(token.delay_ms)
    game.update()
    assert game.phase is GamePhase.IDLE

    game.start()
    for _ in range(5):
        game.primary_action()
        game.advance()
    assert game.reset() is True
    assert game.phase is GamePhase.IDLE
    assert game.history == ()


def test_clear_only_valid_in_idle() -> None:
    _, game = _game()
    assert game.clear() is False  # intro
    game.dismiss_intro()
    assert game.clear() is True
    assert game.phase is GamePhase.IDLE
    game.start()
    assert game.clear() is False


def test_intro_never_reentered() -> None:
    _, game = _game()
    game.dismiss_intro()
    for _ in range(3):
        game.start()
        for _ in range(5):
            game.primary_action()
            game.advance()
        game.restart()
        game.reset()
        game.clear()
        assert game.phase is GamePhase.IDLE
        assert game.intro_seen is True
    assert game.reset() is False


def test_invalid_events_are_noops() -> None:
    clock, game = _game(intro_seen=True)
    assert game.advance() is False
    assert game.restart() is False
    assert game.reset() is False
    assert game.phase is GamePhase.IDLE

    game.start()
    assert game.start() is False
    assert game.advance() is False
    assert game.restart() is False
    _show_stimulus(clock, game)
    assert game.advance() is False
    assert game.dismiss_intro() is False
    assert game.phase is GamePhase.GO


def test_visual_signal_emitted_on_every_transition() -> None:
    clock, game = _game()
    signals: list[VisualSignal] = []
    game.subscribe(signals.append)

    game.dismiss_intro()
    game.start()
    _show_stimulus(clock, game)
    game.primary_action()
    game.advance()
    game.primary_action()
    game.clear()  # no-op outside idle, emits nothing

    assert [s.phase for s in signals] == [
        GamePhase.IDLE,
        GamePhase.WAITING,
        GamePhase.GO,
        GamePhase.RESULT,
        GamePhase.WAITING,
        GamePhase.EARLY,
    ]
    for s in signals:
        assert s.target == PHASE_CONFIG[s.phase].visual


def test_snapshot_is_immutable_view() -> None:
    clock, game = _game(intro_seen=True)
    game.start()
    _show_stimulus(clock, game)
    clock.advance(180.0)
    game.primary_action()

    snap = game.snapshot()
    assert snap.phase is GamePhase.RESULT
    assert snap.round_number == 1
    assert snap.total_rounds == 5
    assert snap.last_record is not None and snap.last_record.reaction_ms == 180
    assert snap.summary.average_ms == 180
    assert snap.config is PHASE_CONFIG[GamePhase.RESULT]

    game.advance()
    assert snap.phase is GamePhase.RESULT
    assert len(snap.history) == 1


def test_custom_round_count_and_delay_bounds() -> None:
    clock = FakeClock()
    cfg = GameConfig(total_rounds=2, min_delay_ms=10.0, max_delay_ms=20.0)
    game = build_reaction_game(clock=clock, config=cfg, seed=3, intro_seen=True)

    game.start()
    token = game.pending_token
    assert token is not None and 10.0 <= token.delay_ms <= 20.0
    game.primary_action()
    game.advance()
    game.primary_action()
    game.advance()
    assert game.phase is GamePhase.DONE
    assert game.total_rounds == 2
