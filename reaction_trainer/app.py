"""Pygame UI shell for the reaction trainer.

Deterministic timing/scoring/RNG/state lives in reaction_trainer/* (core
modules). This module only turns pygame events into controller calls, pumps
the delay scheduler and the visual interpolator once per frame, and draws.
"""

from __future__ import annotations

import logging
import math
import random
from array import array
from collections.abc import Callable
from typing import Protocol

import pygame

from .clock import RealClock
from .config import GameConfig, load_config
from .game import GameController, SessionSnapshot, build_reaction_game
from .phases import Control, phase_config
from .reaction_core import GamePhase, clamp01
from .visuals import VisualInterpolator

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)

PRIMARY_KEYS = (pygame.K_SPACE, pygame.K_RETURN, pygame.K_KP_ENTER)

_CONTROL_LABELS: dict[Control, str] = {
    Control.DISMISS: "Got it",
    Control.START: "Start",
    Control.CLEAR: "Clear",
    Control.RESTART: "Play again",
    Control.RESET: "Reset",
}


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def update(self, dt_s: float) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


class App:
    def __init__(self, surface: pygame.Surface) -> None:
        self._surface = surface
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def update(self, dt_s: float) -> None:
        if not self._screens:
            return
        self._screens[-1].update(dt_s)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class _ParticleField:
    """Orbiting dots driven by the interpolated visual state.

    Storage is allocated once; ``step`` only rewrites the angle buffer.
    """

    def __init__(self, count: int, *, seed: int = 0x5EED) -> None:
        rng = random.Random(seed)
        self._count = int(count)
        self._angle = array("d", (rng.uniform(0.0, math.tau) for _ in range(self._count)))
        self._radius = array("d", (math.sqrt(rng.random()) for _ in range(self._count)))
        self._rate = array("d", (rng.uniform(0.6, 1.4) for _ in range(self._count)))

    def step(self, dt_s: float, speed: float) -> None:
        if dt_s <= 0.0:
            return
        angle = self._angle
        rate = self._rate
        for i in range(self._count):
            angle[i] = (angle[i] + speed * rate[i] * dt_s) % math.tau

    def draw(self, surface: pygame.Surface, visuals: VisualInterpolator) -> None:
        w, h = surface.get_size()
        cx, cy = w * 0.5, h * 0.5
        reach = visuals.spread * math.hypot(cx, cy)
        r, g, b = visuals.color
        color = (_channel(r), _channel(g), _channel(b))
        dot = max(1, int(round(visuals.size)))
        angle = self._angle
        radius = self._radius
        for i in range(self._count):
            d = reach * radius[i]
            pygame.draw.circle(
                surface,
                color,
                (int(cx + math.cos(angle[i]) * d), int(cy + math.sin(angle[i]) * d)),
                dot,
            )


def _channel(v: float) -> int:
    return int(clamp01(v / 255.0) * 255.0)


class ReactionScreen:
    def __init__(self, app: App, *, game: GameController, config: GameConfig) -> None:
        self._app = app
        self._game = game
        self._visuals = VisualInterpolator(phase=game.phase, tau_s=config.smoothing_tau_s)
        self._particles = _ParticleField(config.particle_count)
        game.subscribe(self._visuals.on_signal)

        self._headline_font = pygame.font.Font(None, 72)
        self._body_font = pygame.font.Font(None, 32)
        self._small_font = pygame.font.Font(None, 24)

        self._interaction_rect = pygame.Rect(0, 0, 0, 0)
        self._control_hitboxes: dict[Control, pygame.Rect] = {}

    @property
    def game(self) -> GameController:
        return self._game

    @property
    def visuals(self) -> VisualInterpolator:
        return self._visuals

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key)
            return

        if event.type == pygame.MOUSEBUTTONDOWN and getattr(event, "button", 1) == 1:
            pos = getattr(event, "pos", None)
            if pos is None:
                return
            for control, rect in self._control_hitboxes.items():
                if rect.collidepoint(pos):
                    self._activate(control)
                    return
            cfg = phase_config(self._game.phase)
            if cfg.accepts_pointer and self._interaction_rect.collidepoint(pos):
                self._game.primary_action()

    def _handle_key(self, key: int) -> None:
        # The key event is consumed here; nothing else scrolls or reacts to it.
        if key in PRIMARY_KEYS:
            if phase_config(self._game.phase).accepts_primary:
                self._game.primary_action()
        elif key == pygame.K_r:
            self._game.restart()
        elif key == pygame.K_c:
            self._game.clear()
        elif key == pygame.K_BACKSPACE:
            self._game.reset()
        elif key == pygame.K_ESCAPE:
            self._app.quit()

    def _activate(self, control: Control) -> None:
        game = self._game
        if control is Control.DISMISS:
            game.dismiss_intro()
        elif control is Control.START:
            game.start()
        elif control is Control.CLEAR:
            game.clear()
        elif control is Control.RESTART:
            game.restart()
        elif control is Control.RESET:
            game.reset()

    def update(self, dt_s: float) -> None:
        # Timers fire after this frame's input, never in the middle of an event.
        self._game.update()
        self._visuals.tick(dt_s)
        self._particles.step(dt_s, self._visuals.speed)

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill((6, 8, 20))
        self._particles.draw(surface, self._visuals)

        snap = self._game.snapshot()

        margin = max(12, w // 40)
        button_h = max(36, h // 12)
        self._interaction_rect = pygame.Rect(
            margin,
            margin,
            w - margin * 2,
            max(120, h - margin * 3 - button_h),
        )

        self._render_text(surface, snap)
        self._render_controls(surface, snap, top=self._interaction_rect.bottom + margin, height=button_h)

    def _render_text(self, surface: pygame.Surface, snap: SessionSnapshot) -> None:
        rect = self._interaction_rect
        text_main = (238, 245, 255)
        text_muted = (186, 200, 224)

        lines: list[tuple[pygame.font.Font, str, tuple[int, int, int]]] = []
        headline = snap.config.headline
        if snap.phase is GamePhase.RESULT and snap.last_record is not None:
            rec = snap.last_record
            headline = f"{rec.reaction_ms} ms"
            lines.append((self._headline_font, headline, text_main))
            if rec.rating is not None:
                lines.append((self._body_font, rec.rating.label, text_main))
        else:
            lines.append((self._headline_font, headline, text_main))

        if snap.phase in (GamePhase.WAITING, GamePhase.GO, GamePhase.EARLY, GamePhase.RESULT):
            lines.append((self._small_font, f"Round {snap.round_number} / {snap.total_rounds}", text_muted))

        if snap.phase is GamePhase.DONE:
            lines.extend((self._body_font, line, text_main) for line in _summary_lines(snap))

        if snap.config.hint:
            lines.append((self._small_font, snap.config.hint, text_muted))

        rendered = [font.render(text, True, color) for font, text, color in lines if text]
        total_h = sum(s.get_height() + 8 for s in rendered)
        y = rect.centery - total_h // 2
        for s in rendered:
            surface.blit(s, s.get_rect(midtop=(rect.centerx, y)))
            y += s.get_height() + 8

    def _render_controls(self, surface: pygame.Surface, snap: SessionSnapshot, *, top: int, height: int) -> None:
        self._control_hitboxes = {}
        controls = snap.config.controls
        if not controls:
            return
        w = surface.get_width()
        bw = max(120, min(200, w // 6))
        gap = 16
        total_w = bw * len(controls) + gap * (len(controls) - 1)
        x = (w - total_w) // 2
        for control in controls:
            rect = pygame.Rect(x, top, bw, height)
            pygame.draw.rect(surface, (18, 30, 118), rect)
            pygame.draw.rect(surface, (226, 236, 255), rect, 2)
            label = self._small_font.render(_CONTROL_LABELS[control], True, (238, 245, 255))
            surface.blit(label, label.get_rect(center=rect.center))
            self._control_hitboxes[control] = rect
            x += bw + gap


def _summary_lines(snap: SessionSnapshot) -> list[str]:
    s = snap.summary
    lines = [f"Valid rounds: {s.valid_rounds} / {s.rounds}"]
    if not s.is_defined:
        lines.append("No valid rounds: every round was a false start")
        return lines
    assert s.overall_rating is not None
    lines.extend(
        [
            f"Average: {s.average_ms} ms",
            f"Best:    {s.best_ms} ms",
            f"Worst:   {s.worst_ms} ms",
            f"Rating:  {s.overall_rating.label}",
        ]
    )
    return lines


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: GameConfig | None = None,
) -> int:
    cfg = load_config() if config is None else config
    logging.basicConfig(level=cfg.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    pygame.init()
    pygame.display.set_caption("Reaction Trainer")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    clock = pygame.time.Clock()

    app = App(surface=surface)
    game = build_reaction_game(clock=RealClock(), config=cfg)
    screen = ReactionScreen(app, game=game, config=cfg)
    app.push(screen)
    logger.info("Reaction trainer started (%d rounds)", cfg.total_rounds)

    frame = 0
    dt_s = 0.0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.update(dt_s)
            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            dt_s = clock.tick(cfg.target_fps) / 1000.0
    finally:
        pygame.quit()

    return 0
