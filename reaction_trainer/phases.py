from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from .reaction_core import GamePhase


class Control(StrEnum):
    DISMISS = "dismiss"
    START = "start"
    CLEAR = "clear"
    RESTART = "restart"
    RESET = "reset"


@dataclass(frozen=True, slots=True)
class VisualStateTarget:
    color: tuple[float, float, float]
    size: float
    speed: float  # radians per second
    spread: float  # orbit radius as a fraction of the half-diagonal

    def as_vector(self) -> tuple[float, float, float, float, float, float]:
        r, g, b = self.color
        return (r, g, b, self.size, self.speed, self.spread)


@dataclass(frozen=True, slots=True)
class PhaseConfig:
    headline: str
    hint: str
    accepts_primary: bool  # primary key
    accepts_pointer: bool  # pointer-down in the interaction region
    controls: tuple[Control, ...]
    visual: VisualStateTarget


VISUAL_TARGETS: Mapping[GamePhase, VisualStateTarget] = MappingProxyType({
    GamePhase.INTRO: VisualStateTarget(color=(70.0, 110.0, 220.0), size=2.0, speed=0.15, spread=0.55),
    GamePhase.IDLE: VisualStateTarget(color=(90.0, 140.0, 255.0), size=2.5, speed=0.25, spread=0.50),
    GamePhase.WAITING: VisualStateTarget(color=(220.0, 60.0, 60.0), size=2.0, speed=0.60, spread=0.30),
    GamePhase.GO: VisualStateTarget(color=(60.0, 230.0, 110.0), size=4.0, speed=2.20, spread=0.75),
    GamePhase.EARLY: VisualStateTarget(color=(255.0, 150.0, 40.0), size=3.0, speed=1.40, spread=0.40),
    GamePhase.RESULT: VisualStateTarget(color=(170.0, 110.0, 255.0), size=3.0, speed=0.45, spread=0.60),
    GamePhase.DONE: VisualStateTarget(color=(255.0, 210.0, 80.0), size=3.5, speed=0.35, spread=0.65),
})


PHASE_CONFIG: Mapping[GamePhase, PhaseConfig] = MappingProxyType({
    GamePhase.INTRO: PhaseConfig(
        headline="Reaction Test",
        hint="Wait for green, then click or press Space as fast as you can.",
        accepts_primary=True,
        accepts_pointer=False,
        controls=(Control.DISMISS,),
        visual=VISUAL_TARGETS[GamePhase.INTRO],
    ),
    GamePhase.IDLE: PhaseConfig(
        headline="Click to start",
        hint="Space / click: start",
        accepts_primary=True,
        accepts_pointer=True,
        controls=(Control.START, Control.CLEAR),
        visual=VISUAL_TARGETS[GamePhase.IDLE],
    ),
    GamePhase.WAITING: PhaseConfig(
        headline="Wait for green...",
        hint="Do not click yet",
        accepts_primary=True,
        accepts_pointer=True,
        controls=(Control.RESET,),
        visual=VISUAL_TARGETS[GamePhase.WAITING],
    ),
    GamePhase.GO: PhaseConfig(
        headline="CLICK!",
        hint="",
        accepts_primary=True,
        accepts_pointer=True,
        controls=(),
        visual=VISUAL_TARGETS[GamePhase.GO],
    ),
    GamePhase.EARLY: PhaseConfig(
        headline="Too soon!",
        hint="Space / click: next round",
        accepts_primary=True,
        accepts_pointer=True,
        controls=(Control.RESET,),
        visual=VISUAL_TARGETS[GamePhase.EARLY],
    ),
    GamePhase.RESULT: PhaseConfig(
        headline="",
        hint="Space / click: next round",
        accepts_primary=True,
        accepts_pointer=True,
        controls=(Control.RESET,),
        visual=VISUAL_TARGETS[GamePhase.RESULT],
    ),
    GamePhase.DONE: PhaseConfig(
        headline="Session complete",
        hint="R: play again  |  Backspace: reset",
        accepts_primary=False,
        accepts_pointer=False,
        controls=(Control.RESTART, Control.RESET),
        visual=VISUAL_TARGETS[GamePhase.DONE],
    ),
})


def phase_config(phase: GamePhase) -> PhaseConfig:
    return PHASE_CONFIG[phase]
