"""
Linear ADSR envelope for FM operators.

A fixed-step integrator: every call to ``advance`` moves the level by a
straight-line slope for ``dt`` seconds. Stage times that are very short
relative to ``dt`` can be crossed in a single call, so at low sample rates a
stage may appear to happen instantly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# Tolerance for stage completion. Repeated float steps (ten steps of 0.1)
# land a hair short of the target and would otherwise cost an extra sample.
LEVEL_EPSILON = 1e-9


class Stage(Enum):
    """Envelope stage."""
    ATTACK = "attack"
    DECAY = "decay"
    SUSTAIN = "sustain"
    RELEASE = "release"
    IDLE = "idle"


@dataclass
class Envelope:
    """
    Attack/decay/sustain/release level generator.

    Attributes:
        attack: Attack time in seconds (> 0)
        decay: Decay time in seconds (> 0)
        sustain: Sustain level (0..1)
        release: Release time in seconds (> 0)

    The timing fields may be changed at any point, even mid-stage; the next
    ``advance`` call picks up the new values.

    Example:
        >>> env = Envelope(attack=0.01, decay=0.05, sustain=0.6, release=0.2)
        >>> env.note_on()
        >>> for _ in range(10):
        ...     env.advance(0.001)
        >>> env.level, env.stage
        (1.0, <Stage.DECAY: 'decay'>)
    """
    attack: float
    decay: float
    sustain: float
    release: float

    stage: Stage = field(default=Stage.IDLE, init=False)
    level: float = field(default=0.0, init=False)
    active: bool = field(default=False, init=False)
    # Level captured when released early; None means released from sustain
    _release_from: Optional[float] = field(default=None, init=False, repr=False)

    def note_on(self) -> None:
        """Restart from silence in the attack stage (always retriggers)."""
        self.level = 0.0
        self.stage = Stage.ATTACK
        self.active = True

    def note_off(self) -> None:
        """Enter release from whatever stage is current."""
        if not self.active:
            return
        if self.stage is Stage.SUSTAIN:
            self._release_from = None
        elif self.stage is not Stage.RELEASE:
            self._release_from = self.level
        self.stage = Stage.RELEASE

    def reset(self) -> None:
        """Drop straight to idle without a release tail."""
        self.level = 0.0
        self.stage = Stage.IDLE
        self.active = False
        self._release_from = None

    def advance(self, dt: float) -> None:
        """
        Advance the envelope by ``dt`` seconds.

        Args:
            dt: Time step in seconds (> 0), normally one sample period
        """
        if not self.active:
            return

        stage = self.stage
        if stage is Stage.ATTACK:
            self.level += dt / self.attack
            if self.level >= 1.0 - LEVEL_EPSILON:
                self.level = 1.0
                self.stage = Stage.DECAY
        elif stage is Stage.DECAY:
            self.level -= dt * (1.0 - self.sustain) / self.decay
            if self.level <= self.sustain + LEVEL_EPSILON:
                self.level = self.sustain
                self.stage = Stage.SUSTAIN
        elif stage is Stage.RELEASE:
            # From the sustain plateau the slope tracks the live sustain;
            # an early release runs down from the level it was cut at.
            start = self.sustain if self._release_from is None else self._release_from
            self.level -= dt * start / self.release
            if self.level <= LEVEL_EPSILON:
                self.level = 0.0
                self.active = False
                self.stage = Stage.IDLE

    def is_finished(self) -> bool:
        """True once the envelope is idle."""
        return not self.active


if __name__ == "__main__":
    import doctest
    doctest.testmod()

    env = Envelope(attack=0.01, decay=0.05, sustain=0.6, release=0.2)
    env.note_on()
    steps = 0
    while env.stage is not Stage.SUSTAIN:
        env.advance(0.001)
        steps += 1
    print(f"✓ Reached sustain ({env.level}) after {steps} steps")

    env.note_off()
    steps = 0
    while env.active:
        env.advance(0.001)
        steps += 1
    print(f"✓ Released to idle after {steps} steps")
