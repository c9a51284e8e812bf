"""
FM operator: phase-accumulating sine oscillator with its own envelope.

Per sample the operator applies linear FM, feedback from its raw phase
accumulator, optional hard sync, the envelope, a headroom clip and a
bit-crusher, in that order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from ..processing.effects import HEADROOM, crush, hard_clip
from .envelope import Envelope


TWO_PI = 2.0 * math.pi


@dataclass
class Operator:
    """
    Single FM operator.

    Attributes:
        frequency: Base frequency in Hz
        amplitude: Output gain (>= 0)
        envelope: Owned Envelope instance
        modulation_ratio: Multiplier on the base frequency
        feedback_amount: Self-feedback from the raw phase (0..1)
        hard_sync_enabled: Wrap phase to [0, 2pi) each sample
        bit_depth: Output resolution in bits (typically 8-16)

    Without hard sync the phase is never wrapped and grows for as long as the
    operator runs; accuracy then rests on ``sin`` at large arguments.
    """
    frequency: float
    amplitude: float
    envelope: Envelope
    modulation_ratio: float = 1.0
    feedback_amount: float = 0.0
    hard_sync_enabled: bool = False
    bit_depth: int = 16

    phase: float = field(default=0.0, init=False)

    def note_on(self) -> None:
        self.envelope.note_on()

    def note_off(self) -> None:
        self.envelope.note_off()

    def reset(self) -> None:
        """Zero the phase and silence the envelope."""
        self.phase = 0.0
        self.envelope.reset()

    def sample(self, dt: float, modulation_input: float) -> float:
        """
        Produce one output sample.

        Must be called exactly once per output sample: it advances the phase
        and the envelope.

        Args:
            dt: Sample period in seconds
            modulation_input: Output of the upstream operator (0.0 if none)

        Returns:
            Quantized sample in [-1, 1]
        """
        freq = self.frequency * self.modulation_ratio + modulation_input * self.frequency
        feedback = self.feedback_amount * self.phase
        self.phase += TWO_PI * freq * dt + feedback
        if self.hard_sync_enabled and math.isfinite(self.phase):
            self.phase = math.fmod(self.phase, TWO_PI)

        self.envelope.advance(dt)

        # A runaway phase poisons the output with NaN rather than raising
        osc = math.sin(self.phase) if math.isfinite(self.phase) else math.nan
        raw = self.amplitude * self.envelope.level * osc
        return crush(hard_clip(raw, HEADROOM), self.bit_depth)
