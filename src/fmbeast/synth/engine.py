"""
4-operator serial FM synthesizer.

Core engine shared between a real-time render callback and a control thread.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, MutableSequence, Optional

import numpy as np

from .envelope import Envelope
from .operator import Operator
from .presets import (
    NUM_OPERATORS,
    EnvelopeParams,
    OperatorParams,
    PatchParams,
    get_preset,
)


DEFAULT_SAMPLE_RATE = 44100


def _build_operator(params: OperatorParams) -> Operator:
    env = params.envelope
    return Operator(
        frequency=params.frequency,
        amplitude=params.amplitude,
        envelope=Envelope(env.attack, env.decay, env.sustain, env.release),
        modulation_ratio=params.modulation_ratio,
        feedback_amount=params.feedback_amount,
        hard_sync_enabled=params.hard_sync_enabled,
        bit_depth=params.bit_depth,
    )


def _copy_params(op: Operator, params: OperatorParams) -> None:
    """Write patch values onto a live operator, leaving phase and envelope state alone."""
    op.frequency = params.frequency
    op.amplitude = params.amplitude
    op.modulation_ratio = params.modulation_ratio
    op.feedback_amount = params.feedback_amount
    op.hard_sync_enabled = params.hard_sync_enabled
    op.bit_depth = params.bit_depth
    op.envelope.attack = params.envelope.attack
    op.envelope.decay = params.envelope.decay
    op.envelope.sustain = params.envelope.sustain
    op.envelope.release = params.envelope.release


class FMSynth:
    """
    Monophonic 4-operator FM synthesizer.

    Operator 0 is the carrier; operators 3 -> 2 -> 1 form a serial modulator
    chain feeding it. One re-entrant lock guards all state: ``render_block``
    holds it for a whole block and every note event or parameter edit takes
    it too, so a long edit can delay rendering.

    Args:
        sample_rate: Audio sample rate in Hz (immutable after construction)
        patch: Initial PatchParams (default factory patch if omitted)

    Example:
        >>> synth = FMSynth(sample_rate=44100)
        >>> synth.note_on()
        >>> block = synth.render(256)
        >>> len(block), bool(np.all(np.abs(block) <= 1.0))
        (256, True)
    """

    def __init__(self, sample_rate: float = DEFAULT_SAMPLE_RATE, patch: Optional[PatchParams] = None):
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")
        if patch is None:
            patch = get_preset("default")
        if len(patch.operators) != NUM_OPERATORS:
            raise ValueError(f"FMSynth requires exactly {NUM_OPERATORS} operators, got {len(patch.operators)}")

        self._sample_rate = float(sample_rate)
        self._operators = tuple(_build_operator(p) for p in patch.operators)
        self._lock = threading.RLock()

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def operators(self) -> tuple[Operator, ...]:
        """The four operators, carrier first. Mutate them inside ``edit()``."""
        return self._operators

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def is_sounding(self) -> bool:
        """True while any operator envelope is still active."""
        with self._lock:
            return any(op.envelope.active for op in self._operators)

    @contextmanager
    def edit(self) -> Iterator[tuple[Operator, ...]]:
        """
        Hold the engine lock while editing operators.

        Example:
            >>> synth = FMSynth()
            >>> with synth.edit() as ops:
            ...     ops[0].frequency = 220.0
            ...     ops[0].envelope.release = 0.5
        """
        with self._lock:
            yield self._operators

    def note_on(self) -> None:
        """Trigger (or retrigger) every operator envelope."""
        with self._lock:
            for op in self._operators:
                op.note_on()

    def note_off(self) -> None:
        """Release every operator envelope."""
        with self._lock:
            for op in self._operators:
                op.note_off()

    def reset(self) -> None:
        """Silence the voice immediately: phases to zero, envelopes idle."""
        with self._lock:
            for op in self._operators:
                op.reset()

    def set_patch(self, patch: PatchParams) -> None:
        """
        Apply a patch to the live operators.

        Running phases and envelope stages are kept, so a patch change while a
        note sounds does not click.

        Args:
            patch: PatchParams instance
        """
        if len(patch.operators) != NUM_OPERATORS:
            raise ValueError(f"FMSynth requires exactly {NUM_OPERATORS} operators, got {len(patch.operators)}")
        with self._lock:
            for op, params in zip(self._operators, patch.operators):
                _copy_params(op, params)

    def get_patch(self) -> PatchParams:
        """Snapshot the current operator settings as a PatchParams."""
        with self._lock:
            return PatchParams(operators=[
                OperatorParams(
                    frequency=op.frequency,
                    amplitude=op.amplitude,
                    modulation_ratio=op.modulation_ratio,
                    feedback_amount=op.feedback_amount,
                    hard_sync_enabled=op.hard_sync_enabled,
                    bit_depth=op.bit_depth,
                    envelope=EnvelopeParams(
                        attack=op.envelope.attack,
                        decay=op.envelope.decay,
                        sustain=op.envelope.sustain,
                        release=op.envelope.release,
                    ),
                )
                for op in self._operators
            ])

    def render_block(self, buffer: MutableSequence[float]) -> MutableSequence[float]:
        """
        Fill ``buffer`` in place with consecutive output samples.

        Each slot runs the chain once, deepest modulator first:
        op3(0) -> op2 -> op1 -> op0. An empty buffer changes nothing.

        Args:
            buffer: Caller-owned list or numpy array of floats

        Returns:
            The same buffer
        """
        with self._lock:
            dt = 1.0 / self._sample_rate
            carrier, mod1, mod2, mod3 = self._operators
            for i in range(len(buffer)):
                m3 = mod3.sample(dt, 0.0)
                m2 = mod2.sample(dt, m3)
                m1 = mod1.sample(dt, m2)
                buffer[i] = carrier.sample(dt, m1)
        return buffer

    def render(self, num_samples: int) -> np.ndarray:
        """
        Render ``num_samples`` into a new float32 array.

        Args:
            num_samples: Number of samples (>= 0)

        Returns:
            Mono audio as numpy array (float32)
        """
        if num_samples < 0:
            raise ValueError(f"Sample count must be non-negative, got {num_samples}")
        out = np.zeros(num_samples, dtype=np.float32)
        self.render_block(out)
        return out


# =============================================================================
# Module Self-Test
# =============================================================================

if __name__ == "__main__":
    import sys
    import doctest

    doctest.testmod()

    print("FMSynth Module Self-Test")
    print("=" * 50)

    errors = []

    print("\n[Test 1] Default patch render...")
    try:
        synth = FMSynth(sample_rate=44100)
        synth.note_on()
        audio = synth.render(44100)
        assert np.all(np.isfinite(audio)), "Output should be finite"
        assert np.max(np.abs(audio)) <= 1.0, "Output should stay within [-1, 1]"
        assert np.max(np.abs(audio)) > 0, "Output should be non-silent"
        print(f"  ✓ Rendered {len(audio)} samples, peak={np.max(np.abs(audio)):.4f}")
    except Exception as e:
        errors.append(f"Default render: {e}")
        print(f"  ✗ {e}")

    print("\n[Test 2] Release to silence...")
    try:
        synth.note_off()
        tail = synth.render(44100)
        assert not synth.is_sounding, "Voice should be idle after the release"
        assert tail[-1] == 0.0, "Release tail should end in silence"
        print("  ✓ Release reached idle")
    except Exception as e:
        errors.append(f"Release: {e}")
        print(f"  ✗ {e}")

    print("\n" + "=" * 50)
    if errors:
        print(f"FAILED: {len(errors)} error(s)")
        for e in errors:
            print(f"  - {e}")
        sys.exit(1)
    else:
        print("ALL TESTS PASSED")
        sys.exit(0)
