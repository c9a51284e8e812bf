"""
Controller for a running FMSynth.

Stands in for a control surface: every edit is range-checked, clamped into
the range a slider would allow, and written under the engine lock so the
render thread only ever sees whole values.
"""

from __future__ import annotations

import math
import warnings
from typing import Union

from .synth.engine import FMSynth
from .synth.presets import NUM_OPERATORS, PatchParams, get_preset


# (min, max) for every numeric parameter; bit_depth is integral
OPERATOR_RANGES: dict[str, tuple[float, float]] = {
    "frequency": (20.0, 2000.0),
    "amplitude": (0.0, 2.0),
    "modulation_ratio": (0.1, 5.0),
    "feedback_amount": (0.0, 0.5),
    "bit_depth": (8, 16),
}

ENVELOPE_RANGES: dict[str, tuple[float, float]] = {
    "attack": (0.001, 2.0),
    "decay": (0.001, 2.0),
    "sustain": (0.0, 1.0),
    "release": (0.001, 2.0),
}

PARAM_RANGES: dict[str, tuple[float, float]] = {**OPERATOR_RANGES, **ENVELOPE_RANGES}


def clamp_param(name: str, value: Union[float, int, bool]) -> Union[float, int, bool]:
    """
    Validate and clamp one parameter value.

    Args:
        name: Operator or envelope parameter name
        value: Requested value

    Returns:
        Value clamped into the parameter's range (``int`` for bit_depth)

    Raises:
        ValueError: If the name is unknown or the value is not finite

    Example:
        >>> clamp_param("sustain", 0.25)
        0.25
        >>> clamp_param("bit_depth", 12.4)
        12
    """
    if name == "hard_sync_enabled":
        return bool(value)
    if name not in PARAM_RANGES:
        raise ValueError(f"Unknown parameter '{name}'. Available: {', '.join(sorted(PARAM_RANGES) + ['hard_sync_enabled'])}")

    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")

    lo, hi = PARAM_RANGES[name]
    if value < lo or value > hi:
        clamped = min(max(value, lo), hi)
        warnings.warn(f"{name}={value} out of range ({lo}-{hi}), clamped to {clamped}")
        value = clamped

    if name == "bit_depth":
        return int(round(value))
    return value


class Controller:
    """
    Parameter and note control for one FMSynth.

    Args:
        synth: Engine to control

    Example:
        >>> ctl = Controller(FMSynth())
        >>> ctl.set_operator_param(0, "frequency", 220.0)
        >>> ctl.toggle_note()
        True
        >>> ctl.note_held
        True
    """

    def __init__(self, synth: FMSynth):
        self.synth = synth
        self._note_held = False

    @property
    def note_held(self) -> bool:
        return self._note_held

    def _check_index(self, index: int) -> None:
        if not 0 <= index < NUM_OPERATORS:
            raise ValueError(f"Operator index must be 0-{NUM_OPERATORS - 1}, got {index}")

    def set_operator_param(self, index: int, name: str, value: Union[float, int, bool]) -> None:
        """
        Set an operator parameter.

        Args:
            index: Operator index (0 = carrier)
            name: One of frequency, amplitude, modulation_ratio,
                feedback_amount, hard_sync_enabled, bit_depth
            value: New value, clamped into range
        """
        self._check_index(index)
        if name != "hard_sync_enabled" and name not in OPERATOR_RANGES:
            raise ValueError(f"Unknown operator parameter '{name}'")
        value = clamp_param(name, value)
        with self.synth.edit() as ops:
            setattr(ops[index], name, value)

    def set_envelope_param(self, index: int, name: str, value: float) -> None:
        """
        Set an envelope parameter (attack, decay, sustain or release).

        Takes effect on the next sample, even mid-stage.
        """
        self._check_index(index)
        if name not in ENVELOPE_RANGES:
            raise ValueError(f"Unknown envelope parameter '{name}'")
        value = clamp_param(name, value)
        with self.synth.edit() as ops:
            setattr(ops[index].envelope, name, value)

    def apply_patch(self, patch: PatchParams) -> None:
        """Clamp every field of ``patch`` and apply it in one lock acquisition."""
        clamped = []
        for params in patch.operators:
            values = {name: clamp_param(name, getattr(params, name))
                      for name in list(OPERATOR_RANGES) + ["hard_sync_enabled"]}
            env = {name: clamp_param(name, getattr(params.envelope, name))
                   for name in ENVELOPE_RANGES}
            clamped.append((values, env))

        with self.synth.edit() as ops:
            for op, (values, env) in zip(ops, clamped):
                for name, value in values.items():
                    setattr(op, name, value)
                for name, value in env.items():
                    setattr(op.envelope, name, value)

    def load_preset(self, name: str) -> None:
        """Apply a factory patch by name."""
        self.apply_patch(get_preset(name))

    def snapshot(self) -> PatchParams:
        """Current engine settings."""
        return self.synth.get_patch()

    def note_on(self) -> None:
        with self.synth.edit():
            self.synth.note_on()
            self._note_held = True

    def note_off(self) -> None:
        with self.synth.edit():
            self.synth.note_off()
            self._note_held = False

    def toggle_note(self) -> bool:
        """
        Flip between note-on and note-off, like a latching NOTE button.

        Returns:
            True if the note is now held
        """
        with self.synth.edit():
            if self._note_held:
                self.note_off()
            else:
                self.note_on()
            return self._note_held
