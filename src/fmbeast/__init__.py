"""
fmbeast - a monophonic 4-operator FM synthesizer core.

Three modulators in series feed one carrier. Each operator carries its own
ADSR envelope, self-feedback from its raw phase, optional hard sync and a
bit-crusher.

Example:
    >>> from fmbeast import FMSynth, render_note
    >>> synth = FMSynth(sample_rate=44100)
    >>> synth.note_on()
    >>> block = synth.render_block([0.0] * 64)

    # Or render a whole note from a factory patch:
    >>> audio = render_note(220.0, 0.25, preset="bell")

Available patches:
- default: the startup patch (synced, crushed modulators)
- clean_sine: carrier only
- bell: inharmonic, long release
- crushed_bass: 8-bit everything
- sync_lead: heavy feedback through synced modulators
"""

from typing import Union

import numpy as np

from .synth import (
    DEFAULT_SAMPLE_RATE,
    PRESETS,
    Envelope,
    EnvelopeParams,
    FMSynth,
    Operator,
    OperatorParams,
    PatchParams,
    Stage,
    get_preset,
    list_presets,
)
from .control import Controller, PARAM_RANGES, clamp_param
from .processing import remove_dc
from .sink import (
    DEFAULT_BLOCK_SIZE,
    OfflineRenderer,
    SampleFormat,
    convert_block,
    write_wav,
)


def render_note(
    freq: float,
    duration: float,
    preset: Union[str, PatchParams] = "default",
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    gate: float = 0.8,
    dc_block: bool = False,
) -> np.ndarray:
    """
    Render a single note with the FM synthesizer.

    The carrier is tuned to ``freq``; modulators keep their frequency relative
    to the patch's carrier, so a patch transposes as a whole.

    Args:
        freq: Note frequency in Hz
        duration: Note duration in seconds
        preset: Patch name or PatchParams instance
        sample_rate: Audio sample rate
        gate: Fraction of the duration before note-off
        dc_block: Highpass the result to strip DC drift

    Returns:
        Mono audio as numpy array (float32, or float64 when dc_block is set)

    Example:
        >>> audio = render_note(440.0, 0.1)
        >>> len(audio)
        4410
    """
    if freq <= 0:
        raise ValueError(f"Frequency must be positive, got {freq}")
    patch = get_preset(preset) if isinstance(preset, str) else preset

    scale = freq / patch.operators[0].frequency
    synth = FMSynth(sample_rate=sample_rate, patch=patch)
    with synth.edit() as ops:
        for op in ops:
            op.frequency *= scale

    audio = OfflineRenderer(synth).render(duration, gate=gate)
    if dc_block:
        audio = remove_dc(audio.astype(np.float64), sample_rate)
    return audio


def render_midi_note(
    midi_note: int,
    duration: float,
    preset: Union[str, PatchParams] = "default",
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    gate: float = 0.8,
    dc_block: bool = False,
) -> np.ndarray:
    """
    Render a note from MIDI note number.

    Example:
        >>> audio = render_midi_note(69, 0.05)   # A4 (440Hz)
        >>> len(audio)
        2205
    """
    freq = 440.0 * (2 ** ((midi_note - 69) / 12.0))
    return render_note(freq, duration, preset, sample_rate, gate, dc_block)


__all__ = [
    # Engine
    "FMSynth",
    "Operator",
    "Envelope",
    "Stage",
    "DEFAULT_SAMPLE_RATE",
    # Parameter classes
    "PatchParams",
    "OperatorParams",
    "EnvelopeParams",
    # Presets
    "PRESETS",
    "get_preset",
    "list_presets",
    # Control
    "Controller",
    "PARAM_RANGES",
    "clamp_param",
    # Output
    "OfflineRenderer",
    "SampleFormat",
    "convert_block",
    "write_wav",
    "DEFAULT_BLOCK_SIZE",
    # Convenience functions
    "render_note",
    "render_midi_note",
]
