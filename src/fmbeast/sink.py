"""
Output-side helpers: sample-format conversion and offline rendering.

``OfflineRenderer`` drives an FMSynth the way an audio device callback does,
pulling fixed-size blocks through one preallocated buffer, and converts each
block to the requested device format.
"""

from __future__ import annotations

import warnings
from enum import Enum
from pathlib import Path
from typing import Union

import numpy as np
import soundfile as sf

from .synth.engine import FMSynth


DEFAULT_BLOCK_SIZE = 512

_I16_MAX = 32767


class SampleFormat(Enum):
    """Device sample formats."""
    F32 = "float32"
    I16 = "int16"
    U16 = "uint16"


def convert_block(samples: np.ndarray, fmt: SampleFormat) -> np.ndarray:
    """
    Convert float samples in [-1, 1] to a device sample format.

    I16 truncates ``s * 32767`` toward zero; U16 is the I16 value offset by
    32768. Out-of-range input is clipped with a warning.

    Args:
        samples: Float samples (numpy array)
        fmt: Target SampleFormat

    Returns:
        numpy.ndarray in the target dtype

    Example:
        >>> convert_block(np.array([1.0, -1.0, 0.5, 0.0]), SampleFormat.I16).tolist()
        [32767, -32767, 16383, 0]
        >>> convert_block(np.array([1.0, -1.0, 0.0]), SampleFormat.U16).tolist()
        [65535, 1, 32768]
    """
    if not isinstance(samples, np.ndarray):
        raise TypeError("Samples must be a numpy array")

    samples = samples.astype(np.float32, copy=False)
    if samples.size and np.nanmax(np.abs(samples)) > 1.0:
        warnings.warn("Samples outside [-1, 1] clipped during format conversion")
        samples = np.clip(samples, -1.0, 1.0)

    if fmt is SampleFormat.F32:
        return samples
    ints = np.trunc(samples * _I16_MAX).astype(np.int32)
    if fmt is SampleFormat.I16:
        return ints.astype(np.int16)
    if fmt is SampleFormat.U16:
        return (ints + 32768).astype(np.uint16)
    raise ValueError(f"Unsupported sample format: {fmt}")


class OfflineRenderer:
    """
    Pull-model renderer emulating a device callback.

    Args:
        synth: Engine to render from
        block_size: Samples per callback (positive)
        sample_format: Output SampleFormat

    Example:
        >>> renderer = OfflineRenderer(FMSynth(44100), block_size=256)
        >>> audio = renderer.render(0.1)
        >>> len(audio), audio.dtype
        (4410, dtype('float32'))
    """

    def __init__(self, synth: FMSynth, block_size: int = DEFAULT_BLOCK_SIZE,
                 sample_format: SampleFormat = SampleFormat.F32):
        if block_size <= 0:
            raise ValueError(f"Block size must be positive, got {block_size}")
        self.synth = synth
        self.block_size = block_size
        self.sample_format = sample_format
        self._buffer = np.zeros(block_size, dtype=np.float32)

    def pull(self, frames: int) -> np.ndarray:
        """
        Render ``frames`` samples the way one device callback would.

        Args:
            frames: Samples requested (at most block_size)

        Returns:
            Converted block (a fresh array)
        """
        if not 0 <= frames <= self.block_size:
            raise ValueError(f"Frame count must be 0-{self.block_size}, got {frames}")
        view = self._buffer[:frames]
        self.synth.render_block(view)
        return convert_block(view, self.sample_format).copy()

    def render(self, duration: float, gate: float = 0.8) -> np.ndarray:
        """
        Render one note: note-on at the start, note-off after ``gate * duration``.

        The release is issued at the exact gate sample, splitting a block if
        needed.

        Args:
            duration: Total length in seconds (positive)
            gate: Fraction of the duration the note is held (0..1)

        Returns:
            Audio in the renderer's sample format
        """
        if duration <= 0:
            raise ValueError(f"Duration must be positive, got {duration}")
        if not 0.0 <= gate <= 1.0:
            raise ValueError(f"Gate must be within 0..1, got {gate}")

        total = int(duration * self.synth.sample_rate)
        release_at = int(total * gate)
        blocks = []

        self.synth.note_on()
        released = False
        pos = 0
        while pos < total:
            frames = min(self.block_size, total - pos)
            if not released and pos <= release_at < pos + frames:
                head = release_at - pos
                if head:
                    blocks.append(self.pull(head))
                self.synth.note_off()
                released = True
                frames -= head
                pos += head
            blocks.append(self.pull(frames))
            pos += frames

        if not blocks:
            return np.zeros(0, dtype=np.dtype(self.sample_format.value))
        return np.concatenate(blocks)


def write_wav(path: Union[str, Path], audio: np.ndarray, sample_rate: int) -> Path:
    """
    Write mono audio to a WAV file.

    Float input is written as 32-bit float, int16 input as PCM_16.
    """
    if audio.dtype == np.uint16:
        raise ValueError("WAV export takes float or int16 samples, not offset-binary uint16")
    path = Path(path)
    subtype = "PCM_16" if audio.dtype == np.int16 else "FLOAT"
    sf.write(str(path), audio, int(sample_rate), subtype=subtype)
    return path
