"""
Amplitude shaping for operator outputs.
Headroom clipping and fixed-step bit-crushing, scalar and vectorised.
"""

import math

import numpy as np


# Operators never emit more than this before quantization.
HEADROOM = 0.9


def _validate_signal(signal: np.ndarray) -> None:
    """Validate input for the vectorised processors."""
    if not isinstance(signal, np.ndarray):
        raise TypeError("Input signal must be a numpy array")


def _validate_bit_depth(bit_depth: int) -> None:
    if not (1 <= bit_depth <= 32):
        raise ValueError(f"Bit depth must be between 1 and 32, got {bit_depth}")


def quantization_step(bit_depth: int) -> float:
    """
    Size of one quantization step for a bit depth.

    Example:
        >>> quantization_step(8)
        0.00390625
    """
    return 2.0 ** -bit_depth


def hard_clip(sample: float, threshold: float = HEADROOM) -> float:
    """
    Clamp a sample to [-threshold, threshold].

    Example:
        >>> hard_clip(1.7)
        0.9
        >>> hard_clip(-0.25)
        -0.25
    """
    if sample > threshold:
        return threshold
    if sample < -threshold:
        return -threshold
    return sample


def crush(sample: float, bit_depth: int) -> float:
    """
    Quantize one sample to a step of ``2**-bit_depth``.

    Rounds half away from zero and clamps to [-1, 1]. Crushing an already
    crushed sample returns it unchanged. NaN passes straight through.

    Args:
        sample: Input sample
        bit_depth: Bits of resolution (typically 8-16)

    Returns:
        Quantized sample in [-1, 1]

    Example:
        >>> crush(0.3, 2)
        0.25
        >>> crush(-0.375, 3)
        -0.375
        >>> crush(crush(0.123456, 8), 8) == crush(0.123456, 8)
        True
    """
    if math.isnan(sample):
        return sample
    if sample >= 1.0:
        return 1.0
    if sample <= -1.0:
        return -1.0

    step = 2.0 ** -bit_depth
    scaled = sample / step
    rounded = math.copysign(math.floor(abs(scaled) + 0.5), scaled)
    out = rounded * step
    if out > 1.0:
        return 1.0
    if out < -1.0:
        return -1.0
    return out


def apply_bitcrush(signal: np.ndarray, bit_depth: int) -> np.ndarray:
    """
    Apply the same fixed-step quantization as ``crush`` to a whole signal.

    Unlike a normalising bitcrusher the step size does not depend on the
    signal's peak, so quiet passages lose resolution too.

    Args:
        signal: Input audio signal (numpy array)
        bit_depth: Bits of resolution (1-32)

    Returns:
        numpy.ndarray: Crushed signal, clamped to [-1, 1] (same length as input)

    Example:
        >>> apply_bitcrush(np.array([0.3, -0.3, 2.0]), 2).tolist()
        [0.25, -0.25, 1.0]
    """
    _validate_signal(signal)
    _validate_bit_depth(bit_depth)

    step = 2.0 ** -bit_depth
    scaled = np.asarray(signal, dtype=np.float64) / step
    rounded = np.sign(scaled) * np.floor(np.abs(scaled) + 0.5)
    return np.clip(rounded * step, -1.0, 1.0)


if __name__ == "__main__":
    import doctest
    doctest.testmod()

    sine = np.sin(2 * np.pi * 440 * np.arange(4410) / 44100)
    for bits in (16, 12, 8, 4):
        crushed = apply_bitcrush(sine, bits)
        levels = len(np.unique(crushed))
        print(f"✓ {bits:2d}-bit: {levels} distinct levels")
