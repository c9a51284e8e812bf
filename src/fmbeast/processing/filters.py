"""
Filters for rendered FM output.
"""

import numpy as np
from scipy import signal


def _validate_filter_params(input_signal: np.ndarray, cutoff_freq: float, sample_rate: int) -> None:
    """Validate common parameters for filter functions."""
    if not isinstance(input_signal, np.ndarray):
        raise TypeError("Input signal must be a numpy array")
    if sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got {sample_rate}")
    if cutoff_freq <= 0:
        raise ValueError(f"Cutoff frequency must be positive, got {cutoff_freq}")
    if cutoff_freq >= sample_rate / 2:
        raise ValueError(f"Cutoff frequency {cutoff_freq}Hz must be less than Nyquist frequency {sample_rate/2}Hz")


def highpass_filter(input_signal: np.ndarray, cutoff_freq: float, sample_rate: int = 44100) -> np.ndarray:
    """
    Apply a zero-phase Butterworth highpass.

    Args:
        input_signal: Input audio signal (numpy array)
        cutoff_freq: Cutoff frequency in Hz (positive, < sample_rate/2)
        sample_rate: Sample rate in Hz (default 44100)

    Returns:
        numpy.ndarray: Filtered audio signal (same length as input)

    Example:
        >>> x = np.random.normal(0, 0.1, 1000)
        >>> len(highpass_filter(x, 100.0)) == len(x)
        True
    """
    _validate_filter_params(input_signal, cutoff_freq, sample_rate)

    nyquist = sample_rate / 2
    b, a = signal.butter(2, cutoff_freq / nyquist, btype='high', analog=False)

    # filtfilt needs a few samples of padding to work with
    if len(input_signal) <= 3 * max(len(a), len(b)):
        return input_signal.copy()
    return signal.filtfilt(b, a, input_signal)


def remove_dc(input_signal: np.ndarray, sample_rate: int = 44100, cutoff_freq: float = 10.0) -> np.ndarray:
    """
    Strip DC offset and sub-audio drift from a rendered signal.

    Aggressive self-feedback on an unwrapped phase can park an operator on a
    slowly drifting value; this removes that before the render is written out.

    Example:
        >>> x = np.full(4410, 0.5) + 0.1 * np.sin(2 * np.pi * 440 * np.arange(4410) / 44100)
        >>> abs(float(np.mean(remove_dc(x)))) < 0.02
        True
    """
    return highpass_filter(input_signal, cutoff_freq, sample_rate)


if __name__ == "__main__":
    import doctest
    doctest.testmod()
