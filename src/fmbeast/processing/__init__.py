"""
Processing helpers for FM output: quantization, clipping and filtering.
"""

from .effects import (
    HEADROOM,
    apply_bitcrush,
    crush,
    hard_clip,
    quantization_step,
)

from .filters import (
    highpass_filter,
    remove_dc,
)

__all__ = [
    # Effects
    "HEADROOM",
    "apply_bitcrush",
    "crush",
    "hard_clip",
    "quantization_step",
    # Filters
    "highpass_filter",
    "remove_dc",
]
