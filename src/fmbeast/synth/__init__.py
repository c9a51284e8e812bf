"""
Synthesis core: envelopes, operators and the 4-operator FM engine.
"""

from .envelope import Envelope, Stage
from .operator import Operator
from .engine import FMSynth, DEFAULT_SAMPLE_RATE
from .presets import (
    PRESETS,
    EnvelopeParams,
    OperatorParams,
    PatchParams,
    get_preset,
    list_presets,
)

__all__ = [
    # Core
    "Envelope",
    "Stage",
    "Operator",
    "FMSynth",
    "DEFAULT_SAMPLE_RATE",
    # Parameter classes
    "EnvelopeParams",
    "OperatorParams",
    "PatchParams",
    # Presets
    "PRESETS",
    "get_preset",
    "list_presets",
]
