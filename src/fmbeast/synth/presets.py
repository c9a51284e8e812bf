"""
Patch parameters and factory patches for the 4-operator FM synth.

A patch is plain data: ``FMSynth.set_patch`` copies it onto live operators.
Operator order is fixed: index 0 is the carrier, 1-3 the modulator chain
(3 -> 2 -> 1 -> 0).
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field


NUM_OPERATORS = 4


@dataclass
class EnvelopeParams:
    """ADSR settings for one operator."""
    attack: float = 0.01
    decay: float = 0.05
    sustain: float = 0.6
    release: float = 0.2

    def __post_init__(self):
        for name in ("attack", "decay", "release"):
            if getattr(self, name) <= 0:
                raise ValueError(f"Envelope {name} must be positive, got {getattr(self, name)}")
        if not 0.0 <= self.sustain <= 1.0:
            raise ValueError(f"Sustain must be within 0..1, got {self.sustain}")


@dataclass
class OperatorParams:
    """Parameters for a single operator."""
    frequency: float = 440.0
    amplitude: float = 1.0
    modulation_ratio: float = 1.0
    feedback_amount: float = 0.0
    hard_sync_enabled: bool = False
    bit_depth: int = 16
    envelope: EnvelopeParams = field(default_factory=EnvelopeParams)

    def __post_init__(self):
        if self.frequency <= 0:
            raise ValueError(f"Frequency must be positive, got {self.frequency}")
        if self.amplitude < 0:
            raise ValueError(f"Amplitude must be non-negative, got {self.amplitude}")
        if self.modulation_ratio <= 0:
            raise ValueError(f"Modulation ratio must be positive, got {self.modulation_ratio}")
        if not 0.0 <= self.feedback_amount <= 1.0:
            raise ValueError(f"Feedback must be within 0..1, got {self.feedback_amount}")
        if self.bit_depth < 1:
            raise ValueError(f"Bit depth must be at least 1, got {self.bit_depth}")


@dataclass
class PatchParams:
    """Complete patch: exactly four operators, carrier first."""
    operators: list[OperatorParams] = field(
        default_factory=lambda: [OperatorParams() for _ in range(NUM_OPERATORS)]
    )

    def __post_init__(self):
        if len(self.operators) != NUM_OPERATORS:
            raise ValueError(f"PatchParams requires exactly {NUM_OPERATORS} operators, got {len(self.operators)}")


def _make_patch(op_configs: list[dict]) -> PatchParams:
    """Helper to build PatchParams from simplified config."""
    operators = []
    for cfg in op_configs:
        operators.append(OperatorParams(
            frequency=cfg.get("freq", 440.0),
            amplitude=cfg.get("amp", 1.0),
            modulation_ratio=cfg.get("ratio", 1.0),
            feedback_amount=cfg.get("feedback", 0.0),
            hard_sync_enabled=cfg.get("sync", False),
            bit_depth=cfg.get("bits", 16),
            envelope=EnvelopeParams(*cfg.get("adsr", (0.01, 0.05, 0.6, 0.2))),
        ))
    return PatchParams(operators=operators)


# =============================================================================
# Factory Patches
# =============================================================================

PRESETS: dict[str, PatchParams] = {}

# -----------------------------------------------------------------------------
# DEFAULT - Startup patch: irrational ratios, crushed and synced modulators
# -----------------------------------------------------------------------------
PRESETS["default"] = _make_patch([
    {"freq": 440.0, "amp": 1.0, "ratio": 1.0, "feedback": 0.0, "sync": False, "bits": 16},
    {"freq": 220.0, "amp": 0.8, "ratio": 1.618, "feedback": 0.05, "sync": True, "bits": 12},
    {"freq": 110.0, "amp": 0.6, "ratio": 2.414, "feedback": 0.1, "sync": True, "bits": 10},
    {"freq": 55.0, "amp": 0.4, "ratio": 3.732, "feedback": 0.15, "sync": True, "bits": 8},
])

# -----------------------------------------------------------------------------
# CLEAN_SINE - Carrier only, modulators silent
# -----------------------------------------------------------------------------
PRESETS["clean_sine"] = _make_patch([
    {"freq": 440.0, "amp": 1.0, "adsr": (0.005, 0.1, 1.0, 0.3)},
    {"freq": 440.0, "amp": 0.0},
    {"freq": 440.0, "amp": 0.0},
    {"freq": 440.0, "amp": 0.0},
])

# -----------------------------------------------------------------------------
# BELL - Long release, inharmonic modulators decaying faster than the carrier
# -----------------------------------------------------------------------------
PRESETS["bell"] = _make_patch([
    {"freq": 440.0, "amp": 1.0, "ratio": 1.0, "adsr": (0.002, 1.5, 0.2, 1.8)},
    {"freq": 440.0, "amp": 0.9, "ratio": 3.5, "adsr": (0.002, 0.6, 0.1, 1.0)},
    {"freq": 440.0, "amp": 0.5, "ratio": 1.41, "adsr": (0.002, 0.3, 0.0, 0.5)},
    {"freq": 440.0, "amp": 0.0, "ratio": 1.0},
])

# -----------------------------------------------------------------------------
# CRUSHED_BASS - Low carrier, heavy quantization on every stage
# -----------------------------------------------------------------------------
PRESETS["crushed_bass"] = _make_patch([
    {"freq": 55.0, "amp": 1.2, "ratio": 1.0, "bits": 8, "adsr": (0.005, 0.2, 0.7, 0.1)},
    {"freq": 55.0, "amp": 1.0, "ratio": 2.0, "feedback": 0.2, "sync": True, "bits": 8},
    {"freq": 55.0, "amp": 0.5, "ratio": 0.5, "bits": 8},
    {"freq": 55.0, "amp": 0.0, "ratio": 1.0, "bits": 8},
])

# -----------------------------------------------------------------------------
# SYNC_LEAD - Synced feedback modulators for a harsh, buzzy lead
# -----------------------------------------------------------------------------
PRESETS["sync_lead"] = _make_patch([
    {"freq": 330.0, "amp": 1.0, "ratio": 1.0, "bits": 14, "adsr": (0.02, 0.3, 0.8, 0.25)},
    {"freq": 330.0, "amp": 1.5, "ratio": 2.0, "feedback": 0.3, "sync": True, "bits": 12},
    {"freq": 330.0, "amp": 1.0, "ratio": 3.0, "feedback": 0.4, "sync": True, "bits": 10},
    {"freq": 330.0, "amp": 0.8, "ratio": 0.5, "feedback": 0.5, "sync": True, "bits": 8},
])


def get_preset(name: str) -> PatchParams:
    """
    Get a factory patch by name.

    Returns a deep copy, so callers may edit it freely.

    Args:
        name: Patch name

    Returns:
        PatchParams instance

    Raises:
        KeyError: If the patch name is unknown
    """
    if name not in PRESETS:
        available = ", ".join(sorted(PRESETS.keys()))
        raise KeyError(f"Unknown preset '{name}'. Available: {available}")
    return copy.deepcopy(PRESETS[name])


def list_presets() -> list[str]:
    """Get list of available factory patch names."""
    return sorted(PRESETS.keys())
