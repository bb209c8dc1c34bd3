from __future__ import annotations

from typing import Dict, Iterable

from .models import TONE_AXES, ResolvedForgeInput, ToneVector
from .presets import DEFAULT_PRESET_KEY, PRESETS
from .rng import clamp01, clamp_int

PRESET_KEEP = 0.64
PRESET_PULL = 0.36

LETHALITY_DELTAS: Dict[str, Dict[str, float]] = {
    "low": {"brutality": -0.18, "darkness": -0.08, "cozy": 0.16},
    "medium": {},
    "high": {"brutality": 0.2, "darkness": 0.12, "tragic": 0.08},
    "brutal": {"brutality": 0.34, "darkness": 0.2, "tragic": 0.16, "cozy": -0.16},
}

MAGIC_DENSITY_DELTAS: Dict[str, Dict[str, float]] = {
    "low": {"cosmic": -0.16},
    "medium": {},
    "high": {"cosmic": 0.18, "heroic": 0.04},
    "wild": {"cosmic": 0.32, "absurdity": 0.2, "tragic": 0.06},
}

TECH_LEVEL_DELTAS: Dict[str, Dict[str, float]] = {
    "primitive": {"cozy": 0.06, "heroic": 0.08, "cosmic": 0.06},
    "medieval": {},
    "steampunk": {"absurdity": 0.1, "brutality": 0.06},
    "arcane-tech": {"cosmic": 0.22, "absurdity": 0.1, "darkness": 0.04},
}

# (keywords, deltas) applied once per enabled toggle for each keyword group it hits.
TOGGLE_RULES = [
    (("hard", "nightmare"), {"brutality": 0.08, "darkness": 0.06}),
    (("cozy", "relax"), {"cozy": 0.1, "brutality": -0.06}),
    (("chaos", "wild"), {"absurdity": 0.1, "cosmic": 0.06}),
    (("hero", "story"), {"heroic": 0.09}),
]


def blend_presets(base: ToneVector, presets: Iterable[str]) -> ToneVector:
    """Pull ``base`` toward each preset's bias in order, 64/36 old/new per axis."""
    values = base.as_dict()
    for key in presets:
        bias = PRESETS[key].tone_bias
        for axis in TONE_AXES:
            values[axis] = values[axis] * PRESET_KEEP + getattr(bias, axis) * PRESET_PULL
    return ToneVector(**values)


def _shift(values: Dict[str, float], deltas: Dict[str, float], scale: float = 1.0) -> None:
    for axis, delta in deltas.items():
        values[axis] += delta * scale


def apply_toggle_adjustments(tone: ToneVector, forge: ResolvedForgeInput) -> ToneVector:
    """Apply the style knobs as additive deltas, then clamp every axis to [0, 1].

    Order matters for clamping, so adjustments run in a fixed sequence: humor,
    lethality, magic density, tech level, corruption, divine interference,
    player toggles.
    """
    values = tone.as_dict()

    humor = clamp01(forge.humor_level / 5)
    values["whimsy"] += (humor - 0.35) * 0.38
    values["absurdity"] += humor * 0.24
    values["darkness"] -= humor * 0.12
    values["cozy"] += humor * 0.18

    _shift(values, LETHALITY_DELTAS.get(forge.lethality, {}))
    _shift(values, MAGIC_DENSITY_DELTAS.get(forge.magic_density, {}))
    _shift(values, TECH_LEVEL_DELTAS.get(forge.tech_level, {}))

    corruption = clamp_int(forge.corruption_level, 0, 5)
    _shift(values, {"darkness": 0.055, "tragic": 0.04, "cozy": -0.038}, corruption)

    divine = clamp_int(forge.divine_interference_level, 0, 5)
    _shift(values, {"cosmic": 0.06, "heroic": 0.028, "tragic": 0.02}, divine)

    for key, enabled in forge.player_toggles.items():
        if not enabled:
            continue
        token = key.lower()
        for keywords, deltas in TOGGLE_RULES:
            if any(word in token for word in keywords):
                _shift(values, deltas)

    return ToneVector(**{axis: clamp01(values[axis]) for axis in TONE_AXES})


def build_tone_vector(forge: ResolvedForgeInput, preset_trace: Iterable[str]) -> ToneVector:
    trace = list(preset_trace) or [DEFAULT_PRESET_KEY]
    return apply_toggle_adjustments(blend_presets(ToneVector(), trace), forge)
