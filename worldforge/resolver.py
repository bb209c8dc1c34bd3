"""Input resolution: validate a raw ForgeInput and fill every unset style field.

The policy depends on ``randomization_mode``:

* ``fixed`` - unset fields take static defaults.
* ``themeLockedRandom`` - unset fields are drawn from their pools.
* ``fullyRandom`` - every style field is drawn, caller values ignored.

Draws use a *prime* seed hashed from title, description and manual seed.
The prime only resolves fields; the world seed is derived later from the
fully resolved input.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence, TypeVar, Union

from .models import ResolvedForgeInput
from .presets import DEFAULT_PRESET_KEY, PRESET_KEYS, PRESETS
from .rng import MAX_SEED, clamp_int, pick_unique, rng_int, rng_pick, stable_hash
from .schemas import (
    COMPLEXITY_LEVELS,
    DENSITY_LEVELS,
    LETHALITY_LEVELS,
    TECH_LEVELS,
    WORLD_SIZES,
    ForgeInput,
    parse_input,
)
from .text import unique_strings

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULTS = {
    "humor_level": 2,
    "lethality": "medium",
    "magic_density": "medium",
    "tech_level": "medieval",
    "faction_complexity": "medium",
    "world_size": "medium",
    "starting_region_type": "borderlands",
    "villain_archetype": "warlord",
    "corruption_level": 2,
    "divine_interference_level": 2,
    "randomization_mode": "fixed",
}

CREATURE_FOCUS_POOL = [
    "undead",
    "beasts",
    "vampires",
    "ninjas",
    "dragons",
    "cats",
    "dogs",
    "cosmic horror",
    "slimes",
    "constructs",
    "bandits",
    "spirits",
]

STARTING_REGION_POOL = [
    "borderlands",
    "highlands",
    "marsh frontier",
    "sun plains",
    "storm coast",
    "rift basin",
    "obsidian district",
]

VILLAIN_ARCHETYPE_POOL = [
    "fallen hero",
    "immortal tyrant",
    "cackling technomancer",
    "chessmaster bishop",
    "famine prophet",
    "charming usurper",
    "laughing void saint",
    "cat emperor",
]


def normalize_creature_focus(value: Union[str, Sequence[str], None]) -> List[str]:
    if isinstance(value, str):
        return unique_strings([value])
    if value:
        return unique_strings(str(entry) for entry in value)
    return []


def parse_manual_seed(value: Any) -> Optional[Union[int, str]]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return clamp_int(value, 0, MAX_SEED)
    if isinstance(value, str):
        return value.strip() or None
    return None


def prime_seed(title: str, description: str, manual_seed: Optional[Union[int, str]]) -> int:
    token = "auto" if manual_seed is None else manual_seed
    digest = stable_hash(f"{title}::{description}::{token}")
    return clamp_int(int(digest[:8], 16), 1, MAX_SEED)


class _Picker:
    """Applies the randomization-mode policy to one optional field at a time."""

    def __init__(self, mode: str, seed: int):
        self.full = mode == "fullyRandom"
        self.locked = mode == "themeLockedRandom"
        self.seed = seed

    def choose(self, provided: Optional[T], fallback: T, pool: Sequence[T], label: str) -> T:
        if self.full:
            return rng_pick(self.seed, label, pool)
        if provided is not None:
            return provided
        if self.locked:
            return rng_pick(self.seed, label, pool)
        return fallback

    def choose_text(self, provided: Optional[str], fallback: str, pool: Sequence[str], label: str) -> str:
        # Locked-random draws for free-text fields use their own label stream.
        if self.full:
            return rng_pick(self.seed, label, pool)
        if provided and provided.strip():
            return provided.strip()
        if self.locked:
            return rng_pick(self.seed, f"{label}:locked", pool)
        return fallback

    def choose_level(self, provided: Optional[int], fallback: int, label: str) -> int:
        if self.full:
            value = rng_int(self.seed, label, 0, 5)
        elif provided is not None:
            value = provided
        elif self.locked:
            value = rng_int(self.seed, f"{label}:locked", 0, 5)
        else:
            value = fallback
        return clamp_int(value, 0, 5)


def _resolve_presets(parsed: ForgeInput, picker: _Picker) -> List[str]:
    draw_preset: Callable[[str], str] = lambda label: rng_pick(picker.seed, label, PRESET_KEYS)

    if picker.full:
        tone_preset = draw_preset("forge:tonePreset")
    elif parsed.tone_preset:
        tone_preset = parsed.tone_preset
    elif picker.locked:
        tone_preset = draw_preset("forge:tonePreset")
    else:
        tone_preset = DEFAULT_PRESET_KEY

    if picker.full:
        selected = unique_strings([tone_preset, draw_preset("forge:preset:1")])
    elif parsed.selected_presets:
        selected = unique_strings([tone_preset, *parsed.selected_presets])
    else:
        selected = [tone_preset]
    return selected


def _resolve_focus(parsed: ForgeInput, picker: _Picker, tone_preset: str) -> List[str]:
    provided = normalize_creature_focus(parsed.creature_focus)
    if picker.full:
        return pick_unique(picker.seed, "forge:focus", CREATURE_FOCUS_POOL, 2)
    if provided:
        return provided
    if picker.locked:
        return pick_unique(picker.seed, "forge:focus:locked", CREATURE_FOCUS_POOL, 2)
    return pick_unique(picker.seed, f"forge:focus:{tone_preset}", PRESETS[tone_preset].creature_bias, 2)


def resolve_forge_input(raw: Union[ForgeInput, Mapping[str, Any]]) -> ResolvedForgeInput:
    """Validate ``raw`` and return a ForgeInput with no style field left unset.

    Raises:
        ValidationError: If ``raw`` violates the ForgeInput schema
    """
    parsed = parse_input(ForgeInput, raw)
    manual_seed = parse_manual_seed(parsed.manual_seed_override)
    mode = parsed.randomization_mode or DEFAULTS["randomization_mode"]
    picker = _Picker(mode, prime_seed(parsed.title, parsed.description, manual_seed))

    selected_presets = _resolve_presets(parsed, picker)
    tone_preset = selected_presets[0]

    resolved = ResolvedForgeInput(
        title=parsed.title,
        description=parsed.description,
        tone_preset=tone_preset,
        selected_presets=selected_presets,
        humor_level=picker.choose(parsed.humor_level, DEFAULTS["humor_level"], [0, 1, 2, 3, 4, 5], "forge:humor"),
        lethality=picker.choose(parsed.lethality, DEFAULTS["lethality"], LETHALITY_LEVELS, "forge:lethality"),
        magic_density=picker.choose(
            parsed.magic_density, DEFAULTS["magic_density"], DENSITY_LEVELS, "forge:magicDensity"
        ),
        tech_level=picker.choose(parsed.tech_level, DEFAULTS["tech_level"], TECH_LEVELS, "forge:techLevel"),
        creature_focus=_resolve_focus(parsed, picker, tone_preset),
        faction_complexity=picker.choose(
            parsed.faction_complexity, DEFAULTS["faction_complexity"], COMPLEXITY_LEVELS, "forge:factionComplexity"
        ),
        world_size=picker.choose(parsed.world_size, DEFAULTS["world_size"], WORLD_SIZES, "forge:worldSize"),
        starting_region_type=picker.choose_text(
            parsed.starting_region_type, DEFAULTS["starting_region_type"], STARTING_REGION_POOL,
            "forge:startingRegion",
        ),
        villain_archetype=picker.choose_text(
            parsed.villain_archetype, DEFAULTS["villain_archetype"], VILLAIN_ARCHETYPE_POOL, "forge:villain"
        ),
        corruption_level=picker.choose_level(
            parsed.corruption_level, DEFAULTS["corruption_level"], "forge:corruption"
        ),
        divine_interference_level=picker.choose_level(
            parsed.divine_interference_level, DEFAULTS["divine_interference_level"], "forge:divine"
        ),
        randomization_mode=mode,
        player_toggles=dict(parsed.player_toggles or {}),
        manual_seed_override=manual_seed,
    )
    logger.debug(
        "Resolved forge input '%s' (mode=%s, presets=%s)", resolved.title, mode, ",".join(selected_presets)
    )
    return resolved
