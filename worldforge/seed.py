from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import Any, List, Mapping, Union

from .models import WORLD_FORGE_VERSION, ResolvedForgeInput, ToneVector, WorldSeed
from .resolver import resolve_forge_input
from .rng import MAX_SEED, clamp_int, stable_hash
from .schemas import ForgeInput
from .text import unique_strings
from .tone import build_tone_vector

logger = logging.getLogger(__name__)

MAX_THEME_TAGS = 36

# Axis value at or above which the adjective joins the theme tags.
TONE_TAG_THRESHOLDS = [
    ("darkness", 0.72, "bleak"),
    ("whimsy", 0.62, "playful"),
    ("brutality", 0.68, "punishing"),
    ("absurdity", 0.62, "ridiculous"),
    ("cosmic", 0.66, "cosmic"),
    ("heroic", 0.68, "heroic"),
    ("tragic", 0.62, "tragic"),
    ("cozy", 0.62, "cozy"),
]


def stable_serialize(value: Any) -> str:
    """Key-sorted compact JSON, so dict ordering never changes the hash."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def build_theme_tags(forge: ResolvedForgeInput, tone: ToneVector) -> List[str]:
    tags = [
        *forge.selected_presets,
        forge.tone_preset,
        forge.lethality,
        forge.magic_density,
        forge.tech_level,
        forge.faction_complexity,
        forge.world_size,
        forge.starting_region_type,
        forge.villain_archetype,
        *forge.creature_focus,
    ]
    tags.extend(tag for axis, cutoff, tag in TONE_TAG_THRESHOLDS if getattr(tone, axis) >= cutoff)
    return unique_strings(tag.replace("_", " ") for tag in tags)[:MAX_THEME_TAGS]


def build_world_seed(raw: Union[ForgeInput, Mapping[str, Any]]) -> WorldSeed:
    """Resolve ``raw`` and derive the immutable WorldSeed for it.

    Identical input, manual seed included, always yields an identical seed.
    """
    forge = resolve_forge_input(raw)
    material = stable_serialize({
        "title": forge.title,
        "description": forge.description,
        "forge": asdict(forge),
    })
    seed_hash = stable_hash(material)
    manual = "auto" if forge.manual_seed_override is None else forge.manual_seed_override
    seed_number = clamp_int(int(seed_hash[:8], 16), 1, MAX_SEED)

    preset_trace = unique_strings([*forge.selected_presets, forge.tone_preset])
    tone = build_tone_vector(forge, preset_trace)

    seed = WorldSeed(
        world_forge_version=WORLD_FORGE_VERSION,
        seed_string=f"{manual}:{seed_hash}",
        seed_number=seed_number,
        theme_tags=build_theme_tags(forge, tone),
        tone_vector=tone,
        preset_trace=preset_trace,
        forge_input=forge,
    )
    logger.debug("Built world seed %d for '%s'", seed_number, forge.title)
    return seed
