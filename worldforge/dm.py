from __future__ import annotations

import logging

from .models import DMBehaviorProfile, DMContext, WorldSeed
from .rng import clamp01, clamp_int, round_half_up

logger = logging.getLogger(__name__)

NARRATIVE_DIRECTIVES = [
    "Keep narration anchored to seeded conflicts, faction tensions, and biome pressure.",
    "Reward intelligent risk occasionally, but punish sloppy certainty quickly.",
    "Use moral climate as a persistent filter for consequences and NPC reactions.",
    "Reference at least one world-specific noun every turn where practical.",
    "Mischief is allowed; contradiction is not.",
    "Preserve deterministic logic and avoid arbitrary outcomes.",
]

TACTICAL_DIRECTIVES = [
    "Escalate villain pressure when player actions increase chaos or brutality.",
    "Thread faction relationships through rumors, shop tone, and encounter framing.",
    "Use biome atmosphere to modulate threat pacing and rewards.",
    "Mirror generosity with temporary opportunities, not permanent safety.",
    "Condense repeated status outcomes while preserving tactical readability.",
]

MIN_MEMORY_DEPTH = 4
MAX_MEMORY_DEPTH = 18


def generate_dm_behavior_profile(seed: WorldSeed) -> DMBehaviorProfile:
    """Derive how the narrator should lean: cruelty, generosity, chaos, fairness, humor."""
    tone = seed.tone_vector
    chaos = clamp01(0.16 + tone.absurdity * 0.52 + tone.cosmic * 0.22)
    fairness = clamp01(0.42 + tone.heroic * 0.22 + tone.cozy * 0.16 - chaos * 0.2)
    return DMBehaviorProfile(
        cruelty_bias=clamp01(0.22 + tone.darkness * 0.42 + tone.brutality * 0.34 - tone.cozy * 0.26),
        generosity_bias=clamp01(0.22 + tone.heroic * 0.32 + tone.cozy * 0.34 - tone.darkness * 0.22),
        chaos_bias=chaos,
        fairness_bias=fairness,
        humor_bias=clamp01(0.08 + tone.whimsy * 0.55 + tone.absurdity * 0.2 - tone.brutality * 0.12),
        memory_depth=clamp_int(
            MIN_MEMORY_DEPTH + round_half_up(fairness * 8 + tone.cosmic * 4),
            MIN_MEMORY_DEPTH,
            MAX_MEMORY_DEPTH,
        ),
    )


def build_dm_context(seed: WorldSeed, profile: DMBehaviorProfile) -> DMContext:
    return DMContext(
        world_seed=seed,
        dm_behavior_profile=profile,
        narrative_directives=list(NARRATIVE_DIRECTIVES),
        tactical_directives=list(TACTICAL_DIRECTIVES),
    )
