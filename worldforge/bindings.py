"""Payload envelopes handed to narrative collaborators.

Each builder slices the campaign down to what a consumer needs. Slice limits
are clamped, so a bad limit degrades to a sane size instead of failing.
"""

from __future__ import annotations

import math
from dataclasses import asdict
from typing import Any, Dict, Optional

from .generator import summarize_world_context
from .models import WORLD_FORGE_VERSION, CampaignContext


def clamp_slice_limit(value: Optional[float], fallback: int, lo: int = 1, hi: int = 24) -> int:
    if value is None:
        return fallback
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(parsed):
        return fallback
    return max(lo, min(hi, math.floor(parsed)))


def build_world_seed_payload(
    campaign: CampaignContext,
    include_title_description: bool = False,
    include_legacy_seed: bool = False,
    include_theme_tags: bool = False,
    include_tone_vector: bool = False,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    if include_title_description:
        payload["title"] = title if title is not None else campaign.title
        payload["description"] = description if description is not None else campaign.description

    payload["seed_number"] = campaign.world_seed.seed_number
    payload["seed_string"] = campaign.world_seed.seed_string

    if include_legacy_seed:
        payload["seed"] = campaign.world_seed.seed_number
    if include_theme_tags:
        payload["theme_tags"] = list(campaign.world_seed.theme_tags)
    if include_tone_vector:
        payload["tone_vector"] = campaign.world_seed.tone_vector.as_dict()
    return payload


def build_runtime_world_bindings(
    campaign: CampaignContext,
    include_campaign_context: bool = True,
    include_biome_atmosphere: bool = False,
    directive_limit: Optional[float] = None,
    core_conflict_limit: Optional[float] = None,
    faction_tension_limit: Optional[float] = None,
) -> Dict[str, Any]:
    """Everything a running narrator needs for one turn."""
    directive_limit = clamp_slice_limit(directive_limit, 6, 1, 12)
    core_conflict_limit = clamp_slice_limit(core_conflict_limit, 4, 1, 12)
    faction_tension_limit = clamp_slice_limit(faction_tension_limit, 4, 1, 16)

    world = campaign.world_context
    bindings: Dict[str, Any] = {
        "world_forge_version": campaign.world_forge_version or WORLD_FORGE_VERSION,
        "world_context": summarize_world_context(campaign),
        "dm_context": {
            "profile": asdict(campaign.dm_context.dm_behavior_profile),
            "directives": campaign.dm_context.narrative_directives[:directive_limit],
        },
        "world_state": asdict(world.world_state),
        "moral_climate": world.world_bible.moral_climate,
        "core_conflicts": world.world_bible.core_conflicts[:core_conflict_limit],
        "faction_tensions": world.faction_graph.active_tensions[:faction_tension_limit],
    }

    if include_campaign_context:
        bindings["campaign_context"] = asdict(campaign)

    if include_biome_atmosphere:
        bindings["biome_atmosphere"] = [
            {
                "id": region.id,
                "name": region.name,
                "biome": region.dominant_biome,
                "corruption": region.corruption,
                "dungeon_density": region.dungeon_density,
            }
            for region in world.biome_map.regions[:6]
        ]
    return bindings


def build_dm_context_payload(
    campaign: CampaignContext,
    include_profile: bool = True,
    narrative_limit: Optional[float] = None,
    tactical_limit: Optional[float] = None,
    use_directives_key: bool = False,
) -> Dict[str, Any]:
    narrative_limit = clamp_slice_limit(narrative_limit, 6, 1, 12)
    tactical_limit = clamp_slice_limit(tactical_limit, 5, 1, 12)
    dm = campaign.dm_context

    payload: Dict[str, Any] = {}
    if include_profile:
        payload["profile"] = asdict(dm.dm_behavior_profile)

    if use_directives_key:
        payload["directives"] = dm.narrative_directives[:narrative_limit]
    else:
        payload["narrative_directives"] = dm.narrative_directives[:narrative_limit]
        payload["tactical_directives"] = dm.tactical_directives[:tactical_limit]
    return payload
