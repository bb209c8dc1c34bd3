"""Campaign assembly: one forge input in, one complete CampaignContext out."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, Mapping, Optional, Union

from .auxiliary import generate_creature_pools, generate_loot_flavor_profile, generate_magic_rules, generate_npc_style_rules
from .bible import generate_world_bible
from .biomes import generate_biome_map
from .dm import build_dm_context, generate_dm_behavior_profile
from .factions import generate_faction_graph
from .models import (
    WORLD_FORGE_VERSION,
    BiomeMap,
    CampaignContext,
    FactionGraph,
    FactionState,
    WorldBible,
    WorldContext,
    WorldSeed,
    WorldState,
    campaign_context_from_dict,
)
from .presets import PRESETS, template_to_preset
from .resolver import parse_manual_seed
from .rng import clamp_int, mean, round_half_up
from .schemas import ForgeInput, parse_patch
from .seed import build_world_seed
from .text import unique_strings

logger = logging.getLogger(__name__)

INITIAL_ACTIVE_TOWNS = 8
INITIAL_CONFLICT_RUMORS = 3
INITIAL_TENSION_RUMORS = 2


def build_initial_world_state(
    seed: WorldSeed, bible: WorldBible, biome_map: BiomeMap, faction_graph: FactionGraph
) -> WorldState:
    tone = seed.tone_vector
    return WorldState(
        seed_number=seed.seed_number,
        world_name=bible.world_name,
        tick=0,
        active_towns=biome_map.capital_towns[:INITIAL_ACTIVE_TOWNS],
        active_rumors=unique_strings([
            *bible.core_conflicts[:INITIAL_CONFLICT_RUMORS],
            *faction_graph.active_tensions[:INITIAL_TENSION_RUMORS],
        ]),
        collapsed_dungeons=[],
        villain_escalation=clamp_int(round_half_up((tone.darkness + tone.brutality) * 14), 0, 999),
        faction_states=[
            FactionState(faction_id=faction.id, power_level=faction.power_level)
            for faction in faction_graph.factions
        ],
        history=[],
    )


def build_campaign_context(raw: Union[ForgeInput, Mapping[str, Any]]) -> CampaignContext:
    """Generate a complete campaign from a raw forge input.

    The result is a pure function of the input: the same input always
    produces an identical CampaignContext.

    Raises:
        ValidationError: If ``raw`` violates the ForgeInput schema
    """
    seed = build_world_seed(raw)
    bible = generate_world_bible(seed)
    biome_map = generate_biome_map(seed)
    faction_graph = generate_faction_graph(seed, bible, biome_map)

    world_context = WorldContext(
        world_seed=seed,
        world_bible=bible,
        biome_map=biome_map,
        faction_graph=faction_graph,
        creature_pools=generate_creature_pools(seed, biome_map),
        npc_style_rules=generate_npc_style_rules(seed, bible),
        loot_flavor_profile=generate_loot_flavor_profile(seed),
        magic_rules=generate_magic_rules(seed),
        world_state=build_initial_world_state(seed, bible, biome_map, faction_graph),
    )
    dm_context = build_dm_context(seed, generate_dm_behavior_profile(seed))

    logger.info(
        "Forged '%s' as %s (seed %d, %d regions, %d factions)",
        seed.forge_input.title,
        bible.world_name,
        seed.seed_number,
        len(biome_map.regions),
        len(faction_graph.factions),
    )
    return CampaignContext(
        world_forge_version=WORLD_FORGE_VERSION,
        title=seed.forge_input.title,
        description=seed.forge_input.description,
        world_seed=seed,
        world_context=world_context,
        dm_context=dm_context,
    )


def from_template_key(
    title: str,
    description: str,
    template_key: str,
    manual_seed_override: Optional[Union[int, str]] = None,
    forge_patch: Optional[Mapping[str, Any]] = None,
) -> CampaignContext:
    """Build a campaign for a narrative template.

    The template's preset applies unless ``forge_patch`` names a tone preset.
    An invalid patch is ignored as a whole.
    """
    patch = parse_patch(forge_patch)
    patch.setdefault("tone_preset", template_to_preset(template_key))
    if patch.get("manual_seed_override") is None and manual_seed_override is not None:
        patch["manual_seed_override"] = manual_seed_override
    return build_campaign_context({"title": title, "description": description, **patch})


def _legacy_seed(profile: Mapping[str, Any]) -> Optional[Union[int, str]]:
    seed_record = profile.get("world_seed") or profile.get("worldSeed") or {}
    world_context = profile.get("world_context") or {}
    context_seed = world_context.get("world_seed") if isinstance(world_context, Mapping) else None
    for candidate in (
        profile.get("seed"),
        seed_record.get("seed") if isinstance(seed_record, Mapping) else None,
        seed_record.get("seed_number") if isinstance(seed_record, Mapping) else None,
        context_seed.get("seed_number") if isinstance(context_seed, Mapping) else None,
    ):
        if candidate is not None:
            return parse_manual_seed(candidate)
    return None


def coerce_campaign_context_from_profile(
    seed_title: str,
    seed_description: str,
    template_key: Optional[str] = None,
    world_profile: Optional[Mapping[str, Any]] = None,
) -> CampaignContext:
    """Recover a CampaignContext from a stored world profile.

    An embedded ``campaign_context`` document is reused when it deserializes
    cleanly. Otherwise the campaign is rebuilt from the embedded forge-input
    patch, legacy seed fields and the template's preset.
    """
    profile = world_profile or {}

    embedded = profile.get("campaign_context") or profile.get("campaignContext")
    if isinstance(embedded, Mapping):
        try:
            return campaign_context_from_dict(dict(embedded))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Embedded campaign context is unusable, rebuilding: %s", e)

    patch = parse_patch(profile.get("forge_input") or profile.get("forgeInput"))
    patch.setdefault("tone_preset", template_to_preset(template_key or "custom"))
    if patch.get("manual_seed_override") is None:
        legacy = _legacy_seed(profile)
        if legacy is not None:
            patch["manual_seed_override"] = legacy
    return build_campaign_context({"title": seed_title, "description": seed_description, **patch})


def build_world_profile_payload(
    source: str, campaign: CampaignContext, template_key: Optional[str] = None
) -> Dict[str, Any]:
    """Flat snake_case profile document for persistence collaborators."""
    world = campaign.world_context
    seed = campaign.world_seed
    presets = [PRESETS[key] for key in seed.preset_trace if key in PRESETS]
    return {
        "source": source,
        "world_forge_version": WORLD_FORGE_VERSION,
        "template_key": template_key,
        "seed": seed.seed_number,
        "seed_string": seed.seed_string,
        "theme_tags": list(seed.theme_tags),
        "tone_vector": seed.tone_vector.as_dict(),
        "preset_aesthetics": unique_strings(a for preset in presets for a in preset.aesthetics),
        "preset_dm_bias": {
            axis: round(mean((getattr(preset.dm_bias, axis) for preset in presets), default=0.5), 3)
            for axis in ("cruelty", "generosity", "chaos", "fairness", "humor")
        },
        "world_name": world.world_bible.world_name,
        "moral_climate": world.world_bible.moral_climate,
        "core_conflicts": list(world.world_bible.core_conflicts),
        "dominant_factions": list(world.world_bible.dominant_factions),
        "active_tensions": list(world.faction_graph.active_tensions),
        "campaign_context": asdict(campaign),
        "world_context": asdict(world),
        "dm_context": asdict(campaign.dm_context),
        "dm_behavior_profile": asdict(campaign.dm_context.dm_behavior_profile),
        "world_state": asdict(world.world_state),
    }


def summarize_world_context(campaign: CampaignContext) -> Dict[str, Any]:
    world = campaign.world_context
    return {
        "world_forge_version": campaign.world_forge_version,
        "world_name": world.world_bible.world_name,
        "tone_vector": campaign.world_seed.tone_vector.as_dict(),
        "theme_tags": list(campaign.world_seed.theme_tags),
        "moral_climate": world.world_bible.moral_climate,
        "core_conflicts": world.world_bible.core_conflicts[:4],
        "dominant_factions": [
            {"id": f.id, "name": f.name, "power": f.power_level, "ideology": f.ideology}
            for f in world.faction_graph.factions[:6]
        ],
        "faction_tensions": world.faction_graph.active_tensions[:5],
        "biome_atmosphere": [
            {
                "id": r.id,
                "name": r.name,
                "dominant_biome": r.dominant_biome,
                "corruption": r.corruption,
                "dungeon_density": r.dungeon_density,
                "capital_town": r.capital_town,
            }
            for r in world.biome_map.regions[:6]
        ],
        "creature_focus": list(world.creature_pools.featured_focus),
        "magic_rules": {
            "density": world.magic_rules.density,
            "volatility": world.magic_rules.volatility,
            "schools": world.magic_rules.schools[:4],
        },
        "loot_flavor": {
            "whimsical_scale": world.loot_flavor_profile.whimsical_scale,
            "flourish_samples": world.loot_flavor_profile.flourish_pool[:4],
        },
        "dm_behavior_profile": asdict(campaign.dm_context.dm_behavior_profile),
    }
