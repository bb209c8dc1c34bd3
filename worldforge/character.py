"""Character forge: root a new player character in an existing world."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Optional, Union

from .models import CampaignContext, CharacterForgeOutput, Faction, Region, WorldContext
from .rng import clamp_int, clamp_signed, pick_unique, rng01, rng_int, rng_pick, round_half_up
from .schemas import CharacterForgeInput, parse_input
from .text import slug_token, unique_strings

logger = logging.getLogger(__name__)

BACKGROUND_POOL_BY_TECH: Dict[str, List[str]] = {
    "primitive": [
        "clan outrider",
        "totem keeper",
        "beast trail cartographer",
        "marsh skirmisher",
        "village oath runner",
    ],
    "medieval": [
        "guild dropout",
        "ex-temple courier",
        "border watch veteran",
        "market duelist",
        "archive thief",
    ],
    "steampunk": [
        "boiler saboteur",
        "airship deck gunner",
        "clocktower mechanic",
        "railline investigator",
        "patent pirate",
    ],
    "arcane-tech": [
        "rift engineer",
        "arc-net signal hunter",
        "mana reactor medic",
        "void compliance auditor",
        "relic firmware smuggler",
    ],
}

PERSONALITY_TRAIT_POOL = [
    "reckless optimist",
    "grim strategist",
    "sarcastic altruist",
    "ceremonial menace",
    "quiet loyalist",
    "chaos enthusiast",
    "soft-hearted bruiser",
    "paranoid analyst",
    "dramatic showstopper",
    "methodical avenger",
    "joyfully stubborn",
    "reluctant icon",
]

NPC_GIVEN_NAMES = ["Mira", "Kael", "Oona", "Rook", "Pip", "Sable", "Iris", "Bram"]
NPC_EPITHETS = ["of the Gate", "Lanternwright", "Market Scribe", "Route Warden", "Bellrunner", "Whisper Clerk"]
STARTING_NPC_COUNT = 3

MAX_STARTING_RUMORS = 6
MAX_STARTING_FLAGS = 10

# Caps for the caller-owned runtime state bag.
MAX_RUNTIME_RUMORS = 26
MAX_RUNTIME_FACTIONS = 10
MAX_DISCOVERY_LOG = 60


def moral_bucket(value: float) -> str:
    if value >= 0.4:
        return "idealistic"
    if value <= -0.4:
        return "ruthless"
    return "pragmatic"


def _match(token: Optional[str], candidates):
    """First candidate whose id or name equals ``token``, or whose name contains it."""
    if token and token.strip():
        needle = token.strip().lower()
        for candidate in candidates:
            name = candidate.name.lower()
            if candidate.id.lower() == needle or name == needle or needle in name:
                return candidate
    return None


def resolve_origin_region(world: WorldContext, requested: Optional[str], seed: int) -> Region:
    regions = world.biome_map.regions
    hit = _match(requested, regions)
    if hit is not None:
        return hit
    return regions[rng_int(seed, "character:originRegion", 0, len(regions) - 1)]


def resolve_faction(world: WorldContext, requested: Optional[str], origin_region_id: str, seed: int) -> Faction:
    factions = world.faction_graph.factions
    hit = _match(requested, factions)
    if hit is not None:
        return hit
    for faction in factions:
        if faction.home_region_id == origin_region_id:
            return faction
    return factions[rng_int(seed, "character:faction", 0, len(factions) - 1)]


def _starting_npcs(seed: int, moral_leaning: float, humor: float, threat: float) -> Dict[str, int]:
    # Given names are drawn without replacement so all three NPCs stay distinct.
    given = pick_unique(seed, "character:npc:prefix", NPC_GIVEN_NAMES, STARTING_NPC_COUNT)
    base = round_half_up(moral_leaning * 22 + humor * 8 - threat * 6)
    relationships: Dict[str, int] = {}
    for i, first in enumerate(given):
        name = f"{first} {rng_pick(seed, f'character:npc:suffix:{i}', NPC_EPITHETS)}"
        jitter = rng_int(seed, f"character:npc:relation:{i}", -12, 16)
        relationships[name] = clamp_int(base + jitter, -100, 100)
    return relationships


def forge_character_from_world(
    campaign: CampaignContext,
    raw: Union[CharacterForgeInput, Mapping[str, Any], None] = None,
) -> CharacterForgeOutput:
    """Derive a character's origin, allegiance and opening hooks from the world.

    Deterministic for a given campaign and input.

    Raises:
        ValidationError: If ``raw`` violates the CharacterForgeInput schema
    """
    request = parse_input(CharacterForgeInput, raw)
    world = campaign.world_context
    seed = campaign.world_seed.seed_number
    tone = campaign.world_seed.tone_vector

    origin = resolve_origin_region(world, request.origin_region_id, seed)
    faction = resolve_faction(world, request.faction_alignment_id, origin.id, seed)

    if request.background:
        background = request.background
    else:
        pool = BACKGROUND_POOL_BY_TECH.get(
            campaign.world_seed.forge_input.tech_level, BACKGROUND_POOL_BY_TECH["medieval"]
        )
        background = rng_pick(seed, "character:background", pool)

    if request.personality_traits and len(request.personality_traits) >= 2:
        traits = unique_strings(request.personality_traits)[:5]
    else:
        traits = pick_unique(seed, "character:traits", PERSONALITY_TRAIT_POOL, 3)

    if request.moral_leaning is not None:
        moral = clamp_signed(request.moral_leaning)
    else:
        from_tone = ((tone.heroic + tone.cozy) - (tone.darkness + tone.brutality)) * 0.5
        moral = clamp_signed(from_tone + (rng01(seed, "character:moral") - 0.5) * 0.35)

    npc_style = world.npc_style_rules
    npcs = _starting_npcs(seed, moral, npc_style.humor_frequency, npc_style.threat_level)

    trust = {
        f.id: clamp_int(
            round_half_up(
                (22 if f.id == faction.id else -4)
                + moral * 14
                + f.moral_alignment.mercy * 10
                - f.moral_alignment.ambition * 6
            ),
            -100,
            100,
        )
        for f in world.faction_graph.factions
    }

    rumors = unique_strings([
        *world.world_state.active_rumors[:3],
        *world.world_bible.core_conflicts[:2],
        f"{faction.name} is quietly watching newcomers from {origin.name}.",
    ])[:MAX_STARTING_RUMORS]

    flags = unique_strings([
        f"origin:{origin.id}",
        f"faction:{faction.id}",
        f"background:{slug_token(background)}",
        f"moral:{moral_bucket(moral)}",
        *(f"trait:{slug_token(trait)}" for trait in traits),
    ])[:MAX_STARTING_FLAGS]

    logger.debug("Forged character in %s aligned with %s", origin.id, faction.id)
    return CharacterForgeOutput(
        origin_region_id=origin.id,
        origin_region_name=origin.name,
        faction_alignment_id=faction.id,
        faction_alignment_name=faction.name,
        background=background,
        personality_traits=traits,
        moral_leaning=round(moral, 3),
        starting_town=origin.capital_town,
        starting_npc_relationships=npcs,
        initial_faction_trust=trust,
        starting_rumors=rumors,
        starting_flags=flags,
    )


def _as_dict(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def apply_character_forge_to_state(
    runtime_state: Optional[Mapping[str, Any]], forged: CharacterForgeOutput
) -> Dict[str, Any]:
    """Fold a forged character into a caller-owned runtime state bag.

    Only ``rumors``, ``factions_present``, ``town_relationships``,
    ``discovery_log``, ``character_forge_profile``, ``starting_town`` and
    ``world_context`` are read or written; every other key passes through.
    The input mapping is not modified.
    """
    base = dict(runtime_state) if isinstance(runtime_state, Mapping) else {}

    rumors = unique_strings([
        *(str(entry) for entry in _as_list(base.get("rumors"))),
        *forged.starting_rumors,
    ])[-MAX_RUNTIME_RUMORS:]

    factions_present = unique_strings([
        *(str(entry) for entry in _as_list(base.get("factions_present"))),
        forged.faction_alignment_name,
    ])[:MAX_RUNTIME_FACTIONS]

    town_relationships = _as_dict(base.get("town_relationships"))
    for npc, score in forged.starting_npc_relationships.items():
        town_relationships[npc] = clamp_int(score, -100, 100)

    discovery_log = _as_list(base.get("discovery_log"))
    discovery_log.append({
        "kind": "character_forge",
        "detail": (
            f"{forged.origin_region_name} origin; aligned with {forged.faction_alignment_name}; "
            f"start at {forged.starting_town}."
        ),
        "flags": list(forged.starting_flags),
    })

    world_context = _as_dict(base.get("world_context"))
    world_context["last_character_origin"] = forged.origin_region_id
    world_context["last_character_faction"] = forged.faction_alignment_id

    return {
        **base,
        "rumors": rumors,
        "factions_present": factions_present,
        "town_relationships": town_relationships,
        "character_forge_profile": asdict(forged),
        "starting_town": forged.starting_town,
        "discovery_log": discovery_log[-MAX_DISCOVERY_LOG:],
        "world_context": world_context,
    }
