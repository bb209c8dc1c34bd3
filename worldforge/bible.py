"""World bible: the narrative reference sheet for a campaign.

Everything here is a pure function of the WorldSeed. Name and rule pools are
static tables; the seed decides which entries a world gets.
"""

from __future__ import annotations

import logging
from typing import List

from .biomes import BIOME_POOL
from .models import ToneVector, WorldBible, WorldSeed
from .presets import PRESETS
from .rng import pick_unique, rng_pick
from .text import unique_strings

logger = logging.getLogger(__name__)

WORLD_PREFIX_POOL = [
    "Ashen", "Radiant", "Broken", "Velvet", "Gilded", "Grinning",
    "Starforged", "Moonless", "Honey", "Thunder", "Iron", "Whispering",
]
WORLD_SUFFIX_POOL = [
    "March", "Archipelago", "Frontier", "Dominion", "Reaches", "Wilds",
    "Kingdoms", "Circuit", "Vale", "Parallax", "Sprawl", "Hollows",
]

COSMOLOGY_RULE_POOL = [
    "Every oath leaves a visible scar in the sky for one season.",
    "Souls can reincarnate only inside their home biome unless a god intervenes.",
    "Storms inherit memory and repeat old battles in lightning silhouettes.",
    "The moon keeps score of betrayals and amplifies magic at confession shrines.",
    "Ancient roads are semi-sentient and reroute travelers toward unfinished stories.",
    "Factions can buy weather favors from storm monasteries at extreme cost.",
    "Death is reversible only through equivalent sacrifice and public witness.",
    "Dreams leak tactical hints from alternate timelines once per week.",
    "Cosmic gates open where tragedy and hope peak at the same location.",
    "Named relics choose owners based on intent, not bloodline.",
    "A hidden archive rewrites maps whenever power blocs collapse.",
    "Laughter can break low-tier curses, but empowers high-tier curses.",
]

MAGIC_FLAVOR_POOL = [
    "spellcraft behaves like volatile weather fronts",
    "magic is debt-backed and collectors always arrive",
    "arcane power is sung into shape by breath control",
    "sigils awaken only when paired with emotional extremes",
    "ritual circles run like software and can crash catastrophically",
    "divine miracles are legal contracts with loopholes",
    "wild mana crystallizes into consumable storm-glass",
    "battle chants mutate nearby wildlife and terrain",
    "forbidden rites stitch shadow and light into unstable hybrids",
    "household magic is cozy, combat magic is savage",
]

CONFLICT_POOL = [
    "A coalition of city guilds and zealot wardens race to seize border fortresses.",
    "An old empire's backup army keeps waking beneath regional capitals.",
    "Competing churches claim custody over a prophecy that changes weekly.",
    "Rival scavenger fleets weaponize relic tech against civilian routes.",
    "A hidden villain bankrolls both peace talks and assassination contracts.",
    "The strongest faction controls medicine and manipulates shortages.",
    "Pilgrim caravans vanish near a biome where reality keeps folding.",
    "A cursed inheritance war is dragging neutral towns into siege economics.",
    "Mercenary houses split over whether to protect or exploit cosmic breaches.",
    "Farm communes arm themselves after repeated raids by sanctified monsters.",
    "A cataclysm clock is counting down and only liars can read it.",
    "An absurd sports league secretly determines regional sovereignty.",
]

FACTION_ADJECTIVES = [
    "Iron", "Velvet", "Cinder", "Moon", "Storm", "Hollow", "Golden", "Rift",
    "Bone", "Honey", "Neon", "Dusk", "Azure", "Void", "Thorn",
]
FACTION_NOUNS = [
    "Accord", "Compact", "Syndicate", "Covenant", "Dynasty", "Assembly", "Choir", "Cartel",
    "Guard", "League", "Spiral", "Order", "Front", "Collective", "Union",
]

BIOME_FLAVOR_POOL = [
    "resource-rich but contested",
    "haunted by old conflicts",
    "strategically vital for travel lanes",
    "volatile weather and unstable magic",
    "civilian settlements cling to fragile safety",
]

CREATURE_ARCHETYPE_POOL = [
    "vampire duelists", "rift beasts", "clockwork sentinels", "grave hounds",
    "rogue paladins", "storm witches", "slime cadres", "dragonkin raiders",
    "masked ninjas", "cat mercenaries", "dog wardens", "cosmic parasites",
    "forest spirits", "bone golems", "contract killers", "anomaly jesters",
]

LOOT_FLOURISHES = [
    "of Bonking", "of Sparkles", "of Quiet Doom", "of Proper Manners",
    "of Side Quests", "of Thunder Snacks", "of Midnight Tea", "of Noble Panic",
    "of Meteor Insurance", "of Heroic Overkill", "of Cozy Violence", "of Laughing Static",
]

# complexity -> (core conflicts, dominant names, minor names)
COMPLEXITY_COUNTS = {
    "low": (3, 3, 3),
    "medium": (4, 4, 5),
    "high": (6, 6, 7),
}

BIOME_DEFINITION_COUNTS = {"small": 6, "medium": 8, "large": 10}


def generate_faction_names(seed: int, label: str, count: int) -> List[str]:
    """Up to ``count`` distinct adjective+noun names, giving up after ``count * 5`` draws."""
    names: List[str] = []
    seen = set()
    for i in range(count * 5):
        if len(names) >= count:
            break
        name = f"{rng_pick(seed, f'{label}:adj:{i}', FACTION_ADJECTIVES)} {rng_pick(seed, f'{label}:noun:{i}', FACTION_NOUNS)}"
        if name.lower() in seen:
            continue
        seen.add(name.lower())
        names.append(name)
    return names


def describe_npc_speech(tone: ToneVector) -> str:
    if tone.whimsy >= 0.58:
        return "NPCs speak in quick, vivid banter with tactical jokes and emotional honesty under pressure."
    if tone.darkness >= 0.66:
        return (
            "NPCs speak in clipped, guarded phrases with threat-aware pragmatism and very little "
            "sentimental padding."
        )
    return "NPCs speak directly, mixing strategic clarity with occasional dry humor and faction-coded idioms."


def describe_moral_climate(tone: ToneVector) -> str:
    if tone.cozy >= 0.62 and tone.heroic >= 0.58:
        return "Compassion has social weight, but every favor still carries tactical consequence."
    if tone.darkness >= 0.68 and tone.brutality >= 0.62:
        return "Mercy is rare currency; survival rewards decisive cruelty and punishes hesitation."
    if tone.absurdity >= 0.62:
        return "Ethics bend under spectacle, but hypocrisy is remembered and weaponized."
    if tone.heroic >= 0.7:
        return "Honor matters publicly, and betrayal becomes a multi-faction liability."
    return "Pragmatism dominates; altruism and brutality both reshape long-term trust."


def generate_world_bible(seed: WorldSeed) -> WorldBible:
    n = seed.seed_number
    tone = seed.tone_vector
    size = seed.forge_input.world_size
    conflict_count, dominant_count, minor_count = COMPLEXITY_COUNTS[seed.forge_input.faction_complexity]

    world_name = f"{rng_pick(n, 'worldName:prefix', WORLD_PREFIX_POOL)} {rng_pick(n, 'worldName:suffix', WORLD_SUFFIX_POOL)}"

    cosmology_rules = pick_unique(n, "cosmology", COSMOLOGY_RULE_POOL, 4 + (1 if size == "large" else 0))
    core_conflicts = pick_unique(n, "coreConflicts", CONFLICT_POOL, conflict_count)

    names = generate_faction_names(n, "factionName", dominant_count + minor_count + 2)
    dominant_factions = names[:dominant_count]
    minor_factions = names[dominant_count:dominant_count + minor_count]

    biome_definitions = [
        f"{biome}: {rng_pick(n, f'biomeDesc:{biome}', BIOME_FLAVOR_POOL)}"
        for biome in pick_unique(n, "biomeDef", BIOME_POOL, BIOME_DEFINITION_COUNTS.get(size, 8))
    ]

    creature_archetypes = unique_strings([
        *seed.forge_input.creature_focus,
        *pick_unique(n, "creatureArchetypes", CREATURE_ARCHETYPE_POOL, 7),
    ])[:14]

    naming_rules = unique_strings([
        *(style for key in seed.preset_trace for style in PRESETS[key].naming_style),
        "Mix one concrete noun with one dramatic modifier for locations.",
        "Use whimsical escalation for rare loot names even in dark settings.",
        "Faction names should imply ideology and logistics role.",
    ])[:7]

    loot_flavor = unique_strings([
        *pick_unique(n, "lootFlavor", LOOT_FLOURISHES, 5),
        "flourish should imply risk or curse" if tone.darkness >= 0.6 else "flourish should imply playful utility",
        "allow ridiculous suffixes with escalation" if tone.absurdity >= 0.58 else "keep suffixes grounded in setting",
    ])

    bible = WorldBible(
        world_name=world_name,
        cosmology_rules=cosmology_rules,
        magic_system_flavor=rng_pick(n, "magicFlavor", MAGIC_FLAVOR_POOL),
        core_conflicts=core_conflicts,
        dominant_factions=dominant_factions,
        minor_factions=minor_factions,
        biome_definitions=biome_definitions,
        creature_archetypes=creature_archetypes,
        npc_speech_style=describe_npc_speech(tone),
        naming_rules=naming_rules,
        loot_flavor_profile=loot_flavor,
        moral_climate=describe_moral_climate(tone),
    )
    logger.debug(
        "World bible for seed %d: %s (%d conflicts, %d+%d faction names)",
        n, world_name, len(core_conflicts), len(dominant_factions), len(minor_factions),
    )
    return bible
