"""Flat derived records hung off a world: creatures, NPC voice, loot, magic."""

from __future__ import annotations

import logging
from typing import Dict, List

from .models import BiomeMap, CreaturePools, LootFlavorProfile, MagicRules, NpcStyleRules, ToneVector, WorldBible, WorldSeed
from .presets import PRESETS
from .rng import clamp01, pick_unique
from .text import ensure_min_unique, unique_strings

logger = logging.getLogger(__name__)

BIOME_CREATURE_MAP: Dict[str, List[str]] = {
    "sunfields": ["meadow boars", "gallant bandits", "sun sprites", "field golems"],
    "thornwoods": ["thorn wolves", "forest spirits", "masked rangers", "vine mimics"],
    "riverdelta": ["bog lurkers", "otter marauders", "mud elementals", "delta raiders"],
    "stormcoast": ["tempest drakes", "salt corsairs", "reef trolls", "storm imps"],
    "frostheath": ["ice wraiths", "frost hounds", "pale giants", "snow cultists"],
    "ambermarsh": ["mire serpents", "fen witches", "amber slimes", "swamp stalkers"],
    "obsidianridge": ["basalt titans", "ash harpies", "obsidian wolves", "ridge raiders"],
    "catacombs": ["grave knights", "bone swarms", "crypt hags", "mourning shades"],
    "blightfen": ["plague crows", "rotting behemoths", "blight cultists", "toxin oozes"],
    "riftwaste": ["void hounds", "rift revenants", "anomaly clowns", "fractured angels"],
    "clockwork quarter": ["gear sentries", "arcane mechanics", "sparking rogues", "clockwork dogs"],
    "crystal dunes": ["glass wyrms", "mirage assassins", "sand apostles", "shard swarms"],
    "moonlit ruins": ["lunar guardians", "vampire duelists", "ruin stalkers", "echo monks"],
    "lantern valley": ["lantern spirits", "bandit caravans", "willow sentries", "copper foxes"],
    "honey meadows": ["slimes", "bee knights", "mischief cats", "garden golems"],
    "echo caverns": ["sonic bats", "echo giants", "deep ninjas", "crystal worms"],
}

# substring -> biome whose creatures stand in for an unknown biome name
BIOME_CREATURE_ALIASES = [
    (("rift",), "riftwaste"),
    (("catacomb", "crypt"), "catacombs"),
    (("meadow", "field"), "honey meadows"),
    (("ruin",), "moonlit ruins"),
]
GENERIC_CREATURES = ["bandits", "wild beasts", "cultists", "constructs"]

HIGH_THREAT_KEYWORDS = ("lord", "ancient", "titan", "behemoth", "dragon", "archon", "void", "grave")
LOW_THREAT_KEYWORDS = ("slime", "scout", "bandit", "hound", "sprite", "fox", "cat", "dog")

MAX_GLOBAL_CREATURES = 26
MAX_BIOME_CREATURES = 12
MAX_TIER_CREATURES = 8

NPC_IDIOM_POOL = [
    "Keep your boots honest and your promises short.",
    "No free miracles, just expensive shortcuts.",
    "Luck likes prepared fools.",
    "Smile like you mean trouble.",
    "Every rumor has teeth if you feed it.",
    "Quiet heroes still leave loud consequences.",
    "If the map looks friendly, it is lying.",
    "Pay now in coin or later in blood.",
    "Take the deal before the storm takes you.",
    "Mercy is tactical if timed right.",
    "The gods are listening; unfortunately so are spies.",
    "Don't poke that shrine unless you brought snacks.",
]

LOOT_ADJECTIVES = ["Oak", "Steel", "Moon", "Glitter", "Storm", "Honey", "Grim", "Solar", "Neon", "Dusk", "Chaos", "Lantern"]
LOOT_NOUNS = ["Wand", "Blade", "Charm", "Buckler", "Helm", "Talisman", "Spear", "Mace", "Pendant", "Ring", "Totem", "Boots"]
LOOT_FLOURISH_POOL = [
    "of Bonking", "of Sparkles", "of Quiet Doom", "of Proper Manners",
    "of Side Quests", "of Thunder Snacks", "of Midnight Tea", "of Noble Panic",
    "of Meteor Insurance", "of Heroic Overkill", "of Cozy Violence", "of Laughing Static",
]
RARITY_SUFFIXES = {
    "common": "(plain)",
    "uncommon": "(worn)",
    "rare": "(rare)",
    "epic": "(epic)",
    "legendary": "(legendary)",
    "mythic": "(mythic)",
}

MAGIC_SCHOOL_POOL = [
    "evocation", "wardcraft", "binding", "hexes", "chronomancy",
    "songweaving", "biomancy", "stormcalling", "runeforging", "rift surgery",
]
MAGIC_TABOO_POOL = [
    "memory theft", "oath forgery", "soul counterfeiting", "child-star summoning",
    "plague hymncasting", "void grafting", "time debt laundering", "grave market pacts",
]
MAGIC_VOLATILITY_SHIFT = {"low": -0.08, "medium": 0.0, "high": 0.12, "wild": 0.25}


def creatures_for_biome(biome: str) -> List[str]:
    if biome in BIOME_CREATURE_MAP:
        return BIOME_CREATURE_MAP[biome]
    token = biome.lower()
    for needles, stand_in in BIOME_CREATURE_ALIASES:
        if any(needle in token for needle in needles):
            return BIOME_CREATURE_MAP[stand_in]
    return GENERIC_CREATURES


def creature_fallbacks(tone: ToneVector) -> List[str]:
    """Tone-keyed creature list used when focus and preset bias run thin."""
    entries = ["bandits", "war beasts", "rogue mages", "contract killers"]
    if tone.darkness >= 0.58:
        entries += ["undead", "plague wardens", "grave hounds"]
    if tone.whimsy >= 0.55:
        entries += ["slimes", "mischief spirits", "talking cats"]
    if tone.absurdity >= 0.55:
        entries += ["anomaly clowns", "sentient armor", "gravity ninjas"]
    if tone.cosmic >= 0.55:
        entries += ["void serpents", "rift angels", "star parasites"]
    if tone.heroic >= 0.6:
        entries += ["dragons", "champion duelists", "oath knights"]
    return unique_strings(entries)


def _has_keyword(entry: str, keywords) -> bool:
    lowered = entry.lower()
    return any(key in lowered for key in keywords)


def generate_creature_pools(seed: WorldSeed, biome_map: BiomeMap) -> CreaturePools:
    focus = list(seed.forge_input.creature_focus)
    fallbacks = creature_fallbacks(seed.tone_vector)
    global_pool = unique_strings([
        *focus,
        *(creature for key in seed.preset_trace for creature in PRESETS[key].creature_bias),
        *fallbacks,
    ])[:MAX_GLOBAL_CREATURES]

    by_biome = {
        region.id: unique_strings([
            *creatures_for_biome(region.dominant_biome),
            *focus,
            *pick_unique(seed.seed_number, f"creature:extra:{region.id}", global_pool, 2),
        ])[:MAX_BIOME_CREATURES]
        for region in biome_map.regions
    }

    low = [c for c in global_pool if _has_keyword(c, LOW_THREAT_KEYWORDS)]
    high = [c for c in global_pool if _has_keyword(c, HIGH_THREAT_KEYWORDS)]
    medium = [c for c in global_pool if c not in low and c not in high]

    by_threat_tier = {
        "low": ensure_min_unique((low or global_pool)[:MAX_TIER_CREATURES], 2, fallbacks),
        "medium": ensure_min_unique((medium or global_pool)[:MAX_TIER_CREATURES], 2, fallbacks),
        "high": ensure_min_unique((high or global_pool[-MAX_TIER_CREATURES:])[:MAX_TIER_CREATURES], 2, fallbacks),
    }

    logger.debug("Creature pools: %d global, %d regional", len(global_pool), len(by_biome))
    return CreaturePools(
        featured_focus=focus[:6],
        global_pool=global_pool,
        by_biome=by_biome,
        by_threat_tier=by_threat_tier,
    )


def _speech_tone(tone: ToneVector) -> str:
    if tone.darkness >= 0.66:
        return "hard-edged and wary"
    if tone.cozy >= 0.62:
        return "warm, local, and practical"
    if tone.absurdity >= 0.6:
        return "playfully intense with strange metaphors"
    return "direct tactical vernacular"


def generate_npc_style_rules(seed: WorldSeed, bible: WorldBible) -> NpcStyleRules:
    tone = seed.tone_vector
    naming = unique_strings([
        *(style for key in seed.preset_trace for style in PRESETS[key].naming_style),
        "Given name + tactical epithet for notable NPCs",
        "Town names should remain pronounceable in combat callouts",
        *bible.naming_rules[:2],
    ])[:7]
    return NpcStyleRules(
        speech_tone=_speech_tone(tone),
        humor_frequency=clamp01(0.12 + tone.whimsy * 0.52 + tone.absurdity * 0.2 - tone.brutality * 0.2),
        threat_level=clamp01(0.24 + tone.darkness * 0.42 + tone.brutality * 0.3 - tone.cozy * 0.26),
        naming_conventions=naming,
        signature_idioms=pick_unique(seed.seed_number, "npcIdioms", NPC_IDIOM_POOL, 6),
    )


def generate_loot_flavor_profile(seed: WorldSeed) -> LootFlavorProfile:
    tone = seed.tone_vector
    n = seed.seed_number

    adjectives = pick_unique(n, "lootAdj", LOOT_ADJECTIVES, 8)
    if tone.darkness >= 0.62:
        adjectives += ["Grave", "Cursed", "Doom"]
    if tone.cozy >= 0.6:
        adjectives += ["Cozy", "Honey", "Willow"]

    nouns = pick_unique(n, "lootNoun", LOOT_NOUNS, 8)
    if seed.forge_input.tech_level == "steampunk":
        nouns += ["Gadget", "Coil"]

    flourishes = pick_unique(n, "lootFlourish", LOOT_FLOURISH_POOL, 9)
    if tone.absurdity >= 0.58:
        flourishes += ["of Respectful Chaos", "of Tactical Nonsense"]

    return LootFlavorProfile(
        adjective_pool=unique_strings(adjectives)[:16],
        noun_pool=unique_strings(nouns)[:16],
        flourish_pool=unique_strings(flourishes)[:18],
        rarity_suffix_by_tier=dict(RARITY_SUFFIXES),
        whimsical_scale=clamp01(tone.whimsy * 0.6 + tone.absurdity * 0.35),
    )


def generate_magic_rules(seed: WorldSeed) -> MagicRules:
    density = seed.forge_input.magic_density
    tone = seed.tone_vector
    return MagicRules(
        density=density,
        volatility=clamp01(
            0.2 + MAGIC_VOLATILITY_SHIFT.get(density, 0.0) + tone.cosmic * 0.24 + tone.absurdity * 0.18
        ),
        schools=pick_unique(seed.seed_number, "magicSchools", MAGIC_SCHOOL_POOL, 6),
        taboo_practices=pick_unique(seed.seed_number, "magicTaboo", MAGIC_TABOO_POOL, 3),
        cosmic_leakage=clamp01(tone.cosmic * 0.72 + (0.22 if density == "wild" else 0.04)),
    )
