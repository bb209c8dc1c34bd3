from __future__ import annotations

import logging
from typing import List, Optional, Union

from .models import BiomeMap, CorruptionZone, Region, ToneVector, WorldSeed
from .rng import MAX_SEED, clamp01, clamp_int, mean, rng01, rng_int, rng_pick, weighted_pick
from .text import unique_strings

logger = logging.getLogger(__name__)

BIOME_POOL = [
    "sunfields",
    "thornwoods",
    "riverdelta",
    "stormcoast",
    "frostheath",
    "ambermarsh",
    "obsidianridge",
    "catacombs",
    "blightfen",
    "riftwaste",
    "clockwork quarter",
    "crystal dunes",
    "moonlit ruins",
    "lantern valley",
    "honey meadows",
    "echo caverns",
]

DARK_BIOMES = {"blightfen", "catacombs", "riftwaste"}
COZY_BIOMES = {"honey meadows", "lantern valley", "sunfields"}
EXOTIC_BIOMES = {"riftwaste", "crystal dunes", "echo caverns"}

REGION_PREFIXES = ["North", "South", "East", "West", "Upper", "Lower", "High", "Deep", "Outer", "Inner"]
REGION_SUFFIXES = ["March", "Basin", "Reach", "Quarter", "Wild", "Front", "Ward", "Circuit", "Terrace", "Span"]

TOWN_SUFFIXES = ["ford", "haven", "cross", "gate", "rest", "spire", "hollow", "bay"]

REGION_COUNT_BANDS = {"small": (5, 7), "medium": (8, 10), "large": (11, 14)}

CORRUPTION_ZONE_FLOOR = 0.55


def biome_weight(biome: str, tone: ToneVector, start_hint: str = "") -> int:
    weight = 5
    if biome in DARK_BIOMES:
        weight += int((tone.darkness + tone.brutality) * 8)
    if biome in COZY_BIOMES:
        weight += int((tone.cozy + tone.whimsy) * 7)
    if biome in EXOTIC_BIOMES:
        weight += int((tone.cosmic + tone.absurdity) * 7)
    hint = "".join(start_hint.lower().split())
    if hint and hint in biome:
        weight += 6
    return max(1, weight)


def pick_biome(seed: int, label: str, tone: ToneVector, start_hint: str = "") -> str:
    return weighted_pick(seed, label, [(biome, biome_weight(biome, tone, start_hint)) for biome in BIOME_POOL])


def capital_town_name(seed: int, label: str, tone: ToneVector) -> str:
    if tone.cozy >= 0.55:
        prefixes = ["Honey", "Willow", "Lantern", "Clover", "Sun", "Bramble"]
    elif tone.darkness >= 0.6:
        prefixes = ["Grim", "Black", "Ash", "Rift", "Dusk", "Iron"]
    else:
        prefixes = ["Moon", "Storm", "Silver", "Oak", "River", "Glow"]
    return f"{rng_pick(seed, f'{label}:townPrefix', prefixes)}{rng_pick(seed, f'{label}:townSuffix', TOWN_SUFFIXES)}"


def region_count(world_size: str, seed: int) -> int:
    lo, hi = REGION_COUNT_BANDS.get(world_size, REGION_COUNT_BANDS["medium"])
    return rng_int(seed, f"world:size:{world_size}", lo, hi)


def _corruption_zones(regions: List[Region]) -> List[CorruptionZone]:
    hot = sorted((r for r in regions if r.corruption >= CORRUPTION_ZONE_FLOOR), key=lambda r: r.corruption, reverse=True)
    keep = max(1, len(regions) // 3)
    return [
        CorruptionZone(
            region_id=region.id,
            severity=region.corruption,
            note=(
                "Corruption storms distort landmarks and spawn elite threats."
                if region.corruption >= 0.75
                else "Corruption pressure spikes faction hostility and dungeon instability."
            ),
        )
        for region in hot[:keep]
    ]


def generate_biome_map(seed: Union[WorldSeed, int], world_size: Optional[str] = None) -> BiomeMap:
    """Partition the world into regions.

    ``seed`` may be a bare seed number, in which case the baseline tone and
    default knobs apply.
    """
    if isinstance(seed, WorldSeed):
        n = seed.seed_number
        tone = seed.tone_vector
        size = seed.forge_input.world_size
        corruption_level = seed.forge_input.corruption_level
        start_hint = seed.forge_input.starting_region_type
    else:
        n = clamp_int(seed, 1, MAX_SEED)
        tone = ToneVector()
        size = world_size or "medium"
        corruption_level = 2
        start_hint = ""

    regions: List[Region] = []
    for index in range(region_count(size, n)):
        biome = pick_biome(n, f"biome:{index}", tone, start_hint)
        corruption = clamp01(
            tone.darkness * 0.55
            + corruption_level * 0.06
            + rng01(n, f"biome:corruption:{index}") * 0.28
        )
        dungeon_density = clamp01(
            0.18
            + tone.darkness * 0.35
            + tone.brutality * 0.24
            - tone.cozy * 0.2
            + (rng01(n, f"biome:dungeonDensity:{index}") - 0.5) * 0.2
        )
        town_density = clamp01(
            0.58
            - dungeon_density * 0.35
            + tone.cozy * 0.24
            + tone.heroic * 0.14
            - tone.darkness * 0.1
        )
        name = (
            f"{rng_pick(n, f'biome:regionPrefix:{index}', REGION_PREFIXES)} "
            f"{rng_pick(n, f'biome:regionSuffix:{index}', REGION_SUFFIXES)}"
        )
        regions.append(Region(
            id=f"region_{index + 1}",
            name=name,
            dominant_biome=biome,
            corruption=corruption,
            dungeon_density=dungeon_density,
            town_density=town_density,
            capital_town=capital_town_name(n, f"biome:capital:{index}", tone),
            tags=unique_strings([
                biome,
                "corrupted" if corruption >= 0.62 else "stable",
                "dungeon-heavy" if dungeon_density >= 0.55 else "town-heavy",
            ]),
        ))

    biome_map = BiomeMap(
        world_size=size,
        regions=regions,
        corruption_zones=_corruption_zones(regions),
        capital_towns=[r.capital_town for r in regions],
        average_dungeon_density=clamp01(mean((r.dungeon_density for r in regions), default=0.4)),
    )
    logger.debug(
        "Biome map for seed %d: %d regions, %d corruption zones",
        n, len(regions), len(biome_map.corruption_zones),
    )
    return biome_map
