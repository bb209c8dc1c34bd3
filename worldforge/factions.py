"""Faction graph: political factions plus a symmetric relation matrix.

The simulated faction count depends only on faction complexity and is
independent of the bible's narrative name lists; the graph reuses bible
names first and generates fresh ones for the rest.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from .bible import FACTION_ADJECTIVES, FACTION_NOUNS, generate_faction_names
from .models import BiomeMap, Faction, FactionGraph, MoralAlignment, ToneVector, WorldBible, WorldSeed
from .rng import clamp01, clamp_int, clamp_signed, pick_unique, rng01, rng_int, rng_pick, round_half_up
from .text import slug_token, unique_strings

logger = logging.getLogger(__name__)

FACTION_COUNTS = {"low": 4, "medium": 6, "high": 8}

SELF_RELATION = 100
TENSION_THRESHOLD = -25
INITIAL_TENSION_CAP = 8
TENSION_CAP = 12
MIN_TENSIONS = 2

IDEOLOGY_POOL = [
    "order through contracts",
    "survival by any means",
    "mercy before law",
    "profit-driven stability",
    "holy containment",
    "chaotic liberation",
    "technocratic stewardship",
    "ancestral restoration",
    "spectacle as control",
    "communal resilience",
    "predatory expansion",
    "ritual equilibrium",
]

FACTION_GOAL_POOL = [
    "Secure control over regional supply chains.",
    "Capture or destroy an enemy strategic relic.",
    "Recruit elite operatives from neutral towns.",
    "Manipulate public rumor networks.",
    "Enforce ideological law in mixed-faction zones.",
    "Sabotage rival strongholds through deniable operations.",
    "Broker a temporary truce to prepare a betrayal.",
    "Expand influence into an unclaimed biome.",
    "Control pilgrimage routes and tribute lanes.",
    "Stage symbolic victories to maintain legitimacy.",
]


def _signed(x: float) -> float:
    return clamp_signed(round(clamp01(x) * 2 - 1, 3))


def moral_alignment(seed: int, label: str, tone: ToneVector) -> MoralAlignment:
    noise = lambda axis: (rng01(seed, f"{label}:{axis}") - 0.5) * 0.7  # noqa: E731
    return MoralAlignment(
        order=_signed(0.5 + tone.heroic * 0.2 - tone.absurdity * 0.24 + noise("order")),
        mercy=_signed(0.5 + tone.cozy * 0.24 + tone.heroic * 0.18 - tone.brutality * 0.35 + noise("mercy")),
        ambition=_signed(0.5 + tone.brutality * 0.24 + tone.cosmic * 0.12 + noise("ambition")),
    )


def alignment_distance(a: MoralAlignment, b: MoralAlignment) -> float:
    return abs(a.order - b.order) + abs(a.mercy - b.mercy) + abs(a.ambition - b.ambition)


def _build_factions(seed: WorldSeed, bible: WorldBible, biome_map: BiomeMap) -> List[Faction]:
    n = seed.seed_number
    tone = seed.tone_vector
    count = FACTION_COUNTS[seed.forge_input.faction_complexity]
    name_pool = unique_strings([
        *bible.dominant_factions,
        *bible.minor_factions,
        *generate_faction_names(n, "graphFaction", count + 4),
    ])

    factions: List[Faction] = []
    for i in range(count):
        if i < len(name_pool):
            name = name_pool[i]
        else:
            name = (
                f"{rng_pick(n, f'graph:faction:adj:{i}', FACTION_ADJECTIVES)} "
                f"{rng_pick(n, f'graph:faction:noun:{i}', FACTION_NOUNS)}"
            )
        faction_id = f"faction_{slug_token(name)}_{i + 1}"
        home = biome_map.regions[i % len(biome_map.regions)]

        power_base = 35 + int(rng01(n, f"graph:faction:power:{faction_id}") * 50)
        power_shift = int(tone.darkness * 8) - int(tone.cozy * 4)

        factions.append(Faction(
            id=faction_id,
            name=name,
            ideology=rng_pick(n, f"graph:faction:ideology:{faction_id}", IDEOLOGY_POOL),
            moral_alignment=moral_alignment(n, f"graph:faction:{faction_id}", tone),
            power_level=clamp_int(power_base + power_shift, 10, 95),
            home_region_id=home.id,
            goals=pick_unique(n, f"graph:faction:goals:{faction_id}", FACTION_GOAL_POOL, 2),
        ))
    return factions


def _score_relations(seed: int, factions: List[Faction]) -> Tuple[Dict[str, Dict[str, int]], List[Tuple[int, str]]]:
    """Score each unordered pair once and mirror it; collect hostile pairs."""
    relations: Dict[str, Dict[str, int]] = {f.id: {} for f in factions}
    hostile: List[Tuple[int, str]] = []
    for i, a in enumerate(factions):
        relations[a.id][a.id] = SELF_RELATION
        for b in factions[i + 1:]:
            jitter = rng_int(seed, f"graph:rel:{a.id}:{b.id}", -24, 24)
            score = clamp_int(
                round_half_up(58 - alignment_distance(a.moral_alignment, b.moral_alignment) * 28 + jitter),
                -100,
                100,
            )
            relations[a.id][b.id] = score
            relations[b.id][a.id] = score
            if score <= TENSION_THRESHOLD:
                hostile.append((score, f"{a.name} and {b.name} are on the brink of open conflict."))
    return relations, hostile


def _pad_tensions(tensions: List[str], factions: List[Faction]) -> List[str]:
    if len(factions) >= 2 and len(tensions) < MIN_TENSIONS:
        tensions.append(
            f"{factions[0].name} and {factions[1].name} contest regional influence through proxy violence."
        )
    if len(factions) >= 3 and len(tensions) < MIN_TENSIONS:
        tensions.append(
            f"{factions[0].name} and {factions[2].name} sabotage each other through deniable operatives."
        )
    if len(factions) >= 2 and len(tensions) < MIN_TENSIONS:
        tensions.append(
            f"{factions[1].name} pressures neutral towns to deny supplies to {factions[0].name}."
        )
    return tensions


def generate_faction_graph(seed: WorldSeed, bible: WorldBible, biome_map: BiomeMap) -> FactionGraph:
    factions = _build_factions(seed, bible, biome_map)
    relations, hostile = _score_relations(seed.seed_number, factions)

    # Stable sort keeps pair order for equal scores.
    hostile.sort(key=lambda entry: entry[0])
    tensions = unique_strings(summary for _, summary in hostile[:INITIAL_TENSION_CAP])
    tensions = _pad_tensions(tensions, factions)[:TENSION_CAP]

    logger.debug(
        "Faction graph for seed %d: %d factions, %d hostile pairs",
        seed.seed_number, len(factions), len(hostile),
    )
    return FactionGraph(factions=factions, relations=relations, active_tensions=tensions)
