from __future__ import annotations

import logging
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .exceptions import CampaignNotFoundError, CorruptedCampaignError
from .models import CampaignContext, FactionState, HistoryEntry, WorldState, campaign_context_from_dict
from .rng import clamp_int, rng01, rng_int, rng_pick, round_half_up
from .schemas import PlayerWorldAction, parse_input
from .storage import campaign_paths, read_json, set_current_campaign, slugify, write_json
from .text import unique_strings

logger = logging.getLogger(__name__)

MAX_RUMORS = 40
MAX_COLLAPSED_DUNGEONS = 40
MAX_HISTORY = 120

COLLAPSE_CHANCE = 0.86
TOWN_RENAME_CHANCE = 0.9

RUMOR_PREFIXES = [
    "Street whisper",
    "Courier report",
    "Campfire rumor",
    "Temple bulletin",
    "Guild leak",
    "Questionable prophecy",
]
DUNGEON_PREFIXES = ["Old", "Black", "Sable", "Thorn", "Glass", "Cinder"]
DUNGEON_SUFFIXES = ["Vault", "Catacomb", "Spire", "Labyrinth", "Den", "Keep"]
TOWN_RENAME_SUFFIXES = ["Cross", "Ward", "Rest", "Gate", "Rise"]

# Impacts are unbounded; keep intermediate sums finite before rounding.
_DELTA_LIMIT = 1e9


def _round_delta(value: float) -> int:
    return round_half_up(max(-_DELTA_LIMIT, min(_DELTA_LIMIT, value)))


def _advance_faction(
    fs: FactionState, action: PlayerWorldAction, seed: int, tick: int
) -> FactionState:
    targeted = bool(action.target_faction_id) and fs.faction_id == action.target_faction_id
    power_jitter = rng_int(seed, f"world:faction:power:{tick}:{fs.faction_id}", -3, 3)
    trust_jitter = rng_int(seed, f"world:faction:trust:{tick}:{fs.faction_id}", -4, 4)

    power_delta = power_jitter + _round_delta(
        (4 if targeted else 0)
        + action.brutality_impact * 3
        + action.chaos_impact * 2
        - action.generosity_impact * 2
    )
    trust_delta = trust_jitter + _round_delta(
        (3 if targeted else 0)
        + action.moral_impact * 8
        + action.generosity_impact * 6
        - action.brutality_impact * 7
    )
    return FactionState(
        faction_id=fs.faction_id,
        power_level=clamp_int(fs.power_level + power_delta, 1, 120),
        trust_delta=clamp_int(fs.trust_delta + trust_delta, -100, 100),
        last_action_tick=tick,
    )


def update_world_state(
    state: WorldState, action: Union[PlayerWorldAction, Mapping[str, Any]]
) -> WorldState:
    """Advance the world by one tick in response to a player action.

    ``state`` is left untouched; a new WorldState is returned. Every faction
    moves each tick, the targeted one just gets a bonus.

    Raises:
        ValidationError: If ``action`` violates the PlayerWorldAction schema
    """
    action = parse_input(PlayerWorldAction, action)
    seed = state.seed_number
    tick = state.tick + 1

    faction_states = [_advance_faction(fs, action, seed, tick) for fs in state.faction_states]

    summary = action.summary if action.summary else action.action_type

    escalation_delta = _round_delta(
        max(0.0, action.brutality_impact * 8)
        + max(0.0, action.chaos_impact * 6)
        - max(0.0, action.generosity_impact * 4)
        + rng_int(seed, f"world:escalation:{tick}", 0, 3)
    )

    rumor = f"{rng_pick(seed, f'world:rumorPrefix:{tick}', RUMOR_PREFIXES)}: {summary}."
    active_rumors = unique_strings([*state.active_rumors, rumor])[-MAX_RUMORS:]

    collapsed = list(state.collapsed_dungeons)
    if any("collapse" in tag.lower() for tag in action.tags) or rng01(seed, f"world:collapse:{tick}") > COLLAPSE_CHANCE:
        collapsed.append(
            f"{rng_pick(seed, f'world:collapseNamePrefix:{tick}', DUNGEON_PREFIXES)} "
            f"{rng_pick(seed, f'world:collapseNameSuffix:{tick}', DUNGEON_SUFFIXES)}"
        )

    towns = list(state.active_towns)
    if towns and rng01(seed, f"world:townRename:{tick}") > TOWN_RENAME_CHANCE:
        index = rng_int(seed, f"world:townRename:index:{tick}", 0, len(towns) - 1)
        old = towns[index]
        stem = old.split(" ")[0] or old
        towns[index] = f"{stem} {rng_pick(seed, f'world:townRename:suffix:{tick}', TOWN_RENAME_SUFFIXES)}"
        logger.debug("Tick %d renamed %s -> %s", tick, old, towns[index])

    entry = HistoryEntry(
        tick=tick,
        type=action.action_type,
        summary=summary,
        impacts={
            "moral": action.moral_impact,
            "chaos": action.chaos_impact,
            "generosity": action.generosity_impact,
            "brutality": action.brutality_impact,
            "escalation_delta": escalation_delta,
        },
    )

    return replace(
        state,
        tick=tick,
        faction_states=faction_states,
        villain_escalation=clamp_int(state.villain_escalation + escalation_delta, 0, 999),
        active_rumors=active_rumors,
        collapsed_dungeons=unique_strings(collapsed)[-MAX_COLLAPSED_DUNGEONS:],
        active_towns=towns,
        history=[*state.history, entry][-MAX_HISTORY:],
    )


def apply_world_growth_to_context(
    campaign: CampaignContext, action: Union[PlayerWorldAction, Mapping[str, Any]]
) -> CampaignContext:
    """Apply one player action, replacing only the campaign's world state."""
    world_context = campaign.world_context
    next_state = update_world_state(world_context.world_state, action)
    return replace(campaign, world_context=world_context.with_world_state(next_state))


def save_campaign(root: Path, campaign: CampaignContext, slug: Optional[str] = None) -> str:
    slug = slug or slugify(campaign.title)
    paths = campaign_paths(root, slug)
    write_json(paths["campaign"], asdict(campaign))
    set_current_campaign(root, slug)
    return slug


def load_campaign(root: Path, slug: str) -> CampaignContext:
    """Load a stored campaign with validation.

    Raises:
        CampaignNotFoundError: If no campaign.json exists for ``slug``
        CorruptedCampaignError: If the document cannot be deserialized
    """
    paths = campaign_paths(root, slug)
    if not paths["campaign"].exists():
        raise CampaignNotFoundError(slug)

    data = read_json(paths["campaign"])
    if not isinstance(data, dict):
        raise CorruptedCampaignError(slug, "campaign.json is not a JSON object")

    try:
        return campaign_context_from_dict(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise CorruptedCampaignError(slug, str(e)) from e


def load_runtime_state(root: Path, slug: str) -> Dict[str, Any]:
    data = read_json(campaign_paths(root, slug)["runtime"], default={})
    return data if isinstance(data, dict) else {}


def save_runtime_state(root: Path, slug: str, state: Mapping[str, Any]) -> None:
    write_json(campaign_paths(root, slug)["runtime"], dict(state))
