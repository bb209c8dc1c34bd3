from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Union

WORLD_FORGE_VERSION = "worldforge.v1.0.0"

TONE_AXES = ("darkness", "whimsy", "brutality", "absurdity", "cosmic", "heroic", "tragic", "cozy")


@dataclass(frozen=True)
class ToneVector:
    # Defaults are the baseline every campaign starts from.
    darkness: float = 0.4
    whimsy: float = 0.3
    brutality: float = 0.35
    absurdity: float = 0.25
    cosmic: float = 0.3
    heroic: float = 0.45
    tragic: float = 0.35
    cozy: float = 0.25

    def clamped(self) -> "ToneVector":
        return ToneVector(**{axis: max(0.0, min(1.0, getattr(self, axis))) for axis in TONE_AXES})

    def as_dict(self) -> Dict[str, float]:
        return {axis: getattr(self, axis) for axis in TONE_AXES}


@dataclass(frozen=True)
class ResolvedForgeInput:
    """A ForgeInput with every style field filled in."""
    title: str
    description: str
    tone_preset: str
    selected_presets: List[str]
    humor_level: int
    lethality: str
    magic_density: str
    tech_level: str
    creature_focus: List[str]
    faction_complexity: str
    world_size: str
    starting_region_type: str
    villain_archetype: str
    corruption_level: int
    divine_interference_level: int
    randomization_mode: str
    player_toggles: Dict[str, bool] = field(default_factory=dict)
    manual_seed_override: Optional[Union[int, str]] = None


@dataclass(frozen=True)
class WorldSeed:
    world_forge_version: str
    seed_string: str
    seed_number: int
    theme_tags: List[str]
    tone_vector: ToneVector
    preset_trace: List[str]
    forge_input: ResolvedForgeInput


@dataclass
class WorldBible:
    world_name: str
    cosmology_rules: List[str]
    magic_system_flavor: str
    core_conflicts: List[str]
    dominant_factions: List[str]
    minor_factions: List[str]
    biome_definitions: List[str]
    creature_archetypes: List[str]
    npc_speech_style: str
    naming_rules: List[str]
    loot_flavor_profile: List[str]
    moral_climate: str


@dataclass
class Region:
    id: str
    name: str
    dominant_biome: str
    corruption: float
    dungeon_density: float
    town_density: float
    capital_town: str
    tags: List[str] = field(default_factory=list)


@dataclass
class CorruptionZone:
    region_id: str
    severity: float
    note: str


@dataclass
class BiomeMap:
    world_size: str
    regions: List[Region]
    corruption_zones: List[CorruptionZone]
    capital_towns: List[str]
    average_dungeon_density: float


@dataclass
class MoralAlignment:
    order: float
    mercy: float
    ambition: float


@dataclass
class Faction:
    id: str
    name: str
    ideology: str
    moral_alignment: MoralAlignment
    power_level: int
    home_region_id: str
    goals: List[str] = field(default_factory=list)


@dataclass
class FactionGraph:
    factions: List[Faction]
    relations: Dict[str, Dict[str, int]]
    active_tensions: List[str]


@dataclass
class CreaturePools:
    featured_focus: List[str]
    global_pool: List[str]
    by_biome: Dict[str, List[str]]  # keyed by region id
    by_threat_tier: Dict[str, List[str]]  # low / medium / high


@dataclass
class NpcStyleRules:
    speech_tone: str
    humor_frequency: float
    threat_level: float
    naming_conventions: List[str]
    signature_idioms: List[str]


@dataclass
class LootFlavorProfile:
    adjective_pool: List[str]
    noun_pool: List[str]
    flourish_pool: List[str]
    rarity_suffix_by_tier: Dict[str, str]
    whimsical_scale: float


@dataclass
class MagicRules:
    density: str
    volatility: float
    schools: List[str]
    taboo_practices: List[str]
    cosmic_leakage: float


@dataclass
class DMBehaviorProfile:
    cruelty_bias: float
    generosity_bias: float
    chaos_bias: float
    fairness_bias: float
    humor_bias: float
    memory_depth: int


@dataclass
class FactionState:
    faction_id: str
    power_level: int
    trust_delta: int = 0
    last_action_tick: int = 0


@dataclass
class HistoryEntry:
    tick: int
    type: str
    summary: str
    impacts: Dict[str, float] = field(default_factory=dict)


@dataclass
class WorldState:
    seed_number: int
    world_name: str
    tick: int = 0
    active_towns: List[str] = field(default_factory=list)
    active_rumors: List[str] = field(default_factory=list)
    collapsed_dungeons: List[str] = field(default_factory=list)
    villain_escalation: int = 0
    faction_states: List[FactionState] = field(default_factory=list)
    history: List[HistoryEntry] = field(default_factory=list)


@dataclass
class WorldContext:
    world_seed: WorldSeed
    world_bible: WorldBible
    biome_map: BiomeMap
    faction_graph: FactionGraph
    creature_pools: CreaturePools
    npc_style_rules: NpcStyleRules
    loot_flavor_profile: LootFlavorProfile
    magic_rules: MagicRules
    world_state: WorldState

    def with_world_state(self, world_state: WorldState) -> "WorldContext":
        return replace(self, world_state=world_state)


@dataclass
class DMContext:
    world_seed: WorldSeed
    dm_behavior_profile: DMBehaviorProfile
    narrative_directives: List[str]
    tactical_directives: List[str]


@dataclass
class CampaignContext:
    world_forge_version: str
    title: str
    description: str
    world_seed: WorldSeed
    world_context: WorldContext
    dm_context: DMContext


@dataclass
class CharacterForgeOutput:
    origin_region_id: str
    origin_region_name: str
    faction_alignment_id: str
    faction_alignment_name: str
    background: str
    personality_traits: List[str]
    moral_leaning: float
    starting_town: str
    starting_npc_relationships: Dict[str, int]
    initial_faction_trust: Dict[str, int]
    starting_rumors: List[str]
    starting_flags: List[str]


def tone_vector_from_dict(data: Dict[str, Any]) -> ToneVector:
    return ToneVector(**{axis: float(data[axis]) for axis in TONE_AXES}).clamped()


def world_seed_from_dict(data: Dict[str, Any]) -> WorldSeed:
    forge = dict(data["forge_input"])
    return WorldSeed(
        world_forge_version=data["world_forge_version"],
        seed_string=data["seed_string"],
        seed_number=int(data["seed_number"]),
        theme_tags=list(data["theme_tags"]),
        tone_vector=tone_vector_from_dict(data["tone_vector"]),
        preset_trace=list(data["preset_trace"]),
        forge_input=ResolvedForgeInput(**forge),
    )


def _biome_map_from_dict(data: Dict[str, Any]) -> BiomeMap:
    return BiomeMap(
        world_size=data["world_size"],
        regions=[Region(**region) for region in data["regions"]],
        corruption_zones=[CorruptionZone(**zone) for zone in data["corruption_zones"]],
        capital_towns=list(data["capital_towns"]),
        average_dungeon_density=float(data["average_dungeon_density"]),
    )


def _faction_graph_from_dict(data: Dict[str, Any]) -> FactionGraph:
    factions = []
    for faction_data in data["factions"]:
        faction_data = dict(faction_data)
        faction_data["moral_alignment"] = MoralAlignment(**faction_data["moral_alignment"])
        factions.append(Faction(**faction_data))
    return FactionGraph(
        factions=factions,
        relations={a: {b: int(score) for b, score in row.items()} for a, row in data["relations"].items()},
        active_tensions=list(data["active_tensions"]),
    )


def world_state_from_dict(data: Dict[str, Any]) -> WorldState:
    """Rebuild a WorldState, rejecting values outside the simulation's ranges.

    Raises:
        KeyError, TypeError, ValueError: If the document is malformed.
    """
    state = WorldState(
        seed_number=int(data["seed_number"]),
        world_name=data["world_name"],
        tick=int(data.get("tick", 0)),
        active_towns=list(data.get("active_towns", [])),
        active_rumors=list(data.get("active_rumors", [])),
        collapsed_dungeons=list(data.get("collapsed_dungeons", [])),
        villain_escalation=int(data.get("villain_escalation", 0)),
        faction_states=[FactionState(**fs) for fs in data.get("faction_states", [])],
        history=[HistoryEntry(**entry) for entry in data.get("history", [])],
    )
    if state.tick < 0:
        raise ValueError(f"tick must be non-negative, got {state.tick}")
    if not 0 <= state.villain_escalation <= 999:
        raise ValueError(f"villain_escalation out of range: {state.villain_escalation}")
    for fs in state.faction_states:
        if not 1 <= fs.power_level <= 120 or not -100 <= fs.trust_delta <= 100:
            raise ValueError(f"faction state out of range: {fs.faction_id}")
    return state


def campaign_context_from_dict(data: Dict[str, Any]) -> CampaignContext:
    """Deserialize a stored CampaignContext, reconstructing nested dataclasses."""
    world_seed = world_seed_from_dict(data["world_seed"])
    wc = data["world_context"]
    world_context = WorldContext(
        world_seed=world_seed_from_dict(wc["world_seed"]),
        world_bible=WorldBible(**wc["world_bible"]),
        biome_map=_biome_map_from_dict(wc["biome_map"]),
        faction_graph=_faction_graph_from_dict(wc["faction_graph"]),
        creature_pools=CreaturePools(**wc["creature_pools"]),
        npc_style_rules=NpcStyleRules(**wc["npc_style_rules"]),
        loot_flavor_profile=LootFlavorProfile(**wc["loot_flavor_profile"]),
        magic_rules=MagicRules(**wc["magic_rules"]),
        world_state=world_state_from_dict(wc["world_state"]),
    )
    dm = data["dm_context"]
    dm_context = DMContext(
        world_seed=world_seed_from_dict(dm["world_seed"]),
        dm_behavior_profile=DMBehaviorProfile(**dm["dm_behavior_profile"]),
        narrative_directives=list(dm["narrative_directives"]),
        tactical_directives=list(dm["tactical_directives"]),
    )
    if not world_context.biome_map.regions or not world_context.faction_graph.factions:
        raise ValueError("campaign has no regions or no factions")
    return CampaignContext(
        world_forge_version=data["world_forge_version"],
        title=data["title"],
        description=data["description"],
        world_seed=world_seed,
        world_context=world_context,
        dm_context=dm_context,
    )
