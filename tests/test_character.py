import copy

import pytest

from worldforge.character import (
    MAX_DISCOVERY_LOG,
    MAX_RUNTIME_RUMORS,
    apply_character_forge_to_state,
    forge_character_from_world,
    moral_bucket,
)
from worldforge.exceptions import ValidationError


class TestForgeCharacter:
    """Test rooting a character in a generated world."""

    def test_repeatable(self, campaign):
        assert forge_character_from_world(campaign) == forge_character_from_world(campaign)

    def test_accepts_none(self, campaign):
        assert forge_character_from_world(campaign, None) == forge_character_from_world(campaign, {})

    def test_origin_by_region_id(self, campaign):
        region = campaign.world_context.biome_map.regions[-1]
        forged = forge_character_from_world(campaign, {"origin_region_id": region.id})
        assert forged.origin_region_id == region.id
        assert forged.origin_region_name == region.name
        assert forged.starting_town == region.capital_town

    def test_origin_by_region_name(self, campaign):
        region = campaign.world_context.biome_map.regions[0]
        forged = forge_character_from_world(campaign, {"origin_region_id": region.name.upper()})
        assert forged.origin_region_id == region.id

    def test_faction_falls_back_to_home_region(self, campaign):
        region = campaign.world_context.biome_map.regions[0]
        forged = forge_character_from_world(campaign, {"origin_region_id": region.id})
        # factions are homed round-robin, so the first faction lives in region 1
        assert forged.faction_alignment_id == campaign.world_context.faction_graph.factions[0].id

    def test_explicit_faction(self, campaign):
        faction = campaign.world_context.faction_graph.factions[3]
        forged = forge_character_from_world(campaign, {"faction_alignment_id": faction.id})
        assert forged.faction_alignment_id == faction.id
        assert forged.faction_alignment_name == faction.name

    def test_unknown_origin_still_resolves(self, campaign):
        forged = forge_character_from_world(campaign, {"origin_region_id": "nowhere at all"})
        assert forged.origin_region_id in {r.id for r in campaign.world_context.biome_map.regions}

    def test_explicit_background_and_traits(self, campaign):
        forged = forge_character_from_world(campaign, {
            "background": "disgraced cartographer",
            "personality_traits": ["curious", "Curious", "blunt"],
        })
        assert forged.background == "disgraced cartographer"
        assert forged.personality_traits == ["curious", "blunt"]
        assert "background:disgraced_cartographer" in forged.starting_flags

    def test_drawn_traits(self, campaign):
        forged = forge_character_from_world(campaign)
        assert len(forged.personality_traits) == 3
        assert len(set(forged.personality_traits)) == 3

    def test_three_distinct_npcs(self, campaign):
        forged = forge_character_from_world(campaign)
        assert len(forged.starting_npc_relationships) == 3
        for score in forged.starting_npc_relationships.values():
            assert -100 <= score <= 100

    def test_trust_covers_every_faction(self, campaign):
        forged = forge_character_from_world(campaign)
        ids = {f.id for f in campaign.world_context.faction_graph.factions}
        assert set(forged.initial_faction_trust) == ids
        for score in forged.initial_faction_trust.values():
            assert -100 <= score <= 100

    def test_moral_leaning(self, campaign):
        forged = forge_character_from_world(campaign, {"moral_leaning": 0.9})
        assert forged.moral_leaning == 0.9
        assert "moral:idealistic" in forged.starting_flags

    def test_derived_moral_leaning_in_range(self, campaign):
        forged = forge_character_from_world(campaign)
        assert -1.0 <= forged.moral_leaning <= 1.0

    def test_flags_and_rumors(self, campaign):
        forged = forge_character_from_world(campaign)
        assert forged.starting_flags[0] == f"origin:{forged.origin_region_id}"
        assert forged.starting_flags[1] == f"faction:{forged.faction_alignment_id}"
        assert len(forged.starting_flags) <= 10
        assert 0 < len(forged.starting_rumors) <= 6

    def test_moral_leaning_out_of_range(self, campaign):
        with pytest.raises(ValidationError) as exc_info:
            forge_character_from_world(campaign, {"moral_leaning": 3})
        assert exc_info.value.field == "moral_leaning"

    def test_moral_bucket(self):
        assert moral_bucket(0.4) == "idealistic"
        assert moral_bucket(-0.4) == "ruthless"
        assert moral_bucket(0.1) == "pragmatic"


class TestApplyCharacterForge:
    """Test folding a forged character into runtime state."""

    def test_empty_state(self, campaign):
        forged = forge_character_from_world(campaign)
        state = apply_character_forge_to_state(None, forged)
        assert state["starting_town"] == forged.starting_town
        assert state["factions_present"] == [forged.faction_alignment_name]
        assert state["rumors"] == forged.starting_rumors
        assert state["character_forge_profile"]["origin_region_id"] == forged.origin_region_id
        assert state["world_context"]["last_character_faction"] == forged.faction_alignment_id
        assert len(state["discovery_log"]) == 1

    def test_input_not_mutated(self, campaign):
        forged = forge_character_from_world(campaign)
        runtime = {
            "rumors": ["An old rumor."],
            "town_relationships": {"Old Friend": 40},
            "discovery_log": [{"kind": "note"}],
            "world_context": {"weather": "rain"},
            "inventory": ["rope"],
        }
        snapshot = copy.deepcopy(runtime)
        state = apply_character_forge_to_state(runtime, forged)
        assert runtime == snapshot
        assert state["inventory"] == ["rope"]
        assert state["town_relationships"]["Old Friend"] == 40
        assert state["world_context"]["weather"] == "rain"
        assert state["rumors"][0] == "An old rumor."

    def test_repeat_merge_is_stable(self, campaign):
        forged = forge_character_from_world(campaign)
        once = apply_character_forge_to_state({}, forged)
        twice = apply_character_forge_to_state(once, forged)
        assert twice["rumors"] == once["rumors"]
        assert twice["factions_present"] == once["factions_present"]
        assert twice["town_relationships"] == once["town_relationships"]
        assert len(twice["discovery_log"]) == 2

    def test_caps(self, campaign):
        forged = forge_character_from_world(campaign)
        runtime = {
            "rumors": [f"rumor {i}" for i in range(40)],
            "discovery_log": [{"kind": "note", "detail": str(i)} for i in range(MAX_DISCOVERY_LOG + 10)],
        }
        state = apply_character_forge_to_state(runtime, forged)
        assert len(state["rumors"]) == MAX_RUNTIME_RUMORS
        assert state["rumors"][-1] == forged.starting_rumors[-1]
        assert len(state["discovery_log"]) == MAX_DISCOVERY_LOG
        assert state["discovery_log"][-1]["kind"] == "character_forge"

    def test_malformed_sections_replaced(self, campaign):
        forged = forge_character_from_world(campaign)
        state = apply_character_forge_to_state({"rumors": "not a list", "town_relationships": 5}, forged)
        assert state["rumors"] == forged.starting_rumors
        assert set(state["town_relationships"]) == set(forged.starting_npc_relationships)
