from dataclasses import asdict

import pytest

from worldforge.models import (
    TONE_AXES,
    ToneVector,
    campaign_context_from_dict,
    tone_vector_from_dict,
    world_state_from_dict,
)


class TestToneVector:
    """Test the tone vector model."""

    def test_baseline(self):
        tone = ToneVector()
        assert tone.darkness == 0.4
        assert tone.heroic == 0.45
        assert list(tone.as_dict()) == list(TONE_AXES)

    def test_from_dict_clamps(self):
        data = {axis: 0.5 for axis in TONE_AXES}
        data["darkness"] = 1.7
        data["cozy"] = -0.2
        tone = tone_vector_from_dict(data)
        assert tone.darkness == 1.0
        assert tone.cozy == 0.0
        assert tone.whimsy == 0.5

    def test_from_dict_missing_axis(self):
        with pytest.raises(KeyError):
            tone_vector_from_dict({"darkness": 0.5})


class TestWorldStateFromDict:
    """Test world state deserialization."""

    def test_minimal_document(self):
        state = world_state_from_dict({"seed_number": 5, "world_name": "Ashen March"})
        assert state.tick == 0
        assert state.faction_states == []
        assert state.history == []

    def test_round_trip(self, campaign):
        state = campaign.world_context.world_state
        assert world_state_from_dict(asdict(state)) == state

    @pytest.mark.parametrize(
        "overrides",
        [
            {"tick": -1},
            {"villain_escalation": 1000},
            {"faction_states": [{"faction_id": "f", "power_level": 0}]},
            {"faction_states": [{"faction_id": "f", "power_level": 50, "trust_delta": 101}]},
        ],
    )
    def test_out_of_range_rejected(self, overrides):
        with pytest.raises(ValueError):
            world_state_from_dict({"seed_number": 5, "world_name": "Ashen March", **overrides})


class TestCampaignContextFromDict:
    """Test full campaign deserialization."""

    def test_round_trip(self, campaign):
        assert campaign_context_from_dict(asdict(campaign)) == campaign

    def test_no_regions_rejected(self, campaign):
        data = asdict(campaign)
        data["world_context"]["biome_map"]["regions"] = []
        with pytest.raises(ValueError, match="no regions"):
            campaign_context_from_dict(data)

    def test_no_factions_rejected(self, campaign):
        data = asdict(campaign)
        data["world_context"]["faction_graph"]["factions"] = []
        with pytest.raises(ValueError):
            campaign_context_from_dict(data)

    def test_missing_section(self, campaign):
        data = asdict(campaign)
        del data["dm_context"]
        with pytest.raises(KeyError):
            campaign_context_from_dict(data)
