"""Tests for the static world layers: bible, biome map, faction graph."""
import pytest

from worldforge.bible import COMPLEXITY_COUNTS, generate_faction_names, generate_world_bible
from worldforge.biomes import BIOME_POOL, REGION_COUNT_BANDS, biome_weight, generate_biome_map
from worldforge.factions import FACTION_COUNTS, generate_faction_graph
from worldforge.models import ToneVector
from worldforge.seed import build_world_seed


def _layers(raw):
    seed = build_world_seed(raw)
    bible = generate_world_bible(seed)
    biome_map = generate_biome_map(seed)
    return seed, bible, biome_map, generate_faction_graph(seed, bible, biome_map)


class TestWorldBible:
    """Test world bible generation."""

    @pytest.mark.parametrize("complexity", ["low", "medium", "high"])
    def test_counts_follow_complexity(self, minimal_input, complexity):
        seed = build_world_seed({**minimal_input, "faction_complexity": complexity})
        bible = generate_world_bible(seed)
        conflicts, dominant, minor = COMPLEXITY_COUNTS[complexity]
        assert len(bible.core_conflicts) == conflicts
        assert len(bible.dominant_factions) == dominant
        assert len(bible.minor_factions) == minor

    def test_faction_names_distinct(self, campaign):
        bible = campaign.world_context.world_bible
        names = [n.lower() for n in bible.dominant_factions + bible.minor_factions]
        assert len(set(names)) == len(names)

    def test_large_world_has_more_lore(self, minimal_input):
        small = generate_world_bible(build_world_seed({**minimal_input, "world_size": "small"}))
        large = generate_world_bible(build_world_seed({**minimal_input, "world_size": "large"}))
        assert len(small.cosmology_rules) == 4
        assert len(large.cosmology_rules) == 5
        assert len(small.biome_definitions) == 6
        assert len(large.biome_definitions) == 10

    def test_creature_archetypes_lead_with_focus(self, campaign):
        archetypes = campaign.world_context.world_bible.creature_archetypes
        assert archetypes[:2] == ["undead", "wraiths"]
        assert len(archetypes) <= 14

    def test_naming_rules_capped(self, campaign):
        assert 0 < len(campaign.world_context.world_bible.naming_rules) <= 7

    def test_world_name_two_words(self, campaign):
        assert len(campaign.world_context.world_bible.world_name.split(" ")) == 2

    def test_faction_name_helper(self):
        names = generate_faction_names(5, "probe", 6)
        assert len(names) == 6
        assert len({n.lower() for n in names}) == 6


class TestBiomeMap:
    """Test region partitioning."""

    @pytest.mark.parametrize("size", ["small", "medium", "large"])
    def test_region_count_band(self, size):
        lo, hi = REGION_COUNT_BANDS[size]
        for seed in range(1, 25):
            biome_map = generate_biome_map(seed, size)
            assert lo <= len(biome_map.regions) <= hi
            assert biome_map.world_size == size

    def test_region_fields(self, campaign):
        biome_map = campaign.world_context.biome_map
        for index, region in enumerate(biome_map.regions):
            assert region.id == f"region_{index + 1}"
            assert region.dominant_biome in BIOME_POOL
            assert 0.0 <= region.corruption <= 1.0
            assert 0.0 <= region.dungeon_density <= 1.0
            assert 0.0 <= region.town_density <= 1.0
            assert region.dominant_biome in region.tags
        assert biome_map.capital_towns == [r.capital_town for r in biome_map.regions]
        assert 0.0 <= biome_map.average_dungeon_density <= 1.0

    def test_corruption_zones(self, campaign):
        biome_map = campaign.world_context.biome_map
        zones = biome_map.corruption_zones
        assert len(zones) <= max(1, len(biome_map.regions) // 3)
        severities = [zone.severity for zone in zones]
        assert severities == sorted(severities, reverse=True)
        region_ids = {r.id for r in biome_map.regions}
        for zone in zones:
            assert zone.severity >= 0.55
            assert zone.region_id in region_ids

    def test_bare_seed_uses_baseline(self):
        assert generate_biome_map(77) == generate_biome_map(77, "medium")

    def test_start_hint_bonus(self):
        tone = ToneVector()
        assert biome_weight("riftwaste", tone, "rift") - biome_weight("riftwaste", tone) == 6
        assert biome_weight("sunfields", tone, "rift") == biome_weight("sunfields", tone)

    def test_dark_tone_favors_dark_biomes(self):
        bleak = ToneVector(darkness=1.0, brutality=1.0)
        assert biome_weight("catacombs", bleak) > biome_weight("catacombs", ToneVector())


class TestFactionGraph:
    """Test the faction relation graph."""

    @pytest.mark.parametrize("complexity", ["low", "medium", "high"])
    def test_faction_count(self, minimal_input, complexity):
        _, _, _, graph = _layers({**minimal_input, "faction_complexity": complexity})
        assert len(graph.factions) == FACTION_COUNTS[complexity]

    def test_names_come_from_bible(self, campaign):
        bible = campaign.world_context.world_bible
        graph = campaign.world_context.faction_graph
        # high complexity: 13 bible names, 8 graph factions
        assert [f.name for f in graph.factions] == (bible.dominant_factions + bible.minor_factions)[:8]

    def test_ids_and_homes(self, campaign):
        regions = campaign.world_context.biome_map.regions
        for i, faction in enumerate(campaign.world_context.faction_graph.factions):
            assert faction.id.startswith("faction_")
            assert faction.id.endswith(f"_{i + 1}")
            assert faction.home_region_id == regions[i % len(regions)].id

    def test_faction_values_in_range(self, campaign):
        for faction in campaign.world_context.faction_graph.factions:
            assert 10 <= faction.power_level <= 95
            assert len(faction.goals) == 2
            assert len(set(faction.goals)) == 2
            for axis in ("order", "mercy", "ambition"):
                assert -1.0 <= getattr(faction.moral_alignment, axis) <= 1.0

    def test_relations_symmetric(self, campaign):
        graph = campaign.world_context.faction_graph
        ids = [f.id for f in graph.factions]
        for a in ids:
            assert graph.relations[a][a] == 100
            for b in ids:
                assert graph.relations[a][b] == graph.relations[b][a]
                assert -100 <= graph.relations[a][b] <= 100

    def test_tensions_bounded(self, campaign):
        tensions = campaign.world_context.faction_graph.active_tensions
        assert 2 <= len(tensions) <= 12
        assert len({t.lower() for t in tensions}) == len(tensions)

    def test_repeatable(self, base_input):
        assert _layers(base_input) == _layers(base_input)
