import json

import pytest

from worldforge.__main__ import main as entry_main
from worldforge.cli import main
from worldforge.resolver import resolve_forge_input


@pytest.fixture
def cli_root(tmp_path, monkeypatch):
    """Point the CLI's campaign storage at a temp directory."""
    root = tmp_path / "campaigns"
    monkeypatch.setenv("WORLDFORGE_CAMPAIGNS_DIR", str(root))
    return root


def _forge(*extra):
    main(["forge", "--title", "Ashline Covenant", "--description", "Ash valleys and oaths.", *extra])


class TestForgeCommand:
    """Test `worldforge forge`."""

    def test_creates_campaign(self, cli_root):
        _forge("--preset", "dark", "--complexity", "low")
        doc = json.loads((cli_root / "ashline-covenant" / "campaign.json").read_text(encoding="utf-8"))
        assert doc["title"] == "Ashline Covenant"
        assert doc["world_seed"]["forge_input"]["tone_preset"] == "dark"
        assert len(doc["world_context"]["faction_graph"]["factions"]) == 4
        assert (cli_root / ".worldforge_current").read_text(encoding="utf-8") == "ashline-covenant"

    def test_numeric_seed(self, cli_root):
        _forge("--seed", "42", "--slug", "seeded")
        doc = json.loads((cli_root / "seeded" / "campaign.json").read_text(encoding="utf-8"))
        assert doc["world_seed"]["forge_input"]["manual_seed_override"] == 42

    def test_settings_defaults_used(self, cli_root, monkeypatch):
        monkeypatch.setenv("WORLDFORGE_DEFAULT_PRESET", "cozy")
        _forge()
        doc = json.loads((cli_root / "ashline-covenant" / "campaign.json").read_text(encoding="utf-8"))
        assert doc["world_seed"]["forge_input"]["tone_preset"] == "cozy"

    def test_random_mode_ignores_saved_defaults(self, cli_root):
        main(["setup", "--preset", "anime", "--size", "small", "--complexity", "low"])
        _forge("--mode", "themeLockedRandom")
        doc = json.loads((cli_root / "ashline-covenant" / "campaign.json").read_text(encoding="utf-8"))
        expected = resolve_forge_input({
            "title": "Ashline Covenant",
            "description": "Ash valleys and oaths.",
            "randomization_mode": "themeLockedRandom",
        })
        forge_input = doc["world_seed"]["forge_input"]
        assert forge_input["tone_preset"] == expected.tone_preset
        assert forge_input["world_size"] == expected.world_size
        assert forge_input["faction_complexity"] == expected.faction_complexity

    def test_random_mode_keeps_explicit_flags(self, cli_root):
        _forge("--mode", "themeLockedRandom", "--preset", "dark")
        doc = json.loads((cli_root / "ashline-covenant" / "campaign.json").read_text(encoding="utf-8"))
        assert doc["world_seed"]["forge_input"]["tone_preset"] == "dark"

    def test_long_title_truncated(self, cli_root):
        main(["forge", "--title", "a" * 110, "--description", "A very long name."])
        assert (cli_root / ("a" * 100) / "campaign.json").exists()

    def test_template(self, cli_root):
        main(["template", "gothic_horror", "--title", "Fog Bells", "--description", "A drowned parish."])
        doc = json.loads((cli_root / "fog-bells" / "campaign.json").read_text(encoding="utf-8"))
        assert doc["world_seed"]["forge_input"]["tone_preset"] == "dark"


class TestCampaignCommands:
    """Test commands that work on a stored campaign."""

    def test_act_advances_tick(self, cli_root):
        _forge()
        main(["act", "raid", "--brutality", "1", "--tag", "collapse", "--summary", "Burned the toll gate"])
        doc = json.loads((cli_root / "ashline-covenant" / "campaign.json").read_text(encoding="utf-8"))
        state = doc["world_context"]["world_state"]
        assert state["tick"] == 1
        assert state["history"][0]["summary"] == "Burned the toll gate"
        assert len(state["collapsed_dungeons"]) == 1

    def test_character(self, cli_root):
        _forge()
        main(["character", "--background", "ash diver", "--moral", "-0.8"])
        runtime = json.loads((cli_root / "ashline-covenant" / "runtime_state.json").read_text(encoding="utf-8"))
        assert runtime["character_forge_profile"]["background"] == "ash diver"
        assert "moral:ruthless" in runtime["character_forge_profile"]["starting_flags"]

    def test_info(self, cli_root, capsys):
        _forge()
        main(["info"])
        assert "Ashline Covenant" in capsys.readouterr().out

    def test_use(self, cli_root):
        _forge("--slug", "first")
        _forge("--slug", "second")
        main(["use", "first"])
        assert (cli_root / ".worldforge_current").read_text(encoding="utf-8") == "first"

    def test_missing_campaign_exits(self, cli_root):
        with pytest.raises(SystemExit) as exc_info:
            main(["info", "--campaign", "missing"])
        assert exc_info.value.code == 2

    def test_invalid_action_exits(self, cli_root):
        _forge()
        with pytest.raises(SystemExit) as exc_info:
            main(["act", "x" * 81])
        assert exc_info.value.code == 2

    @pytest.mark.parametrize("argv", [
        ["info", "--campaign", "../etc"],
        ["use", "Bad Slug"],
        ["act", "raid", "--campaign", "a/b"],
        ["forge", "--title", "T", "--description", "D", "--slug", ".."],
    ])
    def test_invalid_slug_exits(self, cli_root, argv):
        with pytest.raises(SystemExit) as exc_info:
            main(argv)
        assert exc_info.value.code == 2


class TestSetupCommand:
    """Test `worldforge setup`."""

    def test_saves_defaults(self, cli_root):
        main(["setup", "--preset", "anime", "--size", "small"])
        _forge()
        doc = json.loads((cli_root / "ashline-covenant" / "campaign.json").read_text(encoding="utf-8"))
        assert doc["world_seed"]["forge_input"]["tone_preset"] == "anime"
        assert doc["world_context"]["biome_map"]["world_size"] == "small"


class TestEntryPoint:
    """Test the package entry point."""

    def test_no_args_lists_campaigns(self, cli_root, capsys):
        entry_main([])
        assert "Campaigns" in capsys.readouterr().out
