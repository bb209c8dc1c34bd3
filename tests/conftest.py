from typing import Any, Dict

import pytest

from worldforge.generator import build_campaign_context
from worldforge.models import CampaignContext

BASE_INPUT: Dict[str, Any] = {
    "title": "Ashline Covenant",
    "description": "A frontier of ash-choked valleys where oathbound orders hunt a fallen saint.",
    "tone_preset": "dark",
    "randomization_mode": "controlled",
    "lethality": "high",
    "magic_density": "high",
    "tech_level": "medieval",
    "faction_complexity": "high",
    "world_size": "medium",
    "creature_focus": ["undead", "wraiths"],
}

SETTINGS_ENV_VARS = (
    "WORLDFORGE_LOG_LEVEL",
    "WORLDFORGE_DEFAULT_PRESET",
    "WORLDFORGE_CAMPAIGNS_DIR",
)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep every test away from the real user config and environment."""
    monkeypatch.setattr("worldforge.settings.CONFIG_PATH", tmp_path / "config" / "config.json")
    for var in SETTINGS_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def base_input() -> Dict[str, Any]:
    """A fully specified forge input."""
    return dict(BASE_INPUT)


@pytest.fixture
def minimal_input() -> Dict[str, Any]:
    """Only the required fields; everything else resolves to defaults."""
    return {"title": "Quiet Hollow", "description": "A small valley with a long memory."}


@pytest.fixture
def campaign(base_input) -> CampaignContext:
    """A complete campaign generated from the base input."""
    return build_campaign_context(base_input)


@pytest.fixture
def campaigns_dir(tmp_path):
    """Campaign storage root inside the test's temp directory."""
    root = tmp_path / "campaigns"
    root.mkdir()
    return root
