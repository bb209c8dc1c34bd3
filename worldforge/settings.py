from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()

# Configuration mapping: settings_attr -> env_var
ENV_VAR_MAPPING = {
    'log_level': 'WORLDFORGE_LOG_LEVEL',
    'default_preset': 'WORLDFORGE_DEFAULT_PRESET',
    'campaigns_dir': 'WORLDFORGE_CAMPAIGNS_DIR',
}


def _config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "worldforge"
    return Path.home() / ".config" / "worldforge"


CONFIG_PATH = _config_dir() / "config.json"


@dataclass
class UserSettings:
    # Defaults applied by `worldforge forge` when a flag is omitted
    default_preset: str = "mythic"
    default_randomization_mode: str = "fixed"
    default_world_size: str = "medium"
    default_faction_complexity: str = "medium"

    log_level: str = "INFO"
    campaigns_dir: Optional[str] = None  # None -> ./campaigns


def _apply_env_overrides(s: UserSettings) -> UserSettings:
    for settings_attr, env_var in ENV_VAR_MAPPING.items():
        value = os.environ.get(env_var)
        if value:
            setattr(s, settings_attr, value)
    return s


def load_user_settings() -> UserSettings:
    """Load user settings from config file, then apply environment overrides.

    Returns default settings if file doesn't exist or is corrupted.
    """
    settings = UserSettings()
    try:
        if CONFIG_PATH.exists():
            data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
            settings = UserSettings(**data)
    except json.JSONDecodeError as e:
        logging.warning(f"Failed to parse settings file {CONFIG_PATH}: {e}")
    except (TypeError, ValueError) as e:
        logging.warning(f"Ignoring unrecognized settings in {CONFIG_PATH}: {e}")

    return _apply_env_overrides(settings)


def save_user_settings(s: UserSettings) -> None:
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(json.dumps(asdict(s), indent=2), encoding="utf-8")


def campaigns_root(settings: Optional[UserSettings] = None) -> Path:
    """Directory holding one sub-directory per stored campaign."""
    s = settings or load_user_settings()
    if s.campaigns_dir:
        return Path(s.campaigns_dir).expanduser()
    return Path(os.getcwd()) / "campaigns"
