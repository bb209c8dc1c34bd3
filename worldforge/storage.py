from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Optional

CURRENT_FILE_NAME = ".worldforge_current"
CAMPAIGN_FILE = "campaign.json"
RUNTIME_STATE_FILE = "runtime_state.json"


def campaign_paths(root: Path, slug: str) -> Dict[str, Path]:
    base = root / validate_slug(slug)
    return {
        "base": base,
        "campaign": base / CAMPAIGN_FILE,
        "runtime": base / RUNTIME_STATE_FILE,
    }


def list_campaigns(root: Path) -> list[str]:
    if not root.exists():
        return []
    return sorted(p.name for p in root.iterdir() if (p / CAMPAIGN_FILE).exists())


def write_json(path: Path, data: Any) -> None:
    if is_dataclass(data):
        data = asdict(data)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def read_json(path: Path, default: Optional[Any] = None) -> Any:
    """Read JSON from file with error handling.

    Returns default value if file doesn't exist or JSON is invalid.
    """
    if not path.exists():
        return default

    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logging.error(f"Failed to parse JSON from {path}: {e}")
        return default
    except IOError as e:
        logging.error(f"Failed to read file {path}: {e}")
        return default


def slugify(value: str) -> str:
    """Convert a campaign title to a safe directory name."""
    value = value.strip().lower()
    value = re.sub(r"[^a-z0-9\-\s]", "", value)
    value = re.sub(r"\s+", "-", value)
    value = re.sub(r"-+", "-", value)
    # Truncated slugs must still pass validate_slug.
    return value.strip("-")[:100].strip("-") or "campaign"


def validate_slug(slug: str) -> str:
    """Validate a slug given on the command line.

    Raises:
        ValueError: If slug is empty or could escape the campaigns directory
    """
    if not slug:
        raise ValueError("Slug cannot be empty")

    # SECURITY: Prevent path traversal
    if ".." in slug or "/" in slug or "\\" in slug:
        raise ValueError("Invalid slug: contains path traversal characters")
    if not re.match(r"^[a-z0-9][a-z0-9\-]*[a-z0-9]$|^[a-z0-9]$", slug):
        raise ValueError("Invalid slug: must contain only lowercase letters, numbers, and hyphens")
    if len(slug) > 100:
        raise ValueError("Invalid slug: too long (max 100 characters)")

    return slug


def set_current_campaign(root: Path, slug: str) -> None:
    root.mkdir(parents=True, exist_ok=True)
    (root / CURRENT_FILE_NAME).write_text(validate_slug(slug), encoding="utf-8")


def get_current_campaign(root: Path) -> Optional[str]:
    path = root / CURRENT_FILE_NAME
    if path.exists():
        return path.read_text(encoding="utf-8").strip() or None
    return None
