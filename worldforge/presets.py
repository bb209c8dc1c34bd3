from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .models import ToneVector


@dataclass(frozen=True)
class DMBias:
    cruelty: float
    generosity: float
    chaos: float
    fairness: float
    humor: float


@dataclass(frozen=True)
class ForgePreset:
    key: str
    name: str
    tone_bias: ToneVector
    aesthetics: List[str] = field(default_factory=list)
    creature_bias: List[str] = field(default_factory=list)
    naming_style: List[str] = field(default_factory=list)
    dm_bias: DMBias = DMBias(0.5, 0.5, 0.5, 0.5, 0.5)


# Axes a preset leaves unspecified fall back to the ToneVector baseline.
PRESETS: Dict[str, ForgePreset] = {
    "dark": ForgePreset(
        key="dark",
        name="Dark",
        tone_bias=ToneVector(darkness=0.86, brutality=0.68, tragic=0.62, whimsy=0.12, cozy=0.08),
        aesthetics=["ink", "iron rain", "grave lanterns", "ashen skyline"],
        creature_bias=["undead", "vampires", "wraiths", "night hounds"],
        naming_style=["Somber compounds", "Oathbound epithets"],
        dm_bias=DMBias(cruelty=0.72, generosity=0.28, chaos=0.42, fairness=0.66, humor=0.16),
    ),
    "comicbook": ForgePreset(
        key="comicbook",
        name="Dark Comicbook",
        tone_bias=ToneVector(
            darkness=0.72, brutality=0.52, whimsy=0.22, absurdity=0.34, heroic=0.58, tragic=0.48, cozy=0.1
        ),
        aesthetics=["neon", "hard shadows", "ink splashes", "dramatic panels"],
        creature_bias=["vampires", "vigilantes", "cursed mobs", "clockwork brutes"],
        naming_style=["Bold verbs", "Tagline nicknames"],
        dm_bias=DMBias(cruelty=0.62, generosity=0.38, chaos=0.48, fairness=0.64, humor=0.28),
    ),
    "anime": ForgePreset(
        key="anime",
        name="Anime Heroic",
        tone_bias=ToneVector(
            heroic=0.84, absurdity=0.54, whimsy=0.48, brutality=0.38, darkness=0.34, tragic=0.42, cozy=0.34
        ),
        aesthetics=["sky streaks", "spectacle bursts", "banner sigils", "kinetic frames"],
        creature_bias=["dragons", "rivals", "spirit beasts", "masked elites"],
        naming_style=["Ultra/Hyper prefixes", "Final-form escalations"],
        dm_bias=DMBias(cruelty=0.44, generosity=0.56, chaos=0.55, fairness=0.62, humor=0.5),
    ),
    "mythic": ForgePreset(
        key="mythic",
        name="Mythic",
        tone_bias=ToneVector(
            cosmic=0.78, heroic=0.66, tragic=0.5, absurdity=0.32, darkness=0.44, whimsy=0.26, cozy=0.16
        ),
        aesthetics=["celestial fractures", "ancient thrones", "god-etched relics", "starless temples"],
        creature_bias=["titans", "oracles", "angels", "world serpents"],
        naming_style=["Epic honorifics", "Old-world titles"],
        dm_bias=DMBias(cruelty=0.55, generosity=0.45, chaos=0.48, fairness=0.68, humor=0.22),
    ),
    "cozy": ForgePreset(
        key="cozy",
        name="Cozy Fantasy",
        tone_bias=ToneVector(
            cozy=0.88, whimsy=0.64, heroic=0.52, darkness=0.1, brutality=0.08, absurdity=0.32, tragic=0.14
        ),
        aesthetics=["warm fields", "tea steam", "sun meadows", "lantern festivals"],
        creature_bias=["slimes", "forest spirits", "helpful golems", "friendly beasts"],
        naming_style=["Playful surnames", "Village nicknames"],
        dm_bias=DMBias(cruelty=0.24, generosity=0.76, chaos=0.3, fairness=0.74, humor=0.58),
    ),
    "chaotic": ForgePreset(
        key="chaotic",
        name="Chaotic Absurd",
        tone_bias=ToneVector(
            absurdity=0.9, whimsy=0.82, cosmic=0.56, brutality=0.42, darkness=0.36, heroic=0.48, tragic=0.26,
            cozy=0.24,
        ),
        aesthetics=["glitch confetti", "floating stairs", "laughing storms", "wrong-way gravity"],
        creature_bias=["mimics", "sentient furniture", "cosmic clowns", "anomaly swarms"],
        naming_style=["Ridiculous escalations", "Over-extended titles"],
        dm_bias=DMBias(cruelty=0.5, generosity=0.5, chaos=0.88, fairness=0.4, humor=0.84),
    ),
    "grim": ForgePreset(
        key="grim",
        name="Grim",
        tone_bias=ToneVector(
            darkness=0.92, brutality=0.82, tragic=0.72, cozy=0.04, whimsy=0.08, heroic=0.32, absurdity=0.14,
            cosmic=0.34,
        ),
        aesthetics=["cold iron", "bone banners", "war fog", "scarred stone"],
        creature_bias=["ghouls", "executioners", "siege fiends", "warped knights"],
        naming_style=["Hard monosyllables", "Funeral epithets"],
        dm_bias=DMBias(cruelty=0.82, generosity=0.18, chaos=0.54, fairness=0.56, humor=0.08),
    ),
    "heroic": ForgePreset(
        key="heroic",
        name="Heroic",
        tone_bias=ToneVector(
            heroic=0.88, cozy=0.38, whimsy=0.42, darkness=0.26, brutality=0.34, tragic=0.28, absurdity=0.3,
            cosmic=0.4,
        ),
        aesthetics=["bright standards", "wind-swept cliffs", "sunsteel", "fanfare storms"],
        creature_bias=["dragons", "bandits", "fallen champions", "war machines"],
        naming_style=["Clear hero nouns", "Banner verbs"],
        dm_bias=DMBias(cruelty=0.38, generosity=0.62, chaos=0.36, fairness=0.8, humor=0.36),
    ),
}

PRESET_KEYS = tuple(PRESETS.keys())

DEFAULT_PRESET_KEY = "mythic"

TEMPLATE_PRESETS: Dict[str, str] = {
    "gothic_horror": "dark",
    "dark_mythic_horror": "dark",
    "graphic_novel_fantasy": "comicbook",
    "mythic_chaos": "chaotic",
    "sci_fi_ruins": "grim",
    "post_apoc_warlands": "grim",
    "post_apocalypse": "grim",
}


def template_to_preset(template_key: str) -> str:
    """Map a narrative template id to a tone preset key; unknown templates are mythic."""
    return TEMPLATE_PRESETS.get(template_key, DEFAULT_PRESET_KEY)
