from __future__ import annotations

import logging
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator

from .exceptions import ValidationError
from .rng import MAX_SEED

logger = logging.getLogger(__name__)

TonePreset = Literal["dark", "comicbook", "anime", "mythic", "cozy", "chaotic", "grim", "heroic"]
LethalityLevel = Literal["low", "medium", "high", "brutal"]
DensityLevel = Literal["low", "medium", "high", "wild"]
TechLevel = Literal["primitive", "medieval", "steampunk", "arcane-tech"]
ComplexityLevel = Literal["low", "medium", "high"]
WorldSize = Literal["small", "medium", "large"]
RandomizationMode = Literal["fixed", "themeLockedRandom", "fullyRandom"]

LETHALITY_LEVELS: List[str] = ["low", "medium", "high", "brutal"]
DENSITY_LEVELS: List[str] = ["low", "medium", "high", "wild"]
TECH_LEVELS: List[str] = ["primitive", "medieval", "steampunk", "arcane-tech"]
COMPLEXITY_LEVELS: List[str] = ["low", "medium", "high"]
WORLD_SIZES: List[str] = ["small", "medium", "large"]
RANDOMIZATION_MODES: List[str] = ["fixed", "themeLockedRandom", "fullyRandom"]

FocusToken = Annotated[str, Field(min_length=1, max_length=60)]
ManualSeed = Union[Annotated[int, Field(ge=0, le=MAX_SEED)], Annotated[str, Field(min_length=1, max_length=120)]]
ShortToken = Annotated[str, Field(min_length=1, max_length=80)]
TagToken = Annotated[str, Field(min_length=1, max_length=40)]


class ForgeInput(BaseModel):
    """Caller-supplied campaign seed and style knobs."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=120, description="Campaign title")
    description: str = Field(..., min_length=1, max_length=2000, description="Campaign pitch")
    tone_preset: Optional[TonePreset] = None
    selected_presets: Optional[List[TonePreset]] = Field(None, max_length=4)
    humor_level: Optional[int] = Field(None, ge=0, le=5)
    lethality: Optional[LethalityLevel] = None
    magic_density: Optional[DensityLevel] = None
    tech_level: Optional[TechLevel] = None
    creature_focus: Optional[Union[FocusToken, Annotated[List[FocusToken], Field(min_length=1, max_length=8)]]] = None
    faction_complexity: Optional[ComplexityLevel] = None
    world_size: Optional[WorldSize] = None
    starting_region_type: Optional[str] = Field(None, min_length=1, max_length=80)
    villain_archetype: Optional[str] = Field(None, min_length=1, max_length=120)
    corruption_level: Optional[int] = Field(None, ge=0, le=5)
    divine_interference_level: Optional[int] = Field(None, ge=0, le=5)
    randomization_mode: Optional[RandomizationMode] = None
    player_toggles: Optional[Dict[str, bool]] = None
    manual_seed_override: Optional[ManualSeed] = None

    @field_validator("randomization_mode", mode="before")
    @classmethod
    def legacy_mode_alias(cls, v):
        # Older documents call the static-defaults mode "controlled".
        return "fixed" if v == "controlled" else v

    @field_validator("manual_seed_override", mode="before")
    @classmethod
    def reject_bool_seed(cls, v):
        if isinstance(v, bool):
            raise ValueError("must be a number or text, not a boolean")
        return v


class PlayerWorldAction(BaseModel):
    """One player action that advances the world by a tick.

    Impacts are not range-checked; the evolution step clamps its results.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    action_type: str = Field(..., min_length=1, max_length=80)
    summary: Optional[str] = Field(None, max_length=240)
    target_region_id: Optional[ShortToken] = None
    target_faction_id: Optional[ShortToken] = None
    moral_impact: float = Field(0.0, allow_inf_nan=False)
    chaos_impact: float = Field(0.0, allow_inf_nan=False)
    generosity_impact: float = Field(0.0, allow_inf_nan=False)
    brutality_impact: float = Field(0.0, allow_inf_nan=False)
    tags: List[TagToken] = Field(default_factory=list, max_length=8)


class CharacterForgeInput(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    character_name: Optional[ShortToken] = None
    origin_region_id: Optional[ShortToken] = None
    faction_alignment_id: Optional[ShortToken] = None
    background: Optional[str] = Field(None, min_length=1, max_length=160)
    personality_traits: Optional[List[ShortToken]] = Field(None, max_length=6)
    moral_leaning: Optional[float] = Field(None, ge=-1, le=1)


M = TypeVar("M", bound=BaseModel)


def parse_input(model: Type[M], raw: Union[M, Mapping[str, Any], None]) -> M:
    """Validate ``raw`` against ``model``, raising ValidationError with the field path."""
    if isinstance(raw, model):
        return raw
    try:
        return model.model_validate(dict(raw or {}))
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(model.__name__, e) from e


class ForgeInputPatch(ForgeInput):
    """ForgeInput with every field optional, for template and profile overrides."""

    title: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)


def parse_patch(raw: Any) -> Dict[str, Any]:
    """Validate a forge patch leniently: an invalid patch is dropped as a whole."""
    if not raw:
        return {}
    try:
        patch = ForgeInputPatch.model_validate(dict(raw))
    except (PydanticValidationError, TypeError, ValueError) as e:
        logger.warning("Ignoring invalid forge patch: %s", e)
        return {}
    return patch.model_dump(exclude_none=True, exclude={"title", "description"})
