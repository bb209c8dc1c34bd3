from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from rich import print
from rich.logging import RichHandler
from rich.table import Table

from .character import apply_character_forge_to_state, forge_character_from_world
from .exceptions import ValidationError, WorldforgeError
from .generator import build_campaign_context, from_template_key
from .models import CampaignContext
from .presets import PRESET_KEYS, TEMPLATE_PRESETS
from .schemas import COMPLEXITY_LEVELS, RANDOMIZATION_MODES, WORLD_SIZES
from .settings import UserSettings, campaigns_root, load_user_settings, save_user_settings
from .storage import campaign_paths, get_current_campaign, list_campaigns, set_current_campaign, validate_slug
from .world import apply_world_growth_to_context, load_campaign, load_runtime_state, save_campaign, save_runtime_state


def _checked_slug(slug: Optional[str]) -> Optional[str]:
    if slug is None:
        return None
    try:
        return validate_slug(slug)
    except ValueError as e:
        raise ValidationError("slug", str(e)) from e


def _resolve_slug(root: Path, args: argparse.Namespace) -> str:
    slug = args.campaign or get_current_campaign(root)
    if not slug:
        raise SystemExit("[yellow]No campaign chosen.[/] Use --campaign or `worldforge use <slug>`. ")
    return _checked_slug(slug)


def _seed_arg(value: Optional[str]):
    if value is None:
        return None
    return int(value) if value.isdigit() else value


def _report(campaign: CampaignContext, slug: str) -> None:
    world = campaign.world_context
    print(
        f"[bold green]Forged[/] '[cyan]{campaign.title}[/]' as [bold]{world.world_bible.world_name}[/] "
        f"-> [magenta]{slug}[/]"
    )
    print(
        f"[dim]seed {campaign.world_seed.seed_number} | {len(world.biome_map.regions)} regions | "
        f"{len(world.faction_graph.factions)} factions[/]"
    )


def cmd_forge(args: argparse.Namespace) -> None:
    settings = load_user_settings()
    mode = args.mode or settings.default_randomization_mode
    raw: Dict[str, Any] = {
        "title": args.title,
        "description": args.description,
        "randomization_mode": mode,
    }
    # Saved defaults only stand in for flags in fixed mode; the random
    # modes draw whatever the caller leaves unset.
    fixed = mode in ("fixed", "controlled")
    for key, flag, default in (
        ("tone_preset", args.preset, settings.default_preset),
        ("world_size", args.size, settings.default_world_size),
        ("faction_complexity", args.complexity, settings.default_faction_complexity),
    ):
        if flag:
            raw[key] = flag
        elif fixed:
            raw[key] = default
    if args.seed is not None:
        raw["manual_seed_override"] = _seed_arg(args.seed)
    if args.focus:
        raw["creature_focus"] = args.focus

    campaign = build_campaign_context(raw)
    root = campaigns_root(settings)
    slug = save_campaign(root, campaign, _checked_slug(args.slug))
    _report(campaign, slug)


def cmd_template(args: argparse.Namespace) -> None:
    settings = load_user_settings()
    campaign = from_template_key(
        args.title, args.description, args.template, manual_seed_override=_seed_arg(args.seed)
    )
    slug = save_campaign(campaigns_root(settings), campaign, _checked_slug(args.slug))
    _report(campaign, slug)


def cmd_use(args: argparse.Namespace) -> None:
    root = campaigns_root()
    slug = _checked_slug(args.slug)
    if not campaign_paths(root, slug)["campaign"].exists():
        raise SystemExit(f"[red]Campaign not found:[/] {slug}")
    set_current_campaign(root, slug)
    print(f"Current campaign set to: [cyan]{slug}[/]")


def cmd_info(args: argparse.Namespace) -> None:
    root = campaigns_root()
    slug = args.campaign or get_current_campaign(root)
    if not slug:
        print("[bold]Campaigns:[/] ", ", ".join(list_campaigns(root)) or "(none)")
        return

    slug = _checked_slug(slug)
    campaign = load_campaign(root, slug)
    world = campaign.world_context
    state = world.world_state
    print(f"[bold]Title[/]: {campaign.title} | [bold]World[/]: {world.world_bible.world_name} | [bold]Slug[/]: {slug}")
    print(f"[bold]Presets[/]: {', '.join(campaign.world_seed.preset_trace)} | [bold]Tags[/]: {', '.join(campaign.world_seed.theme_tags[:8])}")
    print(f"[bold]Tick[/]: {state.tick} | [bold]Villain escalation[/]: {state.villain_escalation}")
    print(f"[italic]{world.world_bible.moral_climate}[/]")

    table = Table(title="Factions")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Power", justify="right")
    table.add_column("Trust", justify="right")
    table.add_column("Ideology")
    states = {fs.faction_id: fs for fs in state.faction_states}
    for faction in world.faction_graph.factions:
        fs = states.get(faction.id)
        table.add_row(
            faction.id,
            faction.name,
            str(fs.power_level if fs else faction.power_level),
            str(fs.trust_delta if fs else 0),
            faction.ideology,
        )
    print(table)

    for tension in world.faction_graph.active_tensions[:5]:
        print(f"[red]![/] {tension}")


def cmd_act(args: argparse.Namespace) -> None:
    root = campaigns_root()
    slug = _resolve_slug(root, args)
    campaign = load_campaign(root, slug)
    action: Dict[str, Any] = {
        "action_type": args.action_type,
        "moral_impact": args.moral,
        "chaos_impact": args.chaos,
        "generosity_impact": args.generosity,
        "brutality_impact": args.brutality,
        "tags": args.tag or [],
    }
    if args.summary:
        action["summary"] = args.summary
    if args.target_faction:
        action["target_faction_id"] = args.target_faction

    campaign = apply_world_growth_to_context(campaign, action)
    save_campaign(root, campaign, slug)
    state = campaign.world_context.world_state
    print(f"Advanced '[cyan]{slug}[/]' to tick=[bold]{state.tick}[/] | escalation {state.villain_escalation}")
    print(f"[dim]{state.active_rumors[-1]}[/]")


def cmd_character(args: argparse.Namespace) -> None:
    root = campaigns_root()
    slug = _resolve_slug(root, args)
    campaign = load_campaign(root, slug)
    request: Dict[str, Any] = {}
    if args.name:
        request["character_name"] = args.name
    if args.origin:
        request["origin_region_id"] = args.origin
    if args.faction:
        request["faction_alignment_id"] = args.faction
    if args.background:
        request["background"] = args.background
    if args.moral is not None:
        request["moral_leaning"] = args.moral

    forged = forge_character_from_world(campaign, request)
    runtime = apply_character_forge_to_state(load_runtime_state(root, slug), forged)
    save_runtime_state(root, slug, runtime)

    print(f"[bold]Origin[/]: {forged.origin_region_name} ({forged.starting_town})")
    print(f"[bold]Aligned with[/]: {forged.faction_alignment_name}")
    print(f"[bold]Background[/]: {forged.background} | [bold]Traits[/]: {', '.join(forged.personality_traits)}")
    for rumor in forged.starting_rumors:
        print(f"[dim]- {rumor}[/]")


def cmd_setup(args: argparse.Namespace) -> None:
    s = load_user_settings()
    if args.preset:
        s.default_preset = args.preset
    if args.mode:
        s.default_randomization_mode = args.mode
    if args.size:
        s.default_world_size = args.size
    if args.complexity:
        s.default_faction_complexity = args.complexity
    if args.campaigns_dir:
        s.campaigns_dir = args.campaigns_dir
    if args.log_level:
        s.log_level = args.log_level.upper()
    save_user_settings(s)
    print(
        f"Default preset: [cyan]{s.default_preset}[/] | mode: [cyan]{s.default_randomization_mode}[/] | "
        f"size: [cyan]{s.default_world_size}[/] | complexity: [cyan]{s.default_faction_complexity}[/]"
    )


def configure_logging(settings: Optional[UserSettings] = None) -> None:
    s = settings or load_user_settings()
    logging.basicConfig(
        level=getattr(logging, s.log_level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def main(argv: Optional[list[str]] = None) -> None:
    p = argparse.ArgumentParser(prog="worldforge", description="Deterministic campaign world generator")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("forge", help="Generate and store a new campaign")
    sp.add_argument("--title", required=True)
    sp.add_argument("--description", required=True, help="A short pitch for the campaign")
    sp.add_argument("--preset", choices=PRESET_KEYS)
    sp.add_argument("--mode", choices=RANDOMIZATION_MODES)
    sp.add_argument("--size", choices=WORLD_SIZES)
    sp.add_argument("--complexity", choices=COMPLEXITY_LEVELS)
    sp.add_argument("--focus", action="append", help="Creature focus (repeatable)")
    sp.add_argument("--seed", help="Manual seed override (number or text)")
    sp.add_argument("--slug", help="Directory name for the campaign")
    sp.set_defaults(func=cmd_forge)

    sp = sub.add_parser("template", help="Generate a campaign from a narrative template")
    sp.add_argument("template", choices=sorted([*TEMPLATE_PRESETS, "custom"]))
    sp.add_argument("--title", required=True)
    sp.add_argument("--description", required=True)
    sp.add_argument("--seed", help="Manual seed override")
    sp.add_argument("--slug", help="Directory name for the campaign")
    sp.set_defaults(func=cmd_template)

    sp = sub.add_parser("use", help="Set the current campaign by slug")
    sp.add_argument("slug")
    sp.set_defaults(func=cmd_use)

    sp = sub.add_parser("info", help="Show campaign info or list campaigns")
    sp.add_argument("--campaign", help="Slug to inspect (optional)")
    sp.set_defaults(func=cmd_info)

    sp = sub.add_parser("act", help="Apply one player action and advance the world a tick")
    sp.add_argument("action_type")
    sp.add_argument("--campaign", help="Campaign slug (optional; defaults to current)")
    sp.add_argument("--summary")
    sp.add_argument("--target-faction", help="Faction id the action is aimed at")
    sp.add_argument("--moral", type=float, default=0.0)
    sp.add_argument("--chaos", type=float, default=0.0)
    sp.add_argument("--generosity", type=float, default=0.0)
    sp.add_argument("--brutality", type=float, default=0.0)
    sp.add_argument("--tag", action="append", help="Action tag (repeatable)")
    sp.set_defaults(func=cmd_act)

    sp = sub.add_parser("character", help="Forge a character into the campaign's runtime state")
    sp.add_argument("--campaign", help="Campaign slug (optional; defaults to current)")
    sp.add_argument("--name")
    sp.add_argument("--origin", help="Region id or name")
    sp.add_argument("--faction", help="Faction id or name")
    sp.add_argument("--background")
    sp.add_argument("--moral", type=float, help="Moral leaning in [-1, 1]")
    sp.set_defaults(func=cmd_character)

    sp = sub.add_parser("setup", help="Save default forge options")
    sp.add_argument("--preset", choices=PRESET_KEYS)
    sp.add_argument("--mode", choices=RANDOMIZATION_MODES)
    sp.add_argument("--size", choices=WORLD_SIZES)
    sp.add_argument("--complexity", choices=COMPLEXITY_LEVELS)
    sp.add_argument("--campaigns-dir")
    sp.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], type=str.upper)
    sp.set_defaults(func=cmd_setup)

    args = p.parse_args(argv)
    configure_logging()
    try:
        args.func(args)
    except WorldforgeError as e:
        # The error already logged its details on construction
        raise SystemExit(2) from e


if __name__ == "__main__":
    main()
