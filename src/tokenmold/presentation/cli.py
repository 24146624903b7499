from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tokenmold.application.mappers.settings_mapper import merge_documents
from tokenmold.application.services.language_registry import LanguageRegistry
from tokenmold.application.services.seed_policy import session_rng
from tokenmold.bootstrap import build_language_source, create_event_bus, create_token_mold_service, load_settings_document
from tokenmold.domain.events import TokenCreated, TokenPlacementRequested
from tokenmold.domain.models.numbering import NumberingType
from tokenmold.domain.models.token import ActorSnapshot, SceneGrid, TokenPlacement
from tokenmold.domain.services.markov_name_model import MarkovNameModel
from tokenmold.domain.services.number_codec import decode_number, encode_number
from tokenmold.infrastructure.data_tools.build_language_model import build_language_file

REPLACE_CHOICES = {"keep": "", "remove": "remove", "replace": "replace"}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tokenmold", description="Name, number and size tokens as they are placed.")
    parser.add_argument("--seed", default=None, help="Seed for reproducible output")
    sub = parser.add_subparsers(dest="command", required=True)

    names = sub.add_parser("names", help="Generate names in one language")
    names.add_argument("--language", default="random")
    names.add_argument("--count", type=int, default=5)
    names.add_argument("--min", type=int, default=3)
    names.add_argument("--max", type=int, default=9)

    place = sub.add_parser("place", help="Place tokens for an actor and show the resulting patches")
    place.add_argument("--scene", default="scene-1")
    place.add_argument("--actor", required=True, help="Actor id")
    place.add_argument("--actor-name", default=None)
    place.add_argument("--size", default="med")
    place.add_argument("--type", dest="creature_type", default="")
    place.add_argument("--hp-formula", default="")
    place.add_argument("--count", type=int, default=3)
    place.add_argument("--grid-units", default="ft")
    place.add_argument("--grid-distance", type=float, default=5.0)
    place.add_argument("--settings", type=Path, default=None)
    place.add_argument("--replace", choices=sorted(REPLACE_CHOICES), default=None)
    place.add_argument("--numbering", choices=[member.value for member in NumberingType], default=None)
    place.add_argument("--no-adjective", action="store_true")

    convert = sub.add_parser("convert", help="Convert between numbers and numerals")
    convert.add_argument("value")
    convert.add_argument("--type", choices=[member.value for member in NumberingType], default="ro")
    convert.add_argument("--decode", action="store_true")

    sub.add_parser("languages", help="List available languages")

    build = sub.add_parser("build-language", help="Train a language dictionary from a word list")
    build.add_argument("wordlist", type=Path)
    build.add_argument("--out", type=Path, required=True)
    return parser


def _settings_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    name: Dict[str, Any] = {}
    if args.replace is not None:
        name["replace"] = REPLACE_CHOICES[args.replace]
    if args.numbering is not None:
        name["number"] = {"type": args.numbering}
    if args.no_adjective:
        name["prefix"] = {"use": False}
    return {"name": name} if name else {}


def _run_names(args: argparse.Namespace, console: Console) -> int:
    rng = session_rng(args.seed)
    registry = LanguageRegistry(build_language_source())
    keys = registry.keys()
    if not keys:
        console.print("[red]No languages available.[/red]")
        return 1
    if args.language != "random" and args.language not in keys:
        console.print(f"[red]Unknown language: {args.language}[/red]")
        return 1
    model = MarkovNameModel(rng)
    table = Table(title="Generated names")
    table.add_column("Language")
    table.add_column("Name")
    for _ in range(max(0, args.count)):
        language = keys[rng.randrange(len(keys))] if args.language == "random" else args.language
        table.add_row(language, model.generate(registry.get(language), args.min, args.max))
    console.print(table)
    return 0


def _actor_snapshot(args: argparse.Namespace) -> ActorSnapshot:
    actor_name = args.actor_name or args.actor
    data = {
        "name": actor_name,
        "system": {
            "traits": {"size": args.size},
            "details": {"type": args.creature_type},
            "attributes": {"hp": {"formula": args.hp_formula, "value": None}},
        },
    }
    return ActorSnapshot(id=args.actor, data=data)


def _run_place(args: argparse.Namespace, console: Console) -> int:
    document = merge_documents(load_settings_document(args.settings), _settings_overrides(args))
    warnings: List[str] = []
    service = create_token_mold_service(settings_document=document, seed=args.seed, notify=warnings.append)
    event_bus = create_event_bus(service)
    grid = SceneGrid(type=1, units=args.grid_units, distance=args.grid_distance)
    actor = _actor_snapshot(args)

    table = Table(title=f"Placements in {args.scene}")
    for column in ("Token", "Name", "Size", "Scale", "HP"):
        table.add_column(column)

    for index in range(max(0, args.count)):
        placement = TokenPlacement(id=f"{args.actor}-{index + 1}", actor_id=args.actor, name=actor.data["name"])
        requested = event_bus.publish(TokenPlacementRequested(scene_id=args.scene, grid=grid, placement=placement, actor=actor))
        created = event_bus.publish(TokenCreated(scene_id=args.scene, placement=placement, actor=actor))
        size = f"{requested.patch['width']}x{requested.patch['height']}" if "width" in requested.patch else "-"
        scale = f"{requested.patch['texture.scaleX']:.2f}" if "texture.scaleX" in requested.patch else "-"
        hp = created.patch.get("system.attributes.hp.value")
        table.add_row(placement.id, str(requested.patch.get("name", placement.name)), size, scale, "-" if hp is None else str(hp))

    console.print(table)
    for message in dict.fromkeys(warnings):
        console.print(f"[yellow]{message}[/yellow]")
    return 0


def _run_convert(args: argparse.Namespace, console: Console) -> int:
    numbering = NumberingType(args.type)
    if args.decode:
        value = decode_number(args.value, numbering)
        if value is None:
            console.print(f"[red]Not a valid {numbering.name.lower()} numeral: {args.value}[/red]")
            return 1
        console.print(str(value))
        return 0
    try:
        number = int(args.value)
    except ValueError:
        console.print(f"[red]Not an integer: {args.value}[/red]")
        return 1
    encoded = encode_number(number, numbering)
    if not encoded:
        console.print(f"[red]{number} cannot be written as {numbering.name.lower()}[/red]")
        return 1
    console.print(encoded)
    return 0


def _run_languages(console: Console) -> int:
    keys = LanguageRegistry(build_language_source()).keys()
    console.print(Panel.fit("\n".join(keys) or "(none)", title="[bold yellow]Languages[/bold yellow]"))
    return 0


def _run_build_language(args: argparse.Namespace, console: Console) -> int:
    payload = build_language_file(args.wordlist, args.out)
    console.print(f"Wrote {len(payload['beg'])} starting trigrams to {args.out}")
    return 0


def main(argv: List[str] | None = None, console: Console | None = None) -> int:
    logging.basicConfig(level=os.getenv("TOKENMOLD_LOG_LEVEL", "WARNING").upper())
    args = _build_parser().parse_args(argv)
    resolved_console = console or Console()

    if args.command == "names":
        return _run_names(args, resolved_console)
    if args.command == "place":
        return _run_place(args, resolved_console)
    if args.command == "convert":
        return _run_convert(args, resolved_console)
    if args.command == "languages":
        return _run_languages(resolved_console)
    return _run_build_language(args, resolved_console)
