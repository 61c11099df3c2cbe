"""CLI entry point for edgewise."""

from __future__ import annotations

import argparse
import logging

import yaml

from edgewise.console import print_error, print_heading, print_muted, print_success, print_table
from edgewise.errors import ValidationError
from edgewise.loader import load_machine
from edgewise.model import StateMachineModel


def _load(path: str, type_name: str) -> StateMachineModel | None:
    try:
        return load_machine(path, type_name=type_name)
    except (ValidationError, FileNotFoundError, ImportError, yaml.YAMLError) as e:
        print_error(f"Invalid machine definition: {e}")
        return None


def cmd_validate(args: argparse.Namespace) -> int:
    model = _load(args.definition, args.type_name)
    if model is None:
        return 1
    print_success(f"Valid machine: {args.type_name}.{model.state_field}")
    print_muted(f"  States: {len(model.states)}")
    print_muted(f"  Events: {len(model.events)}")
    print_muted(f"  Edges:  {len(model.edges)}")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    model = _load(args.definition, args.type_name)
    if model is None:
        return 1

    print_heading(f"{args.type_name}.{model.state_field}")
    print_table(
        "States",
        ["state", "code"],
        [[name, str(code)] for name, code in model.states.items()],
    )
    print_table(
        "Edges",
        ["action", "from", "to", "in", "post", "events"],
        [
            [
                e.action,
                e.from_state,
                e.to_state,
                "yes" if e.callbacks.in_ else "no",
                "yes" if e.callbacks.post else "no",
                ", ".join(e.on_events),
            ]
            for e in model.edges
        ],
    )
    orphans = [ev for ev in model.events if not model.edges_for_event(ev)]
    if orphans:
        print_muted(f"Events without edges: {', '.join(orphans)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="edgewise",
        description="Validate and inspect declarative state machine definitions",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--type-name", "-t",
        default="Entity",
        help="Host type name used in error messages (default: Entity)",
    )
    sub = parser.add_subparsers(dest="command")

    # validate
    p_val = sub.add_parser("validate", help="Validate a machine definition YAML")
    p_val.add_argument("definition", help="Path to machine definition YAML")

    # show
    p_show = sub.add_parser("show", help="Print states and edges of a machine definition")
    p_show.add_argument("definition", help="Path to machine definition YAML")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    commands = {
        "validate": cmd_validate,
        "show": cmd_show,
    }

    if args.command is None:
        parser.print_help()
        return 0

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    return handler(args)
