"""Summary: Command-line interface for FolderPilot.

Importance: Provides a local entry point for learning folders and inspecting statistics.
Alternatives: Drive the classifier only through the HTTP API.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from folderpilot.app import build_services
from folderpilot.config import AppConfig
from folderpilot.models import FOLDER_USER, Address, Folder, MessageEnvelope
from folderpilot.services import MoveAdvisor
from folderpilot.text import envelope_from_eml, parse_addresses


def build_parser() -> argparse.ArgumentParser:
    """Summary: Build the CLI argument parser.

    Importance: Defines supported commands for local operation.
    Alternatives: Use a CLI framework like Typer or Click.
    """

    parser = argparse.ArgumentParser(description="FolderPilot CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    learn = subparsers.add_parser("learn", help="Learn a message filed into a folder")
    _add_message_arguments(learn)
    unlearn = subparsers.add_parser("unlearn", help="Forget a message removed from a folder")
    _add_message_arguments(unlearn)

    stats = subparsers.add_parser("stats", help="Show learned statistics")
    stats.add_argument("--account", type=int, default=None)

    subparsers.add_parser("save", help="Write the statistics snapshot if it changed")
    subparsers.add_parser("clear", help="Forget all learned statistics")
    return parser


def _add_message_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--account", type=int, required=True)
    parser.add_argument("--folder", type=str, required=True)
    parser.add_argument("--folder-type", type=str, default=FOLDER_USER)
    parser.add_argument(
        "--auto-classify",
        type=str,
        action="append",
        default=[],
        metavar="FOLDER",
        help="Folder that accepts automatic moves (repeatable)",
    )
    parser.add_argument("--eml", type=str, default=None, help="Read the message from an .eml file")
    parser.add_argument("--sender", type=str, default=None)
    parser.add_argument("--to", type=str, action="append", default=[])
    parser.add_argument("--subject", type=str, default=None)
    parser.add_argument("--body", type=str, default="")


def _envelope_from_args(args: argparse.Namespace) -> MessageEnvelope:
    if args.eml:
        return envelope_from_eml(Path(args.eml))
    sender: list[Address] = parse_addresses([args.sender]) if args.sender else []
    return MessageEnvelope(
        sender=sender,
        to=parse_addresses(args.to),
        subject=args.subject,
        body=args.body,
    )


def _lookup_folder(source: Folder, opted_in: set[str], name: str) -> Folder | None:
    if name == source.name:
        return source
    if name not in opted_in:
        return None
    return Folder(account_id=source.account_id, name=name, auto_classify=True)


def run_cli(argv: list[str] | None = None) -> None:
    """Summary: Execute CLI commands based on arguments.

    Importance: Drives local workflows without a server.
    Alternatives: Invoke services via an HTTP API.
    """

    parser = build_parser()
    args = parser.parse_args(argv)
    config = AppConfig.from_env()
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")
    services = build_services(config)
    services.classification.load()

    if args.command in ("learn", "unlearn"):
        if not config.classification_enabled:
            print("Classification is disabled.")
            return
        opted_in = set(args.auto_classify)
        folder = Folder(
            account_id=args.account,
            name=args.folder,
            type=args.folder_type,
            auto_classify=args.folder in opted_in,
        )
        added = args.command == "learn"
        suggestion = services.classification.classify_message(
            folder, _envelope_from_args(args), added=added
        )
        services.classification.save()
        if not added:
            print(f"Forgot message from {folder.name}.")
        elif suggestion is None:
            print("No classification.")
        else:
            print(f"Suggested folder: {suggestion}")
            advisor = MoveAdvisor(find_folder=lambda account_id, name: _lookup_folder(folder, opted_in, name))
            target = advisor.advise(folder, suggestion)
            if target is not None:
                print(f"Move to: {target.name}")
        return

    if args.command == "stats":
        snapshot = services.stats.snapshot(args.account)
        for account, summary in snapshot["accounts"].items():
            print(f"account {account}: {summary['vocabulary']} words")
            for category, count in sorted(summary["categories"].items()):
                print(f"  {category}: {count}")
        print(f"messages: {snapshot['messages']}")
        print(f"words: {snapshot['words']}")
        return

    if args.command == "save":
        written = services.classification.save()
        print("Snapshot saved." if written else "Snapshot unchanged.")
        return

    if args.command == "clear":
        services.classification.clear()
        services.classification.save()
        print("Statistics cleared.")
        return


if __name__ == "__main__":
    run_cli()
