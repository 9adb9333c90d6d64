"""Command line entry point for editing entities and reading recent changes."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from importlib import metadata
from pathlib import Path

import httpx
from loguru import logger

from .config import ApiSettings
from .connection import ApiConnection
from .edit_action import EditEntityAction, EditOptions, EditOutcome
from .errors import WikibaseEditError
from .recent_changes import WIKIDATA_RSS_FEED_URL, RecentChangesFetcher


def _resolve_version() -> str:
    """Return the installed distribution version or fall back to the project default."""

    try:
        return metadata.version("wikibase-edit")
    except metadata.PackageNotFoundError:
        return "0.1.0"


__version__ = _resolve_version()


def configure_logging(verbose: bool = False) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def _read_data(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wikibase-edit",
        description="Edit Wikibase entities through the wbeditentity API action",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("--config", help="Path to the YAML settings file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subcommands = parser.add_subparsers(dest="command", required=True)

    edit = subcommands.add_parser("edit", help="Create or modify an entity.")
    selector = edit.add_mutually_exclusive_group(required=True)
    selector.add_argument("--id", dest="entity_id", help="Id of the entity to edit.")
    selector.add_argument("--new", dest="new_entity", help="Create a new entity of this type.")
    selector.add_argument("--title", help="Select the entity by a linked page title.")
    edit.add_argument("--site", help="Site key for --title, e.g. enwiki.")
    edit.add_argument(
        "--data", required=True, help="File with the JSON data to write, or - for stdin."
    )
    edit.add_argument("--summary", help="Edit summary.")
    edit.add_argument("--bot", action="store_true", help="Flag the edit as a bot edit.")
    edit.add_argument("--clear", action="store_true", help="Clear existing data first.")
    edit.add_argument(
        "--base-revision", type=int, default=0, help="Revision the edit is based on."
    )

    recent = subcommands.add_parser("recent-changes", help="List recently changed entities.")
    recent.add_argument("--feed-url", default=WIKIDATA_RSS_FEED_URL, help="RSS feed URL.")

    return parser


async def _run_edit(parsed: argparse.Namespace) -> int:
    settings = ApiSettings.from_file(parsed.config)
    options = EditOptions(
        clear=parsed.clear,
        bot=parsed.bot,
        base_revision=parsed.base_revision,
        summary=parsed.summary,
    )
    data = _read_data(parsed.data)

    async with ApiConnection.from_settings(settings) as connection:
        if settings.has_login:
            await connection.login(str(settings.username), str(settings.password))
        action = EditEntityAction(connection, settings.site_iri)
        result = await action.edit_entity_result(
            data,
            entity_id=parsed.entity_id,
            site=parsed.site,
            title=parsed.title,
            new_entity=parsed.new_entity,
            options=options,
        )

    if result.outcome is not EditOutcome.SUCCESS or result.document is None:
        logger.error(f"Edit returned no entity ({result.outcome.value}): {result.detail}")
        return 1

    print(result.document.model_dump_json(by_alias=True, indent=2))
    return 0


async def _run_recent_changes(parsed: argparse.Namespace) -> int:
    async with httpx.AsyncClient(follow_redirects=True) as client:
        titles = await RecentChangesFetcher(client, parsed.feed_url).get_recent_changes()
    for title in sorted(titles):
        print(title)
    return 0


def _run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    parsed = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(parsed.verbose)

    runner = _run_edit if parsed.command == "edit" else _run_recent_changes
    try:
        return asyncio.run(runner(parsed))
    except FileNotFoundError as exc:
        logger.error(str(exc))
        return 2
    except ValueError as exc:
        logger.error(f"Invalid arguments: {exc}")
        return 2
    except WikibaseEditError as exc:
        logger.error(f"Request failed: {exc}")
        return 1


def main() -> None:
    sys.exit(_run_cli())


if __name__ == "__main__":
    main()
