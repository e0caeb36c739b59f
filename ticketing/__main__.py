"""TickeTing CLI entry point."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

load_dotenv()

from ticketing import __version__
from ticketing.client import TickeTing
from ticketing.collection import Collection
from ticketing.config import get_settings
from ticketing.exceptions import TicketingError
from ticketing.observability import configure_logging, initialize_logfire

logger = logging.getLogger(__name__)

COLLECTIONS = ("regions", "venues", "events", "account")


def _mask(secret: str) -> str:
    if not secret:
        return "✗ Not set"
    return f"✓ Set (…{secret[-4:]})"


def _dump(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _parse_filters(pairs: list[str]) -> dict[str, str]:
    filters: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"Filters must look like field=value, got {pair!r}")
        filters[name.strip()] = value.strip()
    return filters


def _client(args: argparse.Namespace) -> TickeTing:
    return TickeTing(sandbox=True if args.sandbox else None)


def _collection(client: TickeTing, name: str) -> Collection:
    return getattr(client, name)


def cmd_config(args: argparse.Namespace) -> int:
    """Display merged configuration."""
    try:
        settings = get_settings()
        client_config = settings.client_config()

        print("\n=== TickeTing Configuration ===\n")
        print(f"Config File: {settings.config_path}")
        print(f"Log Level: {settings.log_level}\n")

        print("Client:")
        print(f"  Sandbox: {client_config.sandbox}")
        print(f"  Base URL: {client_config.base_url}")
        print(f"  Timeout: {client_config.timeout_seconds}s")
        print(f"  Max Connections: {client_config.max_connections}")
        print(f"  Default Page Size: {client_config.default_page_size or 'server default'}\n")

        print("API Keys:")
        print(f"  TickeTing: {_mask(settings.api_key)}")
        print(f"  Logfire: {_mask(settings.logfire_token)}\n")

        return 0

    except ValidationError as e:
        print("\n❌ Configuration Error:\n")
        for error in e.errors():
            print(f"  • {'.'.join(str(x) for x in error['loc'])}: {error['msg']}")
        print()
        return 1


async def _list(args: argparse.Namespace) -> list[dict[str, Any]]:
    async with _client(args) as client:
        sequence = _collection(client, args.collection).list(args.page_size)
        if args.filter:
            sequence = sequence.filter(_parse_filters(args.filter))
        if args.sort:
            sequence = sequence.sort(args.sort)
        if args.last:
            models = await sequence.last()
        elif args.all:
            models = await sequence.all()
        else:
            models = await sequence
        return [model.to_dict() for model in models]


async def _find(args: argparse.Namespace) -> dict[str, Any]:
    async with _client(args) as client:
        model = await _collection(client, args.collection).find(args.id)
        return model.to_dict()


async def _delete(args: argparse.Namespace) -> bool:
    async with _client(args) as client:
        return await _collection(client, args.collection).delete(args.id)


def cmd_list(args: argparse.Namespace) -> int:
    """List resources in a collection."""
    _dump(asyncio.run(_list(args)))
    return 0


def cmd_find(args: argparse.Namespace) -> int:
    """Fetch one resource by id."""
    _dump(asyncio.run(_find(args)))
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    """Delete one resource by id."""
    asyncio.run(_delete(args))
    print(f"✓ Deleted {args.collection} {args.id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ticketing",
        description="Command-line access to the TickeTing API",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--sandbox",
        action="store_true",
        help="Use the sandbox API endpoint",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    parser_config = subparsers.add_parser(
        "config",
        help="Display merged configuration",
    )
    parser_config.set_defaults(func=cmd_config)

    parser_list = subparsers.add_parser(
        "list",
        help="List resources in a collection",
    )
    parser_list.add_argument("collection", choices=COLLECTIONS)
    parser_list.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="Records per page",
    )
    parser_list.add_argument(
        "--filter",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Filter on a field (repeatable)",
    )
    parser_list.add_argument(
        "--sort",
        default=None,
        help="Comma separated sort fields, prefix with - for descending",
    )
    group = parser_list.add_mutually_exclusive_group()
    group.add_argument(
        "--last",
        action="store_true",
        help="Fetch only the last page",
    )
    group.add_argument(
        "--all",
        action="store_true",
        help="Fetch every page",
    )
    parser_list.set_defaults(func=cmd_list)

    parser_find = subparsers.add_parser(
        "find",
        help="Fetch one resource by id",
    )
    parser_find.add_argument("collection", choices=COLLECTIONS)
    parser_find.add_argument("id")
    parser_find.set_defaults(func=cmd_find)

    parser_delete = subparsers.add_parser(
        "delete",
        help="Delete one resource by id",
    )
    parser_delete.add_argument("collection", choices=COLLECTIONS)
    parser_delete.add_argument("id")
    parser_delete.set_defaults(func=cmd_delete)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    settings = get_settings()
    configure_logging("DEBUG" if args.debug else settings.log_level)
    initialize_logfire(settings)

    try:
        return args.func(args)
    except TicketingError as e:
        print(f"\n❌ {type(e).__name__}: {e.message}\n", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"\n❌ {e}\n", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
