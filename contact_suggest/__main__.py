"""CLI entry point for offline suggestion queries.

Usage:
    python -m contact_suggest search QUERY --records FILE   # ranked suggestions
    python -m contact_suggest stats --records FILE          # cache statistics
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from . import config
from .display import display_stats, display_suggestions
from .engine import ContactAutoCompleteService
from .records import RecordSource, load_records

console = Console()


def _load_or_exit(path: Path) -> RecordSource:
    try:
        return load_records(path)
    except FileNotFoundError:
        console.print(f"[red]Records file not found: {path}[/red]")
        sys.exit(1)
    except ValueError as exc:
        console.print(f"[red]Could not load records: {exc}[/red]")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

def cmd_search(args: argparse.Namespace) -> None:
    """Rank suggestions for a query against the given records."""
    source = _load_or_exit(args.records)
    service = ContactAutoCompleteService(source, limit=args.limit)
    if args.used:
        # Usage counts only survive on top of a built cache
        service.force_refresh()
        for address in args.used:
            service.record_usage(address)
    views = service.search_suggestions(args.query)
    display_suggestions(args.query, views)


def cmd_stats(args: argparse.Namespace) -> None:
    """Rebuild the cache from the given records and show its statistics."""
    source = _load_or_exit(args.records)
    service = ContactAutoCompleteService(source)
    service.force_refresh()
    display_stats(service.stats())


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m contact_suggest",
        description="Contact suggestion cache and ranking",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # search
    se = sub.add_parser("search", help="Show ranked suggestions for a query")
    se.add_argument("query", help="Text typed into the address field")
    se.add_argument("--records", type=Path, required=True, help="JSON records file")
    se.add_argument(
        "--limit", type=int, default=config.RESULT_LIMIT,
        help=f"Maximum suggestions (default: {config.RESULT_LIMIT})",
    )
    se.add_argument(
        "--used", action="append", metavar="ADDRESS",
        help="Record a usage of ADDRESS before searching (repeatable)",
    )

    # stats
    st = sub.add_parser("stats", help="Show suggestion cache statistics")
    st.add_argument("--records", type=Path, required=True, help="JSON records file")

    return parser


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )

    parser = build_parser()
    args = parser.parse_args(argv)

    commands = {
        "search": cmd_search,
        "stats": cmd_stats,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
