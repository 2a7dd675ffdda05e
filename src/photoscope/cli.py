"""
PhotoScope CLI entrypoint.

This CLI is intended for quick local searches and debugging without the web UI.
It delegates all search logic to `photoscope.search.dispatcher.QueryDispatcher`.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from pydantic import ValidationError

from photoscope.config.settings import get_settings
from photoscope.core.errors import MissingCredentialsError
from photoscope.core.logging import configure_logging
from photoscope.domain.models import EnrichedRecord, SearchRequest
from photoscope.search.dispatcher import QueryDispatcher


def _format_record(i: int, record: EnrichedRecord, *, sentinel_km: float) -> str:
    distance = f"{record.distance_km:.2f}km" if record.distance_km < sentinel_km else "n/a"
    caption = (record.caption.text if record.caption and record.caption.text else "").replace("\n", " ")
    return f"{i:>2}. {record.id or '-'}  tag_match={record.tag_match_rank} distance={distance}  {caption[:60]}"


def _cmd_search(args: argparse.Namespace) -> int:
    """Handle the `search` subcommand."""
    settings = get_settings()

    call_type = args.call_type or ("query" if args.query and args.lat is None else "location")
    try:
        params = SearchRequest(
            query=args.query,
            lat=args.lat,
            lng=args.lng,
            min_date=args.min_date,
            max_date=args.max_date,
            distance=args.distance,
            call_type=call_type,
        ).to_parameters(default_distance_m=settings.instagram.default_distance_m)
    except ValidationError as e:
        print(f"Invalid search parameters: {e}", file=sys.stderr)
        return 2

    outcome: dict[str, Any] = {}

    def _done(error: Exception | None, records: list[EnrichedRecord] | None) -> None:
        outcome["error"] = error
        outcome["records"] = records or []

    try:
        QueryDispatcher.from_settings(settings).run(params, _done)
    except MissingCredentialsError as e:
        print(str(e), file=sys.stderr)
        return 2

    if outcome["error"] is not None:
        print(f"Search failed: {outcome['error']}", file=sys.stderr)
        return 1

    records: list[EnrichedRecord] = outcome["records"]
    if args.json:
        print(json.dumps([r.model_dump(mode="json") for r in records], ensure_ascii=False, indent=2))
        return 0

    print(f"{len(records)} results (mode={params.mode.value}, sort={','.join(params.sort_keys)})")
    for i, record in enumerate(records, start=1):
        print(_format_record(i, record, sentinel_km=settings.enrichment.sentinel_distance_km))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the PhotoScope CLI."""
    parser = argparse.ArgumentParser(prog="photoscope")
    sub = parser.add_subparsers(dest="command", required=True)

    s = sub.add_parser("search", help="Search photos by keyword or by coordinate and time window.")
    s.add_argument("--query", type=str, default=None, help="Keyword / hashtag (spaces are removed)")
    s.add_argument("--lat", type=float, default=None)
    s.add_argument("--lng", type=float, default=None)
    s.add_argument("--min-date", dest="min_date", type=float, default=None, help="Epoch milliseconds")
    s.add_argument("--max-date", dest="max_date", type=float, default=None, help="Epoch milliseconds")
    s.add_argument("--distance", type=int, default=None, help="Search radius in meters")
    s.add_argument(
        "--call-type",
        dest="call_type",
        choices=["query", "location"],
        default=None,
        help="Force the search mode (default: query when only --query is given)",
    )
    s.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    s.set_defaults(func=_cmd_search)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m photoscope.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
