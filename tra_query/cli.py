"""Command-line interface.

Examples:
    tra-query parse "台北到台中明天早上8點自強號"
    tra-query parse "到台中" --context "我在台北" --summary
    tra-query station 北車
    tra-query understand "板橋到高雄最快" --now 2026-10-19T09:00

Results are printed as JSON.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence

from .config import ObservabilityConfig
from .container import Container
from .domain.errors import QueryEngineError
from .services import QueryUnderstandingService


def configure_logging(config: ObservabilityConfig) -> None:
    """Configure the root logger from the observability settings."""
    logging.basicConfig(level=config.level.upper(), format=config.format)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tra-query",
        description="Understand Taiwan Railway queries and resolve station names.",
    )
    parser.add_argument(
        "--stations",
        type=Path,
        default=None,
        help="Station dataset (.csv or .json). Defaults to the configured dataset.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("parse", "Parse a query into structured intent."),
        ("understand", "Parse a query and resolve its stations."),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("query", help="Query text")
        command.add_argument("--context", default=None, help="Supplementary text")
        command.add_argument(
            "--now",
            type=datetime.fromisoformat,
            default=None,
            help="Reference time (ISO 8601) for relative dates",
        )
        command.add_argument(
            "--summary",
            action="store_true",
            help="Print a one-line summary instead of JSON",
        )

    station = commands.add_parser("station", help="Resolve a station name.")
    station.add_argument("name", help="Station name, abbreviation or spelling")

    return parser


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def create_service(
    stations: Optional[Path] = None, load_stations: bool = True
) -> QueryUnderstandingService:
    """Build the service from the default container.

    The station dataset is loaded only when ``load_stations`` is set;
    parsing alone does not need it.
    """
    container = Container.create_default()
    if stations is not None:
        station_config = container.config.station.model_copy(
            update={"data_dir": stations.parent, "stations_file": stations.name}
        )
        config = container.config.model_copy(update={"station": station_config})
        container = Container.create_default(config)

    configure_logging(container.config.observability)
    service = container.resolve(QueryUnderstandingService)
    if load_stations:
        service.refresh_index()
    return service


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        service = create_service(args.stations, load_stations=args.command != "parse")
    except QueryEngineError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "station":
        _print_json(service.resolve_station(args.name).to_dict())
    elif args.command == "parse":
        parsed = service.parse(args.query, context=args.context, now=args.now)
        if args.summary:
            print(service.parser.summarize(parsed))
        else:
            _print_json(parsed.to_dict())
    else:
        resolved = service.understand(args.query, context=args.context, now=args.now)
        if args.summary:
            print(service.parser.summarize(resolved.parsed))
        else:
            _print_json(resolved.to_dict())

    return 0


if __name__ == "__main__":
    sys.exit(main())
