"""Simple interactive launcher for the query engine.

This script loads the configured station dataset, then reads queries
from the terminal and prints what the engine understood. Lines starting
with "站 " or "station " are resolved as station names instead.
"""

from __future__ import annotations

import json
import sys

from tra_query.cli import create_service
from tra_query.domain.errors import QueryEngineError

STATION_PREFIXES = ("站 ", "station ")


def main() -> None:
    try:
        service = create_service(None)
    except QueryEngineError as e:
        print(f"Could not load the station dataset: {e}")
        sys.exit(1)

    print("=== TRA query launcher ===")
    print(f"{len(service.index)} stations loaded. Empty line to quit.")

    while True:
        try:
            line = input("> ").strip()
        except EOFError:
            break
        if not line:
            break

        prefix = next((p for p in STATION_PREFIXES if line.lower().startswith(p)), None)
        if prefix is not None:
            result = service.resolve_station(line[len(prefix) :])
            print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
            continue

        resolved = service.understand(line)
        print(service.parser.summarize(resolved.parsed))
        print(json.dumps(resolved.to_dict(), ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
