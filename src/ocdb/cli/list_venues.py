"""CLI entrypoint for region-grouped catalog listings."""

from __future__ import annotations

import argparse
import json

from ocdb.catalog.persistence import DEFAULT_DB_PATH, VenueBlobStorage
from ocdb.catalog.search import filter_venues, group_by_region


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="List catalogued venues grouped by region code")
    parser.add_argument("--db-path", default=DEFAULT_DB_PATH, help="SQLite catalog path")
    parser.add_argument("--query", default="", help="Substring filter on name, city or region code")
    args = parser.parse_args(argv)

    with VenueBlobStorage(args.db_path) as storage:
        venues = storage.load()

    matched = filter_venues(venues, args.query) if args.query.strip() else venues
    groups = group_by_region(matched)

    payload = {
        "query": args.query,
        "total": len(matched),
        "groups": {
            group: [venue.to_dict() for venue in items]
            for group, items in groups.items()
            if items
        },
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
