"""CLI entrypoint for bulk duplicate cleanup; dry run unless --apply is given."""

from __future__ import annotations

import argparse
import json

from ocdb.catalog.persistence import DEFAULT_DB_PATH, VenueBlobStorage
from ocdb.catalog.service import CLEANUP_DUPLICATES, CatalogService


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Collapse the catalog to one venue per name and city")
    parser.add_argument("--db-path", default=DEFAULT_DB_PATH, help="SQLite catalog path")
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Remove the duplicates instead of only reporting them",
    )
    args = parser.parse_args(argv)

    with VenueBlobStorage(args.db_path) as storage:
        catalog = CatalogService.from_storage(storage)
        preview = catalog.preview_cleanup()
        removed_count = 0
        if args.apply and preview.status == CLEANUP_DUPLICATES:
            removed_count = catalog.apply_cleanup()
        remaining = len(catalog.venues())

    payload = {
        "status": preview.status,
        "applied": bool(args.apply and removed_count),
        "duplicate_count": preview.removed_count,
        "removed_count": removed_count,
        "remaining": remaining,
        "duplicates": [venue.to_dict() for venue in preview.compaction.removed],
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
