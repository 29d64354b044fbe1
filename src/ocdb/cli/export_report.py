"""CLI entrypoint that writes the catalog PDF report."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import time

from ocdb.catalog.persistence import DEFAULT_DB_PATH, VenueBlobStorage
from ocdb.report.pdf import render_report_pdf, report_filename


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Export the venue catalog as a PDF sorted by distance")
    parser.add_argument("--db-path", default=DEFAULT_DB_PATH, help="SQLite catalog path")
    parser.add_argument(
        "--output",
        default=None,
        help="Output PDF path (defaults to ocdb-agenda-<timestamp>.pdf)",
    )
    args = parser.parse_args(argv)

    with VenueBlobStorage(args.db_path) as storage:
        venues = storage.load()

    output_path = Path(args.output or report_filename(int(time.time() * 1000)))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(render_report_pdf(venues))

    payload = {"output": str(output_path), "venue_count": len(venues)}
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
