"""SQLite key-value storage for the serialized venue catalog."""

from __future__ import annotations

import json
import logging
from pathlib import Path
import sqlite3
from typing import Iterable

from ocdb.catalog.models import Venue

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = ".ocdb.db"
CATALOG_KEY = "ocdb_official_db"
PRAGMA_BUSY_TIMEOUT_MS = 5000


def apply_runtime_pragmas(connection: sqlite3.Connection) -> None:
    connection.execute("PRAGMA journal_mode=WAL;")
    connection.execute(f"PRAGMA busy_timeout={PRAGMA_BUSY_TIMEOUT_MS};")
    connection.execute("PRAGMA synchronous=NORMAL;")


def ensure_schema(connection: sqlite3.Connection) -> None:
    connection.executescript(
        """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        """
    )


def decode_catalog(blob: str) -> list[Venue]:
    """Parse a stored blob; anything unreadable yields an empty catalog."""

    try:
        payload = json.loads(blob)
    except json.JSONDecodeError as exc:
        logger.error("Stored catalog is not valid JSON, starting empty: %s", exc)
        return []

    if not isinstance(payload, list):
        logger.error("Stored catalog is not a list (got %s), starting empty", type(payload).__name__)
        return []

    venues: list[Venue] = []
    for position, item in enumerate(payload):
        if not isinstance(item, dict):
            logger.warning("Skipping stored entry %s: not an object", position)
            continue
        try:
            venues.append(Venue.from_dict(item))
        except ValueError as exc:
            logger.warning("Skipping stored entry %s: %s", position, exc)
    return venues


def encode_catalog(venues: Iterable[Venue]) -> str:
    return json.dumps([venue.to_dict() for venue in venues], ensure_ascii=False)


class VenueBlobStorage:
    """One key of a SQLite ``kv_store`` table holding the whole catalog."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH, *, key: str = CATALOG_KEY) -> None:
        self._db_path = Path(db_path)
        self._key = key
        self._connection = sqlite3.connect(str(self._db_path))
        self._connection.row_factory = sqlite3.Row
        apply_runtime_pragmas(self._connection)
        ensure_schema(self._connection)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "VenueBlobStorage":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def load(self) -> list[Venue]:
        row = self._connection.execute(
            "SELECT value FROM kv_store WHERE key = ?",
            (self._key,),
        ).fetchone()
        if row is None:
            return []
        return decode_catalog(row["value"])

    def save(self, venues: Iterable[Venue]) -> None:
        with self._connection:
            self._connection.execute(
                """
                INSERT INTO kv_store (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (self._key, encode_catalog(venues)),
            )

