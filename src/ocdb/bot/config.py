"""Runtime configuration for the Telegram bot process."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping

from ocdb.catalog.persistence import DEFAULT_DB_PATH


DEFAULT_WATCH_DIR = "prints"
DEFAULT_PAGE_SIZE = 10


def _setting(source: Mapping[str, str], name: str, default: str) -> str:
    value = source.get(name, default).strip()
    if not value:
        raise ValueError(f"{name} cannot be empty")
    return value


@dataclass(frozen=True, slots=True)
class BotSettings:
    """Validated Telegram bot runtime settings."""

    token: str
    db_path: Path
    watch_dir: Path
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BotSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        token = source.get("TELEGRAM_BOT_TOKEN", "").strip()
        if not token:
            raise ValueError("Missing required bot environment variable: TELEGRAM_BOT_TOKEN")

        page_size_raw = _setting(source, "TELEGRAM_PAGE_SIZE", str(DEFAULT_PAGE_SIZE))
        try:
            page_size = int(page_size_raw)
        except ValueError as exc:
            raise ValueError("TELEGRAM_PAGE_SIZE must be an integer") from exc
        if page_size < 1:
            raise ValueError("TELEGRAM_PAGE_SIZE must be >= 1")

        return cls(
            token=token,
            db_path=Path(_setting(source, "OCDB_DB_PATH", DEFAULT_DB_PATH)),
            watch_dir=Path(_setting(source, "OCDB_WATCH_DIR", DEFAULT_WATCH_DIR)),
            page_size=page_size,
        )
