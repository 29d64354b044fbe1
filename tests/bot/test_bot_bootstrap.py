"""Smoke tests for bot settings and application bootstrap."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest
from telegram.ext import Application, CallbackQueryHandler, CommandHandler, ConversationHandler, MessageHandler

from ocdb.automation.ingestion_service import IngestGate
from ocdb.bot.config import BotSettings
from ocdb.bot.main import build_application
from ocdb.catalog.models import Venue
from ocdb.catalog.persistence import VenueBlobStorage
from ocdb.catalog.service import CatalogService
from ocdb.extraction.config import ExtractionSettings
from ocdb.extraction.openrouter import OpenRouterVenueExtractor


@pytest.fixture
def mock_settings(tmp_path: Path) -> BotSettings:
    return BotSettings(
        token="test_bot_token_12345",
        db_path=tmp_path / "test.db",
        watch_dir=tmp_path / "prints",
        page_size=5,
    )


@pytest.fixture
def storage(mock_settings: BotSettings):
    with VenueBlobStorage(mock_settings.db_path) as opened:
        yield opened


def _extractor() -> OpenRouterVenueExtractor:
    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=None)))
    return OpenRouterVenueExtractor(ExtractionSettings(api_key="sk-or-v1-test"), client=client)


def test_settings_load_from_env_with_defaults() -> None:
    settings = BotSettings.from_env({"TELEGRAM_BOT_TOKEN": "123:abc"})

    assert settings.token == "123:abc"
    assert settings.db_path == Path(".ocdb.db")
    assert settings.watch_dir == Path("prints")
    assert settings.page_size == 10


def test_settings_missing_token_fails_fast() -> None:
    with pytest.raises(ValueError, match="TELEGRAM_BOT_TOKEN"):
        BotSettings.from_env({"TELEGRAM_BOT_TOKEN": "   "})


def test_settings_validate_page_size() -> None:
    with pytest.raises(ValueError, match="TELEGRAM_PAGE_SIZE"):
        BotSettings.from_env({"TELEGRAM_BOT_TOKEN": "123:abc", "TELEGRAM_PAGE_SIZE": "0"})


def test_build_application_registers_all_handler_types(mock_settings: BotSettings, storage: VenueBlobStorage) -> None:
    app = build_application(mock_settings, storage=storage, extractor=_extractor())

    assert isinstance(app, Application)
    handlers = app.handlers[0]

    assert len([h for h in handlers if isinstance(h, ConversationHandler)]) == 1
    assert len([h for h in handlers if isinstance(h, CommandHandler)]) >= 6
    assert len([h for h in handlers if isinstance(h, MessageHandler)]) == 1
    assert len([h for h in handlers if isinstance(h, CallbackQueryHandler)]) >= 5
    assert app.bot.token == mock_settings.token


def test_build_application_loads_catalog_into_bot_data(mock_settings: BotSettings, storage: VenueBlobStorage) -> None:
    storage.save([Venue(id="a", name="Clube X", city="Florianópolis")])

    app = build_application(mock_settings, storage=storage, extractor=_extractor())

    catalog = app.bot_data["catalog"]
    assert isinstance(catalog, CatalogService)
    assert [venue.id for venue in catalog.venues()] == ["a"]
    assert isinstance(app.bot_data["ingest_gate"], IngestGate)
    assert app.bot_data["page_size"] == 5
    assert app.bot_data["storage"] is storage
