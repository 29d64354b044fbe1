"""Tests for cleanup/delete confirmations and listing pagination callbacks."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any

from ocdb.bot.handlers.callbacks import (
    cleanup_cancel_callback,
    cleanup_confirm_callback,
    delete_cancel_callback,
    delete_confirm_callback,
    parse_page_callback,
    venues_page_callback,
)
from ocdb.bot.handlers.commands import venues_command
from ocdb.bot.handlers.sessions import listing_query, open_listing
from ocdb.catalog.models import Venue
from ocdb.catalog.service import CatalogService
from ocdb.catalog.store import VenueStore


class DummyCallbackQuery:
    def __init__(self, data: str) -> None:
        self.data = data
        self.answered = False
        self.edited_messages: list[dict[str, Any]] = []

    async def answer(self) -> None:
        self.answered = True

    async def edit_message_text(self, text: str, reply_markup: Any = None) -> None:
        self.edited_messages.append({"text": text, "reply_markup": reply_markup})


class DummyMessage:
    def __init__(self, message_id: int) -> None:
        self.message_id = message_id
        self.replies: list[dict[str, Any]] = []

    async def reply_text(self, text: str, reply_markup: Any = None) -> None:
        self.replies.append({"text": text, "reply_markup": reply_markup})


def _context(catalog: CatalogService, *, page_size: int = 10, user_data: dict | None = None) -> SimpleNamespace:
    return SimpleNamespace(
        bot_data={"catalog": catalog, "page_size": page_size},
        user_data={} if user_data is None else user_data,
        args=[],
    )


def _venue(venue_id: str, name: str, city: str, distance_km: float = 0.0) -> Venue:
    return Venue(id=venue_id, name=name, city=city, region_code="48", distance_km=distance_km)


def test_cleanup_confirm_compacts_current_store() -> None:
    catalog = CatalogService(
        VenueStore(
            [
                _venue("k1", "Clube X", "Florianópolis"),
                _venue("k2", "CLUBE X", "florianopolis"),
                _venue("j1", "Bar Ypê", "Biguaçu"),
            ]
        )
    )
    # A duplicate that arrived after the prompt is still unified.
    catalog.store.append([_venue("k3", "clube x", "Florianopolis")])
    query = DummyCallbackQuery("cleanup_confirm")

    asyncio.run(cleanup_confirm_callback(SimpleNamespace(callback_query=query), _context(catalog)))

    assert query.answered is True
    assert query.edited_messages[0]["text"] == "Sucesso! 2 registros duplicados foram removidos."
    assert [venue.id for venue in catalog.venues()] == ["k1", "j1"]


def test_cleanup_confirm_when_duplicates_already_gone() -> None:
    catalog = CatalogService(VenueStore([_venue("k1", "Clube X", "Florianópolis")]))
    query = DummyCallbackQuery("cleanup_confirm")

    asyncio.run(cleanup_confirm_callback(SimpleNamespace(callback_query=query), _context(catalog)))

    assert query.edited_messages[0]["text"] == "Nenhuma casa repetida encontrada. Seu banco está organizado!"


def test_cleanup_cancel_leaves_store_unchanged() -> None:
    catalog = CatalogService(
        VenueStore([_venue("k1", "Clube X", "Florianópolis"), _venue("k2", "CLUBE X", "florianopolis")])
    )
    query = DummyCallbackQuery("cleanup_cancel")

    asyncio.run(cleanup_cancel_callback(SimpleNamespace(callback_query=query), _context(catalog)))

    assert query.edited_messages[0]["text"] == "Limpeza cancelada. Nada foi alterado."
    assert len(catalog.venues()) == 2


def test_delete_confirm_removes_venue_once() -> None:
    catalog = CatalogService(VenueStore([_venue("k1", "Clube X", "Florianópolis"), _venue("j1", "Bar", "Lages")]))

    first = DummyCallbackQuery("delete_confirm_k1")
    asyncio.run(delete_confirm_callback(SimpleNamespace(callback_query=first), _context(catalog)))
    second = DummyCallbackQuery("delete_confirm_k1")
    asyncio.run(delete_confirm_callback(SimpleNamespace(callback_query=second), _context(catalog)))

    assert first.edited_messages[0]["text"] == "Casa removida da agenda."
    assert second.edited_messages[0]["text"] == "Esta casa já não está no banco de dados."
    assert [venue.id for venue in catalog.venues()] == ["j1"]


def test_delete_cancel_keeps_venue() -> None:
    catalog = CatalogService(VenueStore([_venue("k1", "Clube X", "Florianópolis")]))
    query = DummyCallbackQuery("delete_cancel")

    asyncio.run(delete_cancel_callback(SimpleNamespace(callback_query=query), _context(catalog)))

    assert query.edited_messages[0]["text"] == "Remoção cancelada."
    assert len(catalog.venues()) == 1


def test_venues_page_callback_renders_next_page() -> None:
    venues = [_venue(f"id-{index}", f"Casa {index}", "Lages", float(index)) for index in range(5)]
    catalog = CatalogService(VenueStore(venues))
    user_data: dict[str, Any] = {}
    message = DummyMessage(message_id=31)
    update = SimpleNamespace(message=message, effective_chat=SimpleNamespace(id=55))

    asyncio.run(venues_command(update, _context(catalog, page_size=2, user_data=user_data)))
    query = DummyCallbackQuery("venues_page_55:31_1")
    asyncio.run(venues_page_callback(SimpleNamespace(callback_query=query), _context(catalog, page_size=2, user_data=user_data)))

    edited = query.edited_messages[0]
    assert "Casa 2" in edited["text"]
    assert "Casa 3" in edited["text"]
    assert "Casa 0" not in edited["text"]
    buttons = [button.callback_data for row in edited["reply_markup"].inline_keyboard for button in row]
    assert buttons == ["venues_page_55:31_0", "venues_page_55:31_2"]


def test_venues_page_callback_with_unknown_session_or_page() -> None:
    catalog = CatalogService(VenueStore([_venue("k1", "Clube X", "Florianópolis")]))

    expired = DummyCallbackQuery("venues_page_1:1_1")
    asyncio.run(venues_page_callback(SimpleNamespace(callback_query=expired), _context(catalog)))
    assert expired.edited_messages[0]["text"] == "A lista expirou. Use /casas novamente."

    user_data = {"venue_sessions": {"1:1": {"query": ""}}}
    out_of_range = DummyCallbackQuery("venues_page_1:1_4")
    asyncio.run(
        venues_page_callback(SimpleNamespace(callback_query=out_of_range), _context(catalog, user_data=user_data))
    )
    assert out_of_range.edited_messages[0]["text"] == "Página não existe."


def test_parse_page_callback_splits_session_and_page() -> None:
    assert parse_page_callback("venues_page_55:31_2") == ("55:31", 2)
    assert parse_page_callback("venues_page_-100:7_0") == ("-100:7", 0)
    assert parse_page_callback("venues_page_55:31_x") is None
    assert parse_page_callback("venues_page__3") is None
    assert parse_page_callback("delete_confirm_abc") is None


def test_new_listing_expires_older_ones_in_same_chat() -> None:
    context = SimpleNamespace(user_data={})

    first = open_listing(context, chat_id=7, message_id=1, query="bar")
    other_chat = open_listing(context, chat_id=8, message_id=1, query="")
    second = open_listing(context, chat_id=7, message_id=2, query="clube")

    assert first == "7:1"
    assert listing_query(context, first) is None
    assert listing_query(context, second) == "clube"
    assert listing_query(context, other_chat) == ""
    assert listing_query(SimpleNamespace(user_data={}), "7:2") is None
