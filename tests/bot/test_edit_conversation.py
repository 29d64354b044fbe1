"""Tests for the /editar conversation flow."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from telegram.ext import ConversationHandler

from ocdb.bot.handlers.edit import (
    EDIT_ENTER_VALUE,
    EDIT_SELECT_FIELD,
    build_edit_conversation_handler,
    edit_cancel,
    edit_choose_field,
    edit_save_value,
    edit_start,
)
from ocdb.catalog.models import Venue
from ocdb.catalog.service import CatalogService
from ocdb.catalog.store import VenueStore


class DummyMessage:
    def __init__(self, text: str | None = None) -> None:
        self.text = text
        self.replies: list[dict[str, Any]] = []

    async def reply_text(self, text: str, reply_markup: Any = None) -> None:
        self.replies.append({"text": text, "reply_markup": reply_markup})


class DummyCallbackQuery:
    def __init__(self, data: str) -> None:
        self.data = data
        self.answered = False
        self.edited_messages: list[str] = []

    async def answer(self) -> None:
        self.answered = True

    async def edit_message_text(self, text: str, reply_markup: Any = None) -> None:
        self.edited_messages.append(text)


def _catalog() -> CatalogService:
    return CatalogService(
        VenueStore(
            [
                Venue(id="3f2a9c1b-aaaa", name="Clube X", city="Florianópolis", region_code="48", created_at=5),
                Venue(id="77aa0000-bbbb", name="Bar Ypê", city="Biguacu", region_code="?"),
            ]
        )
    )


def _context(catalog: CatalogService, args: list[str] | None = None, user_data: dict | None = None) -> SimpleNamespace:
    return SimpleNamespace(
        bot_data={"catalog": catalog},
        user_data={} if user_data is None else user_data,
        args=args or [],
    )


@pytest.mark.asyncio
async def test_full_edit_flow_updates_city() -> None:
    catalog = _catalog()
    user_data: dict[str, Any] = {}

    start_message = DummyMessage()
    state = await edit_start(
        SimpleNamespace(message=start_message, callback_query=None),
        _context(catalog, args=["#77aa"], user_data=user_data),
    )
    assert state == EDIT_SELECT_FIELD
    assert "Nome: Bar Ypê" in start_message.replies[0]["text"]

    query = DummyCallbackQuery("edit_field_city")
    state = await edit_choose_field(SimpleNamespace(callback_query=query), _context(catalog, user_data=user_data))
    assert state == EDIT_ENTER_VALUE
    assert query.edited_messages == ["Envie o novo valor para Cidade ou /cancel."]

    value_message = DummyMessage(text="  Biguaçu ")
    state = await edit_save_value(SimpleNamespace(message=value_message), _context(catalog, user_data=user_data))

    assert state == ConversationHandler.END
    assert value_message.replies[0]["text"].startswith("Registro atualizado.")
    updated = catalog.store.get("77aa0000-bbbb")
    assert updated is not None
    assert updated.city == "Biguaçu"
    assert user_data == {}


@pytest.mark.asyncio
async def test_edit_can_create_identity_collision() -> None:
    catalog = _catalog()
    user_data = {"edit_venue_id": "77aa0000-bbbb", "edit_field": "name"}

    await edit_save_value(SimpleNamespace(message=DummyMessage(text="CLUBE X")), _context(catalog, user_data=user_data))
    await edit_save_value(
        SimpleNamespace(message=DummyMessage(text="Florianopolis")),
        _context(catalog, user_data={"edit_venue_id": "77aa0000-bbbb", "edit_field": "city"}),
    )

    assert len(catalog.venues()) == 2
    assert catalog.preview_cleanup().removed_count == 1


@pytest.mark.asyncio
async def test_edit_rejects_blank_value_and_keeps_waiting() -> None:
    catalog = _catalog()
    user_data = {"edit_venue_id": "3f2a9c1b-aaaa", "edit_field": "name"}
    message = DummyMessage(text="   ")

    state = await edit_save_value(SimpleNamespace(message=message), _context(catalog, user_data=user_data))

    assert state == EDIT_ENTER_VALUE
    assert catalog.store.get("3f2a9c1b-aaaa").name == "Clube X"


@pytest.mark.asyncio
async def test_edit_start_with_unknown_code_ends_conversation() -> None:
    message = DummyMessage()

    state = await edit_start(SimpleNamespace(message=message), _context(_catalog(), args=["ffff"]))

    assert state == ConversationHandler.END
    assert message.replies[0]["text"] == "Nenhuma casa encontrada com o código #ffff."


@pytest.mark.asyncio
async def test_edit_cancel_clears_session() -> None:
    user_data = {"edit_venue_id": "3f2a9c1b-aaaa", "edit_field": "city"}
    message = DummyMessage()

    state = await edit_cancel(
        SimpleNamespace(message=message, callback_query=None), _context(_catalog(), user_data=user_data)
    )

    assert state == ConversationHandler.END
    assert message.replies[0]["text"] == "Edição cancelada."
    assert user_data == {}


def test_build_edit_conversation_handler_states() -> None:
    handler = build_edit_conversation_handler()

    assert isinstance(handler, ConversationHandler)
    assert set(handler.states) == {EDIT_SELECT_FIELD, EDIT_ENTER_VALUE}
