"""Shared bot handler configuration resolvers."""

from __future__ import annotations

from telegram.ext import ContextTypes

from ocdb.automation.ingestion_service import IngestGate
from ocdb.catalog.service import CatalogService


class ConfigError(RuntimeError):
    """Raised when required handler configuration is missing or invalid."""


def resolve_catalog(context: ContextTypes.DEFAULT_TYPE) -> CatalogService:
    catalog = context.bot_data.get("catalog")
    if catalog is None:
        raise ConfigError("Catalog service missing from context.bot_data['catalog']")
    if not isinstance(catalog, CatalogService):
        raise ConfigError("context.bot_data['catalog'] must be a CatalogService")
    return catalog


def resolve_gate(context: ContextTypes.DEFAULT_TYPE) -> IngestGate:
    gate = context.bot_data.get("ingest_gate")
    if not isinstance(gate, IngestGate):
        raise ConfigError("context.bot_data['ingest_gate'] must be an IngestGate")
    return gate


def resolve_required(context: ContextTypes.DEFAULT_TYPE, key: str) -> object:
    value = context.bot_data.get(key)
    if value is None:
        raise ConfigError(f"{key} missing from context.bot_data['{key}']")
    return value


def resolve_page_size(context: ContextTypes.DEFAULT_TYPE) -> int:
    return int(resolve_required(context, "page_size"))
