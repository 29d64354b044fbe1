"""Shared rendering utilities for bot replies and keyboards."""

from __future__ import annotations

from collections.abc import Sequence

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from ocdb.automation.ingestion_service import ScreenshotIngestResult
from ocdb.catalog.models import Venue
from ocdb.catalog.search import OTHER_REGION_GROUP, group_by_region

CLEANUP_CONFIRM = "cleanup_confirm"
CLEANUP_CANCEL = "cleanup_cancel"
DELETE_CONFIRM_PREFIX = "delete_confirm_"
DELETE_CANCEL = "delete_cancel"
VENUES_PAGE = "venues_page"
VENUES_PAGE_PREFIX = f"{VENUES_PAGE}_"

EXTRACTION_FAILED_TEXT = "Erro ao analisar imagem. Tente um print mais nítido."


def format_ingest_summary(result: ScreenshotIngestResult) -> str:
    """Describe the outcome of one screenshot ingest."""
    if not result.success:
        return EXTRACTION_FAILED_TEXT

    admitted = result.admitted_count
    rejected = result.rejected_count
    if admitted > 0 and rejected > 0:
        return (
            f"{admitted} novas casas adicionadas. "
            f"{rejected} casas repetidas foram ignoradas automaticamente."
        )
    if admitted > 0:
        return f"{admitted} novas casas adicionadas com sucesso!"
    if rejected > 0:
        return (
            "Aviso: Todas as casas deste print já constam no seu banco de dados. "
            "Nenhuma duplicata foi criada."
        )
    return "Nenhuma casa de show encontrada neste print."


def region_title(group: str) -> str:
    return "Região Expandida" if group == OTHER_REGION_GROUP else f"Região {group}"


def render_venue_line(venue: Venue) -> str:
    travel = venue.travel_time or "-"
    line = f"• #{venue.short_id} {venue.name} — {venue.city} · {venue.distance_km:.1f} km · {travel}"
    if venue.social_handle:
        line += f" · {venue.social_handle}"
    return line


def render_venues_page(
    *,
    venues: Sequence[Venue],
    search_query: str,
    page_num: int,
    page_size: int,
) -> str:
    """Render one page of the region-grouped venue listing."""
    groups = group_by_region(venues)
    entries = [(group, venue) for group, items in groups.items() for venue in items]
    total = len(entries)
    offset = page_num * page_size
    page_entries = entries[offset : offset + page_size]

    header = f"Casas encontradas para «{search_query}»: {total}" if search_query else f"Banco de dados: {total} casas únicas"
    lines = [header]
    current_group: str | None = None
    for group, venue in page_entries:
        if group != current_group:
            lines.append("")
            lines.append(f"{region_title(group)} ({len(groups[group])} locais únicos)")
            current_group = group
        lines.append(render_venue_line(venue))
    return "\n".join(lines)


def render_venue_details(venue: Venue) -> str:
    return "\n".join(
        [
            f"#{venue.short_id}",
            f"Nome: {venue.name}",
            f"Cidade: {venue.city}",
            f"DDD: {venue.region_code}",
            f"Distância: {venue.distance_km:.1f} km",
            f"Viagem: {venue.travel_time or '-'}",
            f"Instagram: {venue.social_handle or '-'}",
        ]
    )


def render_cleanup_prompt(removed: Sequence[Venue], *, limit: int = 10) -> str:
    count = len(removed)
    lines = [
        f"Encontramos {count} casa(s) com nomes repetidos na mesma cidade. Deseja unificar agora?",
        "",
    ]
    for venue in removed[:limit]:
        lines.append(f"• {venue.name} — {venue.city}")
    if count > limit:
        lines.append(f"… e mais {count - limit}")
    return "\n".join(lines)


def build_confirmation_keyboard(*, confirm_data: str, cancel_data: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton("Confirmar", callback_data=confirm_data),
                InlineKeyboardButton("Cancelar", callback_data=cancel_data),
            ]
        ]
    )


def build_pagination_keyboard(
    *,
    prefix: str,
    session_key: str | None,
    page_num: int,
    has_next: bool,
) -> InlineKeyboardMarkup | None:
    """Build previous/next pagination keyboard for callback pages."""
    buttons: list[InlineKeyboardButton] = []

    if page_num > 0:
        callback_data = (
            f"{prefix}_{session_key}_{page_num - 1}" if session_key is not None else f"{prefix}_{page_num - 1}"
        )
        buttons.append(InlineKeyboardButton("← Anterior", callback_data=callback_data))

    if has_next:
        callback_data = (
            f"{prefix}_{session_key}_{page_num + 1}" if session_key is not None else f"{prefix}_{page_num + 1}"
        )
        buttons.append(InlineKeyboardButton("Próxima →", callback_data=callback_data))

    if not buttons:
        return None

    return InlineKeyboardMarkup([buttons])
