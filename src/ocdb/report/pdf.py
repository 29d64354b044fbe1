"""Tabular PDF report of the catalog, ordered by distance from home base."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

import pymupdf

from ocdb.catalog.models import Venue
from ocdb.catalog.search import sort_by_distance

REPORT_TITLE = "OCDB - O CAMINHO DO BAILE"
REPORT_SUBTITLE = "Relatório Oficial Studio Voz"
REPORT_COLUMNS = ("CASA DE SHOW", "CIDADE", "DDD", "DISTÂNCIA", "VIAGEM", "INSTAGRAM")
PLACEHOLDER = "-"

_PAGE_WIDTH, _PAGE_HEIGHT = pymupdf.paper_size("a4")
_MARGIN = 40.0
_HEADER_BAND_HEIGHT = 71.0
_TABLE_TOP = 85.0
_ROW_HEIGHT = 14.0
_CELL_PADDING = 3.0
_FONT = "helv"
_HEAD_FONT_SIZE = 8.0
_BODY_FONT_SIZE = 7.0
_COLUMN_WIDTHS = (130.0, 95.0, 35.0, 60.0, 65.0, 130.0)

_BAND_COLOR = (15 / 255, 23 / 255, 42 / 255)
_ACCENT_COLOR = (6 / 255, 182 / 255, 212 / 255)
_MUTED_COLOR = (148 / 255, 163 / 255, 184 / 255)
_GRID_COLOR = (0.75, 0.75, 0.75)
_WHITE = (1.0, 1.0, 1.0)
_BLACK = (0.0, 0.0, 0.0)


def format_distance(distance_km: float) -> str:
    return f"{distance_km:.1f} KM"


def report_rows(venues: Iterable[Venue]) -> list[tuple[str, ...]]:
    """Project venues into report cells, nearest first."""

    return [
        (
            venue.name.upper(),
            venue.city.upper(),
            venue.region_code,
            format_distance(venue.distance_km),
            venue.travel_time or PLACEHOLDER,
            venue.social_handle or PLACEHOLDER,
        )
        for venue in sort_by_distance(list(venues))
    ]


def report_filename(timestamp_ms: int) -> str:
    return f"ocdb-agenda-{timestamp_ms}.pdf"


def _fit_text(text: str, width: float, fontsize: float) -> str:
    available = width - 2 * _CELL_PADDING
    if pymupdf.get_text_length(text, fontname=_FONT, fontsize=fontsize) <= available:
        return text
    trimmed = text
    while trimmed and pymupdf.get_text_length(trimmed + "...", fontname=_FONT, fontsize=fontsize) > available:
        trimmed = trimmed[:-1]
    return trimmed + "..." if trimmed else ""


def _draw_row(
    page: pymupdf.Page,
    cells: Sequence[str],
    *,
    top: float,
    fontsize: float,
    text_color: tuple[float, float, float],
    fill: tuple[float, float, float] | None,
) -> None:
    left = _MARGIN
    for cell, width in zip(cells, _COLUMN_WIDTHS):
        rect = pymupdf.Rect(left, top, left + width, top + _ROW_HEIGHT)
        page.draw_rect(rect, color=_GRID_COLOR, fill=fill, width=0.5)
        baseline = top + (_ROW_HEIGHT + fontsize) / 2 - 1
        page.insert_text(
            pymupdf.Point(left + _CELL_PADDING, baseline),
            _fit_text(cell, width, fontsize),
            fontname=_FONT,
            fontsize=fontsize,
            color=text_color,
        )
        left += width


def _draw_head(page: pymupdf.Page, top: float) -> float:
    _draw_row(page, REPORT_COLUMNS, top=top, fontsize=_HEAD_FONT_SIZE, text_color=_WHITE, fill=_ACCENT_COLOR)
    return top + _ROW_HEIGHT


def _draw_banner(page: pymupdf.Page, generated_on: date) -> None:
    page.draw_rect(pymupdf.Rect(0, 0, _PAGE_WIDTH, _HEADER_BAND_HEIGHT), color=None, fill=_BAND_COLOR)
    page.insert_text(pymupdf.Point(_MARGIN, 45), REPORT_TITLE, fontname=_FONT, fontsize=16, color=_ACCENT_COLOR)
    page.insert_text(
        pymupdf.Point(_MARGIN, 60),
        f"{REPORT_SUBTITLE} - {generated_on.strftime('%d/%m/%Y')}",
        fontname=_FONT,
        fontsize=8,
        color=_MUTED_COLOR,
    )


def render_report_pdf(venues: Iterable[Venue], *, generated_on: date | None = None) -> bytes:
    """Render the catalog as a grid table on A4 pages and return PDF bytes."""

    rows = report_rows(venues)
    report_date = generated_on or date.today()

    with pymupdf.open() as doc:
        page = doc.new_page(width=_PAGE_WIDTH, height=_PAGE_HEIGHT)
        _draw_banner(page, report_date)
        cursor = _draw_head(page, _TABLE_TOP)

        for row in rows:
            if cursor + _ROW_HEIGHT > _PAGE_HEIGHT - _MARGIN:
                page = doc.new_page(width=_PAGE_WIDTH, height=_PAGE_HEIGHT)
                cursor = _draw_head(page, _MARGIN)
            _draw_row(page, row, top=cursor, fontsize=_BODY_FONT_SIZE, text_color=_BLACK, fill=None)
            cursor += _ROW_HEIGHT

        return doc.tobytes()
