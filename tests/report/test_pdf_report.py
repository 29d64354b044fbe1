from __future__ import annotations

from datetime import date

import pymupdf

from ocdb.catalog.models import Venue
from ocdb.report.pdf import PLACEHOLDER, render_report_pdf, report_filename, report_rows


def _venue(venue_id: str, name: str, city: str, distance_km: float, **extra: object) -> Venue:
    return Venue(id=venue_id, name=name, city=city, region_code="48", distance_km=distance_km, **extra)


def test_report_rows_are_uppercased_and_sorted_by_distance() -> None:
    rows = report_rows(
        [
            _venue("a", "Clube X", "Florianópolis", 25.0, travel_time="40min", social_handle="@clubex"),
            _venue("b", "Bar Ypê", "Biguaçu", 5.2),
        ]
    )

    assert rows == [
        ("BAR YPÊ", "BIGUAÇU", "48", "5.2 KM", PLACEHOLDER, PLACEHOLDER),
        ("CLUBE X", "FLORIANÓPOLIS", "48", "25.0 KM", "40min", "@clubex"),
    ]


def test_report_filename_uses_timestamp() -> None:
    assert report_filename(1700000000000) == "ocdb-agenda-1700000000000.pdf"


def test_render_report_pdf_contains_header_and_rows() -> None:
    pdf_bytes = render_report_pdf([_venue("a", "Clube X", "Itajai", 80.0)], generated_on=date(2024, 3, 9))

    with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:
        assert doc.page_count == 1
        text = doc[0].get_text()

    assert "O CAMINHO DO BAILE" in text
    assert "09/03/2024" in text
    assert "CASA DE SHOW" in text
    assert "CLUBE X" in text
    assert "80.0 KM" in text


def test_render_report_pdf_for_empty_catalog_still_has_header() -> None:
    pdf_bytes = render_report_pdf([])

    with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:
        assert doc.page_count == 1
        assert "CIDADE" in doc[0].get_text()


def test_render_report_pdf_paginates_long_catalogs() -> None:
    venues = [_venue(f"id-{index}", f"Casa {index}", "Lages", float(index)) for index in range(120)]

    pdf_bytes = render_report_pdf(venues)

    with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:
        assert doc.page_count >= 2
        last_page_text = doc[doc.page_count - 1].get_text()

    assert "CASA DE SHOW" in last_page_text
    assert "CASA 119" in last_page_text
