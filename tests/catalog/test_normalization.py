from __future__ import annotations

import pytest

from ocdb.catalog.models import Venue
from ocdb.catalog.normalization import IDENTITY_SEPARATOR, identity_key, normalize_identity, venue_identity


@pytest.mark.parametrize(
    ("left", "right"),
    [
        ("Florianópolis", "florianopolis"),
        ("CLUBE X", "clube x"),
        ("Bar Ypê", "bar ype"),
        ("  Biguaçu  ", "BIGUACU"),
        ("Casa do Samba!", "casa-do-samba"),
        ("São José", "Sao.Jose"),
        ("Chopp & Cia", "choppcia"),
    ],
)
def test_normalize_identity_folds_case_accents_and_punctuation(left: str, right: str) -> None:
    assert normalize_identity(left) == normalize_identity(right)


def test_normalize_identity_keeps_only_ascii_letters_and_digits() -> None:
    assert normalize_identity("Bar 2 Irmãos (Centro)") == "bar2irmaoscentro"
    assert normalize_identity("  ") == ""
    assert normalize_identity("Ñandú 47") == "nandu47"


def test_normalize_identity_distinguishes_different_names() -> None:
    assert normalize_identity("Bar Ypê") != normalize_identity("Bar Ypê 2")


def test_identity_key_separates_name_and_city() -> None:
    assert identity_key("Clube X", "Florianópolis") == f"clubex{IDENTITY_SEPARATOR}florianopolis"
    # Shifting characters between name and city must not collide.
    assert identity_key("ab", "c") != identity_key("a", "bc")


def test_venue_identity_uses_name_and_city_only() -> None:
    first = Venue(id="1", name="Clube X", city="Florianópolis", region_code="48", distance_km=10.0)
    second = Venue(id="2", name="CLUBE X", city="florianopolis", region_code="47", distance_km=99.0)

    assert venue_identity(first) == venue_identity(second)
