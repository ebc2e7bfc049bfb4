"""Quantity and unit canonicalization.

Measures collapse to the vocabulary ``{L, ML, KG, G}`` with a numeric prefix
(``"1,5 LT" -> "1.5L"``). The same rules run on the catalog side at ingestion
time and on the extracted side at query time, so exact-match filters line up.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

COUNT_UNIT_KEYWORDS = ("SOBRE", "UNIDAD", "PAR", "PAQUETE", "PACK", "TABLETA", "BLISTER", "FRASCO")

# Order matters: volume first, then weight, GRAMOS before GR.
_SUBSTITUTIONS = (
    (re.compile(r"LITROS?|LTS?"), "L"),
    (re.compile(r"CC"), "ML"),
    (re.compile(r"KILOGRAMOS?|KILOS?"), "KG"),
    (re.compile(r"K$"), "KG"),
    (re.compile(r"GRAMOS?"), "G"),
    (re.compile(r"GR"), "G"),
)

_MEASURE_RE = re.compile(r"^(?P<amount>\d+(?:\.\d+)?)?(?P<unit>ML|L|KG|G)$")

# Unit -> (base unit, factor)
_BASE_UNITS = {
    "L": ("ML", Decimal(1000)),
    "ML": ("ML", Decimal(1)),
    "KG": ("G", Decimal(1000)),
    "G": ("G", Decimal(1)),
}


def normalize(raw: Optional[str]) -> str:
    """Canonicalize a free-text measure.

    Returns an empty string when the input is empty or does not resolve to a
    weight/volume; callers must read that as "no filter applicable".
    """
    if not raw:
        return ""

    unit = re.sub(r"\s+", "", str(raw).upper()).replace(",", ".")
    for pattern, replacement in _SUBSTITUTIONS:
        unit = pattern.sub(replacement, unit)

    if not _MEASURE_RE.match(unit):
        return ""
    return unit


def is_count_unit(raw: Optional[str]) -> bool:
    """True when the unit counts items (sachets, pairs, packs...) rather than measuring them."""
    if not raw:
        return False
    upper = str(raw).upper()
    return any(keyword in upper for keyword in COUNT_UNIT_KEYWORDS)


def _format_amount(value: Decimal) -> str:
    return format(value.normalize(), "f")


def standardize_for_comparison(raw: Optional[str]) -> str:
    """Express a measure in base units (ML or G) so equivalent sizes compare equal.

    ``"1.5L" -> "1500ML"``, ``"1 KG" -> "1000G"``. Measures without an amount
    keep their normalized form; unparseable input returns ``""``.
    """
    unit = normalize(raw)
    match = _MEASURE_RE.match(unit)
    if not match or match.group("amount") is None:
        return unit

    base_unit, factor = _BASE_UNITS[match.group("unit")]
    try:
        amount = Decimal(match.group("amount")) * factor
    except InvalidOperation:
        return unit
    return f"{_format_amount(amount)}{base_unit}"
