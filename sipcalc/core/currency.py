"""Display helpers for currency labels and amounts.

Currency is a label only: nothing here converts between currencies or feeds
back into the projection engine.
"""

from __future__ import annotations

import math
from typing import Dict, List, NamedTuple


class Currency(NamedTuple):
    code: str
    symbol: str
    name: str
    locale: str


CURRENCIES: Dict[str, Currency] = {
    "INR": Currency("INR", "₹", "Indian Rupee", "en-IN"),
    "USD": Currency("USD", "$", "US Dollar", "en-US"),
    "EUR": Currency("EUR", "€", "Euro", "de-DE"),
    "GBP": Currency("GBP", "£", "British Pound", "en-GB"),
    "JPY": Currency("JPY", "¥", "Japanese Yen", "ja-JP"),
    "CAD": Currency("CAD", "C$", "Canadian Dollar", "en-CA"),
}

DEFAULT_CURRENCY = "INR"

CRORE = 10_000_000
LAKH = 100_000
MILLION = 1_000_000
THOUSAND = 1_000


def is_supported(code: str) -> bool:
    return code in CURRENCIES


def supported_currencies() -> List[Currency]:
    return list(CURRENCIES.values())


def symbol_for(code: str) -> str:
    currency = CURRENCIES.get(code)
    return currency.symbol if currency else CURRENCIES[DEFAULT_CURRENCY].symbol


def name_for(code: str) -> str:
    currency = CURRENCIES.get(code)
    return currency.name if currency else CURRENCIES[DEFAULT_CURRENCY].name


def _round_half_up(amount: float) -> int:
    return int(math.floor(amount + 0.5))


def _indian_grouping(digits: str) -> str:
    """Group as 12,34,56,789: commas after 3, 5 and 7 digits from the right."""
    parts: List[str] = []
    for count, digit in enumerate(reversed(digits)):
        if count in (3, 5, 7):
            parts.append(",")
        parts.append(digit)
    return "".join(reversed(parts))


def format_amount(amount: float, code: str = DEFAULT_CURRENCY) -> str:
    """Format ``amount`` as a whole number with the grouping used for ``code``."""
    if not math.isfinite(amount):
        return str(amount)

    rounded = _round_half_up(amount)
    sign = "-" if rounded < 0 else ""
    if code == "INR":
        return sign + _indian_grouping(str(abs(rounded)))
    return f"{sign}{abs(rounded):,}"


def _plain_number(amount: float) -> str:
    if float(amount).is_integer():
        return str(int(amount))
    return f"{amount:g}"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''}"


def _indian_words(amount: float) -> str:
    if amount >= CRORE:
        crores = int(amount // CRORE)
        remainder = amount % CRORE
        text = _plural(crores, "Crore")
        if remainder >= LAKH:
            text = f"{text} {_plural(int(remainder // LAKH), 'Lakh')}"
        return text

    if amount >= LAKH:
        lakhs = int(amount // LAKH)
        remainder = amount % LAKH
        text = _plural(lakhs, "Lakh")
        if remainder >= THOUSAND:
            text = f"{text} {int(remainder // THOUSAND)} Thousand"
        return text

    if amount >= THOUSAND:
        return f"{int(amount // THOUSAND)} Thousand"

    return _plain_number(amount)


def _western_words(amount: float) -> str:
    if amount >= MILLION:
        return f"{amount / MILLION:.1f} Million"
    if amount >= THOUSAND:
        return f"{amount / THOUSAND:.1f} Thousand"
    return _plain_number(amount)


def to_words(amount: float, code: str = DEFAULT_CURRENCY) -> str:
    """Short spoken form of an amount, e.g. "12 Lakhs 50 Thousand"."""
    if amount == 0 or not math.isfinite(amount):
        return ""
    if code == "INR":
        return _indian_words(amount)
    return _western_words(amount)
