"""Currency and date rendering driven by the user's localization settings."""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from propsync._constants import (
    CURRENCY_FRACTION_DIGITS,
    CURRENCY_RATES,
    CURRENCY_SYMBOLS,
    EMPTY_DATE_PLACEHOLDER,
)
from propsync.models.settings import UserSettings


def format_currency(amount: float, settings: UserSettings) -> str:
    """Convert an NGN amount to the display currency and format it en-US style.

    >>> format_currency(100000, UserSettings.model_validate({"localization": {"currency": "USD"}}))
    '$65.00'
    """
    currency = settings.localization.currency
    converted = Decimal(str(amount)) * Decimal(str(CURRENCY_RATES[currency]))
    digits = CURRENCY_FRACTION_DIGITS[currency]
    quantized = converted.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    return f"{sign}{CURRENCY_SYMBOLS[currency]}{abs(quantized):,.{digits}f}"


def format_date(value: str | None, settings: UserSettings) -> str:
    """Render an ISO date as ``DD/MM/YYYY`` or ``MM/DD/YYYY``.

    Empty input and the ``---`` placeholder render as ``---``; anything
    that does not parse is returned unchanged.
    """
    if not value or value == EMPTY_DATE_PLACEHOLDER:
        return EMPTY_DATE_PLACEHOLDER
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return value
    day = f"{parsed.day:02d}"
    month = f"{parsed.month:02d}"
    if settings.localization.date_format == "DD/MM/YYYY":
        return f"{day}/{month}/{parsed.year}"
    return f"{month}/{day}/{parsed.year}"
