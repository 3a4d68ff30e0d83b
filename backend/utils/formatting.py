"""pt-BR display helpers: currency, percent and tolerant number parsing."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from backend.core.logger import log_event


def round2(value: float) -> float:
    """Half-up rounding to cents, the way spreadsheets round money."""
    try:
        return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return float(value)


def _swap_separators(text: str) -> str:
    return text.replace(",", "X").replace(".", ",").replace("X", ".")


def format_brl(value: float) -> str:
    amount = round2(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}R$ " + _swap_separators(f"{abs(amount):,.2f}")


def format_percent(value: float, casas: int = 2) -> str:
    """Formats a value already expressed in percent (18 -> ``18,00%``)."""
    return _swap_separators(f"{value:,.{casas}f}") + "%"


def parse_brl(value: Any) -> float:
    """Convert Brazilian formatted numbers (R$ 1.234,56) or native values to float."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        return float(value)

    text = str(value).strip()
    if not text:
        return 0.0

    sanitized = re.sub(r"[^0-9,.\-]", "", text)
    if sanitized.count(",") and sanitized.count("."):
        if sanitized.rfind(",") > sanitized.rfind("."):
            sanitized = sanitized.replace(".", "").replace(",", ".")
        else:
            sanitized = sanitized.replace(",", "")
    elif sanitized.count(",") == 1:
        sanitized = sanitized.replace(",", ".")
    elif sanitized.count(".") > 1:
        sanitized = sanitized.replace(".", "")

    try:
        return float(sanitized)
    except ValueError:
        log_event("formatting", "DEBUG", "Valor não numérico convertido para 0", {"value": text})
        return 0.0
