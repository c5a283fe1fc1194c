from typing import Optional

from storefront.core.config import settings


def format_price(amount: float, symbol: Optional[str] = None) -> str:
    """1234.5 -> '₱1,234.50'"""
    symbol = settings.CURRENCY_SYMBOL if symbol is None else symbol
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def field_label(field: str) -> str:
    """'zip_code' -> 'zip code'"""
    return field.replace("_", " ").strip().lower()


def split_full_name(name: str) -> tuple:
    parts = (name or "").split(" ")
    first = parts[0] if parts else ""
    last = " ".join(parts[1:])
    return first, last
