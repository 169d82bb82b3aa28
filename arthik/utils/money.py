import math
from typing import Any, Optional

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "CA$",
    "AUD": "A$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
}

# Currencies without minor units
ZERO_DECIMAL_CURRENCIES = {"JPY"}


def safe_float(val: Any, default: float = 0.0) -> float:
    try:
        if val is None:
            return default
        result = float(val)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def format_currency(amount: Optional[float], currency: str = "USD") -> str:
    """
    Format an amount the way the dashboards show it, e.g. ``$1,234.56`` or
    ``-€12.00``.
    """
    code = str(getattr(currency, "value", currency) or "USD").upper()
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    value = safe_float(amount)
    decimals = 0 if code in ZERO_DECIMAL_CURRENCIES else 2
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.{decimals}f}"
