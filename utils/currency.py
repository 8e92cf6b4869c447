from utils.constants import CURRENCY_SYMBOLS


def currency_symbol(code: str | None) -> str:
    """Map a currency code to its display prefix, e.g. 'PKR' -> 'Rs. '."""
    code = code or "PKR"
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


def format_currency(amount: float, symbol: str = "Rs. ") -> str:
    """Format a float as currency string, e.g. 'Rs. 1,234.56'."""
    return f"{symbol}{amount:,.2f}"


def format_signed(amount: float, symbol: str = "Rs. ") -> str:
    """Format with +/- sign."""
    sign = "+" if amount >= 0 else "-"
    return f"{sign}{symbol}{abs(amount):,.2f}"
