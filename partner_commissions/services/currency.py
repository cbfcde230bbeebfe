"""
Currency formatting service
Renders money amounts for display, e.g. 1234.5 → "£1,234.50"
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict

from partner_commissions.errors import InvalidInputError
from partner_commissions.utils.validators import is_currency_code, to_decimal

NBSP = "\u00a0"

CURRENCY_SYMBOLS: Dict[str, str] = {
    "GBP": "£",
    "USD": "$",
    "EUR": "€",
    "JPY": "¥",
}

# Digits after the decimal point; currencies not listed use 2
MINOR_UNITS: Dict[str, int] = {
    "JPY": 0,
}

LOCALES: Dict[str, Dict[str, Any]] = {
    "en-GB": {
        "group": ",",
        "decimal": ".",
        "symbol_first": True,
        "symbols": {"USD": "US$", "JPY": "JP¥"},
    },
    "en-US": {
        "group": ",",
        "decimal": ".",
        "symbol_first": True,
        "symbols": {},
    },
    "de-DE": {
        "group": ".",
        "decimal": ",",
        "symbol_first": False,
        "symbols": {},
    },
}

def _currency(currency_code: str) -> str:
    code = currency_code.strip().upper()
    if not is_currency_code(code):
        raise InvalidInputError(f"Invalid currency code: {currency_code!r}")
    return code

def round_money(amount: Any, currency_code: str = "GBP") -> Decimal:
    """
    Round amount to the currency's minor unit, halves away from zero

    Raises:
        InvalidInputError: If amount is not a finite number or is too large
    """
    code = _currency(currency_code)
    return _quantize(to_decimal(amount, "amount", stacklevel=2), code)

def _quantize(value: Decimal, code: str) -> Decimal:
    exponent = Decimal(1).scaleb(-MINOR_UNITS.get(code, 2))
    try:
        return value.quantize(exponent, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidInputError(f"amount {value} has too many digits to format")

def format_currency(amount: Any, currency_code: str = "GBP", locale: str = "en-GB") -> str:
    """
    Format a money amount for display

    Args:
        amount: Amount to format; negatives are shown with a leading "-"
        currency_code: ISO currency code
        locale: One of LOCALES

    Returns:
        Formatted string such as "£1,234.50" or "1.234,50 €"

    Raises:
        InvalidInputError: If amount is not finite or too large, or locale
            is unsupported
    """
    conventions = LOCALES.get(locale)
    if conventions is None:
        raise InvalidInputError(f"Unsupported locale: {locale!r}")

    code = _currency(currency_code)
    rounded = _quantize(to_decimal(amount, "amount", stacklevel=2), code)

    digits = format(abs(rounded), ",f")
    digits = digits.translate(
        str.maketrans({",": conventions["group"], ".": conventions["decimal"]})
    )

    symbol = conventions["symbols"].get(code) or CURRENCY_SYMBOLS.get(code)
    if conventions["symbol_first"]:
        text = f"{symbol}{digits}" if symbol else f"{code}{NBSP}{digits}"
    else:
        text = f"{digits}{NBSP}{symbol or code}"

    sign = "-" if rounded < 0 else ""
    return f"{sign}{text}"
