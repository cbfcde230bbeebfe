"""
Validation utilities module
Contains regex patterns and coercion of raw values into money and rates
"""

import re
import warnings
from decimal import Decimal, InvalidOperation
from typing import Any

from partner_commissions.errors import InvalidInputError, PrecisionWarning

# Regex patterns
MONEY_RGX = r"^\d+(?:[.,]\d{1,2})?$"
CURRENCY_CODE_RGX = r"^[A-Z]{3}$"

def is_money(s: str) -> bool:
    """
    Validate money format and normalize comma to dot

    Args:
        s: String to validate

    Returns:
        True if valid money format, False otherwise
    """
    return bool(re.match(MONEY_RGX, normalize_money(s)))

def normalize_money(s: str) -> str:
    """
    Normalize money string by replacing comma with dot

    Args:
        s: Money string to normalize

    Returns:
        Normalized money string
    """
    return s.strip().replace(",", ".")

def is_currency_code(s: str) -> bool:
    """Validate ISO 4217 style currency code (three upper-case letters)"""
    return bool(re.match(CURRENCY_CODE_RGX, s))

def to_decimal(value: Any, name: str = "value", stacklevel: int = 1) -> Decimal:
    """
    Coerce a raw numeric value into a finite Decimal

    Floats are converted through their shortest repr, so 0.15 becomes
    Decimal("0.15"); a PrecisionWarning is emitted because the float may
    already carry binary rounding error.

    Args:
        value: int, float, Decimal or numeric string
        name: Field name used in error messages
        stacklevel: Frame the PrecisionWarning is reported at; 1 is the line
            calling this function, each wrapper passes its own level plus one

    Returns:
        Finite Decimal

    Raises:
        InvalidInputError: If value is not numeric or not finite
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a number, got bool")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        warnings.warn(
            f"{name} given as float {value!r}; use Decimal for currency math",
            PrecisionWarning,
            stacklevel=stacklevel + 1,
        )
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(normalize_money(value))
        except InvalidOperation:
            raise InvalidInputError(f"{name} is not a number: {value!r}")
    else:
        raise InvalidInputError(
            f"{name} must be a number, got {type(value).__name__}"
        )

    if not result.is_finite():
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    return result

def to_money(value: Any, name: str = "amount", stacklevel: int = 1) -> Decimal:
    """Coerce value into a non-negative money Decimal"""
    amount = to_decimal(value, name, stacklevel + 1)
    if amount < 0:
        raise InvalidInputError(f"{name} must be >= 0, got {amount}")
    return amount

def to_rate(value: Any, name: str = "rate", stacklevel: int = 1) -> Decimal:
    """Coerce value into a commission rate fraction in [0, 1]"""
    rate = to_decimal(value, name, stacklevel + 1)
    if rate < 0 or rate > 1:
        raise InvalidInputError(f"{name} must be between 0 and 1, got {rate}")
    return rate
