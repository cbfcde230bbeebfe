"""
Configuration module for Partner Commissions
Loads environment variables and provides typed constants
"""

import logging
import os
from decimal import Decimal, InvalidOperation
from dotenv import load_dotenv

from partner_commissions.services.currency import LOCALES
from partner_commissions.utils.validators import is_currency_code

# Load environment variables
load_dotenv()


def _decimal_env(name: str, default: str) -> Decimal:
    raw = os.getenv(name, default).strip()
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise RuntimeError(f"{name} must be a decimal number, got {raw!r}")
    if not value.is_finite() or value < 0:
        raise RuntimeError(f"{name} must be a non-negative finite number")
    return value


# Default commission rule: max(£50, 15% of the sale)
COMMISSION_RATE: Decimal = _decimal_env("COMMISSION_RATE", "0.15")
if COMMISSION_RATE > 1:
    raise RuntimeError("COMMISSION_RATE must be a fraction between 0 and 1")

COMMISSION_MIN: Decimal = _decimal_env("COMMISSION_MIN", "50")

# Display settings
CURRENCY_CODE: str = os.getenv("CURRENCY_CODE", "GBP").strip().upper()
if not is_currency_code(CURRENCY_CODE):
    raise RuntimeError("CURRENCY_CODE must be a three-letter currency code")

CURRENCY_LOCALE: str = os.getenv("CURRENCY_LOCALE", "en-GB").strip()
if CURRENCY_LOCALE not in LOCALES:
    raise RuntimeError(f"CURRENCY_LOCALE must be one of: {', '.join(LOCALES)}")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()
if not isinstance(logging.getLevelName(LOG_LEVEL), int):
    raise RuntimeError(f"LOG_LEVEL must be a logging level name, got {LOG_LEVEL!r}")
