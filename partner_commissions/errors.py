"""
Error types raised by the commission engine
"""


class InvalidInputError(ValueError):
    """Raised when an amount, rate or minimum is outside its domain"""


class PrecisionWarning(UserWarning):
    """Emitted when a binary float is coerced into a money or rate Decimal"""
