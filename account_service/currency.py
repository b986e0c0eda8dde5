"""
Currency and Amount Helpers

Currency codes are free-form ISO 4217 style codes (three uppercase letters);
no exchange rates are kept. All amounts are Decimal. NEVER uses float for
monetary values.
"""

from decimal import Decimal, InvalidOperation, getcontext
from typing import Union
import re

from .exceptions import ValidationError

# Set global decimal context for financial precision
getcontext().prec = 28

CURRENCY_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")

DEFAULT_CURRENCY = "RUB"

AmountLike = Union[Decimal, int, str]


def is_valid_currency_code(code: object) -> bool:
    """Check whether a value is a three-letter uppercase currency code"""
    return isinstance(code, str) and CURRENCY_CODE_PATTERN.match(code) is not None


def validate_currency_code(code: object) -> str:
    """
    Validate a currency code.

    Args:
        code: Candidate currency code, e.g. "RUB", "USD"

    Returns:
        The code unchanged

    Raises:
        ValidationError: If the code is not three uppercase letters
    """
    if not is_valid_currency_code(code):
        raise ValidationError(
            f"Invalid currency code {code!r}: expected three uppercase letters, e.g. RUB, USD, EUR"
        )
    return code


def to_decimal(value: AmountLike, field_name: str = "amount") -> Decimal:
    """
    Convert a monetary value to Decimal.

    Floats are rejected; they cannot represent most decimal fractions exactly.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError(f"{field_name} must be a Decimal, int or numeric string, got {type(value).__name__}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field_name} is not a valid number: {value!r}")
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be a finite number")
    return result


def format_amount(amount: Decimal, currency: str) -> str:
    """Format for display, e.g. 'RUB 1,000.00'"""
    return f"{currency} {amount:,.2f}"
