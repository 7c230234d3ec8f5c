"""
Safe numeric helpers.

Every external field read and every division in the engine goes through
these functions. Values that are missing, non-numeric, NaN or infinite
become zero and leave a `numeric_guard` warning in the log; an invoice
always produces a number.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")
HOURS_PLACES = Decimal("0.01")
RATE_PLACES = Decimal("0.0001")


def _guard(value, field, default):
    logger.warning(
        f"Non-numeric value coerced to {default} for {field or 'value'}",
        extra={
            "field": field,
            "raw_value": repr(value)[:60],
            "action": "numeric_guard",
        },
    )
    return default


def to_decimal(value, field: str = None, default: Decimal = ZERO) -> Decimal:
    """
    Convert any input to a finite Decimal.

    None and empty strings are treated as absent and return `default`
    silently; anything else that cannot be read as a finite number is
    logged and returns `default`.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, bool):
        return Decimal(int(value))

    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return _guard(value, field, default)

    if not result.is_finite():
        return _guard(value, field, default)
    return result


def safe_divide(numerator, denominator, field: str = None) -> Decimal:
    """Divide, returning 0 when the denominator is zero or unreadable"""
    num = to_decimal(numerator, field)
    den = to_decimal(denominator, field)
    if den == ZERO:
        if num != ZERO:
            logger.debug(
                f"Division by zero avoided for {field or 'value'}",
                extra={"field": field, "action": "numeric_guard_division"},
            )
        return ZERO
    return num / den


def safe_sum(values, field: str = None) -> Decimal:
    total = ZERO
    for value in values:
        total += to_decimal(value, field)
    return total


def quantize_money(value) -> Decimal:
    return to_decimal(value, "money").quantize(CENT, rounding=ROUND_HALF_UP)


def quantize_hours(value) -> Decimal:
    return to_decimal(value, "hours").quantize(HOURS_PLACES, rounding=ROUND_HALF_UP)


def quantize_rate(value) -> Decimal:
    return to_decimal(value, "rate").quantize(RATE_PLACES, rounding=ROUND_HALF_UP)
