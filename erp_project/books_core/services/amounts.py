from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ..exceptions import InvalidAmount

CENT = Decimal("0.01")
MILLI = Decimal("0.001")  # quantities are tracked to 3 places


def _to_decimal(value, exp, field):
    if isinstance(value, bool):
        raise InvalidAmount(f"{field} must be a number, got {value!r}")
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"{field} must be a number, got {value!r}")
    if not number.is_finite():
        raise InvalidAmount(f"{field} must be a finite number, got {value!r}")
    return number.quantize(exp, rounding=ROUND_HALF_UP)


def to_money(value, *, field="amount", allow_zero=False, allow_negative=False):
    """Parse a monetary value to 2 places; positive unless told otherwise."""
    amount = _to_decimal(value, CENT, field)
    if amount < 0 and not allow_negative:
        raise InvalidAmount(f"{field} cannot be negative: {amount}")
    if amount == 0 and not allow_zero:
        raise InvalidAmount(f"{field} must be greater than zero")
    return amount


def to_quantity(value, *, field="quantity"):
    quantity = _to_decimal(value, MILLI, field)
    if quantity <= 0:
        raise InvalidAmount(f"{field} must be greater than zero")
    return quantity
