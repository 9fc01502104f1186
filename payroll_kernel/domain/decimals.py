"""
Decimals -- Exact fixed-point arithmetic for every payroll amount.

Responsibility:
    Normalizes any accepted numeric representation into ``Decimal`` at the
    API boundary and provides the small set of operations the engines need:
    multiply, compare and round.  Downstream code only ever sees Decimal.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every engine.  No outward dependencies except
    payroll_kernel.exceptions.

Invariants enforced:
    - Monetary values are Decimal, never float.  Floats accepted at the
      boundary are converted through ``str()`` so ``0.1`` becomes
      ``Decimal("0.1")`` rather than its binary expansion.
    - round_decimal() is the ONLY sanctioned rounding function and always
      uses ROUND_HALF_UP.  Intermediate results are never rounded.

Failure modes:
    - ValidationError for None, bool, NaN, infinity or unparsable strings.
    - ValidationError for negative values where non-negative is required.
    - ValidationError when a value has too many digits to be rounded
      within the decimal context precision.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from payroll_kernel.exceptions import ValidationError

DecimalLike = Decimal | int | float | str

ZERO = Decimal("0")
HUNDRED = Decimal("100")

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP


def to_decimal(value: DecimalLike, field: str = "value") -> Decimal:
    """
    Convert an accepted numeric value to Decimal.

    Preconditions:
        - value is a Decimal, int, float or numeric string.

    Postconditions:
        - Returns a finite Decimal.  Decimal inputs are returned unchanged.

    Raises:
        ValidationError: If value is None, a bool, non-numeric or not finite.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise ValidationError(field, value, "must be a number")
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValidationError(field, value, "must be a number") from e
    else:
        raise ValidationError(field, value, f"unsupported type {type(value).__name__}")

    if not result.is_finite():
        raise ValidationError(field, value, "must be finite")
    return result


def to_non_negative_decimal(value: DecimalLike, field: str = "value") -> Decimal:
    """Convert to Decimal and reject negative values."""
    result = to_decimal(value, field)
    if result < ZERO:
        raise ValidationError(field, value, "must not be negative")
    return result


def multiply(a: DecimalLike, b: DecimalLike) -> Decimal:
    """Exact product of two values."""
    return to_decimal(a, "a") * to_decimal(b, "b")


def compare(a: DecimalLike, b: DecimalLike) -> int:
    """Return -1, 0 or 1 as a is less than, equal to or greater than b."""
    left = to_decimal(a, "a")
    right = to_decimal(b, "b")
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def round_decimal(
    value: DecimalLike,
    decimals: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a value to a fixed number of decimal places.

    Only called at presentation/output boundaries.

    Args:
        value: The value to round.
        decimals: Number of decimal places (>= 0).
        rounding: Rounding mode (default: ROUND_HALF_UP).

    Returns:
        Decimal quantized to ``decimals`` places.

    Raises:
        ValidationError: ``decimals`` is negative, or the rounded value
            would need more digits than the context precision.
    """
    if decimals < 0:
        raise ValidationError("decimals", decimals, "must not be negative")
    exponent = Decimal(1).scaleb(-decimals)
    amount = to_decimal(value)
    try:
        return amount.quantize(exponent, rounding=rounding)
    except InvalidOperation as e:
        raise ValidationError("value", value, "too large to round") from e


def percent_of(base: DecimalLike, rate_percent: DecimalLike) -> Decimal:
    """``base * rate_percent / 100`` without intermediate rounding."""
    return to_decimal(base, "base") * to_decimal(rate_percent, "rate_percent") / HUNDRED
