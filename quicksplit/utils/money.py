"""Currency helpers shared by the settlement engine and the API layer."""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

# One cent. Balances and remainders within this band count as zero.
EPSILON = Decimal("0.01")
CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a numeric value to Decimal without carrying binary float noise.

    Floats go through their shortest repr, so ``0.1`` becomes ``Decimal("0.1")``
    rather than ``Decimal("0.1000000000000000055511151231257827...")``.
    Raises ValueError for anything that is not a finite number.
    """
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, float, str)):
        raise ValueError(f"Cannot interpret {value!r} as an amount")

    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Cannot interpret {value!r} as an amount")

    if not result.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    return result


def round_cents(value: Any) -> Decimal:
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def to_cents(value: Any) -> int:
    """Decimal amount -> integer cents (rounded half up)."""
    return int(round_cents(value) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENTS)
