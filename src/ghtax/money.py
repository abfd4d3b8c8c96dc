from __future__ import annotations

from decimal import ROUND_HALF_UP, Context, Decimal, localcontext
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

# digits carried by engine arithmetic, well above any realistic amount
WORKING_PRECISION = 60

Number = Union[str, int, float, Decimal]


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # go through str() so 0.1 stays 0.1 instead of its binary expansion
        return Decimal(str(value))
    return Decimal(value)


def working_context():
    """Decimal context for engine arithmetic so sums of large amounts keep their cents."""
    return localcontext(Context(prec=WORKING_PRECISION))


def percent_of(amount: Decimal, rate: Decimal) -> Decimal:
    """Exact ``amount * rate%``."""
    return amount * rate / HUNDRED


def quantize(value: Decimal) -> Decimal:
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the two decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_fixed(value: Number) -> str:
    """Render a monetary amount with exactly two decimals, rounding half up."""
    rounded = quantize(to_decimal(value))
    if rounded.is_zero():
        rounded = abs(rounded)
    return f"{rounded:f}"


def format_rate(rate: Decimal) -> str:
    """Render a percentage without trailing zeros, e.g. ``17.50`` -> ``17.5``."""
    if rate.is_zero():
        return "0"
    return f"{rate.normalize():f}"
