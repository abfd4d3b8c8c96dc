from __future__ import annotations

from decimal import Decimal

from .logging import get_logger
from .models import CalculationError, VATCalculationResult, VATOutcome
from .money import HUNDRED, Number, percent_of, to_fixed, working_context
from .validation import parse_amount

VAT_RATE = Decimal("15.0")
NHIL_RATE = Decimal("2.5")
GETFUND_RATE = Decimal("2.5")
TOTAL_TAX_RATE = VAT_RATE + NHIL_RATE + GETFUND_RATE  # levies are additive, not compounded

EXCLUSIVE = "exclusive"
INCLUSIVE = "inclusive"
MODES = (EXCLUSIVE, INCLUSIVE)

logger = get_logger(__name__)


def _levies(taxable_value: Decimal):
    return (
        percent_of(taxable_value, NHIL_RATE),
        percent_of(taxable_value, GETFUND_RATE),
        percent_of(taxable_value, VAT_RATE),
    )


def calculate_vat_exclusive(taxable_amount: Number) -> VATOutcome:
    """Treat ``taxable_amount`` as the pre-tax base and add the levies on top."""
    taxable_value = parse_amount(taxable_amount)
    if taxable_value is None:
        logger.info("vat_input_rejected", mode=EXCLUSIVE)
        return CalculationError(error_message="Please input a valid taxable amount")

    with working_context():
        nhil, getfund, vat = _levies(taxable_value)
        final_cost = taxable_value + nhil + getfund + vat
    return VATCalculationResult(
        taxable_value=to_fixed(taxable_value),
        nhil=to_fixed(nhil),
        getfund=to_fixed(getfund),
        vat=to_fixed(vat),
        final_cost=to_fixed(final_cost),
        mode=EXCLUSIVE,
    )


def calculate_vat_inclusive(final_amount: Number) -> VATOutcome:
    """Treat ``final_amount`` as the tax-inclusive total and back out the base."""
    final_cost = parse_amount(final_amount)
    if final_cost is None:
        logger.info("vat_input_rejected", mode=INCLUSIVE)
        return CalculationError(error_message="Please input a valid final cost amount")

    with working_context():
        taxable_value = final_cost * HUNDRED / (HUNDRED + TOTAL_TAX_RATE)
        nhil, getfund, vat = _levies(taxable_value)
    return VATCalculationResult(
        taxable_value=to_fixed(taxable_value),
        nhil=to_fixed(nhil),
        getfund=to_fixed(getfund),
        vat=to_fixed(vat),
        final_cost=to_fixed(final_cost),
        mode=INCLUSIVE,
    )


def calculate_vat(amount: Number, mode: str = EXCLUSIVE) -> VATOutcome:
    if mode == EXCLUSIVE:
        return calculate_vat_exclusive(amount)
    if mode == INCLUSIVE:
        return calculate_vat_inclusive(amount)
    raise ValueError(f"Unknown VAT mode {mode!r}; expected one of {', '.join(MODES)}")
