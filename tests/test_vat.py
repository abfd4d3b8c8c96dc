from decimal import Decimal

import pytest

from ghtax.models import CalculationError, VATCalculationResult
from ghtax.vat import calculate_vat, calculate_vat_exclusive, calculate_vat_inclusive


def test_exclusive_adds_levies_on_top():
    result = calculate_vat_exclusive("1000")

    assert result == VATCalculationResult(
        taxable_value="1000.00",
        nhil="25.00",
        getfund="25.00",
        vat="150.00",
        final_cost="1200.00",
        mode="exclusive",
    )


def test_inclusive_backs_out_taxable_value():
    result = calculate_vat_inclusive("1200")

    assert result == VATCalculationResult(
        taxable_value="1000.00",
        nhil="25.00",
        getfund="25.00",
        vat="150.00",
        final_cost="1200.00",
        mode="inclusive",
    )


def test_inclusive_rounds_each_levy_from_exact_base():
    result = calculate_vat_inclusive("100")

    assert result.taxable_value == "83.33"
    assert result.nhil == "2.08"
    assert result.getfund == "2.08"
    assert result.vat == "12.50"
    assert result.final_cost == "100.00"


def test_blank_amount_is_zero():
    result = calculate_vat_exclusive("")

    assert result.final_cost == "0.00"
    assert result.taxable_value == "0.00"


def test_grouping_commas_are_ignored():
    assert calculate_vat_exclusive("1,000").final_cost == "1200.00"


def test_negative_exclusive_amount_is_an_error_value():
    assert calculate_vat_exclusive("-50") == CalculationError(error_message="Please input a valid taxable amount")


def test_text_inclusive_amount_is_an_error_value():
    assert calculate_vat_inclusive("abc") == CalculationError(error_message="Please input a valid final cost amount")


@pytest.mark.parametrize("amount", ["0", "1", "19.99", "1000", "123456.78"])
def test_exclusive_final_cost_is_twenty_percent_more(amount):
    expected = (Decimal(amount) * Decimal("1.20")).quantize(Decimal("0.01"))

    assert Decimal(calculate_vat_exclusive(amount).final_cost) == expected


@pytest.mark.parametrize("amount", ["0", "1", "19.99", "1000", "123456.78"])
def test_inclusive_recovers_exclusive_base(amount):
    final_cost = calculate_vat_exclusive(amount).final_cost

    recovered = Decimal(calculate_vat_inclusive(final_cost).taxable_value)

    assert abs(recovered - Decimal(amount)) <= Decimal("0.01")


def test_calculate_vat_dispatches_on_mode():
    assert calculate_vat("1200", "inclusive").taxable_value == "1000.00"
    assert calculate_vat("1000").mode == "exclusive"
    with pytest.raises(ValueError):
        calculate_vat("1000", "compound")


def test_exclusive_handles_amounts_beyond_default_decimal_precision():
    result = calculate_vat_exclusive("1" + "0" * 26)

    assert result == VATCalculationResult(
        taxable_value="100000000000000000000000000.00",
        nhil="2500000000000000000000000.00",
        getfund="2500000000000000000000000.00",
        vat="15000000000000000000000000.00",
        final_cost="120000000000000000000000000.00",
        mode="exclusive",
    )


def test_inclusive_handles_amounts_beyond_default_decimal_precision():
    result = calculate_vat_inclusive("1" + "0" * 26)

    assert isinstance(result, VATCalculationResult)
    assert result.taxable_value == "83333333333333333333333333.33"
    assert result.vat == "12500000000000000000000000.00"
    assert result.final_cost == "100000000000000000000000000.00"
