from decimal import Decimal

import pytest

from ghtax.calculator import PAYECalculator
from ghtax.exceptions import UnsupportedTaxYear
from ghtax.models import AllowanceItem, CalculationError, DeductionItem, PAYERequest, TaxCalculationResult
from ghtax.tax_tables import default_registry


def build_calculator() -> PAYECalculator:
    return PAYECalculator(default_registry())


def test_basic_income_walks_brackets_and_ssnit():
    result = build_calculator().calculate("1000", ssnit_enabled=True, year="2024")

    assert isinstance(result, TaxCalculationResult)
    assert [(e.amount_taxed, e.tax_rate, e.tax_amount) for e in result.computation_breakdown] == [
        ("490.00", "0", "0.00"),
        ("110.00", "5", "5.50"),
        ("130.00", "10", "13.00"),
        ("270.00", "17.5", "47.25"),
    ]
    assert result.income_tax == "65.75"
    ssnit = result.ssnit_breakdown
    assert ssnit.employee_rate == "5.5"
    assert ssnit.employer_rate == "13"
    assert ssnit.base_amount == "1000.00"
    assert ssnit.employee_contribution == "55.00"
    assert ssnit.employer_contribution == "130.00"
    assert ssnit.total_contribution == "185.00"
    assert ssnit.tier1_payable == "135.00"
    assert ssnit.tier2_payable == "50.00"
    assert result.net_income == "879.25"


def test_zero_income_boundary():
    result = build_calculator().calculate("0", "", "", ssnit_enabled=True, year="2024")

    assert result.income_tax == "0.00"
    assert result.net_income == "0.00"
    assert result.ssnit_breakdown.total_contribution == "0.00"
    assert result.computation_breakdown == ()


def test_allowances_and_deductions_compose_pay():
    result = build_calculator().calculate(
        "3000",
        aggregate_allowances="500",
        ssnit_enabled=False,
        year="2024",
        deductions=[DeductionItem("Loan", "300")],
        allowances=[AllowanceItem("Transport", "200", taxable=True), AllowanceItem("Meal", "100", taxable=False)],
    )

    assert result.total_taxable_allowances == "700.00"
    assert result.total_non_taxable_allowances == "100.00"
    assert result.total_deductions == "300.00"
    assert result.gross_taxable_pay == "3700.00"
    assert result.income_tax == "538.25"
    assert result.ssnit_breakdown.total_contribution == "0.00"
    assert result.net_income == "2961.75"


def test_employer_ssnit_does_not_reduce_net_income():
    with_ssnit = build_calculator().calculate("1000", ssnit_enabled=True, year="2024")
    without_ssnit = build_calculator().calculate("1000", ssnit_enabled=False, year="2024")

    difference = Decimal(without_ssnit.net_income) - Decimal(with_ssnit.net_income)
    assert difference == Decimal(with_ssnit.ssnit_breakdown.employee_contribution)


def test_absenteeism_prorates_basic_pay():
    result = build_calculator().calculate(
        "2200", ssnit_enabled=True, year="2024", working_days="22", missed_days="2"
    )

    assert result.absenteeism_deduction == "200.00"
    assert result.gross_taxable_pay == "2000.00"
    assert result.income_tax == "240.75"
    assert result.ssnit_breakdown.base_amount == "2200.00"
    assert result.net_income == "1638.25"


def test_working_days_default_to_22():
    result = build_calculator().calculate("2200", ssnit_enabled=False, year="2024", missed_days="1")

    assert result.absenteeism_deduction == "100.00"


def test_relief_above_gross_pay_clamps_taxable_income():
    result = build_calculator().calculate("500", tax_relief="1000", ssnit_enabled=True, year="2024")

    assert result.taxable_income == "0.00"
    assert result.income_tax == "0.00"
    assert result.computation_breakdown == ()
    assert result.net_income == "472.50"


def test_top_bracket_is_unbounded():
    result = build_calculator().calculate("60000", ssnit_enabled=False, year="2024")

    assert len(result.computation_breakdown) == 7
    assert result.computation_breakdown[-1].amount_taxed == "10000.00"
    assert result.computation_breakdown[-1].tax_rate == "35"
    assert result.income_tax == "17103.67"


@pytest.mark.parametrize("income", ["0", "489.99", "1000", "1234.57", "3896.67", "25000.13", "75000"])
def test_breakdown_adds_up_to_income_tax(income):
    result = build_calculator().calculate(income, aggregate_allowances="123.45", year="2024")

    total = sum((Decimal(e.tax_amount) for e in result.computation_breakdown), Decimal("0"))
    assert total == Decimal(result.income_tax)


def test_ssnit_tiers_add_up_with_odd_cents():
    ssnit = build_calculator().calculate("1000.10", ssnit_enabled=True, year="2024").ssnit_breakdown

    employee = Decimal(ssnit.employee_contribution)
    employer = Decimal(ssnit.employer_contribution)
    total = Decimal(ssnit.total_contribution)
    assert employee + employer == total
    assert Decimal(ssnit.tier1_payable) + Decimal(ssnit.tier2_payable) == total


def test_income_tax_is_monotonic_in_basic_income():
    calc = build_calculator()
    previous = Decimal("-1")
    for step in range(0, 60001, 750):
        tax = Decimal(calc.calculate(str(step), ssnit_enabled=False, year="2024").income_tax)
        assert tax >= previous
        previous = tax


def test_tax_years_change_output():
    calc = build_calculator()

    result_2022 = calc.calculate("1000", ssnit_enabled=False, year="2022")
    result_2024 = calc.calculate("1000", ssnit_enabled=False, year="2024")

    assert result_2022.income_tax == "87.63"
    assert result_2022.income_tax != result_2024.income_tax
    assert result_2022.year == "2022"


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"basic_income": "-50"}, "Please input valid amounts"),
        ({"basic_income": "abc"}, "Please input valid amounts"),
        ({"basic_income": "100", "tax_relief": "1e3"}, "Please input valid amounts"),
        (
            {"basic_income": "100", "deductions": [DeductionItem("Loan", "ten")]},
            'Please input a valid amount for "Loan"',
        ),
        (
            {"basic_income": "100", "allowances": [AllowanceItem("Fuel", "-1")]},
            'Please input a valid amount for "Fuel"',
        ),
        ({"basic_income": "100", "working_days": "x"}, "Please input valid working days"),
        ({"basic_income": "100", "missed_days": "x"}, "Please input valid missed days"),
        ({"basic_income": "100", "working_days": "0"}, "Working days must be greater than zero"),
        ({"basic_income": "100", "working_days": "3", "missed_days": "5"}, "Missed days cannot exceed working days"),
    ],
)
def test_invalid_input_returns_error_value(kwargs, message):
    result = build_calculator().calculate(year="2024", **kwargs)

    assert result == CalculationError(error_message=message)


def test_unsupported_year_raises():
    with pytest.raises(UnsupportedTaxYear):
        build_calculator().calculate("1000", year="1999")


def test_calculate_employee_uses_request_fields():
    request = PAYERequest(
        employee_id="emp1",
        basic_income="2,200",
        ssnit_enabled=False,
        year="2024",
        missed_days="2",
        working_days="22",
    )

    result = build_calculator().calculate_employee(request)

    assert result.absenteeism_deduction == "200.00"
    assert result.ssnit_breakdown.employee_contribution == "0.00"


def test_deductions_above_pay_floor_net_income_at_zero():
    result = build_calculator().calculate("1000", year="2024", deductions=[DeductionItem("Loan", "5000")])

    assert isinstance(result, TaxCalculationResult)
    assert result.total_deductions == "5000.00"
    assert result.net_income == "0.00"
    assert result.income_tax == "65.75"


def test_request_without_year_uses_latest_table():
    calc = build_calculator()

    result = calc.calculate_employee(PAYERequest(basic_income="1000"))

    assert result.year == calc.registry.latest_year() == "2024"


def test_amounts_beyond_default_decimal_precision_keep_their_cents():
    result = build_calculator().calculate("1" + "0" * 26, ssnit_enabled=False, year="2024")

    assert isinstance(result, TaxCalculationResult)
    assert result.computation_breakdown[-1].amount_taxed == "99999999999999999999950000.00"
    assert result.income_tax == "34999999999999999999996103.67"
    assert result.net_income == "65000000000000000000003896.33"
    assert sum(Decimal(e.tax_amount) for e in result.computation_breakdown) == Decimal(result.income_tax)
