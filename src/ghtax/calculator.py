from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from .logging import get_logger
from .models import (
    AllowanceItem,
    CalculationError,
    ComputationBreakdownEntry,
    DeductionItem,
    PAYEOutcome,
    PAYERequest,
    SSNITBreakdown,
    TaxCalculationResult,
)
from .money import ZERO, Number, format_rate, percent_of, quantize, to_fixed, working_context
from .tax_tables import RateTableRegistry, SSNITRates, TaxTable
from .validation import normalize_amount, parse_amount

GENERIC_INPUT_ERROR = "Please input valid amounts"
DEFAULT_WORKING_DAYS = 22

logger = get_logger(__name__)


class _Rejected(Exception):
    """Internal signal carrying the user-facing message for invalid input."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass
class PAYEInputs:
    basic_income: Decimal
    aggregate_allowances: Decimal
    tax_relief: Decimal
    working_days: Decimal
    missed_days: Decimal
    deductions: List[Tuple[str, Decimal]]
    taxable_allowances: List[Tuple[str, Decimal]]
    non_taxable_allowances: List[Tuple[str, Decimal]]


def _require(raw: Number, message: str) -> Decimal:
    value = parse_amount(raw)
    if value is None:
        raise _Rejected(message)
    return value


def _item_message(label: str) -> str:
    return f'Please input a valid amount for "{label}"' if label else GENERIC_INPUT_ERROR


class PAYECalculator:
    def __init__(self, registry: RateTableRegistry, default_working_days: int = DEFAULT_WORKING_DAYS):
        self.registry = registry
        self.default_working_days = Decimal(default_working_days)

    def _parse_inputs(
        self,
        basic_income: Number,
        aggregate_allowances: Number,
        tax_relief: Number,
        deductions: Sequence[DeductionItem],
        allowances: Sequence[AllowanceItem],
        working_days: Number,
        missed_days: Number,
    ) -> PAYEInputs:
        basic = _require(basic_income, GENERIC_INPUT_ERROR)
        aggregate = _require(aggregate_allowances, GENERIC_INPUT_ERROR)
        relief = _require(tax_relief, GENERIC_INPUT_ERROR)

        parsed_deductions = [(item.label, _require(item.value, _item_message(item.label))) for item in deductions]
        taxable: List[Tuple[str, Decimal]] = []
        non_taxable: List[Tuple[str, Decimal]] = []
        for item in allowances:
            value = _require(item.value, _item_message(item.label))
            (taxable if item.taxable else non_taxable).append((item.label, value))

        if normalize_amount(working_days) == "":
            working = self.default_working_days
        else:
            working = _require(working_days, "Please input valid working days")
        missed = _require(missed_days, "Please input valid missed days")
        if working <= 0:
            raise _Rejected("Working days must be greater than zero")
        if missed > working:
            raise _Rejected("Missed days cannot exceed working days")

        return PAYEInputs(
            basic_income=basic,
            aggregate_allowances=aggregate,
            tax_relief=relief,
            working_days=working,
            missed_days=missed,
            deductions=parsed_deductions,
            taxable_allowances=taxable,
            non_taxable_allowances=non_taxable,
        )

    @staticmethod
    def _apply_brackets(amount: Decimal, table: TaxTable) -> List[Tuple[Decimal, Decimal, Decimal]]:
        """Split ``amount`` over the progressive brackets.

        Returns ``(amount_taxed, rate, tax)`` for every bracket that absorbed a
        non-zero amount, lowest bracket first. Nothing is rounded here.
        """
        remaining = amount
        entries: List[Tuple[Decimal, Decimal, Decimal]] = []
        for _lower, width, rate in table.bands():
            if remaining <= 0:
                break
            taxed = remaining if width is None else min(remaining, width)
            if taxed > 0:
                entries.append((taxed, rate, percent_of(taxed, rate)))
            remaining -= taxed
        return entries

    @staticmethod
    def _ssnit(base_amount: Decimal, rates: SSNITRates, enabled: bool) -> SSNITBreakdown:
        if not enabled:
            base_amount = ZERO
        employee = quantize(percent_of(base_amount, rates.employee_rate))
        employer = quantize(percent_of(base_amount, rates.employer_rate))
        total = employee + employer
        tier1 = quantize(percent_of(base_amount, rates.tier1_rate))
        # tier 2 takes whatever tier 1 leaves, so the tiers always add up to the total
        tier2 = total - tier1
        return SSNITBreakdown(
            employee_rate=format_rate(rates.employee_rate),
            employer_rate=format_rate(rates.employer_rate),
            employee_contribution=to_fixed(employee),
            employer_contribution=to_fixed(employer),
            total_contribution=to_fixed(total),
            base_amount=to_fixed(base_amount),
            tier1_rate=format_rate(rates.tier1_rate),
            tier2_rate=format_rate(rates.tier2_rate),
            tier1_payable=to_fixed(tier1),
            tier2_payable=to_fixed(tier2),
        )

    def calculate(
        self,
        basic_income: Number,
        aggregate_allowances: Number = "",
        tax_relief: Number = "",
        ssnit_enabled: bool = True,
        year: Optional[str] = None,
        deductions: Sequence[DeductionItem] = (),
        allowances: Sequence[AllowanceItem] = (),
        working_days: Number = "",
        missed_days: Number = "",
    ) -> PAYEOutcome:
        """Compute PAYE, SSNIT and net income for one month of pay.

        Invalid amounts come back as a :class:`CalculationError`; an unknown
        ``year`` raises :class:`~ghtax.exceptions.UnsupportedTaxYear`.
        """
        table = self.registry.lookup(year if year is not None else self.registry.latest_year())

        try:
            inputs = self._parse_inputs(
                basic_income, aggregate_allowances, tax_relief, deductions, allowances, working_days, missed_days
            )
        except _Rejected as rejected:
            logger.info("paye_input_rejected", year=table.year, reason=rejected.message)
            return CalculationError(error_message=rejected.message)

        with working_context():
            return self._compute(table, inputs, ssnit_enabled)

    def _compute(self, table: TaxTable, inputs: PAYEInputs, ssnit_enabled: bool) -> TaxCalculationResult:
        total_taxable_allowances = inputs.aggregate_allowances + sum(
            (value for _, value in inputs.taxable_allowances), ZERO
        )
        total_non_taxable = sum((value for _, value in inputs.non_taxable_allowances), ZERO)
        total_deductions = sum((value for _, value in inputs.deductions), ZERO)

        absenteeism = ZERO
        if inputs.missed_days > 0:
            absenteeism = inputs.basic_income * inputs.missed_days / inputs.working_days

        gross_taxable_pay = inputs.basic_income + total_taxable_allowances - absenteeism
        taxable_income = max(ZERO, gross_taxable_pay - inputs.tax_relief)

        breakdown = []
        income_tax = ZERO
        for taxed, rate, tax in self._apply_brackets(taxable_income, table):
            tax_rounded = quantize(tax)
            income_tax += tax_rounded
            breakdown.append(
                ComputationBreakdownEntry(
                    amount_taxed=to_fixed(taxed),
                    tax_rate=format_rate(rate),
                    tax_amount=to_fixed(tax_rounded),
                )
            )

        ssnit = self._ssnit(inputs.basic_income, table.ssnit, ssnit_enabled)
        employee_contribution = Decimal(ssnit.employee_contribution)

        net_income = (
            inputs.basic_income
            + total_taxable_allowances
            + total_non_taxable
            - income_tax
            - employee_contribution
            - total_deductions
            - absenteeism
        )
        net_income = max(net_income, ZERO)

        logger.debug(
            "paye_calculated",
            year=table.year,
            taxable_income=to_fixed(taxable_income),
            income_tax=to_fixed(income_tax),
            brackets=len(breakdown),
        )

        return TaxCalculationResult(
            net_income=to_fixed(net_income),
            income_tax=to_fixed(income_tax),
            ssnit_breakdown=ssnit,
            computation_breakdown=tuple(breakdown),
            total_deductions=to_fixed(total_deductions),
            total_taxable_allowances=to_fixed(total_taxable_allowances),
            absenteeism_deduction=to_fixed(absenteeism),
            total_non_taxable_allowances=to_fixed(total_non_taxable),
            gross_taxable_pay=to_fixed(gross_taxable_pay),
            taxable_income=to_fixed(taxable_income),
            year=table.year,
        )

    def calculate_employee(self, request: PAYERequest) -> PAYEOutcome:
        return self.calculate(
            basic_income=request.basic_income,
            aggregate_allowances=request.aggregate_allowances,
            tax_relief=request.tax_relief,
            ssnit_enabled=request.ssnit_enabled,
            year=request.year,
            deductions=request.deductions,
            allowances=request.allowances,
            working_days=request.working_days,
            missed_days=request.missed_days,
        )
