from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple, Union

from .money import Number, format_rate


@dataclass(frozen=True)
class DeductionItem:
    label: str
    value: Number = ""


@dataclass(frozen=True)
class AllowanceItem:
    label: str
    value: Number = ""
    taxable: bool = True


@dataclass(frozen=True)
class PAYERequest:
    basic_income: Number = ""
    aggregate_allowances: Number = ""
    tax_relief: Number = ""
    ssnit_enabled: bool = True
    year: Optional[str] = None
    deductions: Tuple[DeductionItem, ...] = ()
    allowances: Tuple[AllowanceItem, ...] = ()
    working_days: Number = ""
    missed_days: Number = ""
    employee_id: str = ""


@dataclass(frozen=True)
class ComputationBreakdownEntry:
    amount_taxed: str
    tax_rate: str  # percentage, e.g. "17.5"
    tax_amount: str


@dataclass(frozen=True)
class SSNITBreakdown:
    employee_rate: str
    employer_rate: str
    employee_contribution: str
    employer_contribution: str
    total_contribution: str
    base_amount: str
    tier1_rate: str
    tier2_rate: str
    tier1_payable: str
    tier2_payable: str

    @property
    def total_rate(self) -> str:
        return format_rate(Decimal(self.employee_rate) + Decimal(self.employer_rate))


@dataclass(frozen=True)
class TaxCalculationResult:
    net_income: str
    income_tax: str
    ssnit_breakdown: SSNITBreakdown
    computation_breakdown: Tuple[ComputationBreakdownEntry, ...]
    total_deductions: str
    total_taxable_allowances: str
    absenteeism_deduction: str
    total_non_taxable_allowances: str = "0.00"
    gross_taxable_pay: str = "0.00"
    taxable_income: str = "0.00"
    year: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class VATCalculationResult:
    taxable_value: str
    nhil: str
    getfund: str
    vat: str
    final_cost: str
    mode: str  # "exclusive" or "inclusive"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CalculationError:
    error_message: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


PAYEOutcome = Union[TaxCalculationResult, CalculationError]
VATOutcome = Union[VATCalculationResult, CalculationError]


@dataclass
class PreviewTotals:
    employees: Dict[str, TaxCalculationResult] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    gross_taxable_pay: str = "0.00"
    total_net_income: str = "0.00"
    total_income_tax: str = "0.00"
    ssnit_employee: str = "0.00"
    ssnit_employer: str = "0.00"
