from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import AllowanceItem, DeductionItem, PAYERequest


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class DeductionIn(CamelModel):
    label: str = ""
    value: str = ""


class AllowanceIn(CamelModel):
    label: str = ""
    value: str = ""
    taxable: bool = True


class PAYERequestIn(CamelModel):
    monthly_basic_income: str = ""
    monthly_allowances: str = ""
    tax_relief: str = ""
    ssnit_enabled: bool = True
    year: str | None = None
    deductions: list[DeductionIn] = Field(default_factory=list)
    allowances: list[AllowanceIn] = Field(default_factory=list)
    working_days: str = ""
    missed_days: str = ""

    def to_request(self, default_year: str) -> PAYERequest:
        return PAYERequest(
            basic_income=self.monthly_basic_income,
            aggregate_allowances=self.monthly_allowances,
            tax_relief=self.tax_relief,
            ssnit_enabled=self.ssnit_enabled,
            year=self.year or default_year,
            deductions=tuple(DeductionItem(label=d.label, value=d.value) for d in self.deductions),
            allowances=tuple(AllowanceItem(label=a.label, value=a.value, taxable=a.taxable) for a in self.allowances),
            working_days=self.working_days,
            missed_days=self.missed_days,
        )


class VATRequestIn(CamelModel):
    amount: str = ""


class ComputationBreakdownOut(CamelModel):
    amount_taxed: str
    tax_rate: str
    tax_amount: str


class SSNITBreakdownOut(CamelModel):
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


class TaxCalculationOut(CamelModel):
    net_income: str
    income_tax: str
    ssnit_breakdown: SSNITBreakdownOut
    computation_breakdown: list[ComputationBreakdownOut]
    total_deductions: str
    total_taxable_allowances: str
    total_non_taxable_allowances: str
    absenteeism_deduction: str
    gross_taxable_pay: str
    taxable_income: str
    year: str


class VATCalculationOut(CamelModel):
    taxable_value: str
    nhil: str
    getfund: str
    vat: str
    final_cost: str
    mode: Literal["exclusive", "inclusive"]


class CalculationErrorOut(CamelModel):
    error_message: str


class TaxYearOut(CamelModel):
    year: str
    description: str
    effective_from: str


class PreviewOut(CamelModel):
    employees: dict[str, TaxCalculationOut]
    errors: dict[str, str]
    gross_taxable_pay: str
    total_net_income: str
    total_income_tax: str
    ssnit_employee: str
    ssnit_employer: str
