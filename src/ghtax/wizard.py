from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable

from .calculator import PAYECalculator
from .logging import get_logger
from .models import CalculationError, PAYERequest, PreviewTotals, TaxCalculationResult
from .money import ZERO, to_fixed, working_context

logger = get_logger(__name__)


class PreviewWizard:
    def __init__(self, calculator: PAYECalculator):
        self.calculator = calculator

    def preview(self, requests: Iterable[PAYERequest]) -> PreviewTotals:
        employee_results: Dict[str, TaxCalculationResult] = {}
        errors: Dict[str, str] = {}
        totals = {
            "gross": ZERO,
            "net": ZERO,
            "tax": ZERO,
            "ssnit_employee": ZERO,
            "ssnit_employer": ZERO,
        }

        for index, request in enumerate(requests, start=1):
            employee_id = request.employee_id or f"row-{index}"
            result = self.calculator.calculate_employee(request)
            if isinstance(result, CalculationError):
                errors[employee_id] = result.error_message
                continue
            employee_results[employee_id] = result
            with working_context():
                totals["gross"] += Decimal(result.gross_taxable_pay)
                totals["net"] += Decimal(result.net_income)
                totals["tax"] += Decimal(result.income_tax)
                totals["ssnit_employee"] += Decimal(result.ssnit_breakdown.employee_contribution)
                totals["ssnit_employer"] += Decimal(result.ssnit_breakdown.employer_contribution)

        logger.info("preview_complete", employees=len(employee_results), errors=len(errors))
        return PreviewTotals(
            employees=employee_results,
            errors=errors,
            gross_taxable_pay=to_fixed(totals["gross"]),
            total_net_income=to_fixed(totals["net"]),
            total_income_tax=to_fixed(totals["tax"]),
            ssnit_employee=to_fixed(totals["ssnit_employee"]),
            ssnit_employer=to_fixed(totals["ssnit_employer"]),
        )
