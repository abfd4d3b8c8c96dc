from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .calculator import PAYECalculator
from .config import Settings, get_settings
from .csv_io import import_paye_requests
from .exceptions import UnsupportedTaxYear
from .logging import configure_logging
from .models import AllowanceItem, CalculationError, DeductionItem, PreviewTotals, TaxCalculationResult, VATCalculationResult
from .schemas import PreviewOut, TaxCalculationOut, VATCalculationOut
from .tax_tables import RateTableRegistry
from .vat import MODES, calculate_vat
from .wizard import PreviewWizard


def registry_from_settings(settings: Settings) -> RateTableRegistry:
    return RateTableRegistry.from_directory(settings.tax_tables_dir)


def parse_item(value: str) -> tuple[str, str]:
    """Split a ``LABEL=AMOUNT`` option value."""
    label, sep, amount = value.rpartition("=")
    if not sep or not label.strip():
        raise argparse.ArgumentTypeError(f"expected LABEL=AMOUNT, got {value!r}")
    return label.strip(), amount.strip()


def line(label: str, value: str) -> str:
    return f"{label:<26}{value:>12}"


def format_paye(result: TaxCalculationResult, ssnit_enabled: bool) -> str:
    rows = [
        f"PAYE {result.year}",
        line("Net income (take home)", result.net_income),
        line("Income tax", result.income_tax),
        line("SSNIT (employee)", result.ssnit_breakdown.employee_contribution),
        "",
        f"{'Taxable amount':<20}{'Rate':>6}{'Tax due':>12}",
    ]
    for index, entry in enumerate(result.computation_breakdown):
        prefix = "First" if index == 0 else "Next"
        rows.append(f"{prefix:<6}{entry.amount_taxed:>14}{entry.tax_rate + '%':>6}{entry.tax_amount:>12}")
    if not result.computation_breakdown:
        rows.append("(no taxable income)")
    rows.append(f"{'Total':<26}{result.income_tax:>12}")

    if ssnit_enabled:
        ssnit = result.ssnit_breakdown
        rows += [
            "",
            line("SSNIT base amount", ssnit.base_amount),
            line(f"Employee ({ssnit.employee_rate}%)", ssnit.employee_contribution),
            line(f"Employer ({ssnit.employer_rate}%)*", ssnit.employer_contribution),
            line(f"Total ({ssnit.total_rate}%)", ssnit.total_contribution),
            line(f"Tier 1 ({ssnit.tier1_rate}%)", ssnit.tier1_payable),
            line(f"Tier 2 ({ssnit.tier2_rate}%)", ssnit.tier2_payable),
            "* Employer contribution is not deducted from salary",
        ]

    rows += [
        "",
        line("Taxable allowances", result.total_taxable_allowances),
        line("Non-taxable allowances", result.total_non_taxable_allowances),
        line("Deductions", result.total_deductions),
        line("Absenteeism deduction", result.absenteeism_deduction),
    ]
    return "\n".join(rows)


def format_vat(result: VATCalculationResult) -> str:
    rows = [
        f"VAT ({result.mode})",
        line("Taxable value", result.taxable_value),
        line("NHIL (2.5%)", result.nhil),
        line("GETFund (2.5%)", result.getfund),
        line("VAT (15%)", result.vat),
        line("Final cost", result.final_cost),
    ]
    return "\n".join(rows)


def format_preview(totals: PreviewTotals) -> str:
    rows = ["Employee            Net income   Income tax        SSNIT"]
    for employee_id, result in totals.employees.items():
        rows.append(
            f"{employee_id:<16} {result.net_income:>13} {result.income_tax:>12} "
            f"{result.ssnit_breakdown.employee_contribution:>12}"
        )
    rows.append(
        f"{'Total':<16} {totals.total_net_income:>13} {totals.total_income_tax:>12} {totals.ssnit_employee:>12}"
    )
    rows.append(f"Employer SSNIT: {totals.ssnit_employer}")
    for employee_id, message in totals.errors.items():
        rows.append(f"! {employee_id}: {message}")
    return "\n".join(rows)


def fail(message: str, code: int = 1) -> int:
    print(message, file=sys.stderr)
    return code


def cmd_paye(args: argparse.Namespace, settings: Settings) -> int:
    calculator = PAYECalculator(registry_from_settings(settings), settings.default_working_days)
    allowances = [AllowanceItem(label, value, taxable=True) for label, value in args.allowance]
    allowances += [AllowanceItem(label, value, taxable=False) for label, value in args.non_taxable_allowance]
    result = calculator.calculate(
        basic_income=args.basic,
        aggregate_allowances=args.allowances,
        tax_relief=args.relief,
        ssnit_enabled=not args.no_ssnit,
        year=args.year or settings.default_tax_year,
        deductions=[DeductionItem(label, value) for label, value in args.deduction],
        allowances=allowances,
        working_days=args.working_days,
        missed_days=args.missed_days,
    )
    if isinstance(result, CalculationError):
        return fail(result.error_message)
    if args.json:
        print(TaxCalculationOut.model_validate(result).model_dump_json(by_alias=True, indent=2))
    else:
        print(format_paye(result, ssnit_enabled=not args.no_ssnit))
    return 0


def cmd_vat(args: argparse.Namespace, settings: Settings) -> int:
    result = calculate_vat(args.amount, args.mode)
    if isinstance(result, CalculationError):
        return fail(result.error_message)
    if args.json:
        print(VATCalculationOut.model_validate(result).model_dump_json(by_alias=True, indent=2))
    else:
        print(format_vat(result))
    return 0


def cmd_years(args: argparse.Namespace, settings: Settings) -> int:
    registry = registry_from_settings(settings)
    for year in registry.years():
        table = registry.lookup(year)
        marker = "*" if year == settings.default_tax_year else " "
        print(f"{marker} {year}  {table.description}")
    return 0


def cmd_preview(args: argparse.Namespace, settings: Settings) -> int:
    calculator = PAYECalculator(registry_from_settings(settings), settings.default_working_days)
    year = args.year or settings.default_tax_year
    calculator.registry.lookup(year)
    try:
        requests = import_paye_requests(Path(args.path), year=year, ssnit_enabled=not args.no_ssnit)
    except (OSError, ValueError) as exc:
        return fail(str(exc))
    totals = PreviewWizard(calculator).preview(requests)
    if args.json:
        print(PreviewOut.model_validate(totals).model_dump_json(by_alias=True, indent=2))
    else:
        print(format_preview(totals))
    return 1 if totals.errors else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ghtax", description="Ghana PAYE, SSNIT and VAT calculator")
    sub = parser.add_subparsers(dest="command", required=True)

    paye = sub.add_parser("paye", help="Compute PAYE income tax, SSNIT and net income")
    paye.add_argument("basic", help="Monthly basic income")
    paye.add_argument("--allowances", default="", help="Monthly taxable allowances (aggregate)")
    paye.add_argument("--relief", default="", help="Tax relief deducted from the taxable base")
    paye.add_argument("--year", help="Tax year table to use")
    paye.add_argument("--no-ssnit", action="store_true", help="Skip SSNIT contributions")
    paye.add_argument("--deduction", type=parse_item, action="append", default=[], metavar="LABEL=AMOUNT")
    paye.add_argument("--allowance", type=parse_item, action="append", default=[], metavar="LABEL=AMOUNT")
    paye.add_argument(
        "--non-taxable-allowance", type=parse_item, action="append", default=[], metavar="LABEL=AMOUNT"
    )
    paye.add_argument("--working-days", default="", help="Working days in the month (default 22)")
    paye.add_argument("--missed-days", default="", help="Days missed in the month")
    paye.add_argument("--json", action="store_true", help="Emit JSON instead of a table")
    paye.set_defaults(func=cmd_paye)

    vat = sub.add_parser("vat", help="Compute VAT, NHIL and GETFund")
    vat.add_argument("mode", choices=MODES)
    vat.add_argument("amount", help="Taxable amount (exclusive) or final cost (inclusive)")
    vat.add_argument("--json", action="store_true")
    vat.set_defaults(func=cmd_vat)

    years = sub.add_parser("years", help="List supported tax years")
    years.set_defaults(func=cmd_years)

    preview = sub.add_parser("preview", help="Preview PAYE for every employee in a CSV file")
    preview.add_argument("path")
    preview.add_argument("--year")
    preview.add_argument("--no-ssnit", action="store_true", help="Default SSNIT flag when the CSV has no ssnit column")
    preview.add_argument("--json", action="store_true")
    preview.set_defaults(func=cmd_preview)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        return args.func(args, settings)
    except UnsupportedTaxYear as exc:
        return fail(str(exc), code=2)


if __name__ == "__main__":
    sys.exit(main())
