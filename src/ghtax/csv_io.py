from __future__ import annotations

import csv
from pathlib import Path

from .models import PAYERequest

CSV_HEADERS = [
    "employee_id",
    "basic_income",
    "allowances",
    "tax_relief",
    "ssnit",
    "working_days",
    "missed_days",
]

TRUE_VALUES = {"yes", "y", "true", "1"}
FALSE_VALUES = {"no", "n", "false", "0"}


def parse_flag(value: str | None, default: bool) -> bool:
    text = (value or "").strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    return default


def import_paye_requests(path: Path, year: str, ssnit_enabled: bool = True) -> list[PAYERequest]:
    requests: list[PAYERequest] = []
    with path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        missing = {"employee_id", "basic_income"} - set(reader.fieldnames or [])
        if missing:
            raise ValueError(f"{path} is missing required column(s): {', '.join(sorted(missing))}")
        for row in reader:
            requests.append(
                PAYERequest(
                    employee_id=(row.get("employee_id") or "").strip(),
                    basic_income=row.get("basic_income") or "",
                    aggregate_allowances=row.get("allowances") or "",
                    tax_relief=row.get("tax_relief") or "",
                    ssnit_enabled=parse_flag(row.get("ssnit"), ssnit_enabled),
                    year=year,
                    working_days=row.get("working_days") or "",
                    missed_days=row.get("missed_days") or "",
                )
            )
    return requests
