from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from .exceptions import TaxTableError, UnsupportedTaxYear
from .logging import get_logger
from .money import ZERO, to_decimal

DEFAULT_TABLES_DIR = Path(__file__).resolve().parent / "data" / "tax_tables"

logger = get_logger(__name__)


@dataclass(frozen=True)
class TaxBracket:
    upper_bound: Optional[Decimal]  # None means unbounded
    rate: Decimal

    @property
    def unbounded(self) -> bool:
        return self.upper_bound is None


@dataclass(frozen=True)
class SSNITRates:
    employee_rate: Decimal
    employer_rate: Decimal
    tier1_rate: Decimal
    tier2_rate: Decimal

    @property
    def total_rate(self) -> Decimal:
        return self.employee_rate + self.employer_rate


@dataclass(frozen=True)
class TaxTable:
    year: str
    brackets: Tuple[TaxBracket, ...]
    ssnit: SSNITRates
    description: str = ""
    effective_from: str = ""

    def bands(self) -> Iterator[Tuple[Decimal, Optional[Decimal], Decimal]]:
        """Yield ``(lower, width, rate)`` per bracket; width is None for the last one."""
        lower = ZERO
        for bracket in self.brackets:
            if bracket.unbounded:
                yield lower, None, bracket.rate
                return
            yield lower, bracket.upper_bound - lower, bracket.rate
            lower = bracket.upper_bound


def validate_brackets(year: str, brackets: List[TaxBracket]) -> None:
    if not brackets:
        raise TaxTableError(f"Tax table {year} has no PAYE brackets")
    if not brackets[-1].unbounded:
        raise TaxTableError(f"Tax table {year}: the final bracket must be unbounded")
    previous_bound = ZERO
    previous_rate = ZERO
    for index, bracket in enumerate(brackets):
        if bracket.rate < 0:
            raise TaxTableError(f"Tax table {year}: bracket {index} has a negative rate")
        if bracket.rate < previous_rate:
            raise TaxTableError(f"Tax table {year}: bracket {index} rate is lower than the previous bracket")
        previous_rate = bracket.rate
        if bracket.unbounded:
            if index != len(brackets) - 1:
                raise TaxTableError(f"Tax table {year}: only the final bracket may be unbounded")
            continue
        if bracket.upper_bound <= previous_bound:
            raise TaxTableError(f"Tax table {year}: bracket bounds must be strictly increasing")
        previous_bound = bracket.upper_bound


def validate_ssnit(year: str, rates: SSNITRates) -> None:
    for name in ("employee_rate", "employer_rate", "tier1_rate", "tier2_rate"):
        if getattr(rates, name) < 0:
            raise TaxTableError(f"Tax table {year}: SSNIT {name} is negative")
    if rates.tier1_rate + rates.tier2_rate != rates.total_rate:
        raise TaxTableError(
            f"Tax table {year}: SSNIT tiers ({rates.tier1_rate} + {rates.tier2_rate}) "
            f"do not add up to the total contribution rate {rates.total_rate}"
        )


def table_from_dict(data: dict) -> TaxTable:
    year = str(data["year"])
    try:
        brackets = [
            TaxBracket(
                upper_bound=None if row.get("up_to") is None else to_decimal(row["up_to"]),
                rate=to_decimal(row["rate"]),
            )
            for row in data["paye"]["brackets"]
        ]
        ssnit_cfg = data["ssnit"]
        ssnit = SSNITRates(
            employee_rate=to_decimal(ssnit_cfg["employee_rate"]),
            employer_rate=to_decimal(ssnit_cfg["employer_rate"]),
            tier1_rate=to_decimal(ssnit_cfg["tier1_rate"]),
            tier2_rate=to_decimal(ssnit_cfg["tier2_rate"]),
        )
    except KeyError as exc:
        raise TaxTableError(f"Tax table {year} is missing field {exc}") from exc
    validate_brackets(year, brackets)
    validate_ssnit(year, ssnit)
    return TaxTable(
        year=year,
        brackets=tuple(brackets),
        ssnit=ssnit,
        description=data.get("description", ""),
        effective_from=data.get("effective_from", ""),
    )


class TaxTableRepository:
    def __init__(self, base_path: Path):
        self.base_path = Path(base_path)

    def available_versions(self) -> List[str]:
        return sorted([p.stem for p in self.base_path.glob("*.json")])

    def load(self, year: str) -> TaxTable:
        file_path = self.base_path / f"{year}.json"
        if not file_path.exists():
            raise UnsupportedTaxYear(year, self.available_versions())
        with file_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle, parse_float=Decimal, parse_int=Decimal)
        if str(data.get("year")) != year:
            raise TaxTableError(f"{file_path.name} declares year {data.get('year')}, expected {year}")
        return table_from_dict(data)


class RateTableRegistry:
    """Read-only, year-keyed collection of tax tables.

    Built once and shared; nothing mutates it after construction, so any
    number of threads or request handlers may call :meth:`lookup`.
    """

    def __init__(self, tables: Mapping[str, TaxTable]):
        self._tables = MappingProxyType(dict(tables))

    @classmethod
    def from_repository(cls, repo: TaxTableRepository) -> "RateTableRegistry":
        tables: Dict[str, TaxTable] = {}
        for year in repo.available_versions():
            tables[year] = repo.load(year)
        logger.info("tax_tables_loaded", path=str(repo.base_path), years=sorted(tables))
        return cls(tables)

    @classmethod
    def from_directory(cls, base_path: Path) -> "RateTableRegistry":
        return cls.from_repository(TaxTableRepository(base_path))

    def lookup(self, year: str) -> TaxTable:
        key = str(year)
        try:
            return self._tables[key]
        except KeyError:
            raise UnsupportedTaxYear(key, self.years()) from None

    def years(self) -> List[str]:
        return sorted(self._tables)

    def latest_year(self) -> str:
        if not self._tables:
            raise UnsupportedTaxYear("latest")
        return self.years()[-1]

    def __contains__(self, year: object) -> bool:
        return str(year) in self._tables

    def __len__(self) -> int:
        return len(self._tables)


def default_registry() -> RateTableRegistry:
    return RateTableRegistry.from_directory(DEFAULT_TABLES_DIR)
