class GhtaxError(Exception):
    """Base class for configuration faults raised by the engines."""


class UnsupportedTaxYear(GhtaxError, LookupError):
    def __init__(self, year: str, available=()):
        self.year = year
        self.available = list(available)
        supported = ", ".join(self.available) or "none"
        super().__init__(f"Tax year {year} is not supported (available: {supported})")


class TaxTableError(GhtaxError, ValueError):
    """Raised when a tax table file breaks a bracket or SSNIT invariant."""
