"""Ghana PAYE, SSNIT and VAT calculation engines."""

__version__ = "0.3.0"
