from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from .money import ZERO, Number

POSITIVE_NUMBER = re.compile(r"^[+]?([0-9]+(?:[.][0-9]*)?|\.[0-9]+)$")


def normalize_amount(raw: Optional[Number]) -> str:
    """Turn caller input into the bare digit string the pattern checks."""
    if raw is None:
        return ""
    if isinstance(raw, bool):
        # bool is an int subclass; never a money amount
        return "invalid"
    if isinstance(raw, (int, float, Decimal)):
        raw = str(raw)
    return raw.strip().replace(",", "")


def parse_amount(raw: Optional[Number]) -> Optional[Decimal]:
    """Return the amount as a Decimal, zero for blank input, or None when invalid.

    Negative values, scientific notation and text are all invalid. Malformed
    input is an expected outcome, so this never raises.
    """
    text = normalize_amount(raw)
    if text == "":
        return ZERO
    if not POSITIVE_NUMBER.match(text):
        return None
    try:
        return Decimal(text.lstrip("+"))
    except InvalidOperation:
        return None


def is_valid_amount(raw: Optional[Number]) -> bool:
    return parse_amount(raw) is not None
