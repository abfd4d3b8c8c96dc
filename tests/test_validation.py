from decimal import Decimal

import pytest

from ghtax.validation import is_valid_amount, parse_amount


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_blank_input_is_zero(raw):
    assert parse_amount(raw) == Decimal("0")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1000", Decimal("1000")),
        ("+12.50", Decimal("12.50")),
        ("1,234.56", Decimal("1234.56")),
        (".5", Decimal("0.5")),
        ("7.", Decimal("7")),
        (250, Decimal("250")),
    ],
)
def test_valid_amounts(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", ["-50", "abc", "1e5", "1.2.3", "12a", "--1", True])
def test_invalid_amounts_return_none(raw):
    assert parse_amount(raw) is None
    assert not is_valid_amount(raw)
