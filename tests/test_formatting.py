from datetime import date
from decimal import Decimal

import pytest

from formatting import (
    address_lines,
    compact_address,
    format_date,
    format_phone,
    format_quantity,
    money,
    safe_filename,
    to_decimal,
)


@pytest.mark.parametrize("raw,expected", [
    (None, Decimal("0")),
    ("", Decimal("0")),
    ("1,250.50", Decimal("1250.50")),
    ("abc", Decimal("0")),
    (7, Decimal("7")),
])
def test_to_decimal(raw, expected):
    assert to_decimal(raw) == expected


def test_money_formats_with_prefix_and_grouping():
    assert money(Decimal("1234567.5")) == "Rs. 1,234,567.50"
    assert money("0") == "Rs. 0.00"


def test_money_negative_puts_sign_before_prefix():
    assert money(Decimal("-1000")) == "-Rs. 1,000.00"


def test_money_custom_prefix():
    assert money(10, prefix="$") == "$10.00"


def test_format_quantity_drops_trailing_zeros():
    assert format_quantity(Decimal("2.00")) == "2"
    assert format_quantity(Decimal("2.50")) == "2.5"


def test_format_date():
    assert format_date(date(2026, 10, 19)) == "19 Oct 2026"
    assert format_date(None) == ""


def test_format_phone():
    assert format_phone("9876543210") == "98765 43210"
    assert format_phone("+91 98765-43210") == "+91 98765 43210"
    assert format_phone("") == ""


def test_safe_filename_strips_path_characters():
    assert safe_filename('Q/2026:"01"') == "Q202601"
    assert safe_filename("") == "Document"


def test_address_helpers():
    assert address_lines("a\r\n\nb ") == ["a", "b"]
    assert compact_address("a\nb\nc", max_lines=2) == "a, b"
