from decimal import Decimal

import pytest

from hypercave.utils.formatting import (
    DEFAULT_ICON,
    format_amount,
    icon_url,
    shorten_address,
    truncate_to_decimals,
    validate_amount,
)


def test_shorten_address():
    addr = "account_tdx_2_12ypnf68metvh2jgfp9zd4asc3aha0agjdmnxdzev2pczxl6hz5d20m"
    assert shorten_address(addr) == "account_tdx_...z5d20m"
    assert shorten_address("short") == "short"
    assert shorten_address("") == ""


@pytest.mark.parametrize(
    "amount, expected",
    [
        ("1234567.891", "1,234,567.891"),
        ("0.1234567", "0.123457"),
        ("2.500000", "2.5"),
        (Decimal("1000"), "1,000"),
        ("0.0000001", "< 0.000001"),
        ("0", "0"),
        ("abc", "0"),
        (None, "0"),
        ("-3.5", "-3.5"),
    ],
)
def test_format_amount(amount, expected):
    assert format_amount(amount) == expected


def test_format_amount_respects_max_decimals():
    assert format_amount("3.14159", max_decimals=2) == "3.14"


def test_truncate_to_decimals():
    assert truncate_to_decimals("1.23456", 2) == "1.23"
    assert truncate_to_decimals("1.99", 0) == "1"
    assert truncate_to_decimals("1.", 4) == "1."
    assert truncate_to_decimals("42", 3) == "42"
    assert truncate_to_decimals("", 3) == ""


@pytest.mark.parametrize(
    "value, max_amount, divisibility, error",
    [
        ("", "10", 18, "Amount required"),
        ("   ", "10", 18, "Amount required"),
        ("1e5", "10", 18, "Invalid number"),
        (".", "10", 18, "Invalid number"),
        ("-1", "10", 18, "Invalid number"),
        ("0", "10", 18, "Must be greater than 0"),
        ("0.000", "10", 18, "Must be greater than 0"),
        ("1.5", "10", 0, "Must be a whole number"),
        ("1.123", "10", 2, "Max 2 decimal places"),
        ("10.01", "10", 18, "Exceeds available balance"),
    ],
)
def test_validate_amount_errors(value, max_amount, divisibility, error):
    result = validate_amount(value, max_amount, divisibility)
    assert not result.valid
    assert result.error == error


def test_validate_amount_accepts():
    assert validate_amount("10", "10").valid
    assert validate_amount(".5", "1", 1).valid
    assert validate_amount("999999", None).valid


def test_icon_url():
    assert icon_url("ipfs://bafy123/icon.png") == "https://ipfs.io/ipfs/bafy123/icon.png"
    assert icon_url("https://example.com/i.png") == "https://example.com/i.png"
    assert icon_url(None) == DEFAULT_ICON
    assert DEFAULT_ICON.startswith("data:image/svg+xml,")
