from decimal import Decimal

import pytest

from reducing_loan.utils import InvalidInput, format_amount, parse_whole_number


@pytest.mark.parametrize(
    "raw, expected",
    [
        (120000, 120000),
        ("120000", 120000),
        (" 120,000 ", 120000),
        ("1_000", 1000),
        ("12.0", 12),
        (12.0, 12),
        (Decimal("500000"), 500000),
        ("-7", -7),
        ("+7", 7),
    ],
)
def test_parse_whole_number_accepts(raw, expected):
    assert parse_whole_number(raw, "principal") == expected


@pytest.mark.parametrize(
    "raw, kind",
    [
        (None, "missing"),
        ("", "missing"),
        ("   ", "missing"),
        ("abc", "not_numeric"),
        ("12abc", "not_numeric"),
        ("1e3", "not_numeric"),
        ("1E2", "not_numeric"),
        ("2E1", "not_numeric"),
        ("1e9999999", "not_numeric"),
        ("12.", "not_numeric"),
        ("0x10", "not_numeric"),
        ("nan", "not_numeric"),
        (float("nan"), "not_numeric"),
        (float("inf"), "not_numeric"),
        (Decimal("Infinity"), "not_numeric"),
        (True, "not_numeric"),
        ([12], "not_numeric"),
        ("12.5", "not_integer"),
        (0.25, "not_integer"),
    ],
)
def test_parse_whole_number_rejects(raw, kind):
    with pytest.raises(InvalidInput) as exc_info:
        parse_whole_number(raw, "duration_months")

    assert exc_info.value.kind == kind
    assert exc_info.value.field == "duration_months"
    assert exc_info.value.message.startswith("Duration")


def test_invalid_input_is_a_value_error():
    assert issubclass(InvalidInput, ValueError)


def test_format_amount():
    assert format_amount(1234567) == "1,234,567"
    assert format_amount(120000, "₦") == "₦120,000"
    assert format_amount(0, "", " zł") == "0 zł"
