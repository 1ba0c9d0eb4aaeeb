import datetime
import decimal

import pytest

from hledger_import.errors import NumericConversionError
from hledger_import.utils import decimal_from_mantissa
from hledger_import.utils import format_date
from hledger_import.utils import non_empty
from hledger_import.utils import parse_decimal_with_separator
from hledger_import.utils import transaction_hash


@pytest.mark.parametrize(
    "raw, decimal_separator, expected",
    [
        ("1.234,56", ",", "1234.56"),
        ("-3,70", ",", "-3.70"),
        ("22", ",", "22"),
        (" 0,00 ", ",", "0.00"),
        ("-1.000,00", ",", "-1000.00"),
        ("-10.00", ".", "-10.00"),
        ("1,234.5", ".", "1234.5"),
        ("+7", ".", "7"),
    ],
)
def test_parse_decimal_with_separator(raw: str, decimal_separator: str, expected: str):
    result = parse_decimal_with_separator(raw, decimal_separator=decimal_separator)
    assert str(result) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "abc",
        "--1",
        "1e5",
        "12 EUR",
        "1,2,3",
        "1,234.56",
        "1.000,00,5",
    ],
)
def test_parse_decimal_with_separator_invalid(raw: str):
    with pytest.raises(NumericConversionError) as exc_info:
        parse_decimal_with_separator(raw, decimal_separator=",")
    assert exc_info.value.value == raw


@pytest.mark.parametrize("raw", ["1.2.3", "1.234,56", "-0.5,0"])
def test_parse_decimal_with_separator_misplaced_separator(raw: str):
    with pytest.raises(NumericConversionError):
        parse_decimal_with_separator(raw, decimal_separator=".")


@pytest.mark.parametrize(
    "mantissa, places, expected",
    [
        (-2539, 2, "-25.39"),
        (12345678, 8, "0.12345678"),
        (22, 0, "22"),
        (-1, 2, "-0.01"),
    ],
)
def test_decimal_from_mantissa(mantissa: int, places: int, expected: str):
    assert decimal_from_mantissa(mantissa, places) == decimal.Decimal(expected)
    assert str(decimal_from_mantissa(mantissa, places)) == expected


def test_decimal_from_mantissa_negative_places():
    with pytest.raises(NumericConversionError):
        decimal_from_mantissa(1, -2)


def test_transaction_hash():
    values = ["01.03.2024", "10:00:00", "Spotify AB", "-9,99"]
    code = transaction_hash("PAYPAL", values)
    assert code.startswith("PAYPAL_")
    assert len(code) == len("PAYPAL_") + 16
    assert code == transaction_hash("PAYPAL", list(values))
    assert code != transaction_hash("PAYPAL", values[:-1] + ["-9,98"])
    # values are separated, so moving characters between fields changes the code
    assert transaction_hash("X", ["ab", "c"]) != transaction_hash("X", ["a", "bc"])


def test_format_date():
    assert format_date(datetime.date(2024, 1, 5)) == "2024-01-05"


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, None),
        ("", None),
        ("x", "x"),
    ],
)
def test_non_empty(value: str | None, expected: str | None):
    assert non_empty(value) == expected
