import datetime
import decimal
import hashlib
import re
import typing

from hledger_import import constants
from hledger_import.errors import NumericConversionError

MANTISSA_PATTERN = re.compile(r"^[+-]?[0-9]+$")
GROUPING_CHARS = {
    ".": ",",
    ",": ".",
}


def parse_decimal_with_separator(
    raw: str, decimal_separator: str = "."
) -> decimal.Decimal:
    """Parse a bank formatted number like "-1.234,56" into a decimal.

    The digits after the decimal separator define the scale, grouping
    characters and whitespace are dropped and the rest is parsed as an integer
    mantissa. A second decimal separator or a grouping character within the
    fraction is rejected.
    """
    integer_part, separator, fraction = raw.strip().partition(decimal_separator)
    grouping = GROUPING_CHARS.get(decimal_separator)
    if decimal_separator in fraction or (grouping is not None and grouping in fraction):
        raise NumericConversionError(raw)
    scale = len(fraction) if separator else 0
    value = integer_part + fraction
    if grouping is not None:
        value = value.replace(grouping, "")
    value = "".join(value.split())
    if MANTISSA_PATTERN.match(value) is None:
        raise NumericConversionError(raw)
    return decimal_from_mantissa(int(value), scale)


def decimal_from_mantissa(mantissa: int, places: int) -> decimal.Decimal:
    """Convert a mantissa and its number of decimal places into a decimal"""
    if places < 0:
        raise NumericConversionError(f"{mantissa}E{-places}")
    return decimal.Decimal(mantissa).scaleb(-places)


def transaction_hash(prefix: str, values: typing.Iterable[str]) -> str:
    """Stable dedup code for sources that do not provide an id for their records"""
    digest = hashlib.sha256()
    for value in values:
        digest.update(value.encode("utf8"))
        digest.update(b"\x1f")
    return f"{prefix}_{digest.hexdigest()[:16]}"


def format_date(date: datetime.date) -> str:
    return date.strftime(constants.DATE_FORMAT)


def non_empty(value: str | None) -> str | None:
    if not value:
        return None
    return value
