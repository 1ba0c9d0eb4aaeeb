import datetime
import email.utils
import logging
import typing

from hledger_import import constants
from hledger_import.data_types import Amount, Posting, Tag, Transaction
from hledger_import.utils import format_date

logger = logging.getLogger(__name__)


def amount_to_text(amount: Amount) -> str:
    """Render an amount with grouped thousands and at least two fraction digits.

    e.g. Decimal("-299101.12") EUR renders as "-299.101,12 EUR" and
    Decimal("22") GLD as "22,00 GLD". Fraction digits beyond two are kept.
    """
    sign = "-" if amount.value < 0 else ""
    integer_part, _, fraction = format(abs(amount.value), "f").partition(".")
    grouped = f"{int(integer_part):,}".replace(",", constants.GROUPING_SEPARATOR)
    fraction = fraction.ljust(constants.MIN_FRACTION_DIGITS, "0")
    return (
        f"{sign}{grouped}{constants.DECIMAL_SEPARATOR}{fraction} {amount.commodity}"
    )


def tag_to_text(tag: Tag) -> str:
    if tag.value is None:
        return f"{tag.name}:"
    return f"{tag.name}: {tag.value}"


def comment_lines(comment: str | None, tags: list[Tag]) -> list[str]:
    lines = []
    if comment:
        lines.append(f"{constants.INDENT}; {comment}")
    lines.extend(f"{constants.INDENT}; {tag_to_text(tag)}" for tag in tags)
    return lines


def posting_to_text(posting: Posting) -> str:
    if posting.amount is not None:
        amount = amount_to_text(posting.amount)
        # the last character of the amount lands on the last column
        width = constants.COLUMN_WIDTH - len(constants.INDENT) - len(amount) - 1
        line = f"{constants.INDENT}{posting.account.ljust(width)} {amount}"
    else:
        line = f"{constants.INDENT}{posting.account}"
    return "\n".join([line, *comment_lines(posting.comment, posting.tags)])


def txn_to_text(txn: Transaction) -> str:
    columns = [format_date(txn.date), txn.state.value]
    if txn.code is not None:
        columns.append(f"({txn.code})")
    columns.append(txn.payee)
    if txn.note is not None:
        columns.extend(["|", txn.note])
    return "\n".join(
        [
            " ".join(columns),
            *comment_lines(txn.comment, txn.tags),
            *map(posting_to_text, txn.postings),
        ]
    )


def header_comment_to_text(title: str, now: datetime.datetime | None = None) -> str:
    if now is None:
        now = datetime.datetime.now().astimezone()
    timestamp = email.utils.format_datetime(now)
    gap = " " * max(constants.COLUMN_WIDTH - len(title) - len(timestamp) - 2, 1)
    return "\n".join(
        [
            f"; {constants.HEADER_RULE}",
            f"; {title}{gap}{timestamp}",
            f"; {constants.HEADER_RULE}",
        ]
    )


def filter_known_codes(
    transactions: typing.Iterable[Transaction], known_codes: typing.Collection[str]
) -> list[Transaction]:
    """Drop transactions already recorded in the ledger, uncoded ones are always kept"""
    result = []
    for txn in transactions:
        if txn.code is not None and txn.code in known_codes:
            logger.debug("Skipping already imported transaction %s", txn.code)
            continue
        result.append(txn)
    return result


def generate_output(
    transactions: list[Transaction],
    title: str,
    format_text: typing.Callable[[str], str],
    known_codes: typing.Collection[str] | None = None,
    now: datetime.datetime | None = None,
) -> str:
    if known_codes is not None:
        transactions = filter_known_codes(transactions, known_codes)
    logger.info("Formatting %s transactions", len(transactions))
    text = "\n\n".join(map(txn_to_text, transactions))
    formatted = format_text(text)
    return f"{header_comment_to_text(title, now=now)}\n\n{formatted}"
