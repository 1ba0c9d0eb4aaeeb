import datetime
import logging
import shlex
import subprocess
import typing

import pydantic

from hledger_import.data_types import (
    Amount,
    HledgerConfig,
    LedgerJsonAmount,
    LedgerJsonTransaction,
    LedgerJsonTransactions,
)
from hledger_import.errors import QueryError, StringConversionError
from hledger_import.utils import decimal_from_mantissa, format_date

logger = logging.getLogger(__name__)

# (payee substring, account, begin, end) -> transactions found in the ledger
LedgerQuery = typing.Callable[
    [str, str, datetime.date | None, datetime.date | None],
    list[LedgerJsonTransaction],
]


def run_hledger(
    config: HledgerConfig, args: list[str], input_text: str | None = None
) -> str:
    """Run hledger with the given arguments and return its standard output"""
    cmd = [config.path, *args]
    logger.debug("Running %s", shlex.join(cmd))
    try:
        result = subprocess.run(
            cmd,
            input=input_text.encode("utf8") if input_text is not None else None,
            capture_output=True,
            timeout=config.timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise QueryError(
            f"{config.path} did not finish within {config.timeout} seconds"
        ) from exc
    except OSError as exc:
        raise QueryError(f"could not execute {config.path}: {exc}") from exc

    if result.returncode != 0:
        stderr = result.stderr.decode("utf8", errors="replace").strip()
        raise QueryError(stderr or f"{config.path} exited with {result.returncode}")

    try:
        return result.stdout.decode("utf8")
    except UnicodeDecodeError as exc:
        raise StringConversionError(str(exc)) from exc


def query_by_payee_and_account(
    config: HledgerConfig,
    payee: str,
    account: str,
    begin: datetime.date | None = None,
    end: datetime.date | None = None,
) -> list[LedgerJsonTransaction]:
    args = ["print", "-O", "json", f"payee:{payee}"]
    if begin is not None:
        args.extend(["-b", format_date(begin)])
    if end is not None:
        args.extend(["-e", format_date(end)])
    args.append(account)

    output = run_hledger(config, args)
    try:
        return LedgerJsonTransactions.validate_json(output)
    except pydantic.ValidationError as exc:
        raise QueryError(str(exc)) from exc


def make_query(config: HledgerConfig) -> LedgerQuery:
    def query(
        payee: str,
        account: str,
        begin: datetime.date | None,
        end: datetime.date | None,
    ) -> list[LedgerJsonTransaction]:
        return query_by_payee_and_account(
            config, payee=payee, account=account, begin=begin, end=end
        )

    return query


def to_amount(amount: LedgerJsonAmount) -> Amount:
    return Amount(
        value=decimal_from_mantissa(
            amount.aquantity.decimal_mantissa, amount.aquantity.decimal_places
        ),
        commodity=amount.acommodity,
    )


def get_codes(
    config: HledgerConfig, accounts: typing.Iterable[str] | None = None
) -> set[str]:
    """Codes of all transactions already recorded, optionally limited to some accounts"""
    output = run_hledger(config, ["codes", *(accounts or ())])
    return {line.strip() for line in output.splitlines() if line.strip()}


def format_transactions(
    config: HledgerConfig,
    transactions: str,
    commodity_formatting_rules: list[str] | None = None,
) -> str:
    args = ["print", "-x", "-f-"]
    if commodity_formatting_rules:
        args.append("--round=soft")
        for rule in commodity_formatting_rules:
            args.extend(["-c", rule])
    return run_hledger(config, args, input_text=transactions)
