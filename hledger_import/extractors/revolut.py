import datetime

from hledger_import.data_types import Amount, BankRecord, Tag, TransactionState
from hledger_import.errors import InputParseError, MissingConfigError
from hledger_import.extractors.base import ExtractorCsvBase
from hledger_import.utils import non_empty, parse_decimal_with_separator

COMPLETED_STATE = "COMPLETED"
TOPUP_TYPE = "TOPUP"


class RevolutCsvExtractor(ExtractorCsvBase):
    name: str = "revolut"
    title: str = "Revolut import"
    date_format: str = "%Y-%m-%d"

    def __init__(self, input_file, config):
        super().__init__(input_file, config)
        if config.revolut is None:
            raise MissingConfigError("revolut")
        self.revolut_config = config.revolut

    def parse_day(self, value: str) -> datetime.date:
        # timestamps look like "2024-01-31 10:15:02", only the day is used
        if len(value) < 10:
            raise InputParseError(f"invalid date {value!r}")
        return self.parse_date(value[:10])

    def process_line(self, lineno: int, line: dict[str, str | None]) -> BankRecord:
        started_date = self.get_field(line, "Started Date")
        # pending transactions have no completed date yet
        completed_date = line.get("Completed Date") or started_date
        currency = self.get_field(line, "Currency")
        transaction_type = self.get_field(line, "Type")
        if self.get_field(line, "State").upper() == COMPLETED_STATE:
            state = TransactionState.CLEARED
        else:
            state = TransactionState.PENDING
        return BankRecord(
            extractor=self.name,
            file=self.filename,
            lineno=lineno,
            date=self.parse_day(completed_date),
            valuation=self.parse_day(started_date),
            state=state,
            amount=Amount(
                value=parse_decimal_with_separator(self.get_field(line, "Amount")),
                commodity=currency,
            ),
            fee=Amount(
                value=parse_decimal_with_separator(line.get("Fee") or "0"),
                commodity=currency,
            ),
            fee_account=self.revolut_config.fee_account,
            own_account=self.revolut_config.account,
            partner_name=non_empty(self.get_field(line, "Description")),
            is_transfer=transaction_type == TOPUP_TYPE,
            extra_tags=(Tag(name="revolut_type", value=transaction_type),),
        )
