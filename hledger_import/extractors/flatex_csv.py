from hledger_import.data_types import Amount, BankRecord, TransactionState
from hledger_import.errors import MissingConfigError
from hledger_import.extractors.base import ExtractorCsvBase
from hledger_import.utils import non_empty, parse_decimal_with_separator


class FlatexCsvExtractor(ExtractorCsvBase):
    name: str = "flatex-csv"
    title: str = "flatex import"
    delimiter: str = ";"
    # the header row of the export is not reliably encoded, columns are positional
    fields: list[str] = [
        "posting_date",
        "valuation_date",
        "recipient_name",
        "recipient_account",
        "transaction_nr",
        "posting_text",
        "amount",
        "currency",
    ]

    def __init__(self, input_file, config):
        super().__init__(input_file, config)
        if config.flatex_csv is None:
            raise MissingConfigError("flatex_csv")
        self.flatex_config = config.flatex_csv

    def process_line(self, lineno: int, line: dict[str, str | None]) -> BankRecord:
        posting_text = non_empty(self.get_field(line, "posting_text").strip())
        return BankRecord(
            extractor=self.name,
            file=self.filename,
            lineno=lineno,
            date=self.parse_date(self.get_field(line, "posting_date")),
            valuation=self.parse_date(self.get_field(line, "valuation_date")),
            code=non_empty(self.get_field(line, "transaction_nr").strip()),
            state=TransactionState.CLEARED,
            amount=Amount(
                value=parse_decimal_with_separator(
                    self.get_field(line, "amount"), decimal_separator=","
                ),
                commodity=self.get_field(line, "currency").strip(),
            ),
            own_account=self.flatex_config.account,
            partner_iban=non_empty(self.get_field(line, "recipient_account").strip()),
            partner_name=non_empty(self.get_field(line, "recipient_name").strip()),
            reference=posting_text,
            note=posting_text,
        )
