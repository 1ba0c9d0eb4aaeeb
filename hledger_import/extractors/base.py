import csv
import datetime
import typing

from hledger_import.data_types import BankRecord, ImporterConfig
from hledger_import.errors import InputParseError


class ExtractorBase:
    name: str
    """Name of the extractor, stored in the records it produces"""

    title: str
    """Title of the generated ledger output"""

    encoding: str = "utf-8-sig"
    """Encoding of the input file"""

    date_format: str = "%d.%m.%Y"
    """The date format the input file uses"""

    input_file: typing.TextIO
    """The input file to be processed"""

    def __init__(self, input_file: typing.TextIO, config: ImporterConfig):
        self.input_file = input_file
        self.config = config
        self.filename = getattr(input_file, "name", None)

    def parse_date(self, date_str: str) -> datetime.date:
        """
        Parse a date string using the self.date_format
        """
        try:
            return datetime.datetime.strptime(date_str.strip(), self.date_format).date()
        except ValueError as exc:
            raise InputParseError(f"invalid date {date_str!r}: {exc}") from exc

    def process(self) -> typing.Generator[BankRecord, None, None]:
        raise NotImplementedError()


class ExtractorCsvBase(ExtractorBase):
    """
    Base class for CSV extractors
    """

    delimiter: str = ","
    """The field delimiter of the CSV file"""

    fields: list[str] | None = None
    """Column names in file order, the header row is used when not set"""

    def get_field(self, line: dict[str, str | None], key: str) -> str:
        value = line.get(key)
        if value is None:
            raise InputParseError(f"column {key!r} missing in line {line}")
        return value

    def process_line(self, lineno: int, line: dict[str, str | None]) -> BankRecord | None:
        raise NotImplementedError()

    def process(self) -> typing.Generator[BankRecord, None, None]:
        reader = csv.DictReader(
            self.input_file, fieldnames=self.fields, delimiter=self.delimiter
        )
        try:
            if self.fields is not None:
                # skip the header row, columns are identified by position
                next(reader, None)
            for line in reader:
                record = self.process_line(reader.line_num, line)
                if record is not None:
                    yield record
        except csv.Error as exc:
            raise InputParseError(
                f"{self.filename}:{reader.line_num}: {exc}"
            ) from exc
