import typing
from xml.etree import ElementTree as ET

from hledger_import.data_types import Amount, BankRecord, TransactionState
from hledger_import.errors import InputParseError
from hledger_import.extractors.base import ExtractorBase
from hledger_import.utils import non_empty, parse_decimal_with_separator

TRANSACTION_TAG = "TRANSACTION"
MERCHANT_NAME = "HAENLDERNAME-MERCHANT_NAME"
AMOUNT = "BETRAG-AMOUNT"
CURRENCY = "WAEHRUNG-CURRENCY"
DATE = "DATUM-DATE"
TIME = "ZEIT-TIME"
CATEGORY = "BRANCHE-CATEGORY"
STATUS = "STATUS-STATUS"
POSTING_DATE = "BUCHUNGSDATUM-POSTING_DATE"
PLACE = "ORT-PLACE"
CARD_NUMBER = "KARTENNUMMER-CARD_NUMBER"

BOOKED_STATUS = "verbucht"


def required_text(element: ET.Element, tag: str) -> str:
    value = element.findtext(tag)
    if value is None:
        raise InputParseError(f"element {tag} missing in {TRANSACTION_TAG}")
    return value.strip()


def optional_text(element: ET.Element, tag: str) -> str | None:
    value = element.findtext(tag)
    if value is None:
        return None
    return non_empty(value.strip())


class CardcompleteXmlExtractor(ExtractorBase):
    name: str = "cardcomplete"
    title: str = "cardcomplete import"

    def parse_transaction(self, index: int, element: ET.Element) -> BankRecord:
        if required_text(element, STATUS).lower() == BOOKED_STATUS:
            state = TransactionState.CLEARED
        else:
            state = TransactionState.PENDING
        return BankRecord(
            extractor=self.name,
            file=self.filename,
            lineno=index + 1,
            date=self.parse_date(required_text(element, POSTING_DATE)),
            valuation=self.parse_date(required_text(element, DATE)),
            state=state,
            amount=Amount(
                value=parse_decimal_with_separator(
                    required_text(element, AMOUNT), decimal_separator=","
                ),
                commodity=required_text(element, CURRENCY),
            ),
            own_card=optional_text(element, CARD_NUMBER),
            partner_name=non_empty(required_text(element, MERCHANT_NAME)),
            category=non_empty(required_text(element, CATEGORY)),
            location=optional_text(element, PLACE),
            time=non_empty(required_text(element, TIME)),
        )

    def process(self) -> typing.Generator[BankRecord, None, None]:
        try:
            root = ET.parse(self.input_file).getroot()
        except ET.ParseError as exc:
            raise InputParseError(str(exc)) from exc
        records = [
            self.parse_transaction(index, element)
            for index, element in enumerate(root.iter(TRANSACTION_TAG))
        ]
        yield from sorted(records, key=lambda record: record.date)
