import datetime
import json
import typing

import iso8601
import pydantic
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from hledger_import.data_types import Amount, BankRecord, TransactionState
from hledger_import.errors import InputParseError
from hledger_import.extractors.base import ExtractorBase
from hledger_import.utils import decimal_from_mantissa, non_empty

# Erste card payments are looked up in the card table with this key
ERSTE_CARD = "Erste"


class ErsteModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErstePartnerAccount(ErsteModel):
    iban: str | None = None
    bic: str | None = None
    number: str | None = None
    bank_code: str | None = None
    country_code: str | None = None


class ErsteAmount(ErsteModel):
    value: int
    precision: int
    currency: str


class ErsteTransaction(ErsteModel):
    booking: str
    valuation: str
    partner_name: str | None = None
    reference: str | None = None
    reference_number: str
    receiver_reference: str | None = None
    partner_account: ErstePartnerAccount = ErstePartnerAccount()
    partner_reference: str | None = None
    amount: ErsteAmount
    note: str | None = None
    card_number: str | None = None
    sepa_mandate_id: str | None = None
    sepa_creditor_id: str | None = None
    owner_account_number: str | None = None
    owner_account_title: str | None = None


ErsteTransactions = pydantic.TypeAdapter(list[ErsteTransaction])


def parse_timestamp_date(value: str) -> datetime.date:
    try:
        return iso8601.parse_date(value).date()
    except iso8601.ParseError as exc:
        raise InputParseError(f"invalid timestamp {value!r}: {exc}") from exc


class ErsteJsonExtractor(ExtractorBase):
    name: str = "erste"
    title: str = "Erste import"

    def process(self) -> typing.Generator[BankRecord, None, None]:
        try:
            transactions = ErsteTransactions.validate_python(json.load(self.input_file))
        except (json.JSONDecodeError, pydantic.ValidationError) as exc:
            raise InputParseError(str(exc)) from exc

        for index, txn in enumerate(transactions):
            yield BankRecord(
                extractor=self.name,
                file=self.filename,
                lineno=index + 1,
                date=parse_timestamp_date(txn.booking),
                valuation=parse_timestamp_date(txn.valuation),
                code=txn.reference_number,
                state=TransactionState.CLEARED,
                amount=Amount(
                    value=decimal_from_mantissa(
                        txn.amount.value, txn.amount.precision
                    ),
                    commodity=txn.amount.currency,
                ),
                own_iban=non_empty(txn.owner_account_number),
                own_card=ERSTE_CARD,
                partner_iban=non_empty(txn.partner_account.iban),
                partner_name=non_empty(txn.partner_name),
                reference=non_empty(txn.reference),
                receiver_reference=non_empty(txn.receiver_reference),
                note=non_empty(txn.note),
                sepa_creditor_id=non_empty(txn.sepa_creditor_id),
                sepa_mandate_id=non_empty(txn.sepa_mandate_id),
            )
