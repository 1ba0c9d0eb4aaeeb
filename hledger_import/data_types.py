import dataclasses
import datetime
import decimal
import enum

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from hledger_import import constants


@dataclasses.dataclass(frozen=True)
class Amount:
    """Binds a commodity to a decimal value (e.g. 25.39 USD or 0.1 BTC)"""

    value: decimal.Decimal
    commodity: str


@dataclasses.dataclass(frozen=True, eq=False)
class Tag:
    """hledger tag of a transaction or posting.

    Two tags with the same name are the same tag, no matter their values.
    """

    name: str
    value: str | None = None

    def __eq__(self, other):
        if not isinstance(other, Tag):
            return NotImplemented
        return self.name == other.name

    def __hash__(self):
        return hash(self.name)


@enum.unique
class TransactionState(enum.Enum):
    # registered, no further verification needed
    DEFAULT = " "
    # confirmed by the bank, e.g. appears on the account statement
    CLEARED = "*"
    # unclear state, might need further checking
    PENDING = "!"


@dataclasses.dataclass(frozen=True)
class Posting:
    account: str
    # no amount means the amount is elided and balances the transaction
    amount: Amount | None = None
    comment: str | None = None
    tags: list[Tag] = dataclasses.field(default_factory=list)


@dataclasses.dataclass(frozen=True)
class Transaction:
    date: datetime.date
    payee: str
    # the dedup key against previously recorded transactions
    code: str | None = None
    note: str | None = None
    state: TransactionState = TransactionState.DEFAULT
    comment: str | None = None
    tags: list[Tag] = dataclasses.field(default_factory=list)
    postings: list[Posting] = dataclasses.field(default_factory=list)


@dataclasses.dataclass(frozen=True)
class BankRecord:
    """A single bank record normalized by an extractor"""

    extractor: str
    # booking date of the record
    date: datetime.date
    # signed amount on the own account
    amount: Amount
    # the filename of import source
    file: str | None = None
    # the entry line number of the source file
    lineno: int | None = None
    # value date of the record
    valuation: datetime.date | None = None
    # unique id of the record provided by the bank
    code: str | None = None
    state: TransactionState = TransactionState.CLEARED
    # fee charged on top of the amount, posted to a fee account
    fee: Amount | None = None
    fee_account: str | None = None
    fee_comment: str = constants.FEE_COMMENT
    # own side identifiers, looked up in the IBAN and card tables
    own_iban: str | None = None
    own_card: str | None = None
    # own account fixed by the importer configuration, takes precedence over the tables
    own_account: str | None = None
    # counterparty IBAN, multiple IBANs are separated by "/"
    partner_iban: str | None = None
    partner_name: str | None = None
    # free text reference or description
    reference: str | None = None
    receiver_reference: str | None = None
    # note embedded in the record itself
    note: str | None = None
    sepa_creditor_id: str | None = None
    sepa_mandate_id: str | None = None
    category: str | None = None
    location: str | None = None
    time: str | None = None
    # set by importers that know the record is a transfer between own bank accounts
    is_transfer: bool = False
    # counter account decided by the importer, skips the matching tables
    counter_account: str | None = None
    # importer specific tags appended after the common ones
    extra_tags: tuple[Tag, ...] = ()


@dataclasses.dataclass(frozen=True)
class ConfigTarget:
    account: str
    note: str | None = None
    fees_account: str | None = None


class LedgerJsonQuantity(BaseModel):
    decimal_mantissa: int = Field(alias="decimalMantissa")
    decimal_places: int = Field(alias="decimalPlaces")


class LedgerJsonAmount(BaseModel):
    acommodity: str
    aquantity: LedgerJsonQuantity


class LedgerJsonPosting(BaseModel):
    paccount: str
    pcomment: str | None = None
    pamount: list[LedgerJsonAmount] = []


class LedgerJsonTransaction(BaseModel):
    tcode: str = ""
    tdate: datetime.date
    tdate2: datetime.date | None = None
    tcomment: str | None = None
    tdescription: str | None = None
    tpostings: list[LedgerJsonPosting] = []


LedgerJsonTransactions = pydantic.TypeAdapter(list[LedgerJsonTransaction])


class ImportBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class HledgerConfig(ImportBaseModel):
    path: str = constants.HLEDGER_DEFAULT_PATH
    """Path of the hledger executable"""
    timeout: float | None = None
    """Seconds to wait for a hledger process, waits forever when not set"""


class IbanMapping(ImportBaseModel):
    """
    Maps an IBAN to a hledger asset or liability account:

    ```YAML
    ibans:
    - iban: AT483200000012345864
      account: Assets:Bank:Checking
    ```
    """

    iban: str
    account: str
    fees_account: str | None = None
    note: str | None = None


class CardMapping(ImportBaseModel):
    """Maps a credit card number (or identifier) to a hledger asset or liability account"""

    card: str
    account: str
    fees_account: str | None = None
    note: str | None = None


class SepaCreditorMapping(ImportBaseModel):
    creditor_id: str
    account: str
    note: str | None = None


class SepaMandateMapping(ImportBaseModel):
    mandate_id: str
    account: str
    note: str | None = None


class SepaConfig(ImportBaseModel):
    creditors: list[SepaCreditorMapping] = []
    mandates: list[SepaMandateMapping] = []


class TransferAccounts(ImportBaseModel):
    """Accounts used to post bank transfers and cash transfers"""

    bank: str
    cash: str


class SimpleMapping(ImportBaseModel):
    """
    Post to the account when the case-insensitive regular expression is found in
    the counterparty name or the reference:

    ```YAML
    mapping:
    - search: "^Billa"
      account: Expenses:Groceries
    ```
    """

    search: str
    account: str
    note: str | None = None


class CreditorDebitorMapping(ImportBaseModel):
    """
    Posts to an open item account when the ledger holds a matching counter booking
    of the payee, e.g. an invoice that is paid with this transaction:

    ```YAML
    creditor_and_debitor_mapping:
    - payee: Special Store
      account: Liabilities:AP:Special
      default_pl_account: Expenses:Specials
      days_difference: 3
    ```
    """

    payee: str
    account: str
    default_pl_account: str | None = None
    """Used when no matching counter booking is found"""
    days_difference: int | None = Field(default=None, ge=0)
    """Days around the booking date to look for the counter booking, unbounded when not set"""


class CategoryMapping(ImportBaseModel):
    pattern: str
    account: str
    note: str | None = None


class FilterEntry(ImportBaseModel):
    pattern: str
    replacement: str


class WordFilter(ImportBaseModel):
    """Remove or replace words in the resulting hledger transactions"""

    payee: list[FilterEntry] = []


class RevolutConfig(ImportBaseModel):
    account: str
    fee_account: str | None = None


class FlatexCsvConfig(ImportBaseModel):
    account: str


class PayPalMatchingRule(ImportBaseModel):
    name: str | None = None
    """Regular expression matched against the name of the counterparty"""
    type: str | None = None
    """Regular expression matched against the PayPal transaction type"""
    ignore: bool = False
    account: str | None = None
    """The account the PayPal transaction is posted against"""


class PayPalConfig(ImportBaseModel):
    asset_account: str
    fees_account: str
    empty_payee: str
    rules: list[PayPalMatchingRule] = []


class ImporterConfig(ImportBaseModel):
    hledger: HledgerConfig = HledgerConfig()
    commodity_formatting_rules: list[str] | None = None
    deduplication_accounts: list[str] | None = None
    ibans: list[IbanMapping] = []
    cards: list[CardMapping] = []
    mapping: list[SimpleMapping] = []
    categories: list[CategoryMapping] = []
    creditor_and_debitor_mapping: list[CreditorDebitorMapping] = []
    sepa: SepaConfig = SepaConfig()
    transfer_accounts: TransferAccounts
    filter: WordFilter = WordFilter()
    fallback_account: str | None = None
    """Balances postings that could not be assigned to any other account"""
    revolut: RevolutConfig | None = None
    flatex_csv: FlatexCsvConfig | None = None
    paypal: PayPalConfig | None = None
