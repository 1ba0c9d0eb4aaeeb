import dataclasses
import datetime
import functools
import logging
import re
import typing

from hledger_import import constants
from hledger_import.data_types import (
    Amount,
    BankRecord,
    ConfigTarget,
    ImporterConfig,
    Posting,
    Tag,
    Transaction,
)
from hledger_import.environment import VERBOSE_LOG_LEVEL
from hledger_import.errors import RegexConfigError
from hledger_import.hledger import LedgerQuery, to_amount
from hledger_import.utils import format_date

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class StepResult:
    account: str
    # only rules of the SEPA, mapping and category tables contribute notes
    note: str | None = None
    step: str = ""


OtherSideStep = typing.Callable[
    [BankRecord, ImporterConfig, LedgerQuery], StepResult | None
]


@functools.lru_cache(maxsize=None)
def compile_pattern(pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise RegexConfigError(pattern, str(exc)) from exc


def search_pattern(pattern: str, value: str | None) -> bool:
    regex = compile_pattern(pattern)
    if not value:
        return False
    return regex.search(value) is not None


def identify_iban(config: ImporterConfig, iban: str | None) -> ConfigTarget | None:
    if not iban:
        return None
    for rule in config.ibans:
        if rule.iban == iban:
            return ConfigTarget(
                account=rule.account, note=rule.note, fees_account=rule.fees_account
            )
    return None


def identify_card(config: ImporterConfig, card: str | None) -> ConfigTarget | None:
    if not card:
        return None
    for rule in config.cards:
        if rule.card == card:
            return ConfigTarget(
                account=rule.account, note=rule.note, fees_account=rule.fees_account
            )
    return None


def match_sepa_mandate(
    config: ImporterConfig, mandate_id: str | None
) -> ConfigTarget | None:
    if not mandate_id:
        return None
    for rule in config.sepa.mandates:
        if rule.mandate_id == mandate_id:
            return ConfigTarget(account=rule.account, note=rule.note)
    return None


def match_sepa_creditor(
    config: ImporterConfig, creditor_id: str | None
) -> ConfigTarget | None:
    if not creditor_id:
        return None
    for rule in config.sepa.creditors:
        if rule.creditor_id == creditor_id:
            return ConfigTarget(account=rule.account, note=rule.note)
    return None


def match_mapping(config: ImporterConfig, *fields: str | None) -> ConfigTarget | None:
    """First rule whose regex is found in the first field, failing that in the next field"""
    for field in fields:
        for rule in config.mapping:
            if search_pattern(rule.search, field):
                return ConfigTarget(account=rule.account, note=rule.note)
    return None


def match_category(config: ImporterConfig, category: str | None) -> ConfigTarget | None:
    if not category:
        return None
    for rule in config.categories:
        if rule.pattern in category:
            return ConfigTarget(account=rule.account, note=rule.note)
    return None


def fallback(config: ImporterConfig) -> ConfigTarget | None:
    if config.fallback_account is None:
        return None
    return ConfigTarget(account=config.fallback_account)


def date_window(
    date: datetime.date, days_difference: int | None
) -> tuple[datetime.date | None, datetime.date | None]:
    """The [begin, end) window around the date, end is exclusive"""
    if days_difference is None:
        return None, None
    delta = datetime.timedelta(days=days_difference)
    return date - delta, date + delta + datetime.timedelta(days=1)


def has_counter_booking(
    record: BankRecord,
    account: str,
    query: LedgerQuery,
    payee: str,
    begin: datetime.date | None,
    end: datetime.date | None,
) -> bool:
    expected = Amount(value=-record.amount.value, commodity=record.amount.commodity)
    for txn in query(payee, account, begin, end):
        for posting in txn.tpostings:
            if posting.paccount != account:
                continue
            if any(to_amount(amount) == expected for amount in posting.pamount):
                return True
    return False


def step_sepa_mandate(
    record: BankRecord, config: ImporterConfig, query: LedgerQuery
) -> StepResult | None:
    target = match_sepa_mandate(config, record.sepa_mandate_id)
    if target is None:
        return None
    return StepResult(account=target.account, note=target.note, step="sepa mandate")


def step_sepa_creditor(
    record: BankRecord, config: ImporterConfig, query: LedgerQuery
) -> StepResult | None:
    target = match_sepa_creditor(config, record.sepa_creditor_id)
    if target is None:
        return None
    return StepResult(account=target.account, note=target.note, step="sepa creditor")


def step_creditor_debitor(
    record: BankRecord, config: ImporterConfig, query: LedgerQuery
) -> StepResult | None:
    if not record.partner_name:
        return None
    for rule in config.creditor_and_debitor_mapping:
        if rule.payee not in record.partner_name:
            continue
        begin, end = date_window(record.date, rule.days_difference)
        if has_counter_booking(record, rule.account, query, rule.payee, begin, end):
            return StepResult(account=rule.account, step="creditor/debitor")
        if rule.default_pl_account is not None:
            return StepResult(
                account=rule.default_pl_account, step="creditor/debitor default"
            )
        logger.debug(
            "No counter booking of %s found in %s and no default account configured",
            rule.payee,
            rule.account,
        )
        return None
    return None


def step_mapping(
    record: BankRecord, config: ImporterConfig, query: LedgerQuery
) -> StepResult | None:
    target = match_mapping(config, record.partner_name, record.reference)
    if target is None:
        return None
    return StepResult(account=target.account, note=target.note, step="mapping")


def step_category(
    record: BankRecord, config: ImporterConfig, query: LedgerQuery
) -> StepResult | None:
    target = match_category(config, record.category)
    if target is None:
        return None
    return StepResult(account=target.account, note=target.note, step="category")


def step_fallback(
    record: BankRecord, config: ImporterConfig, query: LedgerQuery
) -> StepResult | None:
    target = fallback(config)
    if target is None:
        return None
    return StepResult(account=target.account, step="fallback")


OTHER_SIDE_STEPS: tuple[OtherSideStep, ...] = (
    step_sepa_mandate,
    step_sepa_creditor,
    step_creditor_debitor,
    step_mapping,
    step_category,
    step_fallback,
)


def first_match(
    steps: typing.Iterable[OtherSideStep],
    record: BankRecord,
    config: ImporterConfig,
    query: LedgerQuery,
) -> StepResult | None:
    for step in steps:
        result = step(record, config, query)
        logger.log(
            VERBOSE_LOG_LEVEL,
            "Step %s for record %s:%s: %s",
            step.__name__,
            record.file,
            record.lineno,
            result,
        )
        if result is not None:
            return result
    return None


def is_own_transfer(record: BankRecord, config: ImporterConfig) -> bool:
    if record.is_transfer:
        return True
    if not record.partner_iban:
        return False
    return any(
        identify_iban(config, iban.strip()) is not None
        for iban in record.partner_iban.split("/")
    )


def resolve_own_side(record: BankRecord, config: ImporterConfig) -> ConfigTarget | None:
    if record.own_account is not None:
        return ConfigTarget(account=record.own_account)
    return identify_iban(config, record.own_iban) or identify_card(
        config, record.own_card
    )


def resolve_other_side(
    record: BankRecord, config: ImporterConfig, query: LedgerQuery
) -> StepResult | None:
    if is_own_transfer(record, config):
        return StepResult(account=config.transfer_accounts.bank, step="bank transfer")
    if record.counter_account is not None:
        return StepResult(account=record.counter_account, step="importer")
    return first_match(OTHER_SIDE_STEPS, record, config, query)


def add_tag(tags: list[Tag], name: str, value: str | None):
    """Append the tag unless it has no value or a tag with the same name exists"""
    if not value:
        return
    tag = Tag(name=name, value=value)
    if tag in tags:
        return
    tags.append(tag)


def derive_tags(record: BankRecord) -> list[Tag]:
    tags: list[Tag] = []
    if record.valuation is not None:
        add_tag(tags, constants.VALUATION_TAG, format_date(record.valuation))
    add_tag(tags, constants.REFERENCE_TAG, record.reference)
    add_tag(tags, constants.PARTNER_IBAN_TAG, record.partner_iban)
    add_tag(tags, constants.LOCATION_TAG, record.location)
    add_tag(tags, constants.RECEIVER_REFERENCE_TAG, record.receiver_reference)
    add_tag(tags, constants.SEPA_CREDITOR_ID_TAG, record.sepa_creditor_id)
    add_tag(tags, constants.SEPA_MANDATE_ID_TAG, record.sepa_mandate_id)
    add_tag(tags, constants.CATEGORY_TAG, record.category)
    add_tag(tags, constants.TIME_TAG, record.time)
    for tag in record.extra_tags:
        if tag not in tags:
            tags.append(tag)
    return tags


def derive_payee(record: BankRecord, config: ImporterConfig) -> str:
    payee = record.partner_name or record.reference or ""
    for word_filter in config.filter.payee:
        if word_filter.pattern in payee:
            payee = payee.replace(word_filter.pattern, word_filter.replacement)
    return payee


def resolve_transaction(
    record: BankRecord, config: ImporterConfig, query: LedgerQuery
) -> Transaction:
    """Turn a bank record into a ledger transaction.

    The own side posting carries the amount, the other side posting is elided.
    Either a complete transaction is returned or an error is raised.
    """
    postings: list[Posting] = []

    own_side = resolve_own_side(record, config)
    if own_side is not None:
        postings.append(Posting(account=own_side.account, amount=record.amount))
        fee_account = record.fee_account or own_side.fees_account
        if record.fee is not None and record.fee.value != 0 and fee_account:
            postings.append(
                Posting(
                    account=fee_account,
                    amount=record.fee,
                    comment=record.fee_comment,
                )
            )
    else:
        logger.warning(
            "No own account found for record %s:%s (iban=%s, card=%s)",
            record.file,
            record.lineno,
            record.own_iban,
            record.own_card,
        )

    other_side = resolve_other_side(record, config, query)
    if other_side is not None:
        logger.debug(
            "Record %s:%s posts against %s (%s)",
            record.file,
            record.lineno,
            other_side.account,
            other_side.step,
        )
        postings.append(Posting(account=other_side.account))

    note = record.note
    if note is None and other_side is not None:
        note = other_side.note
    if note is None and own_side is not None:
        note = own_side.note

    return Transaction(
        date=record.date,
        code=record.code,
        payee=derive_payee(record, config),
        note=note,
        state=record.state,
        tags=derive_tags(record),
        postings=postings,
    )


def process_records(
    records: typing.Iterable[BankRecord],
    config: ImporterConfig,
    query: LedgerQuery,
) -> typing.Generator[Transaction, None, None]:
    for record in records:
        yield resolve_transaction(record, config, query)
