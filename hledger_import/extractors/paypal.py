import logging
import re

from hledger_import.data_types import (
    Amount,
    BankRecord,
    PayPalMatchingRule,
    Tag,
    TransactionState,
)
from hledger_import.errors import MissingConfigError, MissingValueError
from hledger_import.extractors.base import ExtractorCsvBase
from hledger_import.processor import compile_pattern
from hledger_import.utils import parse_decimal_with_separator, transaction_hash

logger = logging.getLogger(__name__)

CODE_PREFIX = "PAYPAL"
FEE_COMMENT = "transaction fee"
# columns in export order, all of them feed the dedup code
COLUMNS = [
    "Datum",
    "Uhrzeit",
    "Zeitzone",
    "Name",
    "Typ",
    "Status",
    "Währung",
    "Brutto",
    "Gebühr",
    "Netto",
]


class PayPalRuleMatcher:
    """Compiled form of a rule, patterns are compiled eagerly to surface config errors"""

    def __init__(self, rule: PayPalMatchingRule):
        self.rule = rule
        self.name = compile_pattern(rule.name) if rule.name is not None else None
        self.type = compile_pattern(rule.type) if rule.type is not None else None

    @staticmethod
    def _matches(pattern: re.Pattern | None, value: str) -> bool:
        if pattern is None:
            return True
        return pattern.search(value.strip()) is not None

    def matches(self, name: str, transaction_type: str) -> bool:
        return self._matches(self.name, name) and self._matches(
            self.type, transaction_type
        )


class PayPalTsvExtractor(ExtractorCsvBase):
    name: str = "paypal"
    title: str = "PayPal import"
    delimiter: str = "\t"

    def __init__(self, input_file, config):
        super().__init__(input_file, config)
        if config.paypal is None:
            raise MissingConfigError("paypal")
        self.paypal_config = config.paypal
        self.matchers = [PayPalRuleMatcher(rule) for rule in config.paypal.rules]

    def find_rule(self, name: str, transaction_type: str) -> PayPalMatchingRule | None:
        for matcher in self.matchers:
            if matcher.matches(name, transaction_type):
                return matcher.rule
        return None

    def process_line(
        self, lineno: int, line: dict[str, str | None]
    ) -> BankRecord | None:
        values = [self.get_field(line, column) for column in COLUMNS]
        (
            date,
            time,
            timezone,
            name,
            transaction_type,
            status,
            currency,
            gross,
            fee,
            net,
        ) = values

        rule = self.find_rule(name, transaction_type)
        if rule is None:
            logger.debug("No rule matches PayPal line %s, skipped", lineno)
            return None
        if rule.ignore:
            logger.debug("PayPal line %s ignored by rule", lineno)
            return None
        if rule.account is None:
            raise MissingValueError("paypal.rules.account")

        return BankRecord(
            extractor=self.name,
            file=self.filename,
            lineno=lineno,
            date=self.parse_date(date),
            code=transaction_hash(CODE_PREFIX, values),
            state=TransactionState.CLEARED,
            amount=Amount(
                value=parse_decimal_with_separator(gross, decimal_separator=","),
                commodity=currency,
            ),
            fee=Amount(
                value=parse_decimal_with_separator(fee or "0", decimal_separator=","),
                commodity=currency,
            ),
            fee_account=self.paypal_config.fees_account,
            fee_comment=FEE_COMMENT,
            own_account=self.paypal_config.asset_account,
            partner_name=name.strip() or self.paypal_config.empty_payee,
            note=transaction_type,
            time=time,
            counter_account=rule.account,
            extra_tags=(
                Tag(name="timezone", value=timezone),
                Tag(name="status", value=status),
                Tag(name="net_amount", value=net),
            ),
        )
