import pathlib

# amounts are right aligned so their last character lands on this column
COLUMN_WIDTH = 80
# rendered tags and comments are indented like postings
INDENT = "  "
DATE_FORMAT = "%Y-%m-%d"
FEE_COMMENT = "fee"
HLEDGER_DEFAULT_PATH = "hledger"
CONFIG_ENV_VAR = "HLEDGER_IMPORT_CONFIG"
DEFAULT_CONFIG_PATH = pathlib.Path(".config") / "hledger-import" / "config.yaml"

VALUATION_TAG = "valuation"
REFERENCE_TAG = "reference"
PARTNER_IBAN_TAG = "partner_iban"
LOCATION_TAG = "location"
RECEIVER_REFERENCE_TAG = "receiverReference"
SEPA_CREDITOR_ID_TAG = "sepaCreditorId"
SEPA_MANDATE_ID_TAG = "sepaMandateId"
CATEGORY_TAG = "category"
TIME_TAG = "time"
# amounts are rendered like "-1.234,56 EUR"
GROUPING_SEPARATOR = "."
DECIMAL_SEPARATOR = ","
MIN_FRACTION_DIGITS = 2
HEADER_RULE = "*" * (COLUMN_WIDTH - 2)
