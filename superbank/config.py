"""
Super Bank configuration: reserved columns, markers and environment overrides.
"""
import os
from datetime import date

# ---------------------------------------------------------------------------
# Canonical header
# ---------------------------------------------------------------------------
TAGS_COLUMN = "Tags"
SUPER_BANK_NAME = "SUPER BANK"
DATE_COLUMN = "Date"
AMOUNT_COLUMN = "Amount"
TYPE_COLUMN = "Type"

# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------
DEFAULT_TAG_COLOR = os.environ.get("SUPERBANK_DEFAULT_TAG_COLOR", "#60a5fa")

# ---------------------------------------------------------------------------
# Credit / debit direction
# ---------------------------------------------------------------------------
CREDIT_MARKERS = ("CR", "CREDIT", "C")

# Column names (letters only, lower case) that carry a CR/DR marker
CRDR_COLUMN_ALIASES = (
    "crdr",
    "drcr",
    "type",
    "creditdebit",
    "debitcredit",
    "transactiontype",
)

INFER_TYPE_FROM_SIGN = os.environ.get(
    "SUPERBANK_INFER_TYPE_FROM_SIGN", "true"
).strip().lower() not in ("0", "false", "no", "off")

# ---------------------------------------------------------------------------
# Dates and amounts
# ---------------------------------------------------------------------------
EPOCH = date(1970, 1, 1)

CURRENCY_SYMBOLS = "₹$€£"

# ISO / generic formats tried after the day-first patterns. Every format
# needs a day, a month and a year.
GENERIC_DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%d %B %Y",
    "%d %b %Y",
    "%d-%b-%Y",
    "%d-%b-%y",
    "%d %b %y",
    "%B %d, %Y",
    "%b %d, %Y",
]

# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------
STATEMENT_ENCODINGS = ["utf-8-sig", "utf-8", "cp1252"]
DUPLICATE_CHECK_FIELDS = ("date", "amount")

# ---------------------------------------------------------------------------
# Output layout
# ---------------------------------------------------------------------------
OUTPUT_SUBDIRS = ("rows", "reports")
