"""
Locale-aware number and date parsing.

Bank statements arrive with Indian digit grouping (``11,11,111.00``),
western grouping, currency symbols and day-first dates with either two or
four digit years. Everything here is pure and never touches I/O.

Two flavours are provided for amounts:

- ``parse_amount``: strict, raises ``ValueError`` on anything it cannot read.
- ``parse_amount_or_zero``: the lossy fallback used by the aggregator, which
  silently coerces unreadable values to ``0.0``.

Dates follow the same split: ``try_parse_date`` returns ``None`` when it
gives up, ``parse_date`` substitutes the ``EPOCH`` sentinel instead.
"""

import logging
import re
from datetime import date, datetime

import numpy as np
import pandas as pd

from superbank.config import CURRENCY_SYMBOLS, EPOCH, GENERIC_DATE_FORMATS

logger = logging.getLogger(__name__)

NUMBER_RE = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$')
DAY_FIRST_RE = re.compile(r'^(\d{1,2})[/-](\d{1,2})[/-](\d{4}|\d{2})$')
COMPACT_DATE_RE = re.compile(r'^\d{8}$')
_AMOUNT_NOISE_RE = re.compile(r'[\s,' + re.escape(CURRENCY_SYMBOLS) + r']')


def is_number(value):
    """Return True if ``value`` trims to a plain decimal or scientific number.

    Grouping separators are not accepted here; this is the operand check used
    when comparing rule values, not the amount parser.
    """
    if value is None or isinstance(value, (bool, list, dict)):
        return False
    return bool(NUMBER_RE.match(str(value).strip()))


def to_number(value):
    """Convert ``value`` to float if ``is_number`` accepts it, else None."""
    if not is_number(value):
        return None
    return float(str(value).strip())


def parse_amount(amount):
    """Parse a transaction amount.

    Args:
        amount (str, int or float): Raw amount value

    Returns:
        float: Parsed amount

    Raises:
        ValueError: If the amount is empty, NaN or cannot be converted

    Notes:
        - Strips thousands separators, so Indian grouping works
        - Strips currency symbols and whitespace
        - Parentheses mean a negative amount
    """
    if amount is None or isinstance(amount, bool):
        raise ValueError(f"Invalid amount format: {amount!r}")
    if isinstance(amount, (int, float, np.integer, np.floating)):
        if pd.isna(amount) or not np.isfinite(amount):
            raise ValueError(f"Invalid amount format: {amount!r}")
        return float(amount)
    if not isinstance(amount, str):
        raise ValueError(f"Amount must be string or number, got {type(amount)}")

    cleaned = _AMOUNT_NOISE_RE.sub('', amount)
    if cleaned.startswith('(') and cleaned.endswith(')'):
        cleaned = '-' + cleaned[1:-1].lstrip('+-')

    if not NUMBER_RE.match(cleaned):
        raise ValueError(f"Invalid amount format: {amount!r}")
    value = float(cleaned)
    if not np.isfinite(value):
        raise ValueError(f"Amount out of range: {amount!r}")
    return value


def parse_amount_or_zero(amount):
    """Parse an amount, returning 0.0 for anything unreadable.

    This is a deliberate lossy fallback: an unreadable amount still counts as
    a transaction but contributes nothing to totals.
    """
    try:
        return parse_amount(amount)
    except ValueError:
        logger.debug(f"Unreadable amount {amount!r}, using 0")
        return 0.0


def try_parse_date(value):
    """Parse a statement date, returning None when the value is unreadable.

    Day-first forms (``dd/mm/yyyy``, ``dd-mm-yyyy`` and two digit years,
    which map to ``20yy``) are tried first, then ISO and month-name forms.
    Text missing a day, month or year is unreadable, never completed.
    """
    if isinstance(value, datetime):
        if pd.isna(value):
            return None
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip().strip('"\'')
    if not text:
        return None

    match = DAY_FIRST_RE.match(text)
    if match:
        day, month, year = match.groups()
        if len(year) == 2:
            year = '20' + year
        try:
            return date(int(year), int(month), int(day))
        except ValueError:
            logger.debug(f"Invalid calendar date: {text}")
            return None

    formats = GENERIC_DATE_FORMATS + ['%Y%m%d'] if COMPACT_DATE_RE.match(text) else GENERIC_DATE_FORMATS
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    logger.debug(f"Unreadable date: {text}")
    return None


def parse_date(value):
    """Parse a statement date, returning ``EPOCH`` when it cannot be read."""
    parsed = try_parse_date(value)
    return EPOCH if parsed is None else parsed


def format_date_ddmmyyyy(value):
    """Format a date as ``dd/mm/yyyy``."""
    if isinstance(value, datetime):
        value = value.date()
    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


def normalize_date_string(value):
    """Render a date column value in the canonical ``dd/mm/yyyy`` form.

    Values that cannot be parsed are returned unchanged.
    """
    if not isinstance(value, str) or not value.strip():
        return value
    parsed = try_parse_date(value)
    if parsed is None:
        return value
    return format_date_ddmmyyyy(parsed)


def to_iso_date(value):
    """Return ``YYYY-MM-DD`` for a parseable date value, else None."""
    parsed = try_parse_date(value)
    return parsed.isoformat() if parsed is not None else None


def month_key(value):
    """Return the ``YYYY-MM`` slice of a parseable date value, else None."""
    parsed = try_parse_date(value)
    if parsed is None:
        return None
    return f"{parsed.year:04d}-{parsed.month:02d}"
