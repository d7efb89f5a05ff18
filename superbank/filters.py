"""
Filtering, searching and sorting of canonical rows.

These mirror the filters offered on the Super Bank and reports views and run
before aggregation, so analytics always describe the rows on screen.
"""

import logging
from datetime import date

from superbank.config import DATE_COLUMN, TAGS_COLUMN
from superbank.parsing import parse_date, to_iso_date
from superbank.tags import tag_id, tag_name

logger = logging.getLogger(__name__)


def _iso(value):
    if value is None or value == '':
        return None
    if isinstance(value, date):
        return value.isoformat()
    return to_iso_date(value) or str(value)


def _row_tags(row):
    tags = row.get(TAGS_COLUMN)
    return tags if isinstance(tags, list) else []


def _searchable(value):
    if isinstance(value, list):
        return ', '.join(tag_name(v) for v in value)
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def matches_search(row, search, search_field='all'):
    """Case-insensitive substring search over one column or every column."""
    if not search:
        return True
    needle = search.lower()
    if search_field == 'all':
        for column, value in row.items():
            if column == 'id':
                continue
            text = _searchable(value)
            if text is not None and needle in text.lower():
                return True
        return False
    text = _searchable(row.get(search_field, ''))
    return text is not None and needle in text.lower()


def find_date_column(header):
    """First column whose name contains "date", case-insensitively."""
    for column in header:
        if 'date' in str(column).lower():
            return column
    return None


def filter_rows(rows, transactions=(), date_from=None, date_to=None, banks=None,
                accounts=None, tags=None, include_untagged=True, search=None,
                search_field='all', header=None):
    """Apply the view filters to canonical rows.

    Args:
        rows (list): Canonical rows
        transactions (list): Source transactions, for bank/account filters
        date_from, date_to (str or date): Inclusive ISO bounds
        banks, accounts (list): Allowed bank/account ids
        tags (list): Tag ids or names; a row needs at least one of them
        include_untagged (bool): Keep rows without tags
        search (str): Free text search
        search_field (str): Column to search, or 'all'
        header (list): Canonical header, used to locate the date column

    Returns:
        list: Rows passing every filter, in input order
    """
    by_id = {tx.get('id'): tx for tx in transactions or () if tx.get('id') is not None}
    wanted_tags = {str(t) for t in tags or ()}
    wanted_banks = {str(b) for b in banks or ()}
    wanted_accounts = {str(a) for a in accounts or ()}
    low = _iso(date_from)
    high = _iso(date_to)

    result = []
    for row in rows:
        row_tags = _row_tags(row)
        if wanted_tags and not any(
            tag_id(t) in wanted_tags or tag_name(t) in wanted_tags for t in row_tags
        ):
            continue
        if not include_untagged and not row_tags:
            continue

        if wanted_banks or wanted_accounts:
            raw = by_id.get(row.get('id'))
            if raw is None:
                continue
            if wanted_banks and str(raw.get('bankId')) not in wanted_banks:
                continue
            if wanted_accounts and str(raw.get('accountId')) not in wanted_accounts:
                continue

        if low or high:
            date_column = find_date_column(header if header is not None else row.keys())
            value = row.get(date_column) if date_column is not None else None
            row_date = to_iso_date(value) if isinstance(value, str) else None
            if row_date is not None:
                if low and row_date < low:
                    continue
                if high and row_date > high:
                    continue

        if not matches_search(row, search, search_field):
            continue
        result.append(row)

    logger.debug(f"Filtered {len(rows)} rows down to {len(result)}")
    return result


def sort_rows_by_date(rows, column=DATE_COLUMN, descending=True):
    """Sort rows by a date column; unreadable dates sort as 1970-01-01."""
    return sorted(rows, key=lambda row: parse_date(row.get(column)), reverse=descending)
