"""
Super Bank analytics.

Summarizes a set of canonical rows: totals, the credit/debit split and
per-bank, per-tag and per-month breakdowns.

Resolved amount, in order of preference:
- the bank's decision list for ``Amount`` (evaluated on the source transaction)
- the canonical ``Amount`` column, parsed with the lossy number parser
- 0

Resolved type, in order of preference:
- the bank's decision list for ``Type``
- a CR/DR style canonical column (``Dr./Cr.``, ``Type``, ``Credit/Debit``...)
- the sign of the resolved amount (positive is credit, negative debit)

A marker of ``CR``, ``CREDIT`` or ``C`` means credit, any other marker debit.

Totals are deliberately asymmetric: a row whose type cannot be determined
still counts towards ``total_transactions`` and ``total_amount`` but is left
out of ``total_credit``/``total_debit`` (and the credit/debit columns of the
bank and month breakdowns). ``total_credit - total_debit`` therefore only
equals ``total_amount`` when every row has a type and signed amounts.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import reduce

import pandas as pd

from superbank.config import (
    AMOUNT_COLUMN,
    CREDIT_MARKERS,
    CRDR_COLUMN_ALIASES,
    DATE_COLUMN,
    INFER_TYPE_FROM_SIGN,
    TAGS_COLUMN,
    TYPE_COLUMN,
)
from superbank.models import BankMapping
from superbank.parsing import month_key, parse_amount, parse_amount_or_zero
from superbank.rules import evaluate
from superbank.tags import tag_name

logger = logging.getLogger(__name__)

CREDIT = 'credit'
DEBIT = 'debit'
UNKNOWN_BANK = 'unknown'
UNKNOWN_BANK_NAME = 'Unknown Bank'


@dataclass
class AnalyticsSummary:
    total_transactions: int = 0
    total_amount: float = 0.0
    total_credit: float = 0.0
    total_debit: float = 0.0
    tagged: int = 0
    untagged: int = 0
    untyped: int = 0
    bank_breakdown: dict = field(default_factory=dict)
    tag_breakdown: dict = field(default_factory=dict)
    monthly_breakdown: dict = field(default_factory=dict)

    def merge(self, other):
        """Combine two partial summaries computed over disjoint row sets."""
        return AnalyticsSummary(
            total_transactions=self.total_transactions + other.total_transactions,
            total_amount=self.total_amount + other.total_amount,
            total_credit=self.total_credit + other.total_credit,
            total_debit=self.total_debit + other.total_debit,
            tagged=self.tagged + other.tagged,
            untagged=self.untagged + other.untagged,
            untyped=self.untyped + other.untyped,
            bank_breakdown=_merge_breakdown(self.bank_breakdown, other.bank_breakdown),
            tag_breakdown=_merge_breakdown(self.tag_breakdown, other.tag_breakdown),
            monthly_breakdown=dict(sorted(
                _merge_breakdown(self.monthly_breakdown, other.monthly_breakdown).items()
            )),
        )

    def to_dict(self):
        """Transport shape used by the reporting views."""
        return {
            'totalTransactions': self.total_transactions,
            'totalAmount': self.total_amount,
            'totalCredit': self.total_credit,
            'totalDebit': self.total_debit,
            'taggedTransactions': self.tagged,
            'untaggedTransactions': self.untagged,
            'untypedTransactions': self.untyped,
            'bankBreakdown': {k: dict(v) for k, v in self.bank_breakdown.items()},
            'tagBreakdown': {k: dict(v) for k, v in self.tag_breakdown.items()},
            'monthlyBreakdown': {k: dict(v) for k, v in self.monthly_breakdown.items()},
        }


def _merge_breakdown(left, right):
    merged = {key: dict(value) for key, value in left.items()}
    for key, value in right.items():
        if key not in merged:
            merged[key] = dict(value)
            continue
        target = merged[key]
        for metric in ('count', 'amount', 'credit', 'debit'):
            if metric in value:
                target[metric] = target.get(metric, 0) + value[metric]
    return merged


def merge_summaries(summaries):
    """Reduce partial summaries into one."""
    return reduce(lambda a, b: a.merge(b), summaries, AnalyticsSummary())


# ---------------------------------------------------------------------------
# Per-row resolution
# ---------------------------------------------------------------------------

def _letters(name):
    return re.sub(r'[^a-z]', '', str(name).lower())


def _find_column(row, wanted):
    for column in row:
        if str(column).strip().lower() == wanted.lower():
            return column
    return None


def _find_date_column(row):
    exact = _find_column(row, DATE_COLUMN)
    if exact is not None:
        return exact
    for column in row:
        if 'date' in str(column).lower():
            return column
    return None


def classify_marker(marker):
    """Map a CR/DR marker to ``credit``/``debit``; blank markers give None."""
    if marker is None:
        return None
    text = str(marker).strip().upper()
    if not text:
        return None
    return CREDIT if text in CREDIT_MARKERS else DEBIT


def resolve_amount(row, raw=None, mapping=None):
    """Resolved amount of a canonical row (see module docstring)."""
    if raw is not None and mapping is not None:
        value = evaluate(mapping.conditions, raw, AMOUNT_COLUMN)
        if value is not None:
            try:
                return parse_amount(value)
            except ValueError:
                logger.debug(f"Rule amount {value!r} for {row.get('id')} is not a number")

    column = _find_column(row, AMOUNT_COLUMN)
    if column is not None and row.get(column) is not None:
        return parse_amount_or_zero(row[column])
    return 0.0


def resolve_type(row, amount, raw=None, mapping=None, infer_type_from_sign=True):
    """Resolved direction of a canonical row: ``credit``, ``debit`` or None."""
    if raw is not None and mapping is not None:
        direction = classify_marker(evaluate(mapping.conditions, raw, TYPE_COLUMN))
        if direction is not None:
            return direction

    for column, value in row.items():
        if column == TAGS_COLUMN or _letters(column) not in CRDR_COLUMN_ALIASES:
            continue
        if isinstance(value, (str, int, float)):
            direction = classify_marker(value)
            if direction is not None:
                return direction

    if infer_type_from_sign:
        if amount > 0:
            return CREDIT
        if amount < 0:
            return DEBIT
    return None


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def _bank_names(banks):
    """Accept ``{bankId: name}`` or a list of bank records."""
    if not banks:
        return {}
    if isinstance(banks, dict):
        return {str(k): str(v) for k, v in banks.items()}
    return {
        str(bank.get('id')): str(bank.get('bankName') or bank.get('name') or bank.get('id'))
        for bank in banks
    }


def _as_mapping(value):
    if value is None or isinstance(value, BankMapping):
        return value
    return BankMapping.from_record(value)


def _contribution(row, raw, mapping, infer_type_from_sign):
    amount = resolve_amount(row, raw, mapping)
    direction = resolve_type(row, amount, raw, mapping, infer_type_from_sign)

    date_column = _find_date_column(row)
    month = month_key(row.get(date_column)) if date_column is not None else None
    if month is None and raw is not None:
        raw_date = _find_date_column(raw)
        month = month_key(raw.get(raw_date)) if raw_date is not None else None

    tags = row.get(TAGS_COLUMN)
    if not isinstance(tags, list):
        tags = []

    bank_id = raw.get('bankId') if raw is not None else None
    return {
        'bank': str(bank_id) if bank_id else UNKNOWN_BANK,
        'month': month,
        'amount': amount,
        'credit': abs(amount) if direction == CREDIT else 0.0,
        'debit': abs(amount) if direction == DEBIT else 0.0,
        'typed': direction is not None,
        'tags': tags,
    }


def aggregate(rows, transactions=(), bank_mappings=None, banks=None, infer_type_from_sign=None):
    """Summarize canonical rows.

    Args:
        rows (list): Canonical rows (after any filtering by the caller)
        transactions (list): Source raw transactions, looked up by row ``id``
        bank_mappings (dict): ``{bankId: BankMapping or record}``
        banks: Optional bank display names, ``{bankId: name}`` or bank records
        infer_type_from_sign (bool): Fall back to the amount's sign for the
            credit/debit split; defaults to ``SUPERBANK_INFER_TYPE_FROM_SIGN``
            (on unless set to false). With it on, an untyped positive row is
            counted as credit, so rows of 100 CR, 50 DR and an untyped 30 give
            ``total_credit == 130``; pass False to leave the 30 untyped and
            get ``total_credit == 100``, ``total_debit == 50``.

    Returns:
        AnalyticsSummary
    """
    if infer_type_from_sign is None:
        infer_type_from_sign = INFER_TYPE_FROM_SIGN

    by_id = {tx.get('id'): tx for tx in transactions or () if tx.get('id') is not None}
    mappings = {key: _as_mapping(value) for key, value in (bank_mappings or {}).items()}
    names = _bank_names(banks)

    contributions = []
    for row in rows:
        raw = by_id.get(row.get('id'))
        mapping = mappings.get(raw.get('bankId')) if raw is not None else None
        contributions.append(_contribution(row, raw, mapping, infer_type_from_sign))

    if not contributions:
        return AnalyticsSummary()

    df = pd.DataFrame(contributions)
    df['tagged'] = df['tags'].apply(len) > 0

    summary = AnalyticsSummary(
        total_transactions=len(df),
        total_amount=float(df['amount'].sum()),
        total_credit=float(df['credit'].sum()),
        total_debit=float(df['debit'].sum()),
        tagged=int(df['tagged'].sum()),
        untagged=int((~df['tagged']).sum()),
        untyped=int((~df['typed']).sum()),
    )

    metrics = dict(
        count=('amount', 'size'),
        amount=('amount', 'sum'),
        credit=('credit', 'sum'),
        debit=('debit', 'sum'),
    )

    for bank_id, group in df.groupby('bank', sort=False).agg(**metrics).iterrows():
        mapping = mappings.get(bank_id)
        default_name = mapping.name if mapping is not None and mapping.name else UNKNOWN_BANK_NAME
        summary.bank_breakdown[bank_id] = {
            'name': names.get(bank_id, default_name),
            'count': int(group['count']),
            'amount': float(group['amount']),
            'credit': float(group['credit']),
            'debit': float(group['debit']),
        }

    dated = df.dropna(subset=['month'])
    if not dated.empty:
        for month, group in dated.groupby('month', sort=True).agg(**metrics).iterrows():
            summary.monthly_breakdown[month] = {
                'count': int(group['count']),
                'amount': float(group['amount']),
                'credit': float(group['credit']),
                'debit': float(group['debit']),
            }

    tag_rows = [
        {
            'name': tag_name(tag),
            'color': getattr(tag, 'color', None) or (tag.get('color') if isinstance(tag, dict) else None),
            'amount': amount,
        }
        for tags, amount in zip(df['tags'], df['amount'])
        for tag in tags
        if tag_name(tag)
    ]
    if tag_rows:
        tags_df = pd.DataFrame(tag_rows)
        grouped = tags_df.groupby('name', sort=False).agg(
            count=('amount', 'size'),
            amount=('amount', 'sum'),
            color=('color', 'first'),
        )
        for name, group in grouped.iterrows():
            summary.tag_breakdown[name] = {
                'name': name,
                'count': int(group['count']),
                'amount': float(group['amount']),
                'color': group['color'] if isinstance(group['color'], str) else None,
            }

    logger.debug(
        f"Aggregated {summary.total_transactions} rows: "
        f"credit={summary.total_credit:.2f} debit={summary.total_debit:.2f} untyped={summary.untyped}"
    )
    return summary


def aggregate_chunked(rows, transactions=(), bank_mappings=None, banks=None,
                      infer_type_from_sign=None, chunk_size=1000, max_workers=None):
    """Aggregate in chunks on a thread pool and merge the partial summaries."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be a positive integer")
    rows = list(rows)
    chunks = [rows[i:i + chunk_size] for i in range(0, len(rows), chunk_size)]

    def _run(chunk):
        return aggregate(chunk, transactions, bank_mappings, banks, infer_type_from_sign)

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        partials = list(pool.map(_run, chunks))
    return merge_summaries(partials)
