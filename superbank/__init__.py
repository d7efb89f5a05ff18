"""
Super Bank - consolidated analytics across heterogeneous bank statements.

This package provides functionality to:
- Parse Indian/western grouped amounts and day-first statement dates
- Evaluate per-bank decision lists that derive canonical columns
- Resolve transaction tag references against the tag catalog
- Normalize raw transactions from any bank onto one canonical header
- Aggregate canonical rows into totals and per-bank/tag/month breakdowns

The canonical header always contains the reserved column:
- Tags: the transaction's resolved tags
plus whatever columns the user configured (typically Date, Description,
Amount, Type).
"""

from .parsing import (
    parse_amount,
    parse_amount_or_zero,
    parse_date,
    format_date_ddmmyyyy,
)
from .models import BankMapping, Condition, Tag
from .rules import evaluate
from .tags import resolve_tags
from .normalize import normalize_row, normalize_transactions
from .aggregate import AnalyticsSummary, aggregate

__all__ = [
    'parse_amount',
    'parse_amount_or_zero',
    'parse_date',
    'format_date_ddmmyyyy',
    'BankMapping',
    'Condition',
    'Tag',
    'evaluate',
    'resolve_tags',
    'normalize_row',
    'normalize_transactions',
    'AnalyticsSummary',
    'aggregate',
]
