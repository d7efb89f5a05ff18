"""
Super Bank row normalization.

Every raw transaction is projected onto the canonical ("Super Bank") header.
For each canonical column the value comes from the first source that has one:

1. ``Tags``: the transaction's tag list, resolved against the tag catalog
2. the bank's decision list for that column
3. the raw column mapped onto it by the bank's mapping
4. a raw column with the canonical column's own name (unmapped banks)
5. an empty string

Rules come before the structural mapping because many banks split credits
and debits into two amount columns, which a plain column rename cannot
express. Steps 3-5 keep banks working before anyone has configured them.
"""

import logging

from superbank.config import DATE_COLUMN, SUPER_BANK_NAME, TAGS_COLUMN
from superbank.models import BankMapping
from superbank.parsing import normalize_date_string
from superbank.rules import evaluate
from superbank.tags import find_tag_list, index_catalog, resolve_tags

logger = logging.getLogger(__name__)


def canonical_header(header):
    """Clean a canonical header and make sure it ends with ``Tags``."""
    result = []
    for column in header or ():
        column = str(column).strip()
        if column and column not in result:
            result.append(column)
    if TAGS_COLUMN not in result:
        result.append(TAGS_COLUMN)
    return result


def header_from_records(records):
    """Pick the canonical header out of the bank header records."""
    for record in records or ():
        if record.get('id') == SUPER_BANK_NAME and isinstance(record.get('header'), list):
            return canonical_header(record['header'])
    return [TAGS_COLUMN]


def _as_bank_mapping(value):
    if value is None or isinstance(value, BankMapping):
        return value
    return BankMapping.from_record(value)


def index_bank_mappings(records):
    """Build the ``{bankId: BankMapping}`` lookup from bank header records.

    The canonical header record is skipped. Records without a ``bankId`` are
    keyed by their name.
    """
    index = {}
    for record in records or ():
        mapping = _as_bank_mapping(record)
        if mapping.name == SUPER_BANK_NAME:
            continue
        key = mapping.bank_id or mapping.name
        index[key] = mapping
    logger.debug(f"Indexed {len(index)} bank mappings")
    return index


def _has_value(value):
    if value is None or isinstance(value, list):
        return False
    if isinstance(value, float) and value != value:
        return False
    return str(value).strip() != ''


def _displayable(value):
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value != value:
        return ''
    if isinstance(value, (str, int, float)):
        return value
    return ''


def normalize_row(raw, mapping, header, tag_catalog):
    """Project one raw transaction onto the canonical header.

    Args:
        raw (dict): Raw transaction, never modified
        mapping (BankMapping, dict or None): The transaction's bank mapping
        header (list): Canonical header
        tag_catalog: Tag catalog (list of tags, or an index from ``index_catalog``)

    Returns:
        dict: Canonical row keyed by the header columns plus ``id``
    """
    mapping = _as_bank_mapping(mapping)
    conditions = mapping.conditions if mapping else ()
    reverse = mapping.reverse_mapping() if mapping else {}
    catalog = tag_catalog if isinstance(tag_catalog, dict) else index_catalog(tag_catalog)

    row = {}
    for column in header:
        if column == TAGS_COLUMN:
            refs = find_tag_list(raw)
            if refs is None:
                refs = raw.get('tags')
            row[TAGS_COLUMN] = resolve_tags(refs if isinstance(refs, list) else [], catalog)
            continue

        value = evaluate(conditions, raw, column)
        if value is None:
            raw_column = reverse.get(column)
            if raw_column is not None and _has_value(raw.get(raw_column)):
                value = raw[raw_column]
            elif raw.get(column) is not None:
                value = raw[column]
            else:
                value = ''

        value = _displayable(value)
        if column.lower() == DATE_COLUMN.lower():
            value = normalize_date_string(value)
        row[column] = value

    row['id'] = raw.get('id')
    return row


def normalize_transactions(transactions, bank_mappings, header, tag_catalog):
    """Normalize a list of raw transactions.

    Args:
        transactions (list): Raw transactions
        bank_mappings (dict): ``{bankId: BankMapping or record}``
        header (list): Canonical header (``Tags`` is added if missing)
        tag_catalog (list): Tag objects or records

    Returns:
        list[dict]: Canonical rows, in input order
    """
    header = canonical_header(header)
    catalog = index_catalog(tag_catalog)
    mappings = {key: _as_bank_mapping(value) for key, value in (bank_mappings or {}).items()}

    rows = []
    unmapped = set()
    for raw in transactions:
        mapping = mappings.get(raw.get('bankId'))
        if mapping is None:
            unmapped.add(raw.get('bankId'))
        rows.append(normalize_row(raw, mapping, header, catalog))

    if unmapped:
        logger.debug(f"No mapping configured for banks {sorted(map(str, unmapped))}; using identity")
    logger.info(f"Normalized {len(rows)} transactions onto {len(header)} columns")
    return rows
