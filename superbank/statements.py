"""
Boundary adapters: statement files and record-store exports.

Reads uploaded bank statements into string-typed DataFrames, slices a range
of statement rows into raw transaction records, and loads JSON exports of the
record store (transactions, bank header records, tags, banks).
"""

import json
import logging
import os
import uuid
from datetime import datetime, timezone

import pandas as pd

from superbank.config import DUPLICATE_CHECK_FIELDS, STATEMENT_ENCODINGS

logger = logging.getLogger(__name__)


def read_statement(file_path):
    """Read a CSV or Excel statement with every column as a string.

    Args:
        file_path (str or Path): Path to the statement

    Returns:
        pd.DataFrame: Statement rows, blanks as empty strings

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the path is a directory, the extension is unsupported,
            or the file cannot be read
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")
    if os.path.isdir(file_path):
        raise ValueError("Path is a directory")

    _, ext = os.path.splitext(str(file_path))
    if ext.lower() not in ['.csv', '.xlsx']:
        raise ValueError("Unsupported file format")
    if os.path.getsize(file_path) == 0:
        raise ValueError(f"Could not read statement {file_path}: File is empty")

    logger.debug(f"Reading statement: {file_path}")
    df = None
    if ext.lower() == '.xlsx':
        df = pd.read_excel(file_path, dtype=str)
    else:
        for encoding in STATEMENT_ENCODINGS:
            try:
                df = pd.read_csv(
                    file_path,
                    header=0,
                    dtype=str,
                    skipinitialspace=True,
                    keep_default_na=False,
                    encoding=encoding,
                )
                logger.debug(f"Successfully read file with encoding: {encoding}")
                break
            except UnicodeDecodeError:
                continue
            except pd.errors.EmptyDataError:
                raise ValueError(f"Could not read statement {file_path}: No data")
            except pd.errors.ParserError as e:
                raise ValueError(f"Could not read statement {file_path}: {e}")

    if df is None:
        raise ValueError(f"Could not read statement {file_path} with any supported encoding")

    df.columns = [str(col).strip() for col in df.columns]
    df = df.fillna('')
    logger.info(f"Read {len(df)} rows from {os.path.basename(str(file_path))}")
    return df


def _check_columns(row, fields):
    """Match duplicate-check field names to row columns, ignoring case."""
    lookup = {str(col).strip().lower(): col for col in row}
    return [lookup[f.lower()] for f in fields if f.lower() in lookup]


def _duplicate_key(row, fields):
    """Key of ``row`` over ``fields`` (case-insensitive names), or None if a field is missing."""
    columns = _check_columns(row, fields)
    if len(columns) != len(fields):
        return None
    return tuple(str(row.get(col) or '').strip().lower() for col in columns)


def slice_statement(df, start_row, end_row, bank_id, account_id, statement_id,
                    existing=(), duplicate_check_fields=None, file_name='',
                    bank_name='', account_name='', user_id='', now=None):
    """Turn statement rows ``start_row..end_row`` into raw transactions.

    Row numbers are 0-based positions in ``df`` and both bounds are inclusive.

    Args:
        df (pd.DataFrame): Statement from ``read_statement``
        start_row, end_row (int): Slice bounds
        bank_id, account_id, statement_id (str): Owning records
        existing (list): Transactions already stored for the account
        duplicate_check_fields (list): Columns identifying a transaction,
            matched case-insensitively; defaults to date and amount

    Returns:
        list[dict]: New raw transactions with fresh ids and empty tags

    Raises:
        ValueError: On missing ids or bounds, or if any row duplicates an
            existing transaction or another row of the slice
    """
    missing = [
        name for name, value in (
            ('statementId', statement_id), ('startRow', start_row), ('endRow', end_row),
            ('bankId', bank_id), ('accountId', account_id),
        )
        if value is None or value == ''
    ]
    if missing:
        raise ValueError(f"Missing required fields: {missing}")
    if start_row < 0 or end_row < start_row:
        raise ValueError(f"Invalid row range: {start_row}-{end_row}")

    rows = df.iloc[start_row:end_row + 1].fillna('').to_dict('records')
    fields = list(duplicate_check_fields or DUPLICATE_CHECK_FIELDS)

    if rows:
        key_fields = [f for f in fields if _check_columns(rows[0], [f])]
        if not key_fields:
            logger.warning(f"None of {fields} found in statement columns; skipping duplicate check")
        else:
            seen = {_duplicate_key(tx, key_fields) for tx in existing}
            seen.discard(None)
            fresh = set()
            for row in rows:
                key = _duplicate_key(row, key_fields)
                if key in seen or key in fresh:
                    raise ValueError("Duplicate transaction(s) exist. No transactions were saved.")
                fresh.add(key)

    created_at = (now or datetime.now(timezone.utc)).isoformat()
    transactions = []
    for row in rows:
        record = {
            key: value for key, value in row.items()
            if str(key).strip() and key not in ('tag', 'tags')
        }
        record.update({
            'tags': [],
            'userId': user_id,
            'bankId': bank_id,
            'bankName': bank_name,
            'accountId': account_id,
            'accountName': account_name,
            'statementId': statement_id,
            'fileName': file_name,
            'startRow': start_row,
            'endRow': end_row,
            'createdAt': created_at,
            'id': str(uuid.uuid4()),
        })
        transactions.append(record)

    logger.info(f"Sliced {len(transactions)} transactions from statement {statement_id}")
    return transactions


def load_records(file_path):
    """Load a JSON export of records.

    Accepts a JSON list or an object with an ``Items`` list.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON or holds no record list
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Error reading {file_path}: {e}")

    if isinstance(data, dict) and isinstance(data.get('Items'), list):
        data = data['Items']
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of records in {file_path}")
    records = [record for record in data if isinstance(record, dict)]
    logger.debug(f"Loaded {len(records)} records from {file_path}")
    return records
