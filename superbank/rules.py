"""
Per-bank decision lists.

A bank's conditions are evaluated top to bottom, independently for every
target column. For a given column the first condition whose ``then`` names
that column and whose ``if`` clause holds decides the value; later
conditions for the same column are never consulted.

Right-hand side expressions are classified against the raw row:

- ``"-Withdrawal Amt."``: numeric negation of the raw field
- ``"Deposit Amt."``: the raw field's value, if the row has that field
- anything else: the literal text (e.g. ``"DR"``)
"""

import logging
import operator

from superbank.models import Condition, FieldRef, Literal, NegatedFieldRef
from superbank.parsing import parse_amount_or_zero, to_number

logger = logging.getLogger(__name__)

_ORDERING = {
    '>=': operator.ge,
    '<=': operator.le,
    '>': operator.gt,
    '<': operator.lt,
}


def _as_text(value):
    """Trimmed string form of a raw value; missing values are empty."""
    if value is None:
        return ''
    if isinstance(value, float) and value != value:
        return ''
    if isinstance(value, (list, tuple)):
        return ','.join(str(v) for v in value).strip()
    return str(value).strip()


def _as_conditions(conditions):
    """Accept Condition objects or their persisted dict records."""
    result = []
    for condition in conditions or ():
        if isinstance(condition, dict):
            condition = Condition.from_record(condition)
        if condition is not None:
            result.append(condition)
    return result


def matches(predicate, row):
    """Check a condition's ``if`` clause against a raw row.

    Comparisons are numeric when both sides trim to numbers. Otherwise
    ``==``/``!=`` compare the trimmed strings and ordering operators never
    match. Unknown operators never match.
    """
    value = _as_text(row.get(predicate.field))
    op = predicate.op

    if op == 'present':
        return value != ''
    if op == 'not_present':
        return value == ''

    expected = _as_text(predicate.value)
    left = to_number(value) if value else None
    right = to_number(expected) if expected else None
    numeric = left is not None and right is not None

    if op == '==':
        return left == right if numeric else value == expected
    if op == '!=':
        return left != right if numeric else value != expected
    if op in _ORDERING:
        return numeric and _ORDERING[op](left, right)
    return False


def compile_value_expr(text, row):
    """Classify a ``then`` expression against the fields present in ``row``."""
    text = str(text)
    if text.startswith('-') and len(text) > 1 and row.get(text[1:]) is not None:
        return NegatedFieldRef(text[1:])
    if row.get(text) is not None:
        return FieldRef(text)
    return Literal(text)


def resolve_value_expr(expr, row):
    """Produce the value a compiled expression stands for."""
    if isinstance(expr, NegatedFieldRef):
        negated = -parse_amount_or_zero(row.get(expr.field))
        return negated if negated != 0 else 0.0
    if isinstance(expr, FieldRef):
        return row.get(expr.field)
    return expr.text


def evaluate(conditions, row, target_column):
    """Return the value the decision list assigns to ``target_column``.

    Args:
        conditions: Ordered Condition objects (or their dict records)
        row (dict): Raw transaction
        target_column (str): Canonical column to resolve

    Returns:
        The resolved value, or None if no condition for the column matched
    """
    for index, condition in enumerate(_as_conditions(conditions)):
        if target_column not in condition.then:
            continue
        if matches(condition.predicate, row):
            expr = compile_value_expr(condition.then[target_column], row)
            logger.debug(f"Condition {index} set {target_column} via {expr}")
            return resolve_value_expr(expr, row)
    return None


def evaluate_all(conditions, row):
    """Resolve every column any condition targets.

    Returns:
        dict: ``{column: value}`` for the columns whose decision list matched
    """
    conditions = _as_conditions(conditions)
    columns = []
    for condition in conditions:
        for column in condition.then:
            if column not in columns:
                columns.append(column)

    resolved = {}
    for column in columns:
        value = evaluate(conditions, row, column)
        if value is not None:
            resolved[column] = value
    return resolved
