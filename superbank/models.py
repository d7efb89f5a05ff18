"""
Record types shared by the normalization engine.

Raw transactions and canonical rows stay plain dictionaries because their
column set is configured per bank at runtime. The configuration side (tags,
bank mappings and their conditions) is modelled with frozen dataclasses that
round-trip to the persisted record shapes:

    bank mapping  {id, bankId, header, mapping?, conditions?}
    condition     {if: {field, op, value?}, then: {column: expr}}
    tag           {id, name, color}
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from superbank.config import DEFAULT_TAG_COLOR

logger = logging.getLogger(__name__)

OPERATORS = ('present', 'not_present', '==', '!=', '>=', '<=', '>', '<')

# A raw transaction maps bank column names to strings, numbers or tag lists.
FieldValue = Union[str, int, float, List[Any]]
RawTransaction = Dict[str, FieldValue]
CanonicalRow = Dict[str, Any]


@dataclass(frozen=True)
class Tag:
    id: str
    name: str
    color: str = DEFAULT_TAG_COLOR

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Tag":
        tag_id = str(record.get('id', '') or '')
        name = record.get('name') or tag_id
        color = record.get('color') or DEFAULT_TAG_COLOR
        return cls(id=tag_id, name=str(name), color=str(color))

    def to_dict(self) -> Dict[str, str]:
        return {'id': self.id, 'name': self.name, 'color': self.color}


# ---------------------------------------------------------------------------
# Value expressions on the right-hand side of a condition
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class FieldRef:
    field: str


@dataclass(frozen=True)
class NegatedFieldRef:
    field: str


ValueExpr = Union[Literal, FieldRef, NegatedFieldRef]


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Predicate:
    field: str
    op: str
    value: Optional[str] = None


@dataclass(frozen=True)
class Condition:
    """One ``if``/``then`` entry of a bank's decision list."""

    predicate: Predicate
    then: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> Optional["Condition"]:
        """Build a condition from its persisted shape.

        Returns None for records without a usable ``if`` clause.
        """
        if not isinstance(record, dict):
            return None
        clause = record.get('if')
        if not isinstance(clause, dict) or not clause.get('field'):
            return None

        op = str(clause.get('op', '')).strip()
        if op not in OPERATORS:
            logger.warning(f"Unknown condition operator {op!r}; condition will never match")

        value = clause.get('value')
        then = record.get('then')
        if not isinstance(then, dict):
            then = {}
        return cls(
            predicate=Predicate(
                field=str(clause['field']),
                op=op,
                value=None if value is None else str(value),
            ),
            then={str(k): str(v) for k, v in then.items() if v is not None},
        )

    def to_record(self) -> Dict[str, Any]:
        clause = {'field': self.predicate.field, 'op': self.predicate.op}
        if self.predicate.value is not None:
            clause['value'] = self.predicate.value
        return {'if': clause, 'then': dict(self.then)}


# ---------------------------------------------------------------------------
# Bank mappings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BankMapping:
    """Per-bank translation table plus its ordered conditions."""

    name: str
    bank_id: Optional[str] = None
    header: Tuple[str, ...] = ()
    mapping: Dict[str, str] = field(default_factory=dict)
    conditions: Tuple[Condition, ...] = ()

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "BankMapping":
        """Build a mapping from a bank header record.

        Missing or null ``mapping``/``conditions`` become empty, leaving the
        bank on identity mapping.
        """
        raw_mapping = record.get('mapping')
        if not isinstance(raw_mapping, dict):
            raw_mapping = {}
        mapping = {
            str(raw_col): str(canonical)
            for raw_col, canonical in raw_mapping.items()
            if canonical
        }

        raw_conditions = record.get('conditions')
        if not isinstance(raw_conditions, list):
            raw_conditions = []
        conditions = []
        for raw in raw_conditions:
            condition = Condition.from_record(raw)
            if condition is None:
                logger.warning(f"Skipping malformed condition for {record.get('id')}: {raw!r}")
                continue
            conditions.append(condition)

        header = record.get('header')
        result = cls(
            name=str(record.get('id', '') or ''),
            bank_id=record.get('bankId'),
            header=tuple(str(h) for h in header) if isinstance(header, list) else (),
            mapping=mapping,
            conditions=tuple(conditions),
        )
        duplicates = result.duplicate_targets()
        if duplicates:
            logger.warning(
                f"Bank {result.name} maps several raw columns onto {duplicates}; "
                "the last declared column is used"
            )
        return result

    def to_record(self) -> Dict[str, Any]:
        return {
            'id': self.name,
            'bankId': self.bank_id,
            'header': list(self.header),
            'mapping': dict(self.mapping),
            'conditions': [c.to_record() for c in self.conditions],
        }

    def duplicate_targets(self) -> List[str]:
        """Canonical columns that more than one raw column maps onto."""
        counts = Counter(self.mapping.values())
        return sorted(col for col, n in counts.items() if n > 1)

    def reverse_mapping(self) -> Dict[str, str]:
        """Invert ``mapping`` into ``{canonicalColumn: rawColumn}``."""
        reverse = {}
        for raw_col, canonical in self.mapping.items():
            reverse[canonical] = raw_col
        return reverse
