import logging

import pytest

from superbank.config import DEFAULT_TAG_COLOR
from superbank.models import BankMapping, Condition, Predicate, Tag


class TestTagRecords:
    """Tag record conversion."""

    def test_from_record(self):
        tag = Tag.from_record({'id': 't1', 'name': 'Rent', 'color': '#111'})
        assert tag == Tag('t1', 'Rent', '#111')
        assert tag.to_dict() == {'id': 't1', 'name': 'Rent', 'color': '#111'}

    def test_missing_fields_get_defaults(self):
        tag = Tag.from_record({'id': 't9'})
        assert tag.name == 't9'
        assert tag.color == DEFAULT_TAG_COLOR


class TestConditionRecords:
    """Condition record conversion."""

    def test_round_trip(self):
        record = {'if': {'field': 'Balance', 'op': '>=', 'value': '100'}, 'then': {'Type': 'CR'}}
        condition = Condition.from_record(record)
        assert condition.predicate == Predicate('Balance', '>=', '100')
        assert condition.then == {'Type': 'CR'}
        assert condition.to_record() == record

    def test_value_is_stringified(self):
        condition = Condition.from_record({'if': {'field': 'Amt', 'op': '>', 'value': 0}, 'then': {'Type': 'CR'}})
        assert condition.predicate.value == '0'

    @pytest.mark.parametrize("record", [
        None,
        'present',
        {'then': {'Amount': 'Amt'}},
        {'if': {'op': 'present'}, 'then': {}},
        {'if': 'Amt present'},
    ])
    def test_malformed_records(self, record):
        assert Condition.from_record(record) is None

    def test_unknown_operator_is_kept_and_warned(self, caplog):
        with caplog.at_level(logging.WARNING):
            condition = Condition.from_record({'if': {'field': 'Amt', 'op': 'contains'}, 'then': {'Type': 'CR'}})
        assert condition.predicate.op == 'contains'
        assert "Unknown condition operator" in caplog.text


class TestBankMappingRecords:
    """Bank header record conversion."""

    def test_null_mapping_and_conditions(self):
        mapping = BankMapping.from_record({'id': 'AXIS', 'bankId': 'b4', 'header': ['Date'], 'mapping': None, 'conditions': None})
        assert mapping.name == 'AXIS'
        assert mapping.bank_id == 'b4'
        assert mapping.header == ('Date',)
        assert mapping.mapping == {}
        assert mapping.conditions == ()
        assert mapping.reverse_mapping() == {}

    def test_blank_targets_are_dropped(self):
        mapping = BankMapping.from_record({'id': 'AXIS', 'mapping': {'Txn Date': 'Date', 'Ref No': ''}})
        assert mapping.mapping == {'Txn Date': 'Date'}

    def test_malformed_conditions_are_skipped(self, caplog):
        with caplog.at_level(logging.WARNING):
            mapping = BankMapping.from_record({
                'id': 'AXIS',
                'conditions': [
                    {'if': {'field': 'Dr', 'op': 'present'}, 'then': {'Type': 'DR'}},
                    {'then': {'Type': 'CR'}},
                ],
            })
        assert len(mapping.conditions) == 1
        assert "Skipping malformed condition" in caplog.text

    def test_duplicate_targets(self, caplog):
        with caplog.at_level(logging.WARNING):
            mapping = BankMapping.from_record({
                'id': 'ICICI',
                'mapping': {'Value Date': 'Date', 'Txn Date': 'Date', 'Remarks': 'Description'},
            })
        assert mapping.duplicate_targets() == ['Date']
        assert mapping.reverse_mapping() == {'Date': 'Txn Date', 'Description': 'Remarks'}
        assert "maps several raw columns" in caplog.text

    def test_to_record(self):
        record = {
            'id': 'HDFC',
            'bankId': 'b1',
            'header': ['Date', 'Narration'],
            'mapping': {'Narration': 'Description'},
            'conditions': [{'if': {'field': 'Narration', 'op': 'present'}, 'then': {'Type': 'DR'}}],
        }
        assert BankMapping.from_record(record).to_record() == record
