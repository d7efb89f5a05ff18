import datetime

import pytest

from superbank.filters import filter_rows, find_date_column, matches_search, sort_rows_by_date
from superbank.models import Tag


def ids(rows):
    return [row['id'] for row in rows]


class TestSearch:
    """Free text search over canonical rows."""

    def test_all_columns(self):
        row = {'id': 'rent-1', 'Description': 'RENT MARCH', 'Tags': [Tag('t1', 'Housing')]}
        assert matches_search(row, 'rent')
        assert matches_search(row, 'hous')
        assert not matches_search({'id': 'rent-1', 'Description': 'SALARY'}, 'rent')

    def test_single_column(self):
        row = {'Description': 'ATM WDL', 'Amount': -2000.0}
        assert matches_search(row, '2000', 'Amount')
        assert not matches_search(row, 'atm', 'Amount')
        assert not matches_search(row, 'atm', 'Missing')

    def test_empty_search_matches(self):
        assert matches_search({'Description': 'x'}, '')
        assert matches_search({'Description': 'x'}, None)


class TestFilterRows:
    """Test suite for the view filters."""

    def test_no_filters_keep_everything(self, normalized_rows, transactions):
        assert filter_rows(normalized_rows, transactions) == normalized_rows

    def test_date_range_is_inclusive(self, normalized_rows, header):
        rows = filter_rows(normalized_rows, date_from='2023-03-10', date_to='2023-04-02', header=header)
        assert ids(rows) == ['h2', 's1', 'u1']

    def test_date_bounds_accept_dates(self, normalized_rows):
        rows = filter_rows(normalized_rows, date_from=datetime.date(2023, 4, 1))
        assert ids(rows) == ['s1', 's2']

    def test_unreadable_dates_are_kept(self):
        rows = [{'id': 'x', 'Date': 'pending'}, {'id': 'y', 'Date': '01/01/2020'}]
        assert ids(filter_rows(rows, date_from='2021-01-01')) == ['x']

    def test_bank_and_account(self, normalized_rows, transactions):
        assert ids(filter_rows(normalized_rows, transactions, banks=['b2'])) == ['s1', 's2']
        assert ids(filter_rows(normalized_rows, transactions, accounts=['a1', 'a3'])) == ['h1', 'h2', 'u1']
        assert filter_rows(normalized_rows, [], banks=['b2']) == []

    @pytest.mark.parametrize("tags,expected", [
        (['t1'], ['h1']),
        (['Cash'], ['s1']),
        (['t1', 'gone'], ['h1', 'u1']),
    ])
    def test_tags_by_id_or_name(self, normalized_rows, tags, expected):
        assert ids(filter_rows(normalized_rows, tags=tags)) == expected

    def test_exclude_untagged(self, normalized_rows):
        assert ids(filter_rows(normalized_rows, include_untagged=False)) == ['h1', 's1', 'u1']

    def test_search_field(self, normalized_rows):
        assert ids(filter_rows(normalized_rows, search='wdl', search_field='Description')) == ['s1']
        assert ids(filter_rows(normalized_rows, search='rent')) == ['h1']


class TestSortingAndColumns:
    """Date column discovery and ordering."""

    def test_find_date_column(self):
        assert find_date_column(['Description', 'Value Date', 'Date']) == 'Value Date'
        assert find_date_column(['Description']) is None

    def test_sort_newest_first(self, normalized_rows):
        assert ids(sort_rows_by_date(normalized_rows)) == ['s2', 's1', 'u1', 'h2', 'h1']

    def test_sort_oldest_first_with_unreadable_dates(self):
        rows = [{'id': 'a', 'Date': '02/01/2024'}, {'id': 'b', 'Date': 'n/a'}, {'id': 'c', 'Date': '01/01/2024'}]
        assert ids(sort_rows_by_date(rows, descending=False)) == ['b', 'c', 'a']
