import pytest

from superbank.models import BankMapping, Tag

# Canonical header as configured on the SUPER BANK record
super_bank_record = {
    'id': 'SUPER BANK',
    'bankId': None,
    'header': ['Date', 'Description', 'Amount', 'Type'],
}

# HDFC splits withdrawals and deposits into two columns
hdfc_mapping_record = {
    'id': 'HDFC',
    'bankId': 'b1',
    'header': ['Date', 'Narration', 'Withdrawal Amt.', 'Deposit Amt.', 'Closing Balance'],
    'mapping': {'Date': 'Date', 'Narration': 'Description'},
    'conditions': [
        {'if': {'field': 'Withdrawal Amt.', 'op': 'present'},
         'then': {'Amount': '-Withdrawal Amt.', 'Type': 'DR'}},
        {'if': {'field': 'Deposit Amt.', 'op': 'present'},
         'then': {'Amount': 'Deposit Amt.', 'Type': 'CR'}},
    ],
}

# SBI has a signed-less amount plus a CR/DR column
sbi_mapping_record = {
    'id': 'SBI',
    'bankId': 'b2',
    'header': ['Txn Date', 'Details', 'Amt', 'Cr/Dr'],
    'mapping': {'Txn Date': 'Date', 'Details': 'Description', 'Amt': 'Amount', 'Cr/Dr': 'Type'},
    'conditions': None,
}

hdfc_transactions = [
    {
        'id': 'h1', 'bankId': 'b1', 'accountId': 'a1', 'statementId': 's1',
        'Date': '05/03/23', 'Narration': 'RENT MARCH',
        'Withdrawal Amt.': '15,000.00', 'Deposit Amt.': '', 'Closing Balance': '85,000.00',
        'tags': ['t1'],
    },
    {
        'id': 'h2', 'bankId': 'b1', 'accountId': 'a1', 'statementId': 's1',
        'Date': '10/03/23', 'Narration': 'SALARY',
        'Withdrawal Amt.': '', 'Deposit Amt.': '1,11,111.00', 'Closing Balance': '1,96,111.00',
        'tags': [],
    },
]

sbi_transactions = [
    {
        'id': 's1', 'bankId': 'b2', 'accountId': 'a2', 'statementId': 's2',
        'Txn Date': '2023-04-02', 'Details': 'ATM WDL', 'Amt': '2,000.00', 'Cr/Dr': 'DR',
        'tags': [{'id': 't2', 'name': 'Cash', 'color': '#0f0'}],
    },
    {
        'id': 's2', 'bankId': 'b2', 'accountId': 'a2', 'statementId': 's2',
        'Txn Date': '15-04-2023', 'Details': 'INTEREST', 'Amt': '350.50', 'Cr/Dr': 'CR',
        'tags': [],
    },
]

# A bank nobody has configured yet
unmapped_transactions = [
    {
        'id': 'u1', 'bankId': 'b3', 'accountId': 'a3', 'statementId': 's3',
        'Date': '2023-03-20', 'Description': 'REFUND', 'Amount': '250',
        'tags': ['gone'],
    },
]

tag_records = [
    {'id': 't1', 'name': 'Rent', 'color': '#111'},
    {'id': 't2', 'name': 'Cash', 'color': '#222'},
]


@pytest.fixture
def header():
    return ['Date', 'Description', 'Amount', 'Type', 'Tags']


@pytest.fixture
def mapping_records():
    return [super_bank_record, hdfc_mapping_record, sbi_mapping_record]


@pytest.fixture
def bank_mappings():
    return {
        'b1': BankMapping.from_record(hdfc_mapping_record),
        'b2': BankMapping.from_record(sbi_mapping_record),
    }


@pytest.fixture
def transactions():
    return [dict(tx) for tx in hdfc_transactions + sbi_transactions + unmapped_transactions]


@pytest.fixture
def tag_catalog():
    return [Tag.from_record(record) for record in tag_records]


@pytest.fixture
def banks():
    return [
        {'id': 'b1', 'bankName': 'HDFC Bank'},
        {'id': 'b2', 'bankName': 'State Bank of India'},
    ]


@pytest.fixture
def normalized_rows(transactions, bank_mappings, header, tag_catalog):
    from superbank.normalize import normalize_transactions
    return normalize_transactions(transactions, bank_mappings, header, tag_catalog)
