"""
Command line entry point.

Runs one Super Bank pass over JSON exports of the record store: normalize
every transaction onto the canonical header, apply the view filters,
aggregate, and write the canonical rows plus the reports.
"""

import argparse
import logging

from superbank.aggregate import aggregate
from superbank.filters import filter_rows, sort_rows_by_date
from superbank.normalize import header_from_records, index_bank_mappings, normalize_transactions
from superbank.report import format_report_summary, save_canonical_rows, save_report
from superbank.statements import load_records
from superbank.utils import create_output_directories, setup_logging

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(description='Normalize bank transactions and report Super Bank analytics')
    parser.add_argument('--transactions', type=str, required=True,
                        help='JSON export of raw transactions')
    parser.add_argument('--mappings', type=str, required=True,
                        help='JSON export of bank header records (including SUPER BANK)')
    parser.add_argument('--tags', type=str, default=None,
                        help='JSON export of the tag catalog')
    parser.add_argument('--banks', type=str, default=None,
                        help='JSON export of bank records, for display names')
    parser.add_argument('--output', type=str, default='output',
                        help='Output directory')
    parser.add_argument('--from', dest='date_from', type=str, default=None,
                        help='Earliest transaction date (YYYY-MM-DD)')
    parser.add_argument('--to', dest='date_to', type=str, default=None,
                        help='Latest transaction date (YYYY-MM-DD)')
    parser.add_argument('--bank', action='append', default=[],
                        help='Only include this bank id (repeatable)')
    parser.add_argument('--account', action='append', default=[],
                        help='Only include this account id (repeatable)')
    parser.add_argument('--tag', action='append', default=[],
                        help='Only include rows with this tag id or name (repeatable)')
    parser.add_argument('--exclude-untagged', action='store_true',
                        help='Drop rows without tags')
    parser.add_argument('--search', type=str, default=None,
                        help='Free text search')
    parser.add_argument('--search-field', type=str, default='all',
                        help="Column to search, or 'all'")
    parser.add_argument('--no-sign-inference', action='store_true',
                        help='Do not derive credit/debit from the sign of the amount')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    parser.add_argument('--log-level', type=str, default='info',
                        help='Log level when --debug is not given')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Log file (default: $LOG_FILE or debug.log)')
    return parser


def run(args):
    """Execute one pass and return the summary."""
    transactions = load_records(args.transactions)
    mapping_records = load_records(args.mappings)
    tags = load_records(args.tags) if args.tags else []
    banks = load_records(args.banks) if args.banks else None

    header = header_from_records(mapping_records)
    bank_mappings = index_bank_mappings(mapping_records)
    logger.info(f"Canonical header: {header}")

    rows = normalize_transactions(transactions, bank_mappings, header, tags)
    rows = filter_rows(
        rows,
        transactions,
        date_from=args.date_from,
        date_to=args.date_to,
        banks=args.bank,
        accounts=args.account,
        tags=args.tag,
        include_untagged=not args.exclude_untagged,
        search=args.search,
        search_field=args.search_field,
        header=header,
    )
    rows = sort_rows_by_date(rows)

    summary = aggregate(
        rows,
        transactions,
        bank_mappings,
        banks=banks,
        infer_type_from_sign=False if args.no_sign_inference else None,
    )

    paths = create_output_directories(args.output)
    save_canonical_rows(rows, header, paths["rows"] / "super_bank.csv")
    save_report(summary, paths["reports"] / "report.csv")
    save_report(summary, paths["reports"] / "report.txt")
    return summary


def main(argv=None):
    """Main execution function."""
    args = build_parser().parse_args(argv)
    setup_logging(debug=args.debug, log_level=args.log_level, log_file=args.log_file)
    logger.info("Starting Super Bank run")
    try:
        summary = run(args)
    except Exception as e:
        logger.error(f"Error during Super Bank run: {str(e)}")
        raise
    print(format_report_summary(summary))
    return summary


if __name__ == '__main__':
    main()
