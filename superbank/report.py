"""
Report rendering and export.

Turns an AnalyticsSummary into the plain-text summary printed by the CLI and
the sectioned CSV report offered for download, and writes canonical rows out
as CSV or Excel.
"""

import csv
import io
import logging
import pathlib
from datetime import date

import pandas as pd

from superbank.config import TAGS_COLUMN
from superbank.tags import tag_name

logger = logging.getLogger(__name__)


def format_report_summary(summary):
    """Format a summary of the analytics.

    Args:
        summary (AnalyticsSummary): Aggregated analytics

    Returns:
        str: Formatted summary text
    """
    lines = [
        f"Total Transactions: {summary.total_transactions}",
        f"Tagged Transactions: {summary.tagged}",
        f"Untagged Transactions: {summary.untagged}",
        f"Total Amount: {summary.total_amount:.2f}",
        f"Total Credit: {summary.total_credit:.2f}",
        f"Total Debit: {summary.total_debit:.2f}",
    ]
    if summary.untyped:
        lines.append(f"Transactions without credit/debit type: {summary.untyped}")
    if summary.total_transactions == 0:
        lines.append("\nNo transactions found")
    return "\n".join(lines)


def generate_csv_report(summary, generated_on=None):
    """Render the sectioned CSV report.

    Sections: Summary, Bank Breakdown, Tag Breakdown and Monthly Breakdown
    (months in ascending order).

    Returns:
        str: CSV text
    """
    generated_on = generated_on or date.today()
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')

    writer.writerow(['Financial Report'])
    writer.writerow([f"Generated on: {generated_on.isoformat()}"])
    writer.writerow([])
    writer.writerow(['Summary'])
    writer.writerow(['Total Transactions', summary.total_transactions])
    writer.writerow(['Total Amount', f"{summary.total_amount:.2f}"])
    writer.writerow(['Total Credit', f"{summary.total_credit:.2f}"])
    writer.writerow(['Total Debit', f"{summary.total_debit:.2f}"])
    writer.writerow(['Tagged Transactions', summary.tagged])
    writer.writerow(['Untagged Transactions', summary.untagged])

    writer.writerow([])
    writer.writerow(['Bank Breakdown'])
    writer.writerow(['Bank', 'Transactions', 'Amount', 'Credit', 'Debit'])
    for bank in summary.bank_breakdown.values():
        writer.writerow([
            bank['name'], bank['count'], f"{bank['amount']:.2f}",
            f"{bank['credit']:.2f}", f"{bank['debit']:.2f}",
        ])

    writer.writerow([])
    writer.writerow(['Tag Breakdown'])
    writer.writerow(['Tag', 'Transactions', 'Amount'])
    for tag in summary.tag_breakdown.values():
        writer.writerow([tag['name'], tag['count'], f"{tag['amount']:.2f}"])

    writer.writerow([])
    writer.writerow(['Monthly Breakdown'])
    writer.writerow(['Month', 'Transactions', 'Amount', 'Credit', 'Debit'])
    for month, data in sorted(summary.monthly_breakdown.items()):
        writer.writerow([
            month, data['count'], f"{data['amount']:.2f}",
            f"{data['credit']:.2f}", f"{data['debit']:.2f}",
        ])

    return buffer.getvalue()


def save_report(summary, output_path):
    """Write the report to disk.

    A ``.txt`` path gets the text summary, anything else the CSV report. A
    directory (or a path without suffix) receives ``report.csv``.

    Returns:
        pathlib.Path: The file written
    """
    output_path = pathlib.Path(output_path)
    if output_path.is_dir() or not output_path.suffix:
        output_path = output_path / "report.csv"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_path.suffix.lower() == '.txt':
        content = format_report_summary(summary)
    else:
        content = generate_csv_report(summary)

    logger.debug(f"Writing report to {output_path}")
    with open(output_path, 'w', newline='') as f:
        f.write(content)
    return output_path


def rows_to_dataframe(rows, header):
    """Canonical rows as a DataFrame with tags flattened to their names."""
    records = []
    for row in rows:
        record = {}
        for column in header:
            value = row.get(column, '')
            if column == TAGS_COLUMN:
                value = ', '.join(tag_name(t) for t in value) if isinstance(value, list) else ''
            record[column] = value
        records.append(record)
    return pd.DataFrame(records, columns=list(header))


def save_canonical_rows(rows, header, output_path):
    """Save canonical rows to a CSV (or ``.xlsx``) file.

    Returns:
        pathlib.Path: The file written
    """
    output_path = pathlib.Path(output_path)
    if output_path.is_dir() or not output_path.suffix:
        output_path = output_path / "super_bank.csv"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df = rows_to_dataframe(rows, header)
    if output_path.suffix.lower() == '.xlsx':
        with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
            df.to_excel(writer, sheet_name='Super Bank', index=False)
    else:
        df.to_csv(output_path, index=False, quoting=csv.QUOTE_NONNUMERIC)
    logger.info(f"Saved {len(df)} rows to {output_path}")
    return output_path
