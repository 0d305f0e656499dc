# billing/csv_export.py
import csv
import io

from .report import format_amount

CSV_HEADERS = ['date', 'clinic', 'gross', 'notes']


def export_rows(entries):
    """Map billing entries to the date/clinic/gross/notes export shape"""
    return [
        {
            'date': entry.bill_date.isoformat(),
            'clinic': entry.clinic,
            'gross': format_amount(entry.gross_billing),
            'notes': entry.notes or '',
        }
        for entry in entries
    ]


def build_csv(rows):
    """
    Serialize dict rows to CSV text.

    The header comes from the first row's keys. Fields containing a comma,
    quote or newline are quoted with internal quotes doubled; lines are
    joined with '\\n' and there is no trailing newline.

    Returns:
        CSV text, or None when there are no rows
    """
    if not rows:
        return None

    headers = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')
    writer.writerow(headers)
    for row in rows:
        writer.writerow(['' if row.get(h) is None else str(row.get(h)) for h in headers])

    return buffer.getvalue().rstrip('\n')


def export_filename(prefix, date_from, date_to, extension='csv'):
    """<prefix>-billing-<from>_to_<to>.<extension>"""
    return f'{prefix}-billing-{date_from.isoformat()}_to_{date_to.isoformat()}.{extension}'
