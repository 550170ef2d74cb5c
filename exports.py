import csv
import io
from datetime import date

from app_models import amount_to_json

CSV_HEADERS = ['Name', 'WhatsApp', 'Class', 'Total Fee', 'Paid Fee', 'Due Amount']


def export_filename(today=None):
    today = today or date.today()
    return f'students_export_{today.isoformat()}.csv'


def students_csv(students):
    """Delimited text of the given students, one row each, in list order."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator='\n')
    writer.writerow(CSV_HEADERS)
    for s in students:
        writer.writerow([
            s.name,
            s.whatsapp,
            s.standard,
            amount_to_json(s.total_fee),
            amount_to_json(s.paid_fee),
            amount_to_json(s.due),
        ])
    return output.getvalue()


def filter_students(students, search='', standard=''):
    """Name substring match (case-insensitive) and exact class match, as the student list shows them."""
    search = (search or '').strip().lower()
    return [
        s for s in students
        if (not search or search in s.name.lower())
        and (not standard or s.standard == standard)
    ]
