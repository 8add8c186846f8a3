"""CSV export of raw contribution records."""
from datetime import date
from decimal import Decimal
from typing import Any, Iterable

CSV_HEADERS = ["Date", "Staff Member", "File No", "Category", "Amount", "Notes"]


def _quote(value: Any) -> str:
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def _plain(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _amount(value: Any) -> str:
    # 5000.00 -> 5000, 2500.50 -> 2500.5
    if value is None:
        return ""
    return format(Decimal(str(value)).normalize(), "f")


def contributions_to_csv(records: Iterable[Any]) -> str:
    """
    Render records as CSV in stored order.

    Date and amount are written bare, the amount without trailing zeros;
    name, file number, category and notes are always double-quoted with
    embedded quotes doubled.
    """
    lines = [",".join(CSV_HEADERS)]
    for record in records:
        category = getattr(record.category, "value", record.category)
        lines.append(",".join([
            _plain(record.date),
            _quote(record.member_name),
            _quote(record.file_number),
            _quote(category),
            _amount(record.amount),
            _quote(record.notes or ""),
        ]))
    return "\n".join(lines)


def export_filename(today: date = None) -> str:
    today = today or date.today()
    return f"NYSC_Katsina_Coop_Report_{today.isoformat()}.csv"
