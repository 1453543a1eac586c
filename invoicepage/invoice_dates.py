from __future__ import annotations

from datetime import date, datetime, timedelta

DATE_FORMAT = "%Y-%m-%d"


def _parse_date(value: str | None) -> date | None:
    text = (value or "").strip()
    if not text:
        return None
    try:
        return datetime.strptime(text[:10], DATE_FORMAT).date()
    except ValueError:
        return None


def resolve_invoice_dates(
    invoice_date: str | None,
    due_date: str | None,
    *,
    today: date | None = None,
    due_days: int = 30,
) -> tuple[date, date]:
    """Invoice date defaults to today, the due date to invoice date + ``due_days``."""
    issued = _parse_date(invoice_date) or today or date.today()
    due = _parse_date(due_date) or issued + timedelta(days=due_days)
    return issued, due


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)
