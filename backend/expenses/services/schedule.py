"""Date arithmetic for recurring schedules."""
import calendar
from datetime import date, datetime, timedelta

from ..models.recurring_expense import Frequency
from ..models.upcoming_payment import PaymentStatus

# Days past due after which an unpaid instance is "pending" instead of "overdue"
OVERDUE_DAYS = 7


def as_date(value: date | datetime) -> date:
    """Truncate a datetime to its calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def _add_months(d: date, months: int) -> date:
    """Add months to a date, clamping day to valid range."""
    month = d.month - 1 + months
    year = d.year + month // 12
    month = month % 12 + 1
    max_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, max_day))


def parse_frequency(frequency: str | Frequency) -> Frequency:
    """
    Resolve a stored frequency string.

    Unknown values schedule as monthly.
    """
    if isinstance(frequency, Frequency):
        return frequency
    try:
        return Frequency((frequency or "").strip().lower())
    except ValueError:
        return Frequency.MONTHLY


def next_occurrence(current: date | datetime, frequency: str | Frequency) -> date:
    """Return the occurrence after current for the given frequency."""
    current = as_date(current)
    freq = parse_frequency(frequency)
    if freq == Frequency.DAILY:
        return current + timedelta(days=1)
    elif freq == Frequency.WEEKLY:
        return current + timedelta(days=7)
    elif freq == Frequency.YEARLY:
        return _add_months(current, 12)
    return _add_months(current, 1)


def classify_due_status(due_date: date | datetime, today: date | datetime) -> PaymentStatus:
    """
    Classify a due date relative to today.

    More than a week late is pending, up to a week late is overdue,
    today is due, anything later is upcoming.
    """
    days_until_due = (as_date(due_date) - as_date(today)).days
    if days_until_due < -OVERDUE_DAYS:
        return PaymentStatus.PENDING
    if days_until_due < 0:
        return PaymentStatus.OVERDUE
    if days_until_due == 0:
        return PaymentStatus.DUE
    return PaymentStatus.UPCOMING
