from .schedule import next_occurrence, classify_due_status
from .daily_summary_service import DailySummaryService, SummaryDelta
from .upcoming_payment_service import UpcomingPaymentProjector, WINDOW_SIZE
from .recurring_service import RecurringService
from .expense_service import ExpenseService

__all__ = [
    "next_occurrence",
    "classify_due_status",
    "DailySummaryService",
    "SummaryDelta",
    "UpcomingPaymentProjector",
    "WINDOW_SIZE",
    "RecurringService",
    "ExpenseService",
]
