from .base import Base
from .expense import Expense
from .recurring_expense import RecurringExpense, Frequency
from .upcoming_payment import UpcomingPayment, PaymentStatus
from .daily_summary import DailyExpenseSummary, CategorySpending

__all__ = [
    "Base",
    "Expense",
    "RecurringExpense",
    "Frequency",
    "UpcomingPayment",
    "PaymentStatus",
    "DailyExpenseSummary",
    "CategorySpending",
]
