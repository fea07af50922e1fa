from .expense import RecurringConfig, ExpenseCreate, ExpenseUpdate, ExpenseResponse
from .recurring import (
    RecurringCreate,
    RecurringUpdate,
    RecurringResponse,
    MarkPaidRequest,
    UpcomingPaymentResponse,
    MarkPaidResponse,
    GenerateResponse,
    RefreshResponse,
)
from .summary import CategorySpendingItem, DailyTransactionGroup, RebuildResponse

__all__ = [
    "RecurringConfig",
    "ExpenseCreate",
    "ExpenseUpdate",
    "ExpenseResponse",
    "RecurringCreate",
    "RecurringUpdate",
    "RecurringResponse",
    "MarkPaidRequest",
    "UpcomingPaymentResponse",
    "MarkPaidResponse",
    "GenerateResponse",
    "RefreshResponse",
    "CategorySpendingItem",
    "DailyTransactionGroup",
    "RebuildResponse",
]
