from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, computed_field

from ..models.upcoming_payment import PaymentStatus


class RecurringCreate(BaseModel):
    """Fields for creating a recurring expense."""
    amount: float
    category: str
    payment_method: str = ""
    description: str | None = None
    frequency: str = "monthly"
    start_date: date
    end_date: date | None = None
    expense_book_id: str | None = None


class RecurringUpdate(BaseModel):
    """Fields for updating a recurring expense (all optional)."""
    amount: float | None = None
    category: str | None = None
    payment_method: str | None = None
    description: str | None = None
    frequency: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class RecurringResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount_cents: int
    category: str
    payment_method: str
    description: str | None = None
    frequency: str
    start_date: date
    end_date: date | None = None
    next_occurrence: date
    last_processed: date | None = None
    is_active: bool
    expense_book_id: str | None = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def amount(self) -> float:
        """Amount in dollars."""
        return self.amount_cents / 100.0


class MarkPaidRequest(BaseModel):
    paid_date: date
    record_as_expense: bool = True


class UpcomingPaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    recurring_expense_id: int
    expense_book_id: str | None = None
    amount_cents: int
    category: str
    payment_method: str
    description: str | None = None
    frequency: str
    due_date: date
    status: PaymentStatus

    @computed_field
    @property
    def amount(self) -> float:
        """Amount in dollars."""
        return self.amount_cents / 100.0


class MarkPaidResponse(UpcomingPaymentResponse):
    """The consumed upcoming payment and what it became."""
    paid_date: date
    expense_id: int | None = None


class GenerateResponse(BaseModel):
    created_count: int


class RefreshResponse(BaseModel):
    updated_count: int
