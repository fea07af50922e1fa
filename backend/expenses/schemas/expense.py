import datetime as dt
from pydantic import BaseModel, ConfigDict, computed_field


class RecurringConfig(BaseModel):
    """Makes a new expense recurring."""
    frequency: str = "monthly"
    start_date: dt.date | None = None
    end_date: dt.date | None = None


class ExpenseCreate(BaseModel):
    """Fields for creating an expense."""
    amount: float
    date: dt.date
    category: str
    payment_method: str = ""
    description: str | None = None
    notes: str | None = None
    expense_book_id: str | None = None
    recurring: RecurringConfig | None = None


class ExpenseUpdate(BaseModel):
    """Fields for updating an expense (all optional)."""
    amount: float | None = None
    date: dt.date | None = None
    category: str | None = None
    payment_method: str | None = None
    description: str | None = None
    notes: str | None = None


class ExpenseResponse(BaseModel):
    """Expense response with all fields."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount_cents: int
    date: dt.date
    category: str
    payment_method: str
    description: str | None = None
    notes: str | None = None
    expense_book_id: str | None = None
    is_recurring: bool
    recurring_expense_id: int | None = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @computed_field
    @property
    def amount(self) -> float:
        """Amount in dollars."""
        return self.amount_cents / 100.0
