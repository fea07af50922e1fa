import datetime as dt
from pydantic import BaseModel, computed_field


class CategorySpendingItem(BaseModel):
    category: str
    amount_cents: int
    count: int

    @computed_field
    @property
    def amount(self) -> float:
        return self.amount_cents / 100.0


class DailyTransactionGroup(BaseModel):
    """One day of spending, grouped by category."""
    date: dt.date
    date_label: str
    expense_book_id: str | None = None
    category_spending: list[CategorySpendingItem]
    total_spent_cents: int

    @computed_field
    @property
    def total_spent(self) -> float:
        return self.total_spent_cents / 100.0


class RebuildResponse(BaseModel):
    summaries_written: int
