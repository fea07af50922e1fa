import datetime
from sqlalchemy import String, Integer, Date, ForeignKey, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class Expense(Base, TimestampMixin):
    """
    A single recorded expense.

    Amounts are stored as integer cents to avoid floating point issues.
    Expenses are always outflows, so amounts are positive.
    """

    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Ownership
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    expense_book_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Core fields
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(255), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    # Additional details
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Recurring back-reference; definitions are soft-deleted so this stays resolvable
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False)
    recurring_expense_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("recurring_expenses.id"), nullable=True
    )

    recurring_expense: Mapped["RecurringExpense | None"] = relationship(
        "RecurringExpense", back_populates="expenses"
    )

    @property
    def amount(self) -> float:
        """Get amount as decimal dollars."""
        return self.amount_cents / 100.0

    @amount.setter
    def amount(self, value: float) -> None:
        """Set amount from decimal dollars."""
        self.amount_cents = int(round(value * 100))

    def __repr__(self) -> str:
        return (
            f"<Expense(id={self.id}, date={self.date}, "
            f"amount=${self.amount:.2f}, category='{self.category}')>"
        )
