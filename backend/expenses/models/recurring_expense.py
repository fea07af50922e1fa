import enum
from datetime import date
from sqlalchemy import String, Integer, Date, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class Frequency(enum.Enum):
    """Known recurrence cadences."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class RecurringExpense(Base, TimestampMixin):
    """
    Template for a repeating expense.

    frequency is stored as free text; values outside Frequency are scheduled
    as monthly. Definitions are never hard-deleted: deactivation flips
    is_active so recorded expenses keep a resolvable back-reference.
    """

    __tablename__ = "recurring_expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Ownership
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    expense_book_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # What gets paid
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(255), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Schedule
    frequency: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Frequency.MONTHLY.value
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)  # inclusive, null = no end
    next_occurrence: Mapped[date] = mapped_column(Date, nullable=False)
    last_processed: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Active flag
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Relationships
    expenses: Mapped[list["Expense"]] = relationship(
        "Expense", back_populates="recurring_expense"
    )
    upcoming_payments: Mapped[list["UpcomingPayment"]] = relationship(
        "UpcomingPayment", back_populates="recurring_expense"
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
            f"<RecurringExpense(id={self.id}, category='{self.category}', "
            f"frequency={self.frequency}, next={self.next_occurrence})>"
        )
