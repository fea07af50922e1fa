import enum
from datetime import date
from sqlalchemy import String, Integer, Date, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class PaymentStatus(enum.Enum):
    """Due-date status of an upcoming payment."""
    UPCOMING = "upcoming"  # due in the future
    DUE = "due"            # due today
    OVERDUE = "overdue"    # up to a week late
    PENDING = "pending"    # unpaid for more than a week


class UpcomingPayment(Base, TimestampMixin):
    """
    One projected, not yet paid occurrence of a recurring expense.

    Rows are hard-deleted when paid or when the owning definition changes
    schedule or is deactivated.
    """

    __tablename__ = "upcoming_payments"
    __table_args__ = (
        UniqueConstraint("recurring_expense_id", "due_date", name="uq_upcoming_recurring_due"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    expense_book_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    recurring_expense_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("recurring_expenses.id"), nullable=False, index=True
    )

    # Copied from the definition at generation time
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(255), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    frequency: Mapped[str] = mapped_column(String(20), nullable=False)

    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus), nullable=False, default=PaymentStatus.UPCOMING
    )

    recurring_expense: Mapped["RecurringExpense"] = relationship(
        "RecurringExpense", back_populates="upcoming_payments"
    )

    @property
    def amount(self) -> float:
        """Get amount as decimal dollars."""
        return self.amount_cents / 100.0

    def __repr__(self) -> str:
        return (
            f"<UpcomingPayment(id={self.id}, recurring={self.recurring_expense_id}, "
            f"due={self.due_date}, status={self.status.value})>"
        )
