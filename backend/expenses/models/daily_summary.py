import datetime
from sqlalchemy import String, Integer, Date, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class DailyExpenseSummary(Base, TimestampMixin):
    """
    Denormalized spending per user per day (optionally per expense book).

    total_spent_cents always equals the sum of the category rows. The row is
    removed once it has no categories and nothing spent.
    """

    __tablename__ = "daily_expense_summaries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    expense_book_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)  # time truncated
    total_spent_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    category_spending: Mapped[list["CategorySpending"]] = relationship(
        "CategorySpending",
        back_populates="summary",
        cascade="all, delete-orphan",
        order_by=lambda: [CategorySpending.amount_cents.desc(), CategorySpending.category],
    )

    @property
    def total_spent(self) -> float:
        """Total spent as decimal dollars."""
        return self.total_spent_cents / 100.0

    def __repr__(self) -> str:
        return (
            f"<DailyExpenseSummary(user='{self.user_id}', date={self.date}, "
            f"total={self.total_spent_cents})>"
        )


class CategorySpending(Base):
    """Running total and transaction count for one category within a day."""

    __tablename__ = "category_spending"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    summary_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("daily_expense_summaries.id", ondelete="CASCADE"), nullable=False
    )
    category: Mapped[str] = mapped_column(String(255), nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    summary: Mapped["DailyExpenseSummary"] = relationship(
        "DailyExpenseSummary", back_populates="category_spending"
    )

    @property
    def amount(self) -> float:
        return self.amount_cents / 100.0

    def __repr__(self) -> str:
        return f"<CategorySpending(category='{self.category}', amount={self.amount_cents}, count={self.count})>"
