import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from sqlalchemy.orm import Session

from ..models import Expense, DailyExpenseSummary, CategorySpending
from .schedule import as_date

logger = logging.getLogger(__name__)


@dataclass
class SummaryDelta:
    """A signed change to one (user, book, day, category) bucket."""
    user_id: str
    expense_book_id: str | None
    day: date | datetime
    category: str
    amount_cents: int
    count: int


class DailySummaryService:
    """Incrementally maintained per-day, per-category spending totals."""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, user_id: str, expense_book_id: str | None, day: date) -> DailyExpenseSummary | None:
        query = self.db.query(DailyExpenseSummary).filter(
            DailyExpenseSummary.user_id == user_id,
            DailyExpenseSummary.date == day,
        )
        if expense_book_id is None:
            query = query.filter(DailyExpenseSummary.expense_book_id.is_(None))
        else:
            query = query.filter(DailyExpenseSummary.expense_book_id == expense_book_id)
        return query.first()

    def get_summary(
        self,
        user_id: str,
        day: date | datetime,
        expense_book_id: str | None = None,
    ) -> DailyExpenseSummary | None:
        return self._find(user_id, expense_book_id, as_date(day))

    def apply_delta(
        self,
        user_id: str,
        expense_book_id: str | None,
        day: date | datetime,
        category: str,
        amount_delta_cents: int,
        count_delta: int,
    ) -> DailyExpenseSummary | None:
        """
        Add a signed amount/count to a day's category bucket.

        The category entry is dropped once its count reaches zero, whatever
        the sign of the amount. Returns the summary row, or None if the row
        no longer exists (or was never created).
        """
        day = as_date(day)
        summary = self._find(user_id, expense_book_id, day)

        if summary is None:
            if amount_delta_cents <= 0:
                return None
            summary = DailyExpenseSummary(
                user_id=user_id,
                expense_book_id=expense_book_id,
                date=day,
                total_spent_cents=0,
            )
            self.db.add(summary)

        entry = next(
            (c for c in summary.category_spending if c.category == category), None
        )
        if entry is None:
            entry = CategorySpending(category=category, amount_cents=0, count=0)
            summary.category_spending.append(entry)

        entry.amount_cents += amount_delta_cents
        entry.count += count_delta

        if entry.count <= 0:
            summary.category_spending.remove(entry)

        summary.total_spent_cents = sum(c.amount_cents for c in summary.category_spending)
        summary.category_spending.sort(key=lambda c: (-c.amount_cents, c.category))

        if not summary.category_spending and summary.total_spent_cents <= 0:
            if summary in self.db.new:
                self.db.expunge(summary)
            else:
                self.db.delete(summary)
            self.db.flush()
            return None

        self.db.flush()
        return summary

    def apply_deltas(self, deltas: list[SummaryDelta]) -> None:
        """Apply several deltas in order."""
        for delta in deltas:
            self.apply_delta(
                delta.user_id,
                delta.expense_book_id,
                delta.day,
                delta.category,
                delta.amount_cents,
                delta.count,
            )

    # --- Expense hooks ---

    def expense_created(self, expense: Expense) -> None:
        self.apply_delta(
            expense.user_id, expense.expense_book_id, expense.date,
            expense.category, expense.amount_cents, 1,
        )

    def expense_deleted(self, expense: Expense) -> None:
        self.apply_delta(
            expense.user_id, expense.expense_book_id, expense.date,
            expense.category, -expense.amount_cents, -1,
        )

    def expense_edited(self, old: SummaryDelta, expense: Expense) -> None:
        """
        Re-bucket an edited expense.

        old carries the pre-edit bucket and amount. The remove and add always
        both run, even when nothing that affects the bucket changed.
        """
        self.apply_deltas([
            SummaryDelta(
                old.user_id, old.expense_book_id, old.day,
                old.category, -old.amount_cents, -1,
            ),
            SummaryDelta(
                expense.user_id, expense.expense_book_id, expense.date,
                expense.category, expense.amount_cents, 1,
            ),
        ])

    # --- Backfill and reads ---

    def rebuild_from_history(self, user_id: str) -> int:
        """
        Recompute every day bucket for a user from the full expense history.

        Existing rows for days that have expenses are replaced; other rows are
        left alone. Returns the number of summary rows written.
        """
        expenses = self.db.query(Expense).filter(Expense.user_id == user_id).all()
        if not expenses:
            return 0

        # {(book, day): {category: [cents, count]}}
        grouped: dict[tuple[str | None, date], dict[str, list[int]]] = {}
        for expense in expenses:
            key = (expense.expense_book_id, as_date(expense.date))
            bucket = grouped.setdefault(key, {})
            totals = bucket.setdefault(expense.category, [0, 0])
            totals[0] += expense.amount_cents
            totals[1] += 1

        written = 0
        for (book_id, day), categories in grouped.items():
            entries = sorted(
                (
                    CategorySpending(category=cat, amount_cents=cents, count=count)
                    for cat, (cents, count) in categories.items()
                ),
                key=lambda c: (-c.amount_cents, c.category),
            )
            summary = self._find(user_id, book_id, day)
            if summary is None:
                summary = DailyExpenseSummary(user_id=user_id, expense_book_id=book_id, date=day)
                self.db.add(summary)
            summary.category_spending = entries
            summary.total_spent_cents = sum(c.amount_cents for c in entries)
            self.db.flush()
            written += 1

        logger.info("Rebuilt %d daily summaries for user %s", written, user_id)
        return written

    def grouped_by_day(
        self,
        user_id: str,
        today: date,
        start_date: date | None = None,
        end_date: date | None = None,
        expense_book_id: str | None = None,
        limit: int = 10,
    ) -> list[dict]:
        """Most recent day summaries in a range (default last 30 days), newest first."""
        start = start_date or today - timedelta(days=30)
        end = end_date or today

        query = self.db.query(DailyExpenseSummary).filter(
            DailyExpenseSummary.user_id == user_id,
            DailyExpenseSummary.date >= start,
            DailyExpenseSummary.date <= end,
        )
        if expense_book_id is not None:
            query = query.filter(DailyExpenseSummary.expense_book_id == expense_book_id)

        summaries = query.order_by(DailyExpenseSummary.date.desc()).limit(limit).all()

        yesterday = today - timedelta(days=1)
        results = []
        for s in summaries:
            if s.date == today:
                label = "Today"
            elif s.date == yesterday:
                label = "Yesterday"
            else:
                label = s.date.strftime("%B %d, %Y")
            results.append({
                "date": s.date,
                "date_label": label,
                "expense_book_id": s.expense_book_id,
                "category_spending": [
                    {
                        "category": c.category,
                        "amount_cents": c.amount_cents,
                        "count": c.count,
                    }
                    for c in s.category_spending
                ],
                "total_spent_cents": s.total_spent_cents,
            })
        return results
