import logging
from datetime import date
from sqlalchemy.orm import Session

from ..errors import InvalidArgumentError, NotFoundError
from ..models import Expense
from .daily_summary_service import DailySummaryService, SummaryDelta
from .recurring_service import RecurringService, validate_amount, validate_required
from .schedule import as_date

logger = logging.getLogger(__name__)


class ExpenseService:
    """Expense recording; keeps the daily summaries in step with every write."""

    def __init__(self, db: Session):
        self.db = db
        self.summaries = DailySummaryService(db)

    def list_expenses(
        self,
        user_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
        category: str | None = None,
        expense_book_id: str | None = None,
    ) -> list[Expense]:
        query = self.db.query(Expense).filter(Expense.user_id == user_id)
        if start_date:
            query = query.filter(Expense.date >= start_date)
        if end_date:
            query = query.filter(Expense.date <= end_date)
        if category:
            query = query.filter(Expense.category == category)
        if expense_book_id:
            query = query.filter(Expense.expense_book_id == expense_book_id)
        return query.order_by(Expense.date.desc(), Expense.id.desc()).all()

    def get_expense(self, user_id: str, expense_id: int) -> Expense:
        expense = self.db.query(Expense).filter(
            Expense.id == expense_id,
            Expense.user_id == user_id,
        ).first()
        if not expense:
            raise NotFoundError("Expense not found")
        return expense

    def create_expense(
        self,
        user_id: str,
        amount: float,
        expense_date: date,
        category: str,
        payment_method: str = "",
        description: str | None = None,
        notes: str | None = None,
        expense_book_id: str | None = None,
        recurring: dict | None = None,
        today: date | None = None,
    ) -> Expense:
        """
        Record an expense.

        When recurring ({frequency, start_date, end_date}) is given, a
        recurring definition is created as well and linked to the expense.
        """
        if expense_date is None:
            raise InvalidArgumentError("Date is required")

        expense = Expense(
            user_id=user_id,
            expense_book_id=expense_book_id,
            amount_cents=validate_amount(amount),
            date=as_date(expense_date),
            category=validate_required(category, "Category"),
            payment_method=payment_method or "",
            description=description,
            notes=notes,
            is_recurring=recurring is not None,
        )
        self.db.add(expense)
        self.db.flush()
        self.summaries.expense_created(expense)

        if recurring is not None:
            definition = RecurringService(self.db).create(
                user_id=user_id,
                amount=amount,
                category=expense.category,
                payment_method=expense.payment_method,
                description=description,
                frequency=recurring.get("frequency") or "monthly",
                start_date=recurring.get("start_date") or expense.date,
                end_date=recurring.get("end_date"),
                today=today or date.today(),
                expense_book_id=expense_book_id,
            )
            expense.recurring_expense_id = definition.id
            self.db.flush()
            logger.info("Expense %s linked to recurring expense %s", expense.id, definition.id)

        return expense

    def update_expense(self, user_id: str, expense_id: int, patch: dict) -> Expense:
        """Partial update; re-buckets the daily summary as remove-then-add."""
        expense = self.get_expense(user_id, expense_id)
        old = SummaryDelta(
            user_id=expense.user_id,
            expense_book_id=expense.expense_book_id,
            day=expense.date,
            category=expense.category,
            amount_cents=expense.amount_cents,
            count=1,
        )

        if patch.get("amount") is not None:
            expense.amount_cents = validate_amount(patch["amount"])
        if patch.get("date") is not None:
            expense.date = as_date(patch["date"])
        if patch.get("category") is not None:
            expense.category = validate_required(patch["category"], "Category")
        if patch.get("payment_method") is not None:
            expense.payment_method = patch["payment_method"]
        if "description" in patch and patch["description"] is not None:
            expense.description = patch["description"]
        if "notes" in patch and patch["notes"] is not None:
            expense.notes = patch["notes"]
        self.db.flush()

        self.summaries.expense_edited(old, expense)
        return expense

    def delete_expense(self, user_id: str, expense_id: int) -> bool:
        expense = self.db.query(Expense).filter(
            Expense.id == expense_id,
            Expense.user_id == user_id,
        ).first()
        if not expense:
            return False

        self.summaries.expense_deleted(expense)
        self.db.delete(expense)
        self.db.flush()
        return True
