import logging
import math
from datetime import date
from sqlalchemy.orm import Session

from ..errors import InvalidArgumentError, NotFoundError
from ..models import Expense, RecurringExpense, UpcomingPayment
from .daily_summary_service import DailySummaryService
from .schedule import as_date, next_occurrence
from .upcoming_payment_service import UpcomingPaymentProjector

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "amount", "category", "payment_method", "description",
    "frequency", "start_date", "end_date",
)
# Fields that may be cleared with an explicit null
NULLABLE_FIELDS = ("description", "end_date")


def validate_amount(amount: float) -> int:
    """Return a positive amount as cents."""
    if amount is not None and not math.isfinite(amount):
        raise InvalidArgumentError("Amount must be a finite number")
    if amount is None or amount <= 0:
        raise InvalidArgumentError("Amount must be greater than zero")
    cents = int(round(amount * 100))
    if cents <= 0:
        raise InvalidArgumentError("Amount must be greater than zero")
    return cents


def validate_required(value: str | None, field: str) -> str:
    """Return a stripped non-empty string."""
    if value is None or not value.strip():
        raise InvalidArgumentError(f"{field} is required")
    return value.strip()


class RecurringService:
    """Lifecycle of recurring expense definitions."""

    def __init__(self, db: Session):
        self.db = db
        self.projector = UpcomingPaymentProjector(db)
        self.summaries = DailySummaryService(db)

    def get(self, user_id: str, recurring_id: int) -> RecurringExpense:
        recurring = self.db.query(RecurringExpense).filter(
            RecurringExpense.id == recurring_id,
            RecurringExpense.user_id == user_id,
        ).first()
        if not recurring:
            raise NotFoundError("Recurring expense not found")
        return recurring

    def list_recurring(
        self,
        user_id: str,
        active_only: bool = True,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[RecurringExpense]:
        """Definitions for a user, optionally limited to next occurrences in a range."""
        query = self.db.query(RecurringExpense).filter(RecurringExpense.user_id == user_id)
        if active_only:
            query = query.filter(RecurringExpense.is_active == True)
        if start_date:
            query = query.filter(RecurringExpense.next_occurrence >= start_date)
        if end_date:
            query = query.filter(RecurringExpense.next_occurrence <= end_date)
        return query.order_by(RecurringExpense.next_occurrence, RecurringExpense.id).all()

    def create(
        self,
        user_id: str,
        amount: float,
        category: str,
        payment_method: str,
        description: str | None,
        frequency: str,
        start_date: date,
        end_date: date | None,
        today: date,
        expense_book_id: str | None = None,
    ) -> RecurringExpense:
        """Create a definition and project its first upcoming payments."""
        amount_cents = validate_amount(amount)
        category = validate_required(category, "Category")
        frequency = validate_required(frequency, "Frequency").lower()
        if start_date is None:
            raise InvalidArgumentError("Start date is required")
        start_date = as_date(start_date)
        end_date = as_date(end_date) if end_date else None
        if end_date and end_date < start_date:
            raise InvalidArgumentError("End date must not be before start date")

        recurring = RecurringExpense(
            user_id=user_id,
            expense_book_id=expense_book_id,
            amount_cents=amount_cents,
            category=category,
            payment_method=payment_method or "",
            description=description,
            frequency=frequency,
            start_date=start_date,
            end_date=end_date,
            next_occurrence=start_date,
            is_active=True,
        )
        self.db.add(recurring)
        self.db.flush()
        logger.info("Created recurring expense %s for user %s", recurring.id, user_id)

        self.projector.ensure_window(recurring, today)
        return recurring

    def advance(self, recurring: RecurringExpense, paid_date: date) -> RecurringExpense:
        """Move the schedule past a payment made on paid_date."""
        paid_date = as_date(paid_date)
        recurring.last_processed = paid_date
        # Never schedule before the definition starts
        recurring.next_occurrence = max(
            next_occurrence(paid_date, recurring.frequency), recurring.start_date
        )
        self.db.flush()
        return recurring

    def record_payment(self, user_id: str, recurring_id: int, paid_date: date) -> Expense:
        """
        Record a payment as a concrete expense and advance the schedule.

        Upcoming payments are left untouched; the caller tops the window up.
        """
        recurring = self.get(user_id, recurring_id)
        paid_date = as_date(paid_date)

        expense = Expense(
            user_id=user_id,
            expense_book_id=recurring.expense_book_id,
            amount_cents=recurring.amount_cents,
            date=paid_date,
            category=recurring.category,
            payment_method=recurring.payment_method,
            description=recurring.description,
            is_recurring=True,
            recurring_expense_id=recurring.id,
        )
        self.db.add(expense)
        self.db.flush()

        self.advance(recurring, paid_date)
        self.summaries.expense_created(expense)
        return expense

    def update(
        self,
        user_id: str,
        recurring_id: int,
        patch: dict,
        today: date,
    ) -> RecurringExpense:
        """
        Apply a partial update.

        A changed amount, frequency or start date regenerates the upcoming
        window; a changed start date also resets the next occurrence.
        """
        recurring = self.get(user_id, recurring_id)
        changes = {
            k: v for k, v in patch.items()
            if k in UPDATABLE_FIELDS and (v is not None or k in NULLABLE_FIELDS)
        }

        if "amount" in changes:
            changes["amount_cents"] = validate_amount(changes.pop("amount"))
        if "category" in changes:
            changes["category"] = validate_required(changes["category"], "Category")
        if "frequency" in changes:
            changes["frequency"] = validate_required(changes["frequency"], "Frequency").lower()
        if "start_date" in changes:
            changes["start_date"] = as_date(changes["start_date"])
        if "end_date" in changes and changes["end_date"] is not None:
            changes["end_date"] = as_date(changes["end_date"])

        start = changes.get("start_date", recurring.start_date)
        end = changes.get("end_date", recurring.end_date)
        if end and end < start:
            raise InvalidArgumentError("End date must not be before start date")

        # These invalidate already projected upcoming payments
        schedule_breaking = (
            changes.get("amount_cents", recurring.amount_cents) != recurring.amount_cents
            or changes.get("frequency", recurring.frequency) != recurring.frequency
            or start != recurring.start_date
        )
        start_changed = start != recurring.start_date

        for field, value in changes.items():
            setattr(recurring, field, value)

        if start_changed:
            recurring.next_occurrence = start
        self.db.flush()

        if schedule_breaking:
            self.projector.regenerate(recurring, today)

        return recurring

    def deactivate(self, user_id: str, recurring_id: int) -> bool:
        """Soft-delete a definition and drop its upcoming payments."""
        recurring = self.db.query(RecurringExpense).filter(
            RecurringExpense.id == recurring_id,
            RecurringExpense.user_id == user_id,
        ).first()
        if not recurring:
            return False

        recurring.is_active = False
        self.db.query(UpcomingPayment).filter(
            UpcomingPayment.recurring_expense_id == recurring.id,
        ).delete()
        self.db.flush()
        logger.info("Deactivated recurring expense %s for user %s", recurring.id, user_id)
        return True
