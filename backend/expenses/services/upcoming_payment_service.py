import logging
from datetime import date
from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..models import RecurringExpense, UpcomingPayment
from .schedule import as_date, classify_due_status, next_occurrence

logger = logging.getLogger(__name__)

# Number of unpaid instances kept materialized per active definition
WINDOW_SIZE = 2


def _snapshot(payment: UpcomingPayment) -> dict:
    """Plain-dict copy of an upcoming payment, safe to use after deletion."""
    return {
        "id": payment.id,
        "recurring_expense_id": payment.recurring_expense_id,
        "expense_book_id": payment.expense_book_id,
        "amount_cents": payment.amount_cents,
        "category": payment.category,
        "payment_method": payment.payment_method,
        "description": payment.description,
        "frequency": payment.frequency,
        "due_date": payment.due_date,
        "status": payment.status,
    }


class UpcomingPaymentProjector:
    """Keeps a look-ahead window of unpaid occurrences per recurring definition."""

    def __init__(self, db: Session):
        self.db = db

    def _live_payments(self, recurring_id: int) -> list[UpcomingPayment]:
        return self.db.query(UpcomingPayment).filter(
            UpcomingPayment.recurring_expense_id == recurring_id,
        ).all()

    def ensure_window(self, recurring: RecurringExpense, today: date) -> list[UpcomingPayment]:
        """
        Top up the definition's upcoming payments to WINDOW_SIZE.

        Candidates start at next_occurrence; dates already projected are
        skipped, and generation stops past end_date. Returns the new rows.
        """
        if not recurring.is_active:
            return []

        existing = self._live_payments(recurring.id)
        needed = WINDOW_SIZE - len(existing)
        if needed <= 0:
            return []

        taken = {p.due_date for p in existing}
        created = []
        candidate = recurring.next_occurrence
        while len(created) < needed:
            if recurring.end_date and candidate > recurring.end_date:
                break
            if candidate not in taken:
                payment = UpcomingPayment(
                    user_id=recurring.user_id,
                    expense_book_id=recurring.expense_book_id,
                    recurring_expense_id=recurring.id,
                    amount_cents=recurring.amount_cents,
                    category=recurring.category,
                    payment_method=recurring.payment_method,
                    description=recurring.description,
                    frequency=recurring.frequency,
                    due_date=candidate,
                    status=classify_due_status(candidate, today),
                )
                self.db.add(payment)
                created.append(payment)
                taken.add(candidate)
                logger.debug("Projected payment for recurring %s due %s", recurring.id, candidate)
            candidate = next_occurrence(candidate, recurring.frequency)

        self.db.flush()
        return created

    def regenerate(self, recurring: RecurringExpense, today: date) -> list[UpcomingPayment]:
        """Drop every upcoming payment of a definition and project afresh."""
        self.db.query(UpcomingPayment).filter(
            UpcomingPayment.recurring_expense_id == recurring.id,
        ).delete()
        self.db.flush()
        return self.ensure_window(recurring, today)

    def generate_for_all_active(self, user_id: str, today: date) -> int:
        """Top up the window of every active definition; returns rows created."""
        definitions = self.db.query(RecurringExpense).filter(
            RecurringExpense.user_id == user_id,
            RecurringExpense.is_active == True,
        ).all()

        created = 0
        for recurring in definitions:
            created += len(self.ensure_window(recurring, today))
        return created

    def refresh_statuses(self, user_id: str, today: date) -> int:
        """Reclassify a user's upcoming payments; returns how many changed."""
        payments = self.db.query(UpcomingPayment).filter(
            UpcomingPayment.user_id == user_id,
        ).all()

        changed = 0
        for payment in payments:
            status = classify_due_status(payment.due_date, today)
            if status != payment.status:
                payment.status = status
                changed += 1

        if changed:
            self.db.flush()
        return changed

    def list_upcoming(
        self,
        user_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[UpcomingPayment]:
        query = self.db.query(UpcomingPayment).filter(UpcomingPayment.user_id == user_id)
        if start_date:
            query = query.filter(UpcomingPayment.due_date >= start_date)
        if end_date:
            query = query.filter(UpcomingPayment.due_date <= end_date)
        return query.order_by(UpcomingPayment.due_date, UpcomingPayment.id).all()

    def get(self, user_id: str, payment_id: int) -> UpcomingPayment:
        payment = self.db.query(UpcomingPayment).filter(
            UpcomingPayment.id == payment_id,
            UpcomingPayment.user_id == user_id,
        ).first()
        if not payment:
            raise NotFoundError("Upcoming payment not found")
        return payment

    def mark_paid(
        self,
        user_id: str,
        payment_id: int,
        paid_date: date,
        record_as_expense: bool,
        today: date,
    ) -> dict:
        """
        Consume an upcoming payment.

        With record_as_expense the payment becomes a real expense; without it
        the schedule still advances but nothing is spent. Either way the
        window is topped back up.
        """
        from .recurring_service import RecurringService

        payment = self.get(user_id, payment_id)
        result = _snapshot(payment)
        paid_date = as_date(paid_date)

        recurring_service = RecurringService(self.db)
        recurring = recurring_service.get(user_id, payment.recurring_expense_id)

        expense_id = None
        if record_as_expense:
            expense = recurring_service.record_payment(user_id, recurring.id, paid_date)
            expense_id = expense.id
        else:
            recurring_service.advance(recurring, paid_date)

        self.db.delete(payment)
        self.db.flush()

        self.ensure_window(recurring, today)

        result["paid_date"] = paid_date
        result["expense_id"] = expense_id
        return result
