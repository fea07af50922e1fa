from datetime import date

import pytest

from expenses.errors import InvalidArgumentError, NotFoundError
from expenses.models import Expense, PaymentStatus, RecurringExpense, UpcomingPayment
from expenses.services.daily_summary_service import DailySummaryService
from expenses.services.recurring_service import RecurringService
from expenses.services.upcoming_payment_service import UpcomingPaymentProjector

from conftest import OTHER_USER, TODAY, USER


def _create_rent(db, **overrides):
    params = dict(
        user_id=USER,
        amount=1500,
        category="Rent",
        payment_method="Bank transfer",
        description="Flat",
        frequency="monthly",
        start_date=date(2025, 1, 1),
        end_date=None,
        today=TODAY,
    )
    params.update(overrides)
    return RecurringService(db).create(**params)


def _upcoming(db, recurring):
    return db.query(UpcomingPayment).filter(
        UpcomingPayment.recurring_expense_id == recurring.id
    ).order_by(UpcomingPayment.due_date).all()


def test_create_projects_two_payments(db):
    rent = _create_rent(db)

    assert rent.is_active
    assert rent.next_occurrence == date(2025, 1, 1)
    assert rent.last_processed is None

    upcoming = _upcoming(db, rent)
    assert [p.due_date for p in upcoming] == [date(2025, 1, 1), date(2025, 2, 1)]
    assert [p.status for p in upcoming] == [PaymentStatus.DUE, PaymentStatus.UPCOMING]
    assert all(p.amount_cents == 150000 for p in upcoming)
    assert all(p.category == "Rent" and p.frequency == "monthly" for p in upcoming)


def test_recurring_rent_scenario(db):
    rent = _create_rent(db)
    first = _upcoming(db, rent)[0]

    result = UpcomingPaymentProjector(db).mark_paid(
        USER, first.id, date(2025, 1, 1), record_as_expense=True, today=TODAY
    )

    expenses = db.query(Expense).filter(Expense.user_id == USER).all()
    assert len(expenses) == 1
    assert expenses[0].amount_cents == 150000
    assert expenses[0].date == date(2025, 1, 1)
    assert expenses[0].recurring_expense_id == rent.id
    assert result["expense_id"] == expenses[0].id

    assert rent.next_occurrence == date(2025, 2, 1)
    assert rent.last_processed == date(2025, 1, 1)
    assert [p.due_date for p in _upcoming(db, rent)] == [date(2025, 2, 1), date(2025, 3, 1)]


def test_amount_change_regenerates_window(db):
    rent = _create_rent(db)
    first = _upcoming(db, rent)[0]
    UpcomingPaymentProjector(db).mark_paid(USER, first.id, date(2025, 1, 1), True, TODAY)

    RecurringService(db).update(USER, rent.id, {"amount": 1600}, TODAY)

    upcoming = _upcoming(db, rent)
    assert rent.next_occurrence == date(2025, 2, 1)
    assert [p.due_date for p in upcoming] == [date(2025, 2, 1), date(2025, 3, 1)]
    assert all(p.amount_cents == 160000 for p in upcoming)


def test_non_schedule_change_keeps_upcoming(db):
    rent = _create_rent(db)
    first = _upcoming(db, rent)[0]
    first.status = PaymentStatus.PENDING
    db.flush()
    before = [(p.id, p.category, p.status) for p in _upcoming(db, rent)]

    RecurringService(db).update(
        USER, rent.id,
        {"category": "Housing", "description": "New flat", "end_date": date(2026, 1, 1)},
        TODAY,
    )

    assert rent.category == "Housing"
    assert rent.end_date == date(2026, 1, 1)
    assert [(p.id, p.category, p.status) for p in _upcoming(db, rent)] == before


def test_unchanged_amount_is_not_schedule_breaking(db):
    rent = _create_rent(db)
    first = _upcoming(db, rent)[0]
    first.status = PaymentStatus.PENDING
    db.flush()

    RecurringService(db).update(USER, rent.id, {"amount": 1500}, TODAY)

    assert _upcoming(db, rent)[0].status == PaymentStatus.PENDING


def test_start_date_change_resets_next_occurrence(db):
    rent = _create_rent(db)

    RecurringService(db).update(USER, rent.id, {"start_date": date(2025, 3, 15)}, TODAY)

    assert rent.next_occurrence == date(2025, 3, 15)
    assert [p.due_date for p in _upcoming(db, rent)] == [date(2025, 3, 15), date(2025, 4, 15)]


def test_frequency_change_regenerates_window(db):
    rent = _create_rent(db)

    RecurringService(db).update(USER, rent.id, {"frequency": "Weekly"}, TODAY)

    upcoming = _upcoming(db, rent)
    assert rent.frequency == "weekly"
    assert [p.due_date for p in upcoming] == [date(2025, 1, 1), date(2025, 1, 8)]
    assert all(p.frequency == "weekly" for p in upcoming)


def test_end_date_limits_window(db):
    gym = _create_rent(db, category="Gym", end_date=date(2025, 1, 15))
    upcoming = _upcoming(db, gym)
    assert [p.due_date for p in upcoming] == [date(2025, 1, 1)]

    UpcomingPaymentProjector(db).mark_paid(USER, upcoming[0].id, date(2025, 1, 1), True, TODAY)
    assert _upcoming(db, gym) == []
    assert gym.next_occurrence == date(2025, 2, 1)


def test_end_date_is_inclusive(db):
    sub = _create_rent(db, category="Streaming", end_date=date(2025, 2, 1))
    assert [p.due_date for p in _upcoming(db, sub)] == [date(2025, 1, 1), date(2025, 2, 1)]


def test_unknown_frequency_is_stored_and_scheduled_monthly(db):
    odd = _create_rent(db, frequency="fortnightly")
    assert odd.frequency == "fortnightly"
    assert [p.due_date for p in _upcoming(db, odd)] == [date(2025, 1, 1), date(2025, 2, 1)]


def test_record_payment(db):
    rent = _create_rent(db, expense_book_id="home")

    expense = RecurringService(db).record_payment(USER, rent.id, date(2025, 1, 3))

    assert expense.is_recurring
    assert expense.recurring_expense_id == rent.id
    assert expense.expense_book_id == "home"
    assert expense.payment_method == "Bank transfer"
    assert rent.last_processed == date(2025, 1, 3)
    assert rent.next_occurrence == date(2025, 2, 3)

    summary = DailySummaryService(db).get_summary(USER, date(2025, 1, 3), expense_book_id="home")
    assert summary.total_spent_cents == 150000

    # Upcoming payments are left for the caller to top up
    assert [p.due_date for p in _upcoming(db, rent)] == [date(2025, 1, 1), date(2025, 2, 1)]


def test_payment_before_start_keeps_next_occurrence_at_start(db):
    rent = _create_rent(db, start_date=date(2025, 3, 1))

    RecurringService(db).record_payment(USER, rent.id, date(2025, 1, 1))

    assert rent.last_processed == date(2025, 1, 1)
    assert rent.next_occurrence == date(2025, 3, 1)

    UpcomingPaymentProjector(db).regenerate(rent, TODAY)
    assert [p.due_date for p in _upcoming(db, rent)] == [date(2025, 3, 1), date(2025, 4, 1)]


def test_mark_paid_before_start_never_projects_before_start(db):
    rent = _create_rent(db, start_date=date(2025, 3, 1))
    first = _upcoming(db, rent)[0]

    UpcomingPaymentProjector(db).mark_paid(
        USER, first.id, date(2025, 1, 1), record_as_expense=False, today=TODAY
    )

    assert rent.next_occurrence >= rent.start_date
    assert all(p.due_date >= rent.start_date for p in _upcoming(db, rent))


def test_record_payment_writes_are_not_atomic(db, monkeypatch):
    rent = _create_rent(db)

    def fail(self, expense):
        raise RuntimeError("summary write failed")

    monkeypatch.setattr(DailySummaryService, "expense_created", fail)

    with pytest.raises(RuntimeError):
        RecurringService(db).record_payment(USER, rent.id, date(2025, 1, 3))

    # Steps already flushed stay in the session; the summary step never ran
    expenses = db.query(Expense).filter(Expense.recurring_expense_id == rent.id).all()
    assert len(expenses) == 1
    assert rent.last_processed == date(2025, 1, 3)
    assert rent.next_occurrence == date(2025, 2, 3)
    assert DailySummaryService(db).get_summary(USER, date(2025, 1, 3)) is None


def test_deactivate(db):
    rent = _create_rent(db)
    service = RecurringService(db)

    assert service.deactivate(USER, rent.id) is True

    assert rent.is_active is False
    assert _upcoming(db, rent) == []
    assert db.get(RecurringExpense, rent.id) is not None
    assert service.list_recurring(USER) == []
    assert service.list_recurring(USER, active_only=False) == [rent]


def test_deactivate_missing_returns_false(db):
    rent = _create_rent(db)
    service = RecurringService(db)
    assert service.deactivate(OTHER_USER, rent.id) is False
    assert service.deactivate(USER, 9999) is False
    assert rent.is_active


def test_other_users_definition_is_not_found(db):
    rent = _create_rent(db)
    service = RecurringService(db)

    with pytest.raises(NotFoundError):
        service.get(OTHER_USER, rent.id)
    with pytest.raises(NotFoundError):
        service.update(OTHER_USER, rent.id, {"amount": 10}, TODAY)
    with pytest.raises(NotFoundError):
        service.record_payment(OTHER_USER, rent.id, TODAY)


@pytest.mark.parametrize("overrides", [
    {"amount": 0},
    {"amount": -25},
    {"amount": float("nan")},
    {"amount": float("inf")},
    {"category": "   "},
    {"frequency": ""},
    {"end_date": date(2024, 12, 1)},
])
def test_create_rejects_invalid_arguments(db, overrides):
    with pytest.raises(InvalidArgumentError):
        _create_rent(db, **overrides)
    assert db.query(RecurringExpense).count() == 0


def test_update_rejects_invalid_amount(db):
    rent = _create_rent(db)
    with pytest.raises(InvalidArgumentError):
        RecurringService(db).update(USER, rent.id, {"amount": 0}, TODAY)
    assert rent.amount_cents == 150000


def test_list_filters_by_next_occurrence(db):
    rent = _create_rent(db)
    gym = _create_rent(db, category="Gym", start_date=date(2025, 3, 1))
    service = RecurringService(db)

    assert service.list_recurring(USER) == [rent, gym]
    assert service.list_recurring(USER, start_date=date(2025, 2, 1)) == [gym]
    assert service.list_recurring(OTHER_USER) == []
