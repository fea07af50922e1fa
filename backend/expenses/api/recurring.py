from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import (
    ExpenseResponse,
    MarkPaidRequest,
    RecurringCreate,
    RecurringResponse,
    RecurringUpdate,
)
from ..services.recurring_service import RecurringService
from .deps import get_current_user_id, get_today

router = APIRouter()


@router.get("/", response_model=list[RecurringResponse])
def list_recurring(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    include_inactive: bool = Query(False),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get recurring expenses, optionally limited by next occurrence."""
    service = RecurringService(db)
    return service.list_recurring(
        user_id,
        active_only=not include_inactive,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/{recurring_id}", response_model=RecurringResponse)
def get_recurring(
    recurring_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return RecurringService(db).get(user_id, recurring_id)


@router.post("/", response_model=RecurringResponse, status_code=201)
def create_recurring(
    data: RecurringCreate,
    user_id: str = Depends(get_current_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Create a recurring expense and project its first upcoming payments."""
    service = RecurringService(db)
    return service.create(
        user_id=user_id,
        amount=data.amount,
        category=data.category,
        payment_method=data.payment_method,
        description=data.description,
        frequency=data.frequency,
        start_date=data.start_date,
        end_date=data.end_date,
        today=today,
        expense_book_id=data.expense_book_id,
    )


@router.patch("/{recurring_id}", response_model=RecurringResponse)
def update_recurring(
    recurring_id: int,
    data: RecurringUpdate,
    user_id: str = Depends(get_current_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    service = RecurringService(db)
    return service.update(user_id, recurring_id, data.model_dump(exclude_unset=True), today)


@router.delete("/{recurring_id}", status_code=204)
def deactivate_recurring(
    recurring_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Deactivate a recurring expense; its history is kept."""
    if not RecurringService(db).deactivate(user_id, recurring_id):
        raise HTTPException(status_code=404, detail="Recurring expense not found")
    return None


@router.post("/{recurring_id}/mark-paid", response_model=ExpenseResponse)
def mark_recurring_paid(
    recurring_id: int,
    data: MarkPaidRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Record a payment directly against a recurring expense."""
    return RecurringService(db).record_payment(user_id, recurring_id, data.paid_date)
