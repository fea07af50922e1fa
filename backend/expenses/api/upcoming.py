from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import (
    GenerateResponse,
    MarkPaidRequest,
    MarkPaidResponse,
    RefreshResponse,
    UpcomingPaymentResponse,
)
from ..services.upcoming_payment_service import UpcomingPaymentProjector
from .deps import get_current_user_id, get_today

router = APIRouter()


@router.get("/", response_model=list[UpcomingPaymentResponse])
def list_upcoming(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    refresh: bool = Query(False),
    user_id: str = Depends(get_current_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Get upcoming payments ordered by due date."""
    projector = UpcomingPaymentProjector(db)
    if refresh:
        projector.refresh_statuses(user_id, today)
    return projector.list_upcoming(user_id, start_date, end_date)


@router.post("/generate", response_model=GenerateResponse)
def generate_upcoming(
    user_id: str = Depends(get_current_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Top up the upcoming payments of every active recurring expense."""
    created = UpcomingPaymentProjector(db).generate_for_all_active(user_id, today)
    return {"created_count": created}


@router.post("/refresh", response_model=RefreshResponse)
def refresh_statuses(
    user_id: str = Depends(get_current_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Recompute due-date statuses."""
    updated = UpcomingPaymentProjector(db).refresh_statuses(user_id, today)
    return {"updated_count": updated}


@router.post("/{payment_id}/mark-paid", response_model=MarkPaidResponse)
def mark_upcoming_paid(
    payment_id: int,
    data: MarkPaidRequest,
    user_id: str = Depends(get_current_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Pay (or skip, with record_as_expense=false) an upcoming payment."""
    projector = UpcomingPaymentProjector(db)
    return projector.mark_paid(
        user_id, payment_id, data.paid_date, data.record_as_expense, today
    )
