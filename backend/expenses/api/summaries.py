from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import DailyTransactionGroup, RebuildResponse
from ..services.daily_summary_service import DailySummaryService
from .deps import get_current_user_id, get_today

router = APIRouter()


@router.get("/daily", response_model=list[DailyTransactionGroup])
def daily_summaries(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    expense_book_id: str | None = Query(None),
    limit: int = Query(10, ge=1, le=366),
    user_id: str = Depends(get_current_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Most recent days of spending, grouped by category."""
    service = DailySummaryService(db)
    return service.grouped_by_day(
        user_id,
        today,
        start_date=start_date,
        end_date=end_date,
        expense_book_id=expense_book_id,
        limit=limit,
    )


@router.post("/rebuild", response_model=RebuildResponse)
def rebuild_summaries(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """One-time backfill of daily summaries from the expense history."""
    written = DailySummaryService(db).rebuild_from_history(user_id)
    return {"summaries_written": written}
