from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import ExpenseCreate, ExpenseUpdate, ExpenseResponse
from ..services.expense_service import ExpenseService
from .deps import get_current_user_id, get_today

router = APIRouter()


@router.get("/", response_model=list[ExpenseResponse])
def list_expenses(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    category: str | None = Query(None),
    expense_book_id: str | None = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get expenses, newest first, with optional filters."""
    service = ExpenseService(db)
    return service.list_expenses(user_id, start_date, end_date, category, expense_book_id)


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return ExpenseService(db).get_expense(user_id, expense_id)


@router.post("/", response_model=ExpenseResponse, status_code=201)
def create_expense(
    data: ExpenseCreate,
    user_id: str = Depends(get_current_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Create an expense, optionally making it recurring."""
    service = ExpenseService(db)
    return service.create_expense(
        user_id=user_id,
        amount=data.amount,
        expense_date=data.date,
        category=data.category,
        payment_method=data.payment_method,
        description=data.description,
        notes=data.notes,
        expense_book_id=data.expense_book_id,
        recurring=data.recurring.model_dump() if data.recurring else None,
        today=today,
    )


@router.patch("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: int,
    data: ExpenseUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    service = ExpenseService(db)
    return service.update_expense(user_id, expense_id, data.model_dump(exclude_unset=True))


@router.delete("/{expense_id}", status_code=204)
def delete_expense(
    expense_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if not ExpenseService(db).delete_expense(user_id, expense_id):
        raise HTTPException(status_code=404, detail="Expense not found")
    return None
