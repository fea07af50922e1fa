from datetime import date
from fastapi import Header, HTTPException


def get_current_user_id(x_user_id: str | None = Header(None)) -> str:
    """Opaque user id supplied by the authenticating proxy."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


def get_today() -> date:
    """Current date; overridden in tests to pin the clock."""
    return date.today()
