from fastapi import APIRouter

from .expenses import router as expenses_router
from .recurring import router as recurring_router
from .upcoming import router as upcoming_router
from .summaries import router as summaries_router

api_router = APIRouter()

api_router.include_router(expenses_router, prefix="/expenses", tags=["expenses"])
api_router.include_router(recurring_router, prefix="/recurring", tags=["recurring"])
api_router.include_router(upcoming_router, prefix="/upcoming", tags=["upcoming"])
api_router.include_router(summaries_router, prefix="/summaries", tags=["summaries"])
