import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from .api import api_router
from .config import Settings, ensure_data_dir, get_settings
from .database import open_database, close_database, is_database_open
from .errors import ExpenseTrackerError, StoreUnavailableError

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, open_db: bool = True) -> FastAPI:
    """Build the application; open_db=False leaves the database to the caller."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Handle startup and shutdown events."""
        if open_db and not is_database_open():
            if settings.database_url is None:
                ensure_data_dir(settings)
            open_database(settings.resolved_database_url)
        yield
        # Cleanup on shutdown
        if open_db:
            close_database()

    app = FastAPI(
        title="Expense Tracker",
        description="Personal expense tracking with recurring payments",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ExpenseTrackerError)
    async def handle_service_error(request: Request, exc: ExpenseTrackerError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(OperationalError)
    async def handle_store_error(request: Request, exc: OperationalError):
        logger.exception("Database error on %s %s", request.method, request.url.path)
        error = StoreUnavailableError("Database unavailable")
        return JSONResponse(status_code=error.status_code, content={"detail": error.detail})

    # API routes
    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok", "database": is_database_open()}

    return app


app = create_app()
