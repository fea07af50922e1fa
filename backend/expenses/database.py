import logging
from sqlalchemy import create_engine, event, text, inspect
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from .errors import StoreUnavailableError
from .models import Base

logger = logging.getLogger(__name__)

# Global state for the open database
_current_engine: Engine | None = None
_current_session_factory: sessionmaker | None = None


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign keys for SQLite."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def open_database(db_url: str) -> Engine:
    """
    Open the database at db_url.

    Creates the tables if they don't exist. In-memory SQLite URLs share a
    single connection so every session sees the same data.
    """
    global _current_engine, _current_session_factory

    if _current_engine is not None:
        close_database()

    kwargs = {}
    if db_url.startswith("sqlite") and ":memory:" in db_url:
        kwargs = {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    elif db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}

    _current_engine = create_engine(db_url, echo=False, **kwargs)
    _current_session_factory = sessionmaker(bind=_current_engine)

    # Create tables if they don't exist
    Base.metadata.create_all(_current_engine)

    # Migrate existing tables: add missing columns
    _migrate_schema(_current_engine)

    logger.info("Opened database %s", _current_engine.url.render_as_string(hide_password=True))
    return _current_engine


def _migrate_schema(engine: Engine) -> None:
    """Add any missing columns to existing tables."""
    inspector = inspect(engine)

    # Columns added after the first release
    # Format: (table_name, column_name, column_type_sql)
    migrations = [
        ("expenses", "expense_book_id", "VARCHAR(64)"),
        ("recurring_expenses", "expense_book_id", "VARCHAR(64)"),
        ("upcoming_payments", "expense_book_id", "VARCHAR(64)"),
        ("daily_expense_summaries", "expense_book_id", "VARCHAR(64)"),
    ]

    with engine.connect() as conn:
        for table, column, col_type in migrations:
            if not inspector.has_table(table):
                continue
            existing = [c["name"] for c in inspector.get_columns(table)]
            if column not in existing:
                logger.info("Adding column %s.%s", table, column)
                conn.execute(text(
                    f"ALTER TABLE {table} ADD COLUMN {column} {col_type}"
                ))
                conn.commit()


def close_database() -> None:
    """Close the current database."""
    global _current_engine, _current_session_factory

    if _current_engine is not None:
        _current_engine.dispose()
        _current_engine = None
        _current_session_factory = None


def get_session() -> Session:
    """Get a database session for the open database."""
    if _current_session_factory is None:
        raise StoreUnavailableError("No database is currently open")
    return _current_session_factory()


def get_db():
    """FastAPI dependency for database sessions."""
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def is_database_open() -> bool:
    """Check if a database is currently open."""
    return _current_engine is not None
