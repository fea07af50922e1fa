"""Shared pytest fixtures: an in-memory database and an API client bound to it."""
from datetime import date
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from expenses.api.deps import get_today
from expenses.database import get_db
from expenses.main import create_app
from expenses.models import Base

TODAY = date(2025, 1, 1)
USER = "user-1"
OTHER_USER = "user-2"


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine)()
    yield session
    session.close()


@pytest.fixture
def client(engine) -> TestClient:
    """API client whose requests share the test database and a pinned clock."""
    factory = sessionmaker(bind=engine)

    def override_get_db():
        session = factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app = create_app(open_db=False)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    return TestClient(app, headers={"X-User-Id": USER})
