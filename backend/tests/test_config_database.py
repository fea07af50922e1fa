from pathlib import Path

import pytest

from expenses import database
from expenses.config import load_settings
from expenses.errors import StoreUnavailableError
from expenses.models import RecurringExpense


def test_settings_defaults(monkeypatch):
    for name in ("EXPENSES_DATA_DIR", "EXPENSES_DATABASE_URL", "EXPENSES_LOG_LEVEL", "EXPENSES_CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()

    assert settings.log_level == "INFO"
    assert settings.resolved_database_url.endswith("expenses.db")
    assert settings.resolved_database_url.startswith("sqlite:///")


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("EXPENSES_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("EXPENSES_LOG_LEVEL", "debug")
    monkeypatch.setenv("EXPENSES_CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.delenv("EXPENSES_DATABASE_URL", raising=False)

    settings = load_settings()

    assert settings.data_dir == Path(tmp_path)
    assert settings.log_level == "DEBUG"
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.resolved_database_url == f"sqlite:///{tmp_path / 'expenses.db'}"


def test_explicit_database_url_wins(monkeypatch):
    monkeypatch.setenv("EXPENSES_DATABASE_URL", "sqlite://")
    assert load_settings().resolved_database_url == "sqlite://"


def test_session_requires_open_database():
    database.close_database()
    assert not database.is_database_open()
    with pytest.raises(StoreUnavailableError):
        database.get_session()


def test_open_database_creates_tables(tmp_path):
    try:
        database.open_database(f"sqlite:///{tmp_path / 'test.db'}")
        assert database.is_database_open()
        session = database.get_session()
        try:
            assert session.query(RecurringExpense).count() == 0
        finally:
            session.close()
    finally:
        database.close_database()
    assert (tmp_path / "test.db").exists()


def test_launcher_runs_uvicorn_with_settings(monkeypatch):
    import run

    calls = []
    monkeypatch.setattr(run.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setattr(run, "get_settings", lambda: load_settings())
    monkeypatch.setenv("EXPENSES_DATABASE_URL", "sqlite://")
    monkeypatch.setenv("EXPENSES_LOG_LEVEL", "warning")
    monkeypatch.setattr("sys.argv", ["run.py", "--port", "9000"])

    run.main()

    assert calls == [("expenses.main:app", {
        "host": "127.0.0.1",
        "port": 9000,
        "reload": False,
        "log_level": "warning",
    })]
