import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

# Use in-memory SQLite unless a test database is configured explicitly
os.environ.setdefault("PYTEST_RUNNING", "1")

import eventhub.db.database as db_module
from eventhub.db import models
from eventhub.db.database import SessionLocal, engine
from eventhub.search import set_search_engine_kind
from eventhub.utils.settings import refresh_settings

_ENV_SETTINGS = (
    "EVENTHUB_SEARCH_ENGINE",
    "EVENTHUB_SEARCH_LIMIT",
    "EVENTHUB_IMPORT_TIMEOUT",
    "EVENTHUB_IMPORT_USER_AGENT",
    "EVENTHUB_OVERVIEW_DAYS",
    "EVENTHUB_TIMEZONE",
    "APP_BASE_URL",
    "APP_HOST",
)


@pytest.fixture(scope="session", autouse=True)
def create_schema_once():
    """Create all tables once per test session (SQLite in-memory resets per process)."""
    try:
        models.Base.metadata.create_all(bind=engine)
    except OperationalError as e:
        pytest.exit(f"Failed to create test schema: {e}")
    yield
    models.Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_data():
    """Delete all rows between tests without dropping metadata (faster)."""
    yield
    connection = engine.connect()
    trans = connection.begin()
    for table in reversed(models.Base.metadata.sorted_tables):
        connection.execute(table.delete())
    trans.commit()
    connection.close()


@pytest.fixture(autouse=True)
def reset_runtime_config(monkeypatch):
    """Clear env-driven settings and the search engine override for each test."""
    for name in _ENV_SETTINGS:
        monkeypatch.delenv(name, raising=False)
    refresh_settings()
    set_search_engine_kind(None)
    yield
    set_search_engine_kind(None)
    refresh_settings()


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Backwards compatibility: some tests read better with a 'db' fixture name
@pytest.fixture
def db(db_session):
    return db_session


@pytest.fixture
def client(db_session):
    from eventhub.api.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[db_module.get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(db_module.get_db, None)
