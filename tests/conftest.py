import os
import sys

import pytest

# Ensure project root is on sys.path when pytest runs from a different CWD.
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Settings are read at import time: force an in-memory database and no rate limiting.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORE_BACKEND"] = "sql"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from string_analyzer import models  # noqa: E402
from string_analyzer.store import MemoryStore, SqlStore, get_store  # noqa: E402


@pytest.fixture
def session():
    # Use StaticPool to keep a single in-memory DB across threads/requests
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    models.Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def sql_store(session):
    return SqlStore(session)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture(params=["sql", "memory"])
def store(request):
    """Every store test runs against both backends."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def client(store):
    from string_analyzer.main import app

    app.dependency_overrides[get_store] = lambda: store
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
