"""
Shared fixtures: an in-memory SQLite database per test and a FastAPI
client bound to it.
"""
import os

# Must be set before app.database builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models import db_models  # noqa: F401
from scripts.seed_routes import seed_routes


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Real SQLAlchemy session on the in-memory database."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def seeded_db(db_session):
    """Session with the five reference routes (R001 baseline)."""
    seed_routes(db_session)
    return db_session


@pytest.fixture
def client(seeded_db):
    """TestClient whose get_db dependency yields the seeded session."""
    from fastapi.testclient import TestClient
    from app.main import app

    def override_get_db():
        yield seeded_db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
