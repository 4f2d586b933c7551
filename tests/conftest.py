import os

# 測試使用記憶體 SQLite，必須在 import scoped_auth 之前設定
os.environ.setdefault("DATABASE_URL", "sqlite://")

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from scoped_auth.config import Settings
from scoped_auth.database import Base, SessionLocal, engine, get_db
from scoped_auth.main import app, create_app
from scoped_auth.models.user import User
from scoped_auth.services.auth import hash_password

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Run Alembic migrations at the start of the test session."""
    from alembic import command
    from alembic.config import Config

    alembic_cfg = Config(str(ALEMBIC_INI))
    command.upgrade(alembic_cfg, "head")

    yield

    try:
        command.downgrade(alembic_cfg, "base")
    except Exception:
        # Best-effort teardown; the in-memory database disappears anyway
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    """Each test uses an independent transaction that gets rolled back after."""
    connection = engine.connect()
    transaction = connection.begin()
    session = SessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


def _client_for(application, db):
    def override_get_db():
        yield db

    application.dependency_overrides[get_db] = override_get_db
    return TestClient(application)


@pytest.fixture
def client(db):
    """Test client for the default application with the test session."""
    with _client_for(app, db) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_client(db):
    """Build a test client for an application created from custom settings."""
    apps = []

    def _make(**overrides) -> TestClient:
        application = create_app(Settings(**overrides))
        apps.append(application)
        return _client_for(application, db)

    yield _make

    for application in apps:
        application.dependency_overrides.clear()


@pytest.fixture
def test_user(db):
    """Create a user directly in the database."""
    user = User(email="test@example.com", hashed_password=hash_password("pass"))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def other_user(db):
    user = User(email="other@example.com", hashed_password=hash_password("pass"))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
