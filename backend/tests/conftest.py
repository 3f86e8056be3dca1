import os
import tempfile
from pathlib import Path

import pytest

# Point the app at throwaway storage before anything reads the settings
_TMP = Path(tempfile.mkdtemp(prefix="bookstore-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ["SECRET_KEY"] = "test-secret"
os.environ.pop("JWT_SECRET", None)

from fastapi.testclient import TestClient  # noqa: E402

from config import Settings, get_settings  # noqa: E402
from database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402
from models.users import User  # noqa: E402
from utils.hashing import get_password_hash  # noqa: E402
from utils.tokenJWT import create_access_token  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def upload_dir(settings):
    return Path(settings.UPLOAD_DIR)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _create_user(db, *, name="Ada", email="ada@example.com", password="secret123", role="customer"):
    user = User(name=name, email=email, password_hash=get_password_hash(password), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _bearer(user, settings):
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role, settings)}"}


@pytest.fixture
def make_user(db):
    return lambda **kwargs: _create_user(db, **kwargs)


@pytest.fixture
def auth_header(settings):
    return lambda user: _bearer(user, settings)


@pytest.fixture
def admin_headers(make_user, auth_header):
    return auth_header(make_user(name="Root", email="admin@example.com", role="admin"))


@pytest.fixture
def no_secret():
    app.dependency_overrides[get_settings] = lambda: Settings(SECRET_KEY=None)
