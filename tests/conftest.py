# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from models.models import Base
from db import crud
from db.database import get_db, get_session_factory
from auth_utils import create_access_token, token_claims_for
from rate_limiter import limiter
from schemas.user_schemas import UserCreate
from services.photo_source import get_photo_source


# In-memory SQLite; StaticPool keeps every session on the same connection.
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "ValidPassword123"

# (author, count) pairs; ids are assigned in order starting at 0.
DEFAULT_AUTHORS = [
    ("Alejandro Escamilla", 6),
    ("Paul Jarvis", 8),
    ("Tina Rataj", 2),
    ("Ben Moore", 3),
    ("Glen Carrie", 2),
    ("Philipe Cavalcante", 1),
    ("Vadim Sherbakov", 5),
    ("Luke Chesser", 3),
]


def make_listing(authors=DEFAULT_AUTHORS):
    listing = []
    for author, count in authors:
        for _ in range(count):
            photo_id = str(len(listing))
            listing.append({
                "id": photo_id,
                "author": author,
                "width": 5000,
                "height": 3333,
                "url": f"https://unsplash.com/photos/{photo_id}",
                "download_url": f"https://picsum.photos/id/{photo_id}/5000/3333",
            })
    return listing


class FakePhotoSource:
    """Stands in for PicsumClient; records every listing request."""

    def __init__(self, listing=None, error=None):
        self.listing = make_listing() if listing is None else listing
        self.error = error
        self.calls = []

    async def list_photos(self, page=None, limit=None):
        self.calls.append({"page": page, "limit": limit})
        if self.error:
            raise self.error
        if limit is None:
            return list(self.listing)
        return list(self.listing[:limit])


@pytest.fixture(scope="function")
def db_session():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        # Drop all the tables, so the next test starts with a clean slate.
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def photo_source():
    return FakePhotoSource()


@pytest.fixture(scope="function")
def client(db_session, photo_source):
    def override_get_db():
        try:
            yield db_session
        finally:
            db_session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[get_photo_source] = lambda: photo_source
    limiter.enabled = False

    yield TestClient(app)

    limiter.enabled = True
    app.dependency_overrides.clear()


def _create_user(db, email, name="Test User"):
    user = crud.create_user(db, UserCreate(name=name, email=email, password=TEST_PASSWORD))
    token = create_access_token(token_claims_for(user))
    return str(user.id), {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_a(db_session):
    return _create_user(db_session, "alice@example.com", name="Alice")


@pytest.fixture
def user_b(db_session):
    return _create_user(db_session, "bob@example.com", name="Bob")
