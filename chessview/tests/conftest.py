"""
Pytest fixtures for ChessView API tests.
Uses in-memory SQLite, a fake completion client, an inline resume-parse executor,
and provides test users and auth tokens.
"""
import os
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Use in-memory SQLite for tests - set before config/session load
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["OPENAI_API_KEY"] = ""
os.environ["EXPORT_ADMIN_USER_ID"] = "1"

from chessview.app.core.config import settings
from chessview.app.core.dependencies import get_completion_client, get_db, get_google_verifier, get_resume_jobs
from chessview.app.core.security import create_access_token, get_password_hash
from chessview.app.db.base import Base
from chessview.app.db.session import enable_sqlite_foreign_keys
from chessview.app.models.user import User
from chessview.app.services.resume_parser import ResumeParser
from chessview.app.services.storage import Storage
from chessview.app.tasks.resume_parse import ResumeParseJobs
from chessview.main import app
from chessview.tests.fakes import FakeCompletionClient, FakeGoogleVerifier, InlineExecutor

# In-memory SQLite for tests - StaticPool ensures all sessions share same DB
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Patch the session module so app code and the lifespan use our test engine
import chessview.app.db.session as session_module
session_module.engine = engine
session_module.SessionLocal = TestingSessionLocal


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def completion_client():
    """Unavailable by default: relay replies fall back, resume parse uses the basic record."""
    client = FakeCompletionClient(fail=True)
    app.dependency_overrides[get_completion_client] = lambda: client
    yield client
    app.dependency_overrides.pop(get_completion_client, None)


@pytest.fixture
def resume_jobs(completion_client):
    jobs = ResumeParseJobs(
        TestingSessionLocal,
        ResumeParser(completion_client),
        executor=InlineExecutor(),
        max_attempts=2,
        retry_delay=0,
    )
    app.dependency_overrides[get_resume_jobs] = lambda: jobs
    yield jobs
    app.dependency_overrides.pop(get_resume_jobs, None)


@pytest.fixture
def google_verifier():
    """Token verifier with no known tokens; tests register identities on it."""
    verifier = FakeGoogleVerifier()
    app.dependency_overrides[get_google_verifier] = lambda: verifier
    yield verifier
    app.dependency_overrides.pop(get_google_verifier, None)


@pytest.fixture(autouse=True)
def tmp_dirs(tmp_path, monkeypatch):
    """Keep uploads and exports inside the per-test temp dir."""
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "export_dir", str(tmp_path / "exports"))
    return tmp_path


@pytest.fixture(scope="function")
def db_session():
    """Create tables and a fresh DB session per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(db_session):
    return Storage(db_session)


@pytest.fixture
def test_user(db_session):
    """Create the first test user (id=1, also the export admin)."""
    user = User(
        id=1,
        username="testuser",
        first_name="Test",
        last_name="User",
        email="test@example.com",
        hashed_password=get_password_hash("testpass123"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def other_user(db_session, test_user):
    user = User(
        id=2,
        username="otheruser",
        first_name="Other",
        last_name="Player",
        email="other@example.com",
        hashed_password=get_password_hash("otherpass123"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def _headers(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user):
    """Bearer token for test user."""
    return _headers(test_user)


@pytest.fixture
def other_headers(other_user):
    return _headers(other_user)


@pytest.fixture
def client(db_session, test_user, completion_client, resume_jobs, google_verifier):
    """TestClient with DB, test user, fake completion client, fake Google verifier and inline parse jobs."""
    return TestClient(app)


@pytest.fixture
def session_factory(db_session):
    """Session factory bound to the test engine, for code that opens its own sessions."""
    return TestingSessionLocal
