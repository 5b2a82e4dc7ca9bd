"""
Shared test fixtures.

Settings are read when recurate modules are first imported, so the
environment is pointed at a throwaway database and upload directory before
anything from the app is imported.
"""

import io
import os
import tempfile

_TEST_ROOT = tempfile.mkdtemp(prefix="recurate-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_ROOT}/test.db"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["ADMIN_EMAIL"] = "root@example.com"
os.environ["ADMIN_PASSWORD"] = "root-pass"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from starlette.datastructures import Headers, UploadFile  # noqa: E402

from recurate.core.database import Base, SessionLocal, engine, init_db  # noqa: E402
from recurate.core.rate_limit import limiter  # noqa: E402
from recurate.core.security import get_password_hash  # noqa: E402
from recurate.main import app  # noqa: E402
from recurate.models.user import User  # noqa: E402
from recurate.services.session_store import SessionStore, session_store  # noqa: E402
from recurate.storage.local_storage import LocalStorage, storage  # noqa: E402


class FakeClock:
    """Manually advanced replacement for time.time"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def clean_state():
    """Fresh schema, no sessions, no uploads and an empty rate-limit window per test."""
    Base.metadata.drop_all(bind=engine)
    init_db()
    session_store.clear()
    limiter.reset()
    storage.clear()
    yield
    session_store.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    """Drive the app-wide session store with a fake clock."""
    fake = FakeClock()
    original = session_store.clock
    session_store.clock = fake
    yield fake
    session_store.clock = original


@pytest.fixture
def store() -> SessionStore:
    """A private session store with a 30 minute idle timeout and a fake clock."""
    return SessionStore(idle_timeout_seconds=30 * 60, clock=FakeClock())


@pytest.fixture
def local_storage(tmp_path) -> LocalStorage:
    return LocalStorage(upload_dir=str(tmp_path / "uploads"), url_prefix="/uploads")


@pytest.fixture
def make_upload():
    """Build an UploadFile the way FastAPI hands it to a route."""
    def _make(filename: str = "photo.png", data: bytes = b"\x89PNG\r\n\x1a\nfake",
              content_type: str = "image/png") -> UploadFile:
        return UploadFile(
            file=io.BytesIO(data),
            filename=filename,
            headers=Headers({"content-type": content_type}),
        )
    return _make


@pytest.fixture
def make_user(db):
    """Insert a user directly, bypassing the registration flow."""
    def _make(full_name: str = "Alice", email: str = "alice@x.com",
              password: str = "p1", is_admin: bool = False) -> User:
        user = User(
            full_name=full_name,
            email=email,
            phone="1234567890",
            profile_photo="",
            password_hash=get_password_hash(password),
            is_admin=is_admin,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def client() -> TestClient:
    """Client without lifespan; the schema comes from clean_state."""
    return TestClient(app)


@pytest.fixture
def other_client() -> TestClient:
    """A second browser with its own cookie jar."""
    return TestClient(app)


def register_payload(**overrides) -> dict:
    payload = {
        "full_name": "Alice",
        "email": "alice@x.com",
        "phone": "1234567890",
        "password": "p1",
        "confirm_password": "p1",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def register():
    """POST /register through a given client without following the redirect."""
    def _register(client: TestClient, **overrides):
        return client.post("/register", data=register_payload(**overrides), follow_redirects=False)
    return _register
