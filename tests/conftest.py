import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from clinic_queue import security, storage
from clinic_queue.clinic import ClinicState, get_clinic
from clinic_queue.main import app


@pytest.fixture
def session_factory(tmp_path):
    """A throwaway SQLite database per test."""
    engine = storage.make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    storage.init_db(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


class FakeClock:
    """Clock whose current time the test sets by hand."""

    def __init__(self, value="2025-01-01T09:00:00Z"):
        self.value = value

    def __call__(self):
        return self.value


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def clinic(session_factory, clock):
    state = ClinicState(storage.StateRepository(session_factory), namespace="test-storage", seed_demo=False, clock=clock)
    state.load()
    return state


@pytest.fixture
def client(session_factory, clinic):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[storage.get_db] = override_get_db
    app.dependency_overrides[get_clinic] = lambda: clinic
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_user(session_factory, username, password="secret123", role="staff", is_active=True):
    db = session_factory()
    try:
        db.add(storage.User(
            username=username,
            hashed_password=security.hash_password(password),
            full_name=username.title(),
            role=role,
            is_active=is_active,
        ))
        db.commit()
    finally:
        db.close()


def bearer(username, role):
    token = security.create_access_token(data={"sub": username, "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def staff_headers(session_factory):
    create_user(session_factory, "nurse", role="staff")
    return bearer("nurse", "staff")


@pytest.fixture
def admin_headers(session_factory):
    create_user(session_factory, "boss", role="admin")
    return bearer("boss", "admin")


@pytest.fixture
def make_user(session_factory):
    def _make(username, **kwargs):
        create_user(session_factory, username, **kwargs)
    return _make
