import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from marketplace.database import get_db, init_db
from marketplace.main import app
from marketplace.config import settings
from marketplace.services.session_service import session_service


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def tmp_data(tmp_path):
    data_path = tmp_path / "TestMarketplace"
    data_path.mkdir()
    return data_path


@pytest.fixture
def test_db(tmp_data):
    db_path = tmp_data / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def db(test_db):
    session = test_db()
    yield session
    session.close()


@pytest.fixture
def fresh_sessions():
    """Reset the in-memory session store for each test."""
    original = session_service.__dict__.copy()
    session_service._active_tokens = {}
    yield session_service
    session_service.__dict__.update(original)


@pytest.fixture
def client(tmp_data, test_db, fresh_sessions):
    original_data_path = settings.data_path
    settings.data_path = tmp_data
    c = TestClient(app)
    yield c
    settings.data_path = original_data_path


@pytest.fixture
def make_user(client):
    """Register and log in a user; returns its id and auth headers."""
    counter = {"n": 0}

    def _make(username: str | None = None, password: str = "correct-horse-battery"):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        r = client.post("/api/auth/register", json={
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
            "firstname": username.capitalize(),
            "lastname": "Tester",
        })
        assert r.status_code == 201, r.text
        user_id = r.json()["id"]
        r = client.post("/api/auth/login", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        return {"id": user_id, "headers": {"Authorization": f"Bearer {r.json()['token']}"}}

    return _make


@pytest.fixture
def make_announcement(client):
    def _make(owner, role: str = "Backend Engineer", company_name: str = "Acme Corp", **extra):
        r = client.post("/api/job-announcements", json={
            "role": role,
            "company_name": company_name,
            "location": "Bangkok",
            **extra,
        }, headers=owner["headers"])
        assert r.status_code == 201, r.text
        return r.json()["id"]

    return _make
