"""
Shared fixtures: an isolated SQLite ledger per test and bearer tokens.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from splitledger.core.security import create_access_token
from splitledger.db.session import build_engine, get_db, init_db
from splitledger.main import app
from splitledger.services import user_service


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user_ids(db):
    """Four registered users: alice (U1), bob (U2), carol (U3), dave (U4)."""
    names = ["alice", "bob", "carol", "dave"]
    return [user_service.register_user(db, name, f"{name}@example.com").id for name in names]


def token_for(user_id: int) -> str:
    return create_access_token({"sub": str(user_id), "user_id": user_id})


@pytest.fixture
def auth():
    """Build Authorization headers for a user id."""
    def _headers(user_id: int) -> dict:
        return {"Authorization": f"Bearer {token_for(user_id)}"}
    return _headers
