import os

# Settings are read at import time, so configure before importing the app
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["IDENTITY_DATABASE_URL"] = "sqlite://"
os.environ["TODO_DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from todo_platform.core.database import IdentityBase, TodoBase, get_identity_db, get_todo_db, make_engine
from todo_platform.core.security import create_access_token
from todo_platform.main import identity_app, todo_app


def _session_factory(metadata):
    engine = make_engine("sqlite://")
    metadata.create_all(bind=engine)
    return engine, sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def identity_sessions():
    engine, factory = _session_factory(IdentityBase.metadata)
    yield factory
    engine.dispose()


@pytest.fixture
def todo_sessions():
    engine, factory = _session_factory(TodoBase.metadata)
    yield factory
    engine.dispose()


@pytest.fixture
def identity_db(identity_sessions):
    db = identity_sessions()
    yield db
    db.close()


@pytest.fixture
def todo_db(todo_sessions):
    db = todo_sessions()
    yield db
    db.close()


@pytest.fixture
def identity_client(identity_sessions):
    def override_get_db():
        db = identity_sessions()
        try:
            yield db
        finally:
            db.close()

    identity_app.dependency_overrides[get_identity_db] = override_get_db
    yield TestClient(identity_app)
    identity_app.dependency_overrides.clear()


@pytest.fixture
def todo_client(todo_sessions):
    def override_get_db():
        db = todo_sessions()
        try:
            yield db
        finally:
            db.close()

    todo_app.dependency_overrides[get_todo_db] = override_get_db
    yield TestClient(todo_app)
    todo_app.dependency_overrides.clear()


@pytest.fixture
def make_headers():
    """Authorization headers for an arbitrary owner, signed with the test secret"""
    def _make(owner_id: str = "owner-a", email: str = "a@example.com") -> dict:
        token = create_access_token(owner_id=owner_id, email=email)
        return {"Authorization": f"Bearer {token}"}
    return _make


@pytest.fixture
def headers_a(make_headers):
    return make_headers("owner-a", "a@example.com")


@pytest.fixture
def headers_b(make_headers):
    return make_headers("owner-b", "b@example.com")
