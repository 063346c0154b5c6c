from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from todo_platform.core.config import settings


def make_engine(url: str) -> Engine:
    """
    Create an engine for a database URL.

    SQLite connections are shared across the threads FastAPI runs sync
    dependencies on, and an in-memory database must live on a single
    connection or every session would see an empty schema.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


# Credential Store - owned by the identity service
identity_engine = make_engine(settings.IDENTITY_DATABASE_URL)
IdentitySessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=identity_engine)
IdentityBase = declarative_base()

# Todo Store - owned by the todo service
todo_engine = make_engine(settings.TODO_DATABASE_URL)
TodoSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=todo_engine)
TodoBase = declarative_base()


def get_identity_db():
    """Dependency yielding a Credential Store session, closed after the request."""
    db = IdentitySessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_todo_db():
    """Dependency yielding a Todo Store session, closed after the request."""
    db = TodoSessionLocal()
    try:
        yield db
    finally:
        db.close()
