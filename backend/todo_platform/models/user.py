import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime
from todo_platform.core.database import IdentityBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(IdentityBase):
    """
    Credential Store record.

    Users are created on registration and never updated or deleted.
    The password hash never leaves the identity service.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Unique and indexed for login lookups; compared case-sensitively as stored
    email = Column(String(320), unique=True, index=True, nullable=False)
    password_hash = Column(String(128), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
