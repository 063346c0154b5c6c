import uuid
from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, DateTime, Index, String
from todo_platform.core.database import TodoBase

CONTENT_MAX_LENGTH = 500


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Todo(TodoBase):
    __tablename__ = "todos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    content = Column(String(CONTENT_MAX_LENGTH), nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    # Users live in another service's database, so no foreign key here
    owner_id = Column(String(36), nullable=False, index=True)
    # Set in Python so ordering keeps sub-second resolution on every backend
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_todos_owner_created", "owner_id", "created_at"),
    )
