import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from todo_platform.core.errors import NotFoundError, ValidationError
from todo_platform.models.todo import Todo, utcnow

logger = logging.getLogger(__name__)


class StatusFilter(str, Enum):
    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"

    @classmethod
    def parse(cls, value: Optional[str]) -> "StatusFilter":
        """Case-insensitive; anything unrecognised means all"""
        if not value:
            return cls.ALL
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.ALL


@dataclass(frozen=True)
class TodoChanges:
    """Partial update. None means "leave unchanged"; callers validate first."""
    content: Optional[str] = None
    completed: Optional[bool] = None

    def is_empty(self) -> bool:
        return self.content is None and self.completed is None


class TodoService:
    """
    Todo Resource Manager on top of the Todo Store.

    Every call is scoped by owner_id, which comes from the verified token and
    never from request input. A todo owned by someone else is reported
    exactly like a missing one.
    """

    @staticmethod
    def _commit(db: Session) -> None:
        try:
            db.commit()
        except SQLAlchemyError:
            # Discard the pending change so the session is usable again;
            # the error itself becomes a generic 500 in the handler
            db.rollback()
            raise

    @staticmethod
    def get_owned(owner_id: str, todo_id: str, db: Session) -> Todo:
        # Owner is part of the lookup, so another user's todo is simply not found
        # and callers cannot probe which ids exist under other accounts
        todo = db.query(Todo).filter(
            Todo.id == todo_id,
            Todo.owner_id == owner_id
        ).first()
        if todo is None:
            raise NotFoundError()
        return todo

    def create(self, owner_id: str, content: str, db: Session, completed: bool = False) -> Todo:
        now = utcnow()
        todo = Todo(
            owner_id=owner_id,
            content=content,
            completed=completed,
            created_at=now,
            updated_at=now,
        )
        db.add(todo)
        self._commit(db)
        db.refresh(todo)
        logger.info(f"Created todo {todo.id} for owner {owner_id}")
        return todo

    def list(self, owner_id: str, db: Session, status_filter: StatusFilter = StatusFilter.ALL) -> List[Todo]:
        """Owned todos matching the filter, newest first. Empty list when none match."""
        # owner_id always comes from the verified token
        query = db.query(Todo).filter(Todo.owner_id == owner_id)
        if status_filter is StatusFilter.COMPLETED:
            query = query.filter(Todo.completed.is_(True))
        elif status_filter is StatusFilter.PENDING:
            query = query.filter(Todo.completed.is_(False))
        return query.order_by(Todo.created_at.desc(), Todo.id.desc()).all()

    def update(self, owner_id: str, todo_id: str, changes: TodoChanges, db: Session) -> Todo:
        if changes.is_empty():
            raise ValidationError("At least one of content or completed must be provided")
        todo = self.get_owned(owner_id, todo_id, db)

        # Only supplied fields are touched
        if changes.content is not None:
            todo.content = changes.content
        if changes.completed is not None:
            todo.completed = changes.completed
        # Refreshed on every successful mutation
        todo.updated_at = utcnow()

        self._commit(db)
        db.refresh(todo)
        logger.info(f"Updated todo {todo.id}")
        return todo

    def delete(self, owner_id: str, todo_id: str, db: Session) -> None:
        """Remove permanently. A second delete of the same id raises NotFoundError."""
        todo = self.get_owned(owner_id, todo_id, db)
        db.delete(todo)
        self._commit(db)
        logger.info(f"Deleted todo {todo_id}")


todo_service = TodoService()
