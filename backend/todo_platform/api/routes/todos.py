from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, ConfigDict, field_serializer, field_validator, model_validator
from sqlalchemy.orm import Session
from todo_platform.api.dependencies import get_current_claims
from todo_platform.core.database import get_todo_db
from todo_platform.core.security import TokenClaims
from todo_platform.models.todo import CONTENT_MAX_LENGTH
from todo_platform.services.todo_service import StatusFilter, TodoChanges, todo_service

# Every route in this router requires a verified token
router = APIRouter(prefix="/todos", tags=["todos"], dependencies=[Depends(get_current_claims)])


def _clean_content(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Todo content cannot be empty")
    if len(value) > CONTENT_MAX_LENGTH:
        raise ValueError(f"Todo content cannot exceed {CONTENT_MAX_LENGTH} characters")
    return value


class TodoCreate(BaseModel):
    content: str
    completed: bool = False

    @field_validator("content")
    @classmethod
    def content_is_valid(cls, value: str) -> str:
        return _clean_content(value)


class TodoUpdate(BaseModel):
    content: Optional[str] = None
    completed: Optional[bool] = None

    @field_validator("content")
    @classmethod
    def content_is_valid(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _clean_content(value)

    @model_validator(mode="after")
    def has_changes(self):
        supplied = self.model_fields_set & {"content", "completed"}
        if not supplied:
            raise ValueError("At least one of content or completed must be provided")
        # Explicit null is not a way to clear a field
        if "content" in supplied and self.content is None:
            raise ValueError("Todo content cannot be empty")
        if "completed" in supplied and self.completed is None:
            raise ValueError("Completed must be a boolean")
        return self

    def to_changes(self) -> TodoChanges:
        return TodoChanges(content=self.content, completed=self.completed)


class TodoResponse(BaseModel):
    id: str
    content: str
    completed: bool
    owner_id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime, _info):
        return value.isoformat() if value else None

    @field_serializer("updated_at")
    def serialize_updated_at(self, value: datetime, _info):
        return value.isoformat() if value else None


class TodoEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: TodoResponse


class TodoListEnvelope(BaseModel):
    success: bool = True
    data: List[TodoResponse]


@router.post("", response_model=TodoEnvelope, status_code=status.HTTP_201_CREATED)
async def create_todo(
    body: TodoCreate,
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_todo_db)
):
    """Create a todo owned by the caller"""
    # Owner is taken from the token; any owner_id in the body is ignored
    todo = todo_service.create(claims.owner_id, body.content, db, completed=body.completed)
    return TodoEnvelope(message="Todo created successfully", data=TodoResponse.model_validate(todo))


@router.get("", response_model=TodoListEnvelope)
async def list_todos(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_todo_db)
):
    """List the caller's todos, newest first. ?status=all|completed|pending"""
    todos = todo_service.list(claims.owner_id, db, StatusFilter.parse(status_filter))
    return TodoListEnvelope(data=[TodoResponse.model_validate(todo) for todo in todos])


@router.get("/{todo_id}", response_model=TodoEnvelope, response_model_exclude_none=True)
async def get_todo(
    todo_id: str,
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_todo_db)
):
    """Get one of the caller's todos"""
    todo = todo_service.get_owned(claims.owner_id, todo_id, db)
    return TodoEnvelope(data=TodoResponse.model_validate(todo))


@router.put("/{todo_id}", response_model=TodoEnvelope)
async def update_todo(
    todo_id: str,
    body: TodoUpdate,
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_todo_db)
):
    """Partially update content and/or completed"""
    todo = todo_service.update(claims.owner_id, todo_id, body.to_changes(), db)
    return TodoEnvelope(message="Todo updated successfully", data=TodoResponse.model_validate(todo))


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_todo(
    todo_id: str,
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_todo_db)
):
    """Delete permanently. Deleting again yields 404."""
    todo_service.delete(claims.owner_id, todo_id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
