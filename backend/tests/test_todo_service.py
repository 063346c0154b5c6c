import pytest

from todo_platform.core.errors import NotFoundError, ValidationError
from todo_platform.models.todo import Todo
from todo_platform.services.todo_service import StatusFilter, TodoChanges, todo_service


@pytest.mark.parametrize("raw,expected", [
    (None, StatusFilter.ALL),
    ("", StatusFilter.ALL),
    ("all", StatusFilter.ALL),
    ("Completed", StatusFilter.COMPLETED),
    (" pending ", StatusFilter.PENDING),
    ("done", StatusFilter.ALL),
])
def test_status_filter_parse(raw, expected):
    assert StatusFilter.parse(raw) is expected


def test_create_assigns_id_and_timestamps(todo_db):
    todo = todo_service.create("owner-a", "write tests", todo_db)

    assert todo.id
    assert todo.completed is False
    assert todo.owner_id == "owner-a"
    assert todo.created_at == todo.updated_at


def test_ids_are_unique(todo_db):
    ids = {todo_service.create("owner-a", f"item {i}", todo_db).id for i in range(5)}

    assert len(ids) == 5


def test_list_is_scoped_to_owner(todo_db):
    todo_service.create("owner-a", "mine", todo_db)
    todo_service.create("owner-b", "theirs", todo_db)

    assert [t.content for t in todo_service.list("owner-a", todo_db)] == ["mine"]
    assert todo_service.list("owner-c", todo_db) == []


def test_list_filters(todo_db):
    done = todo_service.create("owner-a", "done", todo_db, completed=True)
    open_ = todo_service.create("owner-a", "open", todo_db)

    assert [t.id for t in todo_service.list("owner-a", todo_db, StatusFilter.COMPLETED)] == [done.id]
    assert [t.id for t in todo_service.list("owner-a", todo_db, StatusFilter.PENDING)] == [open_.id]
    assert [t.id for t in todo_service.list("owner-a", todo_db, StatusFilter.ALL)] == [open_.id, done.id]


def test_partial_update(todo_db):
    todo = todo_service.create("owner-a", "draft", todo_db)
    before = todo.updated_at

    updated = todo_service.update("owner-a", todo.id, TodoChanges(completed=True), todo_db)

    assert updated.content == "draft"
    assert updated.completed is True
    assert updated.updated_at >= before

    updated = todo_service.update("owner-a", todo.id, TodoChanges(content="final"), todo_db)

    assert updated.content == "final"
    assert updated.completed is True


def test_update_other_owner_is_not_found(todo_db):
    todo = todo_service.create("owner-a", "private", todo_db)

    with pytest.raises(NotFoundError):
        todo_service.update("owner-b", todo.id, TodoChanges(content="mine now"), todo_db)

    todo_db.expire_all()
    assert todo_db.get(Todo, todo.id).content == "private"


def test_delete_removes_record(todo_db):
    todo = todo_service.create("owner-a", "temporary", todo_db)

    todo_service.delete("owner-a", todo.id, todo_db)

    assert todo_db.get(Todo, todo.id) is None
    with pytest.raises(NotFoundError):
        todo_service.delete("owner-a", todo.id, todo_db)


def test_delete_other_owner_is_not_found(todo_db):
    todo = todo_service.create("owner-a", "keep", todo_db)

    with pytest.raises(NotFoundError):
        todo_service.delete("owner-b", todo.id, todo_db)

    assert todo_db.get(Todo, todo.id) is not None


def test_empty_changes_are_rejected(todo_db):
    todo = todo_service.create("owner-a", "stay", todo_db)

    assert not TodoChanges(completed=False).is_empty()
    with pytest.raises(ValidationError):
        todo_service.update("owner-a", todo.id, TodoChanges(), todo_db)
