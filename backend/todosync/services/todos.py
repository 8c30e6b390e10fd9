# todosync/services/todos.py
"""
Todo store: CRUD for todos, always scoped by the owning user.
Returns TodoOut schemas so the same objects feed HTTP responses and stream events.
"""
import uuid
from typing import List, Optional, Tuple

from todosync.core.errors import Forbidden, InvalidInput, NotFound
from todosync.models.todo import Todo
from todosync.schemas.todo import TodoOut

DEFAULT_PRIORITY = "normal"


async def list_for_user(user_id: str) -> List[TodoOut]:
    """All todos of the user, newest first."""
    rows = await Todo.filter(user_id=user_id).order_by("-created_at")
    return [TodoOut.from_model(t) for t in rows]


async def create(user_id: str, text: str, priority: Optional[str] = None) -> TodoOut:
    text = (text or "").strip()
    if not text:
        raise InvalidInput("todo text is required")
    todo = await Todo.create(user_id=user_id, text=text, priority=priority or DEFAULT_PRIORITY)
    return TodoOut.from_model(todo)


async def _get_owned(user_id: str, todo_id: str) -> Todo:
    try:
        uuid.UUID(str(todo_id))
    except ValueError:
        # not a UUID, so it cannot exist
        raise NotFound("todo not found")
    todo = await Todo.get_or_none(id=todo_id)
    if todo is None:
        raise NotFound("todo not found")
    if str(todo.user_id) != str(user_id):
        raise Forbidden("todo belongs to another user")
    return todo


async def update(
    user_id: str,
    todo_id: str,
    text: Optional[str] = None,
    completed: Optional[bool] = None,
    priority: Optional[str] = None,
) -> TodoOut:
    """
    Apply the given fields. Ownership is checked before the empty-update rule,
    matching the order clients see: 404, 403, then 400.
    """
    todo = await _get_owned(user_id, todo_id)
    if text is None and completed is None and priority is None:
        raise InvalidInput("no fields to update")

    if text is not None:
        text = text.strip()
        if not text:
            raise InvalidInput("todo text cannot be empty")
        todo.text = text
    if completed is not None:
        todo.completed = completed
    if priority is not None:
        todo.priority = priority
    await todo.save()
    return TodoOut.from_model(todo)


async def delete(user_id: str, todo_id: str) -> str:
    todo = await _get_owned(user_id, todo_id)
    deleted_id = str(todo.id)
    await todo.delete()
    return deleted_id


async def clear_completed(user_id: str) -> Tuple[int, List[TodoOut]]:
    """Delete the user's completed todos; return the count and what is left."""
    removed = await Todo.filter(user_id=user_id, completed=True).delete()
    return removed, await list_for_user(user_id)
