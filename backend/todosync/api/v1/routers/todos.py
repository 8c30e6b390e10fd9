from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from todosync.api.v1.deps import get_current_session
from todosync.core.pubsub import EVENT_CREATED, EVENT_DELETED, EVENT_LIST, EVENT_UPDATED, hub
from todosync.schemas.todo import TodoCreate, TodoOut, TodoUpdate
from todosync.services import todos as todo_store
from todosync.services.sessions import SessionContext

router = APIRouter(prefix="/todos", tags=["todos"])


def _dump(todo: TodoOut) -> dict:
    return todo.model_dump(mode="json")


@router.get("", response_model=list[TodoOut])
async def list_todos(current: SessionContext = Depends(get_current_session)):
    """
    All todos of the authenticated user, newest first.
    """
    return await todo_store.list_for_user(current.user_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_todo(body: TodoCreate, current: SessionContext = Depends(get_current_session)):
    """
    Create a todo and push a `created` event to the user's open streams.
    """
    todo = _dump(await todo_store.create(current.user_id, body.text, body.priority))
    response = JSONResponse(status_code=status.HTTP_201_CREATED, content=todo)
    await hub.publish(current.user_id, EVENT_CREATED, todo)
    return response


@router.delete("/batch/completed")
async def clear_completed(current: SessionContext = Depends(get_current_session)):
    """
    Delete every completed todo and push the remaining collection as a `list` event.
    """
    removed, remaining = await todo_store.clear_completed(current.user_id)
    response = JSONResponse(content={"message": "completed todos cleared", "removed": removed})
    await hub.publish(current.user_id, EVENT_LIST, [_dump(t) for t in remaining])
    return response


@router.put("/{todo_id}")
async def update_todo(todo_id: str, body: TodoUpdate, current: SessionContext = Depends(get_current_session)):
    """
    Update text, completed flag and/or priority; pushes `updated`.

    Errors:
        400: no field given
        403: todo belongs to another user
        404: todo does not exist
    """
    todo = _dump(
        await todo_store.update(
            current.user_id,
            todo_id,
            text=body.text,
            completed=body.completed,
            priority=body.priority,
        )
    )
    response = JSONResponse(content=todo)
    await hub.publish(current.user_id, EVENT_UPDATED, todo)
    return response


@router.delete("/{todo_id}")
async def delete_todo(todo_id: str, current: SessionContext = Depends(get_current_session)):
    """
    Delete one todo; pushes `deleted` with {"id": ...}.
    """
    deleted_id = await todo_store.delete(current.user_id, todo_id)
    response = JSONResponse(content={"message": "deleted", "id": deleted_id})
    await hub.publish(current.user_id, EVENT_DELETED, {"id": deleted_id})
    return response
