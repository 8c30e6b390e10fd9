# todosync/schemas/todo.py
"""
Pydantic schemas for todo endpoints and for the payloads pushed on the stream.
"""
import datetime as dt
from typing import Optional

from pydantic import BaseModel


class TodoCreate(BaseModel):
    text: str = ""
    priority: Optional[str] = None  # Defaults to "normal"


class TodoUpdate(BaseModel):
    """Partial update; at least one field must be present."""
    text: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[str] = None


class TodoOut(BaseModel):
    id: str
    text: str
    completed: bool
    priority: str
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_model(cls, todo) -> "TodoOut":
        return cls(
            id=str(todo.id),
            text=todo.text,
            completed=bool(todo.completed),
            priority=todo.priority,
            created_at=todo.created_at,
            updated_at=todo.updated_at,
        )
