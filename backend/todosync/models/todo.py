# todosync/models/todo.py
import uuid
from tortoise import fields, models

class Todo(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.ForeignKeyField(
        "models.User",
        related_name="todos",
        on_delete=fields.CASCADE,
    )  # Owner; every query is scoped by it
    text = fields.TextField()
    completed = fields.BooleanField(default=False)
    priority = fields.CharField(max_length=16, default="normal")  # Free-form label, client uses low/normal/high
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "todos"
        ordering = ["-created_at"]
