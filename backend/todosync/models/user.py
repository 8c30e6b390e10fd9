# todosync/models/user.py
"""
Database model for users.
Represents an account: login identity plus the salted password hash.
"""
import uuid
from tortoise import fields, models

class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many Sessions (one-to-many, via related_name="sessions")
    - Has many Todos (one-to-many, via related_name="todos")

    Security:
    - Password is stored as an Argon2 hash, never in plain text
    - Username and email are each unique across all users
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: opaque user identifier
    username = fields.CharField(max_length=64, unique=True, index=True)  # Login name
    email = fields.CharField(max_length=255, unique=True, index=True)  # Also accepted as login name
    password_hash = fields.CharField(max_length=255)  # Argon2 hash
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)  # Bumped on password change

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"
