# todosync/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports.

Models exported:
- User: account and password hash
- Session: server-side record behind each bearer token
- LoginAttempt: failed-login counter and lockout deadline per username
- Todo: a task owned by one user
"""
from .user import User
from .session import Session
from .login_attempt import LoginAttempt
from .todo import Todo
