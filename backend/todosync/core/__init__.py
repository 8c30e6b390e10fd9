# todosync/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- clock: UTC "now" used by lockout and session expiry
- db: Database configuration and connection management
- errors: Service exceptions and their HTTP status codes
- pubsub: Per-user fan-out of todo events to live streams
- security: Password hashing and bearer token signing
"""
