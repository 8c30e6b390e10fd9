"""
Services Module

Domain operations called by the routers:
- credentials: registration, credential checks, password changes
- login_guard: failed-login counting and temporary lockout
- sessions: issuing, validating, listing and revoking bearer sessions
- todos: per-user todo CRUD
"""
