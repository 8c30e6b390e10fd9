# todosync/models/session.py
"""
Database model for login sessions.
A bearer token is only honoured while its Session row exists and has not
passed expires_at, which is what makes logout and "log out other devices"
effective for otherwise self-contained signed tokens.
"""
from tortoise import fields, models

class Session(models.Model):
    id = fields.UUIDField(pk=True)  # Same value as the token's `sid` claim
    user = fields.ForeignKeyField(
        "models.User",
        related_name="sessions",
        on_delete=fields.CASCADE,
    )
    token = fields.CharField(max_length=1024, unique=True)  # Signed bearer token
    device_info = fields.CharField(max_length=512, default="unknown")  # Client User-Agent
    created_at = fields.DatetimeField(auto_now_add=True)
    expires_at = fields.DatetimeField()  # Matches the token's `exp` claim

    class Meta:
        table = "sessions"
