# todosync/models/login_attempt.py
from tortoise import fields, models

class LoginAttempt(models.Model):
    """
    Failed-login counter for one username.

    - username: the raw login string as submitted (username or email), not a user FK,
      so attempts against unknown names are counted too
    - attempts: consecutive failures since the last success or expired lock
    - locked_until: set once attempts reach the threshold; logins are refused before it
    The row is deleted on a successful login.
    """
    username = fields.CharField(max_length=255, pk=True)
    attempts = fields.IntField(default=0)
    last_attempt = fields.DatetimeField(null=True)
    locked_until = fields.DatetimeField(null=True)

    class Meta:
        table = "failed_logins"
