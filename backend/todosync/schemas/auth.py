# todosync/schemas/auth.py
"""
Pydantic schemas for authentication and session endpoints.
Request fields default to empty strings so missing values reach the
handlers and are answered with the service's own 400 message.
"""
import datetime as dt

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    username: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    """
    Credentials for the login endpoint.
    `username` may hold either the username or the email address.
    """
    username: str = ""
    password: str = ""


class ChangePasswordRequest(BaseModel):
    oldPassword: str = ""
    newPassword: str = ""


class UserOut(BaseModel):
    """
    Identity returned by register/login. Never contains the password hash.
    """
    id: str
    username: str
    email: str


class ProfileOut(UserOut):
    created_at: dt.datetime


class LoginResponse(BaseModel):
    message: str
    token: str  # Bearer token for the Authorization header and the stream query
    user: UserOut


class SessionOut(BaseModel):
    """
    One entry of the "my devices" listing. The token itself is never listed.
    """
    id: str
    device_info: str
    created_at: dt.datetime
    expires_at: dt.datetime
