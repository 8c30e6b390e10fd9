# todosync/core/security.py
"""
Security module for authentication.
Handles password hashing and signing/decoding of session bearer tokens.
"""
import datetime as dt

import jwt  # PyJWT
from passlib.context import CryptContext

from todosync.config import settings

# Password hashing context
# Argon2 with passlib's default cost verifies in a few tens of milliseconds
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)

# JWT configuration
JWT_SECRET = settings.jwt_secret
JWT_ALG = settings.jwt_alg
SESSION_TTL = dt.timedelta(days=settings.session_ttl_days)


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    The salt is generated per call and embedded in the returned string,
    so hashing the same password twice gives two different hashes.
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a stored hash.

    Returns False (instead of raising) for hashes passlib cannot identify.
    """
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


def create_session_token(
    user_id: str,
    username: str,
    email: str,
    session_id: str,
    issued_at: dt.datetime,
    expires_at: dt.datetime,
) -> str:
    """
    Sign a bearer token for one login session.

    The caller passes both timestamps so the signed `exp` claim and the
    persisted Session.expires_at come from the same clock reading.

    Token payload:
        - sub: user id
        - username / email: identity claims returned by validation
        - sid: session id (unique per token)
        - iat / exp: issue and expiry instants
    """
    payload = {
        "sub": user_id,
        "username": username,
        "email": email,
        "sid": session_id,
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


def decode_session_token(token: str) -> dict:
    """
    Decode a bearer token and check its signature and `exp` claim.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired
        jwt.InvalidTokenError: If the token is malformed or tampered with
    """
    return jwt.decode(
        token,
        JWT_SECRET,
        algorithms=[JWT_ALG],
        options={"require": ["sub", "sid", "exp"]},
    )
