"""Password hashing and JWT helpers for access, refresh and reset tokens."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from tms_backend.core.config import settings
from tms_backend.core.exceptions import UnauthenticatedError

ACCESS_TOKEN_CLAIMS = ("userId", "roleId", "roleName", "iat", "exp")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(pwd_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    pwd_bytes = plain_password.encode("utf-8")
    hashed_bytes = hashed_password.encode("utf-8")
    return bcrypt.checkpw(pwd_bytes, hashed_bytes)


def _encode(claims: dict, secret: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = claims.copy()
    to_encode.update({"iat": int(now.timestamp()), "exp": now + expires_delta})
    return jwt.encode(to_encode, secret, algorithm=settings.JWT_ALGORITHM)


def _decode(token: str, secret: str) -> dict:
    try:
        return jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise UnauthenticatedError("Invalid or expired token")


def create_access_token(
    user_id: str,
    role_id: str,
    role_name: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token carrying the caller's role."""
    return _encode(
        {"userId": user_id, "roleId": role_id, "roleName": role_name},
        settings.ACCESS_TOKEN_SECRET,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(user_id: str, email: str) -> str:
    """Create a JWT refresh token; the uuid keeps every token distinct."""
    return _encode(
        {"sub": user_id, "email": email, "uuid": str(uuid.uuid4())},
        settings.REFRESH_TOKEN_SECRET,
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def create_reset_password_token(user_id: str, email: str) -> str:
    return _encode(
        {"sub": user_id, "email": email, "purpose": "reset-password"},
        settings.RESET_PASSWORD_SECRET,
        timedelta(minutes=settings.RESET_PASSWORD_EXPIRE_MINUTES),
    )


def decode_access_token(token: str) -> dict:
    """Decode and validate an access token, requiring every claim."""
    payload = _decode(token, settings.ACCESS_TOKEN_SECRET)
    if any(payload.get(claim) is None for claim in ACCESS_TOKEN_CLAIMS):
        raise UnauthenticatedError("Invalid token payload")
    return payload


def decode_refresh_token(token: str) -> dict:
    payload = _decode(token, settings.REFRESH_TOKEN_SECRET)
    if not payload.get("sub"):
        raise UnauthenticatedError("Invalid token payload")
    return payload


def decode_reset_password_token(token: str) -> dict:
    payload = _decode(token, settings.RESET_PASSWORD_SECRET)
    if payload.get("purpose") != "reset-password" or not payload.get("sub"):
        raise UnauthenticatedError("Invalid reset token")
    return payload


def extract_bearer(authorization: Optional[str]) -> str:
    """Return the token part of an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise UnauthenticatedError("Access token is missing")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise UnauthenticatedError("Malformed authorization header")
    return parts[1]


def initial_password(eid: str) -> str:
    """Plain initial password of a newly created user."""
    return f"{eid}{settings.PASSWORD_SECRET}"
