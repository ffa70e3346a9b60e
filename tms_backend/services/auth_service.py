"""Auth service: login, token refresh, logout and password reset."""

import hashlib
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy.orm import Session

from tms_backend.core.constants import UserStatus
from tms_backend.core.exceptions import ForbiddenError, MailError, UnauthenticatedError
from tms_backend.core.security import (
    create_access_token,
    create_refresh_token,
    create_reset_password_token,
    decode_refresh_token,
    decode_reset_password_token,
    hash_password,
    verify_password,
)
from tms_backend.models.user import RefreshToken, User
from tms_backend.repositories.user_repository import RefreshTokenRepository, UserRepository
from tms_backend.services.mail_service import mail_service

logger = logging.getLogger("tms")

FORGOT_PASSWORD_MESSAGE = "If the email exists, a reset link has been sent"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _token_hash(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class AuthService:
    """Handles authentication and credential recovery."""

    @staticmethod
    def _ensure_can_sign_in(user: User) -> None:
        if user.deleted_at is not None or user.status != UserStatus.ACTIVE:
            raise UnauthenticatedError("Account is disabled")
        role = user.role
        if role is None or role.deleted_at is not None or not role.is_active:
            raise ForbiddenError("Role is disabled")

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> Dict[str, Any]:
        """Authenticate user and return JWT tokens.

        Raises:
            UnauthenticatedError: If credentials are invalid or the account is disabled.
        """
        users = UserRepository(db)
        user = users.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise UnauthenticatedError("Invalid email or password")
        AuthService._ensure_can_sign_in(user)

        access_token = create_access_token(user.id, user.role_id, user.role.name)
        refresh_token_str = create_refresh_token(user.id, user.email)

        # Store refresh token hash
        payload = decode_refresh_token(refresh_token_str)
        db.add(RefreshToken(
            user_id=user.id,
            token_hash=_token_hash(refresh_token_str),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc).replace(tzinfo=None),
        ))
        user.last_login_at = _utcnow()
        users.commit()
        logger.info("User %s signed in", user.eid)

        return {
            "access_token": access_token,
            "refresh_token": refresh_token_str,
            "token_type": "bearer",
            "user": {
                "id": user.id,
                "eid": user.eid,
                "email": user.email,
                "full_name": user.full_name,
                "role": user.role.name,
                "avatar_url": user.avatar_url,
            },
        }

    @staticmethod
    def refresh_access_token(db: Session, refresh_token: str) -> Dict[str, Any]:
        """Refresh access token using a valid refresh token."""
        payload = decode_refresh_token(refresh_token)
        stored = RefreshTokenRepository(db).find_valid(_token_hash(refresh_token))
        if not stored or stored.expires_at < _utcnow():
            raise UnauthenticatedError("Invalid refresh token")

        user = UserRepository(db).get(payload["sub"])
        if not user or user.id != stored.user_id:
            raise UnauthenticatedError("User not found or disabled")
        AuthService._ensure_can_sign_in(user)

        return {
            "access_token": create_access_token(user.id, user.role_id, user.role.name),
            "token_type": "bearer",
        }

    @staticmethod
    def logout(db: Session, user_id: str) -> None:
        """Revoke all refresh tokens for a user."""
        RefreshTokenRepository(db).revoke_all(user_id, _utcnow())

    @staticmethod
    def forgot_password(db: Session, email: str) -> str:
        """Mail a reset link; the answer never reveals whether the email exists."""
        user = UserRepository(db).get_by_email(email, include_deleted=False)
        if user is None or user.status != UserStatus.ACTIVE:
            logger.info("Password reset requested for unknown or inactive email")
            return FORGOT_PASSWORD_MESSAGE
        token = create_reset_password_token(user.id, user.email)
        try:
            mail_service.send_reset_password(user.email, user.full_name, token)
        except MailError:
            logger.exception("Reset mail for user %s was not delivered", user.eid)
        return FORGOT_PASSWORD_MESSAGE

    @staticmethod
    def reset_password(db: Session, token: str, new_password: str) -> None:
        payload = decode_reset_password_token(token)
        users = UserRepository(db)
        user = users.get(payload["sub"])
        if user is None or user.email != payload.get("email"):
            raise UnauthenticatedError("Invalid reset token")
        user.password_hash = hash_password(new_password)
        user.updated_by_id = user.id
        users.commit()
        AuthService.logout(db, user.id)
        logger.info("Password reset for user %s", user.eid)


auth_service = AuthService()
