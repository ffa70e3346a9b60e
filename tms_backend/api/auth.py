"""Auth API router: login, refresh, logout and password recovery."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from tms_backend.core.access_gate import AccessContext, access_gate
from tms_backend.core.config import settings
from tms_backend.core.rate_limiter import limiter
from tms_backend.db.session import get_db
from tms_backend.schemas.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    ResetPasswordRequest,
    TokenResponse,
)
from tms_backend.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate and return JWT tokens."""
    return auth_service.authenticate(db, str(body.email), body.password)


@router.post("/refresh", response_model=TokenResponse)
def refresh(body: RefreshRequest, db: Session = Depends(get_db)):
    """Refresh access token."""
    return auth_service.refresh_access_token(db, body.refresh_token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    """Revoke all refresh tokens."""
    auth_service.logout(db, ctx.user_id)
    return MessageResponse(message="Logged out successfully")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(body: ForgotPasswordRequest, db: Session = Depends(get_db)):
    return MessageResponse(message=auth_service.forgot_password(db, str(body.email)))


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(body: ResetPasswordRequest, db: Session = Depends(get_db)):
    auth_service.reset_password(db, body.token, body.new_password)
    return MessageResponse(message="Password has been reset")
