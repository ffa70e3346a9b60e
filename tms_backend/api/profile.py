"""Profile API router: the caller's own account."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tms_backend.core.access_gate import AccessContext, access_gate
from tms_backend.db.session import get_db
from tms_backend.schemas.schemas import (
    ChangePasswordRequest,
    Envelope,
    MessageResponse,
    ProfileUpdate,
    UserOut,
)
from tms_backend.services.profile_service import profile_service

router = APIRouter(prefix="/profile", tags=["profile"], dependencies=[Depends(access_gate)])


@router.get("", response_model=Envelope[UserOut])
def get_profile(db: Session = Depends(get_db), ctx: AccessContext = Depends(access_gate)):
    return {"message": "Profile retrieved", "data": profile_service.get_profile(db, ctx.user_id)}


@router.put("", response_model=Envelope[UserOut])
def update_profile(
    body: ProfileUpdate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    return {"message": "Profile updated", "data": profile_service.update_profile(db, ctx.user_id, body)}


@router.put("/reset-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    profile_service.change_password(db, ctx.user_id, body)
    return MessageResponse(message="Password changed")
