"""Users API router."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tms_backend.api.deps import Pagination, hard_delete_flag, include_deleted_flag
from tms_backend.core.access_gate import AccessContext, access_gate
from tms_backend.db.session import get_db
from tms_backend.schemas.schemas import (
    BulkCreateResult,
    Envelope,
    MessageResponse,
    Page,
    UserBulkCreate,
    UserCreate,
    UserOut,
    UserUpdate,
)
from tms_backend.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(access_gate)])


@router.get("", response_model=Envelope[Page[UserOut]])
def list_users(
    role_id: Optional[str] = Query(None),
    department_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    paging: Pagination = Depends(),
    include_deleted: bool = Depends(include_deleted_flag),
    db: Session = Depends(get_db),
):
    result = user_service.list_users(
        db,
        page=paging.page,
        page_size=paging.page_size,
        include_deleted=include_deleted,
        role_id=role_id,
        department_id=department_id,
        search=search,
    )
    return {"message": "Users retrieved", "data": result}


@router.get("/trainees", response_model=Envelope[Page[UserOut]])
def list_trainees(
    search: Optional[str] = Query(None, max_length=100),
    paging: Pagination = Depends(),
    db: Session = Depends(get_db),
):
    result = user_service.list_trainees(db, page=paging.page, page_size=paging.page_size, search=search)
    return {"message": "Trainees retrieved", "data": result}


@router.get("/{user_id}", response_model=Envelope[UserOut])
def get_user(
    user_id: str,
    include_deleted: bool = Depends(include_deleted_flag),
    db: Session = Depends(get_db),
):
    return {"message": "User retrieved", "data": user_service.get_user(db, user_id, include_deleted)}


@router.post("", response_model=Envelope[UserOut], status_code=201)
def create_user(
    body: UserCreate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    """Create a user; the EID is generated from the role."""
    return {"message": "User created", "data": user_service.create_user(db, body, ctx)}


@router.post("/bulk", response_model=Envelope[BulkCreateResult], status_code=201)
def bulk_create_users(
    body: UserBulkCreate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    result = user_service.bulk_create_users(db, body, ctx)
    return {"message": f"Created {len(result['created'])} user(s)", "data": result}


@router.put("/{user_id}", response_model=Envelope[UserOut])
def update_user(
    user_id: str,
    body: UserUpdate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    return {"message": "User updated", "data": user_service.update_user(db, user_id, body, ctx)}


@router.delete("/{user_id}", response_model=MessageResponse)
def disable_user(
    user_id: str,
    hard: bool = Depends(hard_delete_flag),
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    user_service.disable_user(db, user_id, ctx.user_id, hard=hard)
    return MessageResponse(message="User disabled")


@router.patch("/{user_id}/enable", response_model=Envelope[UserOut])
def enable_user(
    user_id: str,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    return {"message": "User enabled", "data": user_service.enable_user(db, user_id, ctx.user_id)}
