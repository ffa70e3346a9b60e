"""Permissions API router."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tms_backend.api.deps import Pagination, hard_delete_flag, include_deleted_flag
from tms_backend.core.access_gate import AccessContext, access_gate
from tms_backend.core.constants import HTTPMethod
from tms_backend.db.session import get_db
from tms_backend.schemas.schemas import (
    Envelope,
    MessageResponse,
    Page,
    PermissionCreate,
    PermissionOut,
    PermissionUpdate,
)
from tms_backend.services.permission_service import permission_service

router = APIRouter(prefix="/permissions", tags=["permissions"], dependencies=[Depends(access_gate)])


@router.get("", response_model=Envelope[Page[PermissionOut]])
def list_permissions(
    module: Optional[str] = Query(None),
    method: Optional[HTTPMethod] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    paging: Pagination = Depends(),
    include_deleted: bool = Depends(include_deleted_flag),
    db: Session = Depends(get_db),
):
    result = permission_service.list_permissions(
        db,
        page=paging.page,
        page_size=paging.page_size,
        include_deleted=include_deleted,
        module=module,
        method=method,
        search=search,
    )
    return {"message": "Permissions retrieved", "data": result}


@router.get("/{permission_id}", response_model=Envelope[PermissionOut])
def get_permission(
    permission_id: str,
    include_deleted: bool = Depends(include_deleted_flag),
    db: Session = Depends(get_db),
):
    permission = permission_service.get_permission(db, permission_id, include_deleted)
    return {"message": "Permission retrieved", "data": permission}


@router.post("", response_model=Envelope[PermissionOut], status_code=201)
def create_permission(
    body: PermissionCreate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    permission = permission_service.create_permission(db, body, ctx.user_id)
    return {"message": "Permission created", "data": permission}


@router.put("/{permission_id}", response_model=Envelope[PermissionOut])
def update_permission(
    permission_id: str,
    body: PermissionUpdate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    permission = permission_service.update_permission(db, permission_id, body, ctx.user_id)
    return {"message": "Permission updated", "data": permission}


@router.delete("/{permission_id}", response_model=MessageResponse)
def delete_permission(
    permission_id: str,
    hard: bool = Depends(hard_delete_flag),
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    permission_service.delete_permission(db, permission_id, ctx.user_id, hard=hard)
    return MessageResponse(message="Permission deleted")


@router.patch("/{permission_id}/enable", response_model=Envelope[PermissionOut])
def enable_permission(
    permission_id: str,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    permission = permission_service.enable_permission(db, permission_id, ctx.user_id)
    return {"message": "Permission enabled", "data": permission}
