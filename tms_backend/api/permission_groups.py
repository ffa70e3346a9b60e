"""Permission groups API router."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tms_backend.core.access_gate import AccessContext, access_gate
from tms_backend.db.session import get_db
from tms_backend.schemas.schemas import (
    Envelope,
    MessageResponse,
    PermissionGroupAssign,
    PermissionGroupCollection,
    PermissionGroupCreate,
    PermissionGroupDetailOut,
    PermissionGroupUpdate,
)
from tms_backend.services.permission_group_service import permission_group_service

router = APIRouter(
    prefix="/permission-groups", tags=["permission-groups"], dependencies=[Depends(access_gate)]
)


@router.get("", response_model=Envelope[List[PermissionGroupCollection]])
def list_permission_groups(db: Session = Depends(get_db)):
    """Permission groups collected under their feature headings."""
    return {"message": "Permission groups retrieved", "data": permission_group_service.list_groups(db)}


@router.get("/{permission_group_id}", response_model=Envelope[PermissionGroupDetailOut])
def get_permission_group(permission_group_id: str, db: Session = Depends(get_db)):
    group = permission_group_service.get_group_detail(db, permission_group_id)
    return {"message": "Permission group retrieved", "data": group}


@router.post("", response_model=Envelope[PermissionGroupDetailOut], status_code=201)
def create_permission_group(
    body: PermissionGroupCreate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    group = permission_group_service.create_group(db, body, ctx.user_id)
    return {"message": "Permission group created", "data": group}


@router.patch("/{permission_group_id}", response_model=Envelope[PermissionGroupDetailOut])
def update_permission_group(
    permission_group_id: str,
    body: PermissionGroupUpdate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    group = permission_group_service.update_group(db, permission_group_id, body, ctx.user_id)
    return {"message": "Permission group updated", "data": group}


@router.delete("/{permission_group_id}", response_model=MessageResponse)
def delete_permission_group(permission_group_id: str, db: Session = Depends(get_db)):
    permission_group_service.delete_group(db, permission_group_id)
    return MessageResponse(message="Permission group deleted")


@router.post("/{permission_group_id}/permissions", response_model=Envelope[PermissionGroupDetailOut])
def assign_permission_group_permissions(
    permission_group_id: str,
    body: PermissionGroupAssign,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    group = permission_group_service.assign_permissions(
        db, permission_group_id, body.permission_ids, ctx.user_id
    )
    return {"message": "Permissions assigned to permission group", "data": group}
