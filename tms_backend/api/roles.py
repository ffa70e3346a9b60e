"""Roles API router."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tms_backend.api.deps import hard_delete_flag, include_deleted_flag
from tms_backend.core.access_gate import AccessContext, access_gate
from tms_backend.db.session import get_db
from tms_backend.schemas.schemas import (
    Envelope,
    MessageResponse,
    RoleCreate,
    RoleDetailOut,
    RoleOut,
    RolePermissionsChange,
    RoleUpdate,
)
from tms_backend.services.role_service import role_service

router = APIRouter(prefix="/roles", tags=["roles"], dependencies=[Depends(access_gate)])


@router.get("", response_model=Envelope[List[RoleOut]])
def list_roles(
    include_deleted: bool = Depends(include_deleted_flag),
    db: Session = Depends(get_db),
):
    """List roles with their user counts."""
    return {"message": "Roles retrieved", "data": role_service.list_roles(db, include_deleted)}


@router.get("/{role_id}", response_model=Envelope[RoleDetailOut])
def get_role(
    role_id: str,
    include_deleted: bool = Depends(include_deleted_flag),
    db: Session = Depends(get_db),
):
    return {"message": "Role retrieved", "data": role_service.get_role_detail(db, role_id, include_deleted)}


@router.post("", response_model=Envelope[RoleDetailOut], status_code=201)
def create_role(
    body: RoleCreate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    return {"message": "Role created", "data": role_service.create_role(db, body, ctx.user_id)}


@router.put("/{role_id}", response_model=Envelope[RoleDetailOut])
def update_role(
    role_id: str,
    body: RoleUpdate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    return {"message": "Role updated", "data": role_service.update_role(db, role_id, body, ctx.user_id)}


@router.delete("/{role_id}", response_model=MessageResponse)
def delete_role(
    role_id: str,
    hard: bool = Depends(hard_delete_flag),
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    role_service.delete_role(db, role_id, ctx.user_id, hard=hard)
    return MessageResponse(message="Role deleted")


@router.patch("/{role_id}/enable", response_model=Envelope[RoleDetailOut])
def enable_role(
    role_id: str,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    return {"message": "Role enabled", "data": role_service.enable_role(db, role_id, ctx.user_id)}


@router.patch("/{role_id}/add-permissions", response_model=Envelope[RoleDetailOut])
def add_permissions(
    role_id: str,
    body: RolePermissionsChange,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    role = role_service.add_permissions(db, role_id, body.permission_ids, ctx.user_id)
    return {"message": "Permissions added", "data": role}


@router.patch("/{role_id}/remove-permissions", response_model=Envelope[RoleDetailOut])
def remove_permissions(
    role_id: str,
    body: RolePermissionsChange,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    role = role_service.remove_permissions(db, role_id, body.permission_ids, ctx.user_id)
    return {"message": "Permissions removed", "data": role}
