"""Departments API router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tms_backend.api.deps import hard_delete_flag, include_deleted_flag
from tms_backend.core.access_gate import AccessContext, access_gate
from tms_backend.db.session import get_db
from tms_backend.schemas.schemas import (
    DepartmentCreate,
    DepartmentOut,
    DepartmentUpdate,
    Envelope,
    MessageResponse,
    TrainerEidsRequest,
    UserBrief,
)
from tms_backend.services.department_service import department_service

router = APIRouter(prefix="/departments", tags=["departments"], dependencies=[Depends(access_gate)])


@router.get("", response_model=Envelope[List[DepartmentOut]])
def list_departments(
    search: Optional[str] = Query(None, max_length=100),
    include_deleted: bool = Depends(include_deleted_flag),
    db: Session = Depends(get_db),
):
    departments = department_service.list_departments(db, include_deleted, search)
    return {"message": "Departments retrieved", "data": departments}


@router.get("/heads", response_model=Envelope[List[UserBrief]])
def list_department_heads(db: Session = Depends(get_db)):
    """Users holding the DEPARTMENT_HEAD role."""
    return {"message": "Department heads retrieved", "data": department_service.list_department_heads(db)}


@router.get("/{department_id}", response_model=Envelope[DepartmentOut])
def get_department(
    department_id: str,
    include_deleted: bool = Depends(include_deleted_flag),
    db: Session = Depends(get_db),
):
    department = department_service.get_department(db, department_id, include_deleted)
    return {"message": "Department retrieved", "data": department}


@router.post("", response_model=Envelope[DepartmentOut], status_code=201)
def create_department(
    body: DepartmentCreate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    department = department_service.create_department(db, body, ctx.user_id)
    return {"message": "Department created", "data": department}


@router.put("/{department_id}", response_model=Envelope[DepartmentOut])
def update_department(
    department_id: str,
    body: DepartmentUpdate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    department = department_service.update_department(db, department_id, body, ctx.user_id)
    return {"message": "Department updated", "data": department}


@router.delete("/{department_id}", response_model=MessageResponse)
def delete_department(
    department_id: str,
    hard: bool = Depends(hard_delete_flag),
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    department_service.delete_department(db, department_id, ctx.user_id, hard=hard)
    return MessageResponse(message="Department deleted")


@router.patch("/{department_id}/enable", response_model=Envelope[DepartmentOut])
def enable_department(
    department_id: str,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    department = department_service.enable_department(db, department_id, ctx.user_id)
    return {"message": "Department enabled", "data": department}


@router.patch("/{department_id}/add-trainers", response_model=Envelope[List[UserBrief]])
def add_trainers(
    department_id: str,
    body: TrainerEidsRequest,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    trainers = department_service.add_trainers(db, department_id, body.trainer_eids, ctx.user_id)
    return {"message": "Trainers added", "data": trainers}


@router.patch("/{department_id}/remove-trainers", response_model=Envelope[List[UserBrief]])
def remove_trainers(
    department_id: str,
    body: TrainerEidsRequest,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    trainers = department_service.remove_trainers(db, department_id, body.trainer_eids, ctx.user_id)
    return {"message": "Trainers removed", "data": trainers}
