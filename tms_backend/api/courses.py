"""Courses and subjects API routers."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tms_backend.api.deps import Pagination, hard_delete_flag, include_deleted_flag
from tms_backend.core.access_gate import AccessContext, access_gate
from tms_backend.core.constants import AcademicStatus
from tms_backend.db.session import get_db
from tms_backend.schemas.schemas import (
    CourseCreate,
    CourseOut,
    CourseUpdate,
    Envelope,
    MessageResponse,
    Page,
    SubjectCreate,
    SubjectOut,
    SubjectUpdate,
)
from tms_backend.services.course_service import course_service, subject_service

router = APIRouter(prefix="/courses", tags=["courses"], dependencies=[Depends(access_gate)])
subjects_router = APIRouter(prefix="/subjects", tags=["subjects"], dependencies=[Depends(access_gate)])


# ---- Courses ----
@router.get("", response_model=Envelope[Page[CourseOut]])
def list_courses(
    department_id: Optional[str] = Query(None),
    status: Optional[AcademicStatus] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    paging: Pagination = Depends(),
    include_deleted: bool = Depends(include_deleted_flag),
    db: Session = Depends(get_db),
):
    result = course_service.list_courses(
        db,
        page=paging.page,
        page_size=paging.page_size,
        include_deleted=include_deleted,
        department_id=department_id,
        status=status,
        search=search,
    )
    return {"message": "Courses retrieved", "data": result}


@router.get("/{course_id}", response_model=Envelope[CourseOut])
def get_course(
    course_id: str,
    include_deleted: bool = Depends(include_deleted_flag),
    db: Session = Depends(get_db),
):
    return {"message": "Course retrieved", "data": course_service.get_course(db, course_id, include_deleted)}


@router.post("", response_model=Envelope[CourseOut], status_code=201)
def create_course(
    body: CourseCreate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    return {"message": "Course created", "data": course_service.create_course(db, body, ctx.user_id)}


@router.put("/{course_id}", response_model=Envelope[CourseOut])
def update_course(
    course_id: str,
    body: CourseUpdate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    course = course_service.update_course(db, course_id, body, ctx.user_id)
    return {"message": "Course updated", "data": course}


@router.delete("/{course_id}", response_model=MessageResponse)
def delete_course(
    course_id: str,
    hard: bool = Depends(hard_delete_flag),
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    course_service.delete_course(db, course_id, ctx.user_id, hard=hard)
    return MessageResponse(message="Course deleted")


@router.patch("/{course_id}/enable", response_model=Envelope[CourseOut])
def enable_course(
    course_id: str,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    return {"message": "Course enabled", "data": course_service.enable_course(db, course_id, ctx.user_id)}


# ---- Subjects ----
@subjects_router.get("", response_model=Envelope[Page[SubjectOut]])
def list_subjects(
    course_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    paging: Pagination = Depends(),
    include_deleted: bool = Depends(include_deleted_flag),
    db: Session = Depends(get_db),
):
    result = subject_service.list_subjects(
        db,
        page=paging.page,
        page_size=paging.page_size,
        include_deleted=include_deleted,
        course_id=course_id,
        search=search,
    )
    return {"message": "Subjects retrieved", "data": result}


@subjects_router.get("/{subject_id}", response_model=Envelope[SubjectOut])
def get_subject(
    subject_id: str,
    include_deleted: bool = Depends(include_deleted_flag),
    db: Session = Depends(get_db),
):
    subject = subject_service.get_subject(db, subject_id, include_deleted)
    return {"message": "Subject retrieved", "data": subject}


@subjects_router.post("", response_model=Envelope[SubjectOut], status_code=201)
def create_subject(
    body: SubjectCreate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    return {"message": "Subject created", "data": subject_service.create_subject(db, body, ctx.user_id)}


@subjects_router.put("/{subject_id}", response_model=Envelope[SubjectOut])
def update_subject(
    subject_id: str,
    body: SubjectUpdate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    subject = subject_service.update_subject(db, subject_id, body, ctx.user_id)
    return {"message": "Subject updated", "data": subject}


@subjects_router.delete("/{subject_id}", response_model=MessageResponse)
def delete_subject(
    subject_id: str,
    hard: bool = Depends(hard_delete_flag),
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    subject_service.delete_subject(db, subject_id, ctx.user_id, hard=hard)
    return MessageResponse(message="Subject deleted")


@subjects_router.patch("/{subject_id}/enable", response_model=Envelope[SubjectOut])
def enable_subject(
    subject_id: str,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    subject = subject_service.enable_subject(db, subject_id, ctx.user_id)
    return {"message": "Subject enabled", "data": subject}
