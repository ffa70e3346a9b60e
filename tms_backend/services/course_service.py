"""Course and subject services, plus the daily academic status update."""

import logging
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from tms_backend.core.constants import AcademicStatus
from tms_backend.core.exceptions import (
    ConflictError,
    NotFoundError,
    UnprocessableEntityError,
    field_error,
)
from tms_backend.models.course import Course, Subject
from tms_backend.repositories.course_repository import CourseRepository, SubjectRepository
from tms_backend.repositories.department_repository import DepartmentRepository
from tms_backend.schemas.schemas import CourseCreate, CourseUpdate, SubjectCreate, SubjectUpdate
from tms_backend.services.lifecycle import lifecycle_service

logger = logging.getLogger("tms")

COURSE_CODE_ERRORS = [field_error("code", "Course code already exists")]
SUBJECT_CODE_ERRORS = [field_error("code", "Subject code already exists in this course")]


def _check_dates(start: date, end: date) -> None:
    if end < start:
        raise UnprocessableEntityError(
            "Invalid date range",
            errors=[field_error("end_date", "end_date must not be before start_date")],
        )


class CourseService:

    @staticmethod
    def list_courses(
        db: Session,
        page: int = 1,
        page_size: int = 20,
        include_deleted: bool = False,
        department_id: Optional[str] = None,
        status: Optional[AcademicStatus] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        filters = []
        if department_id:
            filters.append(Course.department_id == department_id)
        if status:
            filters.append(Course.status == status)
        if search:
            like = f"%{search}%"
            filters.append(or_(Course.name.ilike(like), Course.code.ilike(like)))
        return CourseRepository(db).paginate(
            page=page, page_size=page_size, include_deleted=include_deleted, filters=filters
        )

    @staticmethod
    def get_course(db: Session, course_id: str, include_deleted: bool = False) -> Course:
        course = CourseRepository(db).get(course_id, include_deleted=include_deleted)
        if not course:
            raise NotFoundError("Course not found")
        return course

    @staticmethod
    def create_course(db: Session, data: CourseCreate, actor_id: str) -> Course:
        repo = CourseRepository(db)
        if DepartmentRepository(db).get(data.department_id) is None:
            raise UnprocessableEntityError(
                "Department not found",
                errors=[field_error("department_id", "Department not found or disabled")],
            )
        if repo.get_by_code(data.code):
            raise ConflictError("Course already exists", errors=COURSE_CODE_ERRORS)
        course = Course(**data.model_dump(), status=AcademicStatus.PLANNED, created_by_id=actor_id)
        course = repo.add(course, conflict_errors=COURSE_CODE_ERRORS)
        logger.info("Course %s created", course.code)
        return course

    @staticmethod
    def update_course(db: Session, course_id: str, data: CourseUpdate, actor_id: str) -> Course:
        repo = CourseRepository(db)
        course = CourseService.get_course(db, course_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("code") and changes["code"] != course.code and repo.get_by_code(changes["code"]):
            raise ConflictError("Course already exists", errors=COURSE_CODE_ERRORS)
        _check_dates(changes.get("start_date", course.start_date), changes.get("end_date", course.end_date))
        for field, value in changes.items():
            setattr(course, field, value)
        course.updated_by_id = actor_id
        return repo.save(course, conflict_errors=COURSE_CODE_ERRORS)

    @staticmethod
    def delete_course(db: Session, course_id: str, actor_id: str, hard: bool = False) -> None:
        course = CourseService.get_course(db, course_id, include_deleted=hard)
        if hard:
            lifecycle_service.hard_delete(db, course)
        else:
            lifecycle_service.disable(db, course, actor_id)
        logger.info("Course %s deleted (hard=%s)", course_id, hard)

    @staticmethod
    def enable_course(db: Session, course_id: str, actor_id: str) -> Course:
        course = CourseService.get_course(db, course_id, include_deleted=True)
        return lifecycle_service.enable(db, course, actor_id)


class SubjectService:

    @staticmethod
    def list_subjects(
        db: Session,
        page: int = 1,
        page_size: int = 20,
        include_deleted: bool = False,
        course_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        filters = []
        if course_id:
            filters.append(Subject.course_id == course_id)
        if search:
            like = f"%{search}%"
            filters.append(or_(Subject.name.ilike(like), Subject.code.ilike(like)))
        return SubjectRepository(db).paginate(
            page=page, page_size=page_size, include_deleted=include_deleted, filters=filters
        )

    @staticmethod
    def get_subject(db: Session, subject_id: str, include_deleted: bool = False) -> Subject:
        subject = SubjectRepository(db).get(subject_id, include_deleted=include_deleted)
        if not subject:
            raise NotFoundError("Subject not found")
        return subject

    @staticmethod
    def _check_within_course(course: Course, start: date, end: date) -> None:
        if start < course.start_date or end > course.end_date:
            raise UnprocessableEntityError(
                "Subject dates outside course",
                errors=[field_error("start_date", "Subject must run within the course dates")],
            )

    @staticmethod
    def create_subject(db: Session, data: SubjectCreate, actor_id: str) -> Subject:
        repo = SubjectRepository(db)
        course = CourseRepository(db).get(data.course_id)
        if course is None:
            raise UnprocessableEntityError(
                "Course not found", errors=[field_error("course_id", "Course not found or disabled")]
            )
        if repo.get_by_code(course.id, data.code):
            raise ConflictError("Subject already exists", errors=SUBJECT_CODE_ERRORS)
        SubjectService._check_within_course(course, data.start_date, data.end_date)
        subject = Subject(**data.model_dump(), status=AcademicStatus.PLANNED, created_by_id=actor_id)
        subject = repo.add(subject, conflict_errors=SUBJECT_CODE_ERRORS)
        logger.info("Subject %s created in course %s", subject.code, course.code)
        return subject

    @staticmethod
    def update_subject(db: Session, subject_id: str, data: SubjectUpdate, actor_id: str) -> Subject:
        repo = SubjectRepository(db)
        subject = SubjectService.get_subject(db, subject_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("code") and changes["code"] != subject.code:
            if repo.get_by_code(subject.course_id, changes["code"]):
                raise ConflictError("Subject already exists", errors=SUBJECT_CODE_ERRORS)
        start = changes.get("start_date", subject.start_date)
        end = changes.get("end_date", subject.end_date)
        _check_dates(start, end)
        SubjectService._check_within_course(subject.course, start, end)
        for field, value in changes.items():
            setattr(subject, field, value)
        subject.updated_by_id = actor_id
        return repo.save(subject, conflict_errors=SUBJECT_CODE_ERRORS)

    @staticmethod
    def delete_subject(db: Session, subject_id: str, actor_id: str, hard: bool = False) -> None:
        subject = SubjectService.get_subject(db, subject_id, include_deleted=hard)
        if hard:
            lifecycle_service.hard_delete(db, subject)
        else:
            lifecycle_service.disable(db, subject, actor_id)
        logger.info("Subject %s deleted (hard=%s)", subject_id, hard)

    @staticmethod
    def enable_subject(db: Session, subject_id: str, actor_id: str) -> Subject:
        subject = SubjectService.get_subject(db, subject_id, include_deleted=True)
        return lifecycle_service.enable(db, subject, actor_id)


def update_academic_statuses(db: Session, today: date) -> Dict[str, int]:
    """Move live courses and subjects along PLANNED -> ON_GOING -> COMPLETED."""
    counts = {}
    for model in (Course, Subject):
        live = model.deleted_at.is_(None)
        started = (
            db.query(model)
            .filter(
                live,
                model.status == AcademicStatus.PLANNED,
                model.start_date <= today,
                model.end_date >= today,
            )
            .update({"status": AcademicStatus.ON_GOING}, synchronize_session=False)
        )
        finished = (
            db.query(model)
            .filter(
                live,
                model.status.in_([AcademicStatus.PLANNED, AcademicStatus.ON_GOING]),
                model.end_date < today,
            )
            .update({"status": AcademicStatus.COMPLETED}, synchronize_session=False)
        )
        counts[f"{model.__tablename__}_started"] = started
        counts[f"{model.__tablename__}_completed"] = finished
    db.commit()
    logger.info("Academic statuses updated for %s: %s", today.isoformat(), counts)
    return counts


course_service = CourseService()
subject_service = SubjectService()
