"""Report and request workflows."""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from tms_backend.core.access_gate import AccessContext
from tms_backend.core.constants import (
    ReportStatus,
    ReportType,
    RequestStatus,
    RequestType,
    Severity,
)
from tms_backend.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from tms_backend.models.report import Report, Request
from tms_backend.repositories.report_repository import ReportRepository, RequestRepository
from tms_backend.repositories.role_repository import SharedRoleRepository
from tms_backend.schemas.schemas import ReportCreate, RequestCreate, RequestStatusUpdate

logger = logging.getLogger("tms")

# Report type groups accepted by the list filter.
REPORT_TYPE_GROUPS = {
    "INCIDENT": [
        ReportType.SAFETY_REPORT,
        ReportType.INSTRUCTOR_REPORT,
        ReportType.FATIGUE_REPORT,
        ReportType.TRAINING_PROGRAM_REPORT,
        ReportType.FACILITIES_REPORT,
        ReportType.COURSE_ORGANIZATION_REPORT,
    ],
    "FEEDBACK": [ReportType.FEEDBACK],
    "OTHER": [ReportType.OTHER],
}

REQUEST_TRANSITIONS = {
    RequestStatus.CREATED: {
        RequestStatus.ACKNOWLEDGED,
        RequestStatus.APPROVED,
        RequestStatus.REJECTED,
        RequestStatus.CANCELLED,
    },
    RequestStatus.ACKNOWLEDGED: {
        RequestStatus.RESOLVED,
        RequestStatus.APPROVED,
        RequestStatus.REJECTED,
    },
}


class ReportService:

    @staticmethod
    def create_report(db: Session, data: ReportCreate, user_id: str) -> Report:
        report = Report(**data.model_dump(), status=ReportStatus.SUBMITTED, created_by_id=user_id)
        report = ReportRepository(db).add(report)
        logger.info("Report %s submitted by %s", report.id, user_id)
        return report

    @staticmethod
    def list_reports(
        db: Session,
        page: int = 1,
        page_size: int = 20,
        type_group: Optional[str] = None,
        status: Optional[ReportStatus] = None,
        severity: Optional[Severity] = None,
        is_anonymous: Optional[bool] = None,
        created_by_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        filters = []
        if type_group:
            filters.append(Report.request_type.in_(REPORT_TYPE_GROUPS[type_group]))
        if status:
            filters.append(Report.status == status)
        if severity:
            filters.append(Report.severity == severity)
        if is_anonymous is not None:
            filters.append(Report.is_anonymous.is_(is_anonymous))
        if created_by_id:
            filters.append(Report.created_by_id == created_by_id)
        return ReportRepository(db).paginate(page=page, page_size=page_size, filters=filters)

    @staticmethod
    def get_report(db: Session, report_id: str) -> Report:
        report = ReportRepository(db).get(report_id)
        if not report:
            raise NotFoundError("Report not found")
        return report

    @staticmethod
    def _transition(db: Session, report: Report, expected: ReportStatus, target: ReportStatus) -> Report:
        if report.status != expected:
            raise BadRequestError(f"Can only {target.value.lower()} reports with {expected.value} status")
        report.status = target
        return ReportRepository(db).save(report)

    @staticmethod
    def acknowledge_report(db: Session, report_id: str, manager_id: str) -> Report:
        report = ReportService.get_report(db, report_id)
        report.managed_by_id = manager_id
        return ReportService._transition(db, report, ReportStatus.SUBMITTED, ReportStatus.ACKNOWLEDGED)

    @staticmethod
    def respond_to_report(db: Session, report_id: str, response: str, manager_id: str) -> Report:
        report = ReportService.get_report(db, report_id)
        if report.status != ReportStatus.ACKNOWLEDGED:
            raise BadRequestError("Can only respond to reports with ACKNOWLEDGED status")
        report.response = response
        report.managed_by_id = manager_id
        report.status = ReportStatus.RESOLVED
        return ReportRepository(db).save(report)

    @staticmethod
    def cancel_report(db: Session, report_id: str, user_id: str) -> Report:
        report = ReportService.get_report(db, report_id)
        if report.created_by_id != user_id:
            raise BadRequestError("You can only cancel your own reports")
        report.updated_by_id = user_id
        return ReportService._transition(db, report, ReportStatus.SUBMITTED, ReportStatus.CANCELLED)


class RequestService:

    @staticmethod
    def create_request(db: Session, data: RequestCreate, user_id: str) -> Request:
        request = Request(**data.model_dump(), status=RequestStatus.CREATED, created_by_id=user_id)
        return RequestRepository(db).add(request)

    @staticmethod
    def get_request(db: Session, request_id: str) -> Request:
        request = RequestRepository(db).get(request_id)
        if not request:
            raise NotFoundError("Request not found")
        return request

    @staticmethod
    def sees_all_requests(db: Session, ctx: AccessContext) -> bool:
        return ctx.is_admin or ctx.role.id == SharedRoleRepository(db).get_academic_role_id()

    @staticmethod
    def list_requests(
        db: Session,
        ctx: AccessContext,
        page: int = 1,
        page_size: int = 20,
        request_type: Optional[RequestType] = None,
        status: Optional[RequestStatus] = None,
        severity: Optional[Severity] = None,
        search: Optional[str] = None,
        mine_only: bool = False,
    ) -> Dict[str, Any]:
        filters = []
        if mine_only:
            filters.append(Request.created_by_id == ctx.user_id)
        elif not RequestService.sees_all_requests(db, ctx):
            filters.append(or_(
                Request.created_by_id == ctx.user_id,
                Request.managed_by_id == ctx.user_id,
            ))
        if request_type:
            filters.append(Request.request_type == request_type)
        if status:
            filters.append(Request.status == status)
        if severity:
            filters.append(Request.severity == severity)
        if search:
            like = f"%{search}%"
            filters.append(or_(Request.title.ilike(like), Request.description.ilike(like)))
        return RequestRepository(db).paginate(page=page, page_size=page_size, filters=filters)

    @staticmethod
    def update_status(
        db: Session, request_id: str, data: RequestStatusUpdate, ctx: AccessContext
    ) -> Request:
        repo = RequestRepository(db)
        request = RequestService.get_request(db, request_id)
        if not RequestService.sees_all_requests(db, ctx) and request.managed_by_id not in (None, ctx.user_id):
            raise ForbiddenError("Request is managed by someone else")
        allowed = REQUEST_TRANSITIONS.get(request.status, set())
        if data.status not in allowed:
            raise BadRequestError(
                f"Cannot move request from {request.status.value} to {data.status.value}"
            )
        request.status = data.status
        if data.response is not None:
            request.response = data.response
        request.managed_by_id = ctx.user_id
        request.updated_by_id = ctx.user_id
        logger.info("Request %s moved to %s", request.id, data.status.value)
        return repo.save(request)


report_service = ReportService()
request_service = RequestService()
