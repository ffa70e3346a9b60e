"""Reports and requests API routers."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tms_backend.api.deps import Pagination
from tms_backend.core.access_gate import AccessContext, access_gate
from tms_backend.core.constants import ReportStatus, RequestStatus, RequestType, Severity
from tms_backend.db.session import get_db
from tms_backend.models.report import Report
from tms_backend.schemas.schemas import (
    Envelope,
    Page,
    ReportCreate,
    ReportOut,
    ReportRespond,
    RequestCreate,
    RequestOut,
    RequestStatusUpdate,
)
from tms_backend.services.report_service import report_service, request_service

router = APIRouter(prefix="/reports", tags=["reports"], dependencies=[Depends(access_gate)])
requests_router = APIRouter(prefix="/requests", tags=["requests"], dependencies=[Depends(access_gate)])


def _present(report: Report, ctx: AccessContext) -> ReportOut:
    """Anonymous reports hide their author from everyone but the author and administrators."""
    out = ReportOut.model_validate(report)
    if report.is_anonymous and not ctx.is_admin and report.created_by_id != ctx.user_id:
        out = out.model_copy(update={"created_by": None})
    return out


def _present_page(result: dict, ctx: AccessContext) -> dict:
    return {**result, "items": [_present(r, ctx) for r in result["items"]]}


# ---- Reports ----
@router.get("", response_model=Envelope[Page[ReportOut]])
def list_reports(
    request_type: Optional[Literal["INCIDENT", "FEEDBACK", "OTHER"]] = Query(None),
    status: Optional[ReportStatus] = Query(None),
    severity: Optional[Severity] = Query(None),
    is_anonymous: Optional[bool] = Query(None),
    paging: Pagination = Depends(),
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    result = report_service.list_reports(
        db,
        page=paging.page,
        page_size=paging.page_size,
        type_group=request_type,
        status=status,
        severity=severity,
        is_anonymous=is_anonymous,
    )
    return {"message": "Reports retrieved", "data": _present_page(result, ctx)}


@router.get("/my-reports", response_model=Envelope[Page[ReportOut]])
def my_reports(
    status: Optional[ReportStatus] = Query(None),
    paging: Pagination = Depends(),
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    result = report_service.list_reports(
        db, page=paging.page, page_size=paging.page_size, status=status, created_by_id=ctx.user_id
    )
    return {"message": "Reports retrieved", "data": _present_page(result, ctx)}


@router.get("/{report_id}", response_model=Envelope[ReportOut])
def get_report(
    report_id: str,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    report = report_service.get_report(db, report_id)
    return {"message": "Report retrieved", "data": _present(report, ctx)}


@router.post("", response_model=Envelope[ReportOut], status_code=201)
def create_report(
    body: ReportCreate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    report = report_service.create_report(db, body, ctx.user_id)
    return {"message": "Report submitted", "data": _present(report, ctx)}


@router.patch("/{report_id}/cancel", response_model=Envelope[ReportOut])
def cancel_report(
    report_id: str,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    report = report_service.cancel_report(db, report_id, ctx.user_id)
    return {"message": "Report cancelled", "data": _present(report, ctx)}


@router.patch("/{report_id}/acknowledge", response_model=Envelope[ReportOut])
def acknowledge_report(
    report_id: str,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    report = report_service.acknowledge_report(db, report_id, ctx.user_id)
    return {"message": "Report acknowledged", "data": _present(report, ctx)}


@router.patch("/{report_id}/respond", response_model=Envelope[ReportOut])
def respond_to_report(
    report_id: str,
    body: ReportRespond,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    report = report_service.respond_to_report(db, report_id, body.response, ctx.user_id)
    return {"message": "Report resolved", "data": _present(report, ctx)}


# ---- Requests ----
@requests_router.get("", response_model=Envelope[Page[RequestOut]])
def list_requests(
    request_type: Optional[RequestType] = Query(None),
    status: Optional[RequestStatus] = Query(None),
    severity: Optional[Severity] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    paging: Pagination = Depends(),
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    result = request_service.list_requests(
        db,
        ctx,
        page=paging.page,
        page_size=paging.page_size,
        request_type=request_type,
        status=status,
        severity=severity,
        search=search,
    )
    return {"message": "Requests retrieved", "data": result}


@requests_router.get("/my-requests", response_model=Envelope[Page[RequestOut]])
def my_requests(
    status: Optional[RequestStatus] = Query(None),
    paging: Pagination = Depends(),
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    result = request_service.list_requests(
        db, ctx, page=paging.page, page_size=paging.page_size, status=status, mine_only=True
    )
    return {"message": "Requests retrieved", "data": result}


@requests_router.get("/{request_id}", response_model=Envelope[RequestOut])
def get_request(
    request_id: str,
    db: Session = Depends(get_db),
):
    return {"message": "Request retrieved", "data": request_service.get_request(db, request_id)}


@requests_router.post("", response_model=Envelope[RequestOut], status_code=201)
def create_request(
    body: RequestCreate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    return {"message": "Request created", "data": request_service.create_request(db, body, ctx.user_id)}


@requests_router.patch("/{request_id}/status", response_model=Envelope[RequestOut])
def update_request_status(
    request_id: str,
    body: RequestStatusUpdate,
    db: Session = Depends(get_db),
    ctx: AccessContext = Depends(access_gate),
):
    request = request_service.update_status(db, request_id, body, ctx)
    return {"message": "Request updated", "data": request}
