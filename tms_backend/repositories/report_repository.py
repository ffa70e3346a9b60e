"""Report and request data access. Neither entity is soft-deleted."""

from tms_backend.models.report import Report, Request
from tms_backend.repositories.base import BaseRepository


class ReportRepository(BaseRepository[Report]):
    model = Report
    has_soft_delete = False


class RequestRepository(BaseRepository[Request]):
    model = Request
    has_soft_delete = False
