"""Report and request models."""

from sqlalchemy import Boolean, Column, Enum, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from tms_backend.core.constants import ReportStatus, ReportType, RequestStatus, RequestType, Severity
from tms_backend.db.base import AuditMixin, Base, new_uuid


class Report(AuditMixin, Base):
    """Safety/feedback report filed by any user and handled by auditors."""
    __tablename__ = "reports"

    id = Column(String(36), primary_key=True, default=new_uuid)
    request_type = Column(Enum(ReportType, native_enum=False, length=40), nullable=False)
    severity = Column(Enum(Severity, native_enum=False, length=10), nullable=True)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    actions_taken = Column(Text, nullable=True)
    is_anonymous = Column(Boolean, default=False, nullable=False)
    status = Column(
        Enum(ReportStatus, native_enum=False, length=20),
        default=ReportStatus.SUBMITTED,
        nullable=False,
    )
    created_by_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    managed_by_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    response = Column(Text, nullable=True)

    created_by = relationship("User", foreign_keys=[created_by_id], lazy="joined")
    managed_by = relationship("User", foreign_keys=[managed_by_id], lazy="joined")


class Request(AuditMixin, Base):
    """Workflow request (incident, feedback, assessment approval)."""
    __tablename__ = "requests"

    id = Column(String(36), primary_key=True, default=new_uuid)
    request_type = Column(Enum(RequestType, native_enum=False, length=40), nullable=False)
    severity = Column(Enum(Severity, native_enum=False, length=10), nullable=True)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    actions_taken = Column(Text, nullable=True)
    is_anonymous = Column(Boolean, default=False, nullable=False)
    status = Column(
        Enum(RequestStatus, native_enum=False, length=20),
        default=RequestStatus.CREATED,
        nullable=False,
    )
    created_by_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    managed_by_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    response = Column(Text, nullable=True)

    created_by = relationship("User", foreign_keys=[created_by_id], lazy="joined")
    managed_by = relationship("User", foreign_keys=[managed_by_id], lazy="joined")
