"""Department model."""

from sqlalchemy import Boolean, Column, ForeignKey, String
from sqlalchemy.orm import relationship

from tms_backend.db.base import AuditMixin, Base, SoftDeleteMixin, new_uuid


class Department(AuditMixin, SoftDeleteMixin, Base):
    __tablename__ = "departments"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(255), unique=True, nullable=False)
    code = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(String(1000), nullable=True)
    head_user_id = Column(String(36), ForeignKey("users.id", use_alter=True), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    head_user = relationship("User", foreign_keys=[head_user_id], lazy="select")
    courses = relationship("Course", back_populates="department", lazy="raise")
