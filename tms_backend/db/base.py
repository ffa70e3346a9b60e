"""Declarative base and column mixins shared by every model."""

import uuid

from sqlalchemy import Column, DateTime, String, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def new_uuid() -> str:
    return str(uuid.uuid4())


class AuditMixin:
    """Who created/updated a row and when."""

    created_by_id = Column(String(36), nullable=True)
    updated_by_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


class SoftDeleteMixin:
    """Soft-delete columns plus the active-flag hook used by the lifecycle."""

    deleted_at = Column(DateTime, nullable=True, index=True)
    deleted_by_id = Column(String(36), nullable=True)

    @property
    def is_disabled(self) -> bool:
        return self.deleted_at is not None

    def set_active(self, active: bool) -> None:
        # Models without an active flag only track deleted_at.
        if hasattr(type(self), "is_active"):
            self.is_active = active
