"""Permission model: one row per (path, method) endpoint."""

from sqlalchemy import Boolean, Column, Enum, String, UniqueConstraint, event
from sqlalchemy.orm import relationship

from tms_backend.core.constants import HTTPMethod
from tms_backend.db.base import AuditMixin, Base, SoftDeleteMixin, new_uuid
from tms_backend.models.role import role_permissions


class Permission(AuditMixin, SoftDeleteMixin, Base):
    """Grantable endpoint, identified by its route template and HTTP method.

    ``active_key`` holds ``"METHOD path"`` while the row is live and NULL once
    it is soft-deleted, so the unique constraint only covers live endpoints.
    """
    __tablename__ = "permissions"
    __table_args__ = (UniqueConstraint("active_key", name="uq_permissions_active_key"),)

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(250), nullable=False)
    description = Column(String(500), nullable=True)
    path = Column(String(500), nullable=False, index=True)
    method = Column(Enum(HTTPMethod, native_enum=False, length=10), nullable=False)
    module = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    active_key = Column(String(520), nullable=True)

    roles = relationship(
        "Role",
        secondary=role_permissions,
        back_populates="permissions",
        lazy="raise",
    )

    @staticmethod
    def endpoint_key(path: str, method) -> str:
        return f"{HTTPMethod(method).value} {path}"

    def refresh_active_key(self) -> None:
        self.active_key = None if self.is_disabled else Permission.endpoint_key(self.path, self.method)


@event.listens_for(Permission, "before_insert")
@event.listens_for(Permission, "before_update")
def _sync_active_key(mapper, connection, target: Permission) -> None:
    target.refresh_active_key()
