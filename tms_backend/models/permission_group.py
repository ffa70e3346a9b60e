"""Permission groups: named feature bundles of endpoint permissions."""

from sqlalchemy import Column, ForeignKey, String, Table
from sqlalchemy.orm import relationship

from tms_backend.db.base import AuditMixin, Base, new_uuid

permission_group_permissions = Table(
    "permission_group_permissions",
    Base.metadata,
    Column(
        "permission_group_id",
        String(36),
        ForeignKey("permission_groups.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("permission_id", String(36), ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
)


class PermissionGroup(AuditMixin, Base):
    """One feature (``code`` e.g. ``PERM-07``) listed under a feature group heading."""
    __tablename__ = "permission_groups"

    id = Column(String(36), primary_key=True, default=new_uuid)
    group_name = Column(String(200), nullable=False, index=True)
    name = Column(String(250), nullable=False)
    code = Column(String(20), unique=True, nullable=False, index=True)

    permissions = relationship("Permission", secondary=permission_group_permissions, lazy="selectin")
