"""Permission group data access."""

from typing import Optional

from sqlalchemy import func

from tms_backend.models.permission import Permission
from tms_backend.models.permission_group import PermissionGroup, permission_group_permissions
from tms_backend.repositories.base import BaseRepository


class PermissionGroupRepository(BaseRepository[PermissionGroup]):
    model = PermissionGroup
    has_soft_delete = False

    def get_by_code(self, code: str) -> Optional[PermissionGroup]:
        return self.find_one(PermissionGroup.code == code)

    def active_permissions(self, group_id: str) -> list[Permission]:
        return (
            self.db.query(Permission)
            .join(
                permission_group_permissions,
                permission_group_permissions.c.permission_id == Permission.id,
            )
            .filter(
                permission_group_permissions.c.permission_group_id == group_id,
                Permission.deleted_at.is_(None),
            )
            .order_by(Permission.name)
            .all()
        )

    def permission_counts(self, group_ids: list[str]) -> dict[str, int]:
        """Number of live permissions per group id."""
        if not group_ids:
            return {}
        link = permission_group_permissions.c
        rows = (
            self.db.query(link.permission_group_id, func.count(Permission.id))
            .join(Permission, Permission.id == link.permission_id)
            .filter(link.permission_group_id.in_(group_ids), Permission.deleted_at.is_(None))
            .group_by(link.permission_group_id)
            .all()
        )
        counts = {group_id: 0 for group_id in group_ids}
        counts.update({group_id: total for group_id, total in rows})
        return counts
