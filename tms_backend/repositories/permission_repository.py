"""Permission data access."""

from typing import Optional

from tms_backend.core.constants import HTTPMethod
from tms_backend.models.permission import Permission
from tms_backend.repositories.base import BaseRepository


class PermissionRepository(BaseRepository[Permission]):
    model = Permission

    def find_active_by_endpoint(
        self, path: str, method: HTTPMethod, exclude_id: Optional[str] = None
    ) -> Optional[Permission]:
        """Non-deleted permission with the same ``(path, method)``."""
        filters = [Permission.path == path, Permission.method == method]
        if exclude_id:
            filters.append(Permission.id != exclude_id)
        return self.find_one(*filters)

    def get_many(self, permission_ids: list[str]) -> list[Permission]:
        if not permission_ids:
            return []
        return self.list(filters=[Permission.id.in_(permission_ids)], order_by=Permission.path)
