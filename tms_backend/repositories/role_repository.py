"""Role data access."""

from typing import Optional

from sqlalchemy import func

from tms_backend.core.constants import RoleName
from tms_backend.core.exceptions import NotFoundError
from tms_backend.models.permission import Permission
from tms_backend.models.role import Role, role_permissions
from tms_backend.models.user import User
from tms_backend.repositories.base import BaseRepository
from tms_backend.services.cache_service import RoleIdCache, role_id_cache


class RoleRepository(BaseRepository[Role]):
    model = Role

    def get_by_name(self, name: str, include_deleted: bool = True) -> Optional[Role]:
        return self.find_one(Role.name == name, include_deleted=include_deleted)

    def user_counts(self, role_ids: list[str]) -> dict[str, int]:
        """Number of non-deleted users per role id."""
        if not role_ids:
            return {}
        rows = (
            self.db.query(User.role_id, func.count(User.id))
            .filter(User.role_id.in_(role_ids), User.deleted_at.is_(None))
            .group_by(User.role_id)
            .all()
        )
        counts = {role_id: 0 for role_id in role_ids}
        counts.update({role_id: total for role_id, total in rows})
        return counts

    def active_permissions(self, role_id: str) -> list[Permission]:
        return (
            self.db.query(Permission)
            .join(role_permissions, role_permissions.c.permission_id == Permission.id)
            .filter(role_permissions.c.role_id == role_id, Permission.deleted_at.is_(None))
            .order_by(Permission.module, Permission.path, Permission.method)
            .all()
        )


class SharedRoleRepository:
    """Lookups of seed-role ids, served from the role-id cache."""

    def __init__(self, db, cache: RoleIdCache = role_id_cache):
        self.db = db
        self.cache = cache

    def _role_id(self, role_name: RoleName, required: bool = True) -> Optional[str]:
        def load() -> Optional[str]:
            return (
                self.db.query(Role.id)
                .filter(Role.name == role_name.value, Role.deleted_at.is_(None))
                .scalar()
            )

        role_id = self.cache.get_or_populate(role_name.value, load)
        if role_id is None and required:
            raise NotFoundError(f"Role {role_name.value} not found")
        return role_id

    def get_trainee_role_id(self) -> str:
        return self._role_id(RoleName.TRAINEE)

    def get_admin_role_id(self) -> str:
        return self._role_id(RoleName.ADMINISTRATOR)

    def get_academic_role_id(self) -> Optional[str]:
        """None when the optional academic-department role was never seeded."""
        return self._role_id(RoleName.ACADEMIC_DEPARTMENT, required=False)
