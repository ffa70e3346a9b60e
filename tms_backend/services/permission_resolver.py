"""Resolve a role together with the permissions matching one endpoint."""

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from tms_backend.core.constants import HTTPMethod
from tms_backend.models.permission import Permission
from tms_backend.models.role import Role, role_permissions


@dataclass(frozen=True)
class PermissionSnapshot:
    id: str
    name: str
    path: str
    method: str
    module: str


@dataclass(frozen=True)
class RoleWithPermissions:
    """Detached view of a role and only the permissions that matched the lookup."""
    id: str
    name: str
    permissions: tuple[PermissionSnapshot, ...] = field(default_factory=tuple)

    @property
    def has_permissions(self) -> bool:
        return len(self.permissions) > 0


class PermissionResolver:
    """Computes whether a role may call a ``(path, method)`` endpoint.

    Paths are compared literally against the registered route template
    (``/api/roles/{role_id}``), so a route nobody granted is denied.
    """

    @staticmethod
    def resolve(
        db: Session, role_id: str, path: str, method: str
    ) -> Optional[RoleWithPermissions]:
        """Return the active, non-deleted role with its matching permissions.

        One statement: the role outer-joined to the matching, non-deleted
        permissions granted to it. ``None`` when the role does not exist,
        is deleted or is inactive.
        """
        try:
            http_method = HTTPMethod(method.upper())
        except ValueError:
            http_method = None

        matched = (
            select(
                role_permissions.c.role_id.label("role_id"),
                Permission.id.label("permission_id"),
                Permission.name.label("permission_name"),
                Permission.path.label("path"),
                Permission.method.label("method"),
                Permission.module.label("module"),
            )
            .join(Permission, Permission.id == role_permissions.c.permission_id)
            .where(
                Permission.path == path,
                Permission.method == http_method,
                Permission.deleted_at.is_(None),
            )
            .subquery()
        )
        stmt = (
            select(
                Role.id,
                Role.name,
                matched.c.permission_id,
                matched.c.permission_name,
                matched.c.path,
                matched.c.method,
                matched.c.module,
            )
            .select_from(Role)
            .outerjoin(matched, matched.c.role_id == Role.id)
            .where(
                Role.id == role_id,
                Role.deleted_at.is_(None),
                Role.is_active.is_(True),
            )
        )
        rows = db.execute(stmt).all()
        if not rows:
            return None

        permissions = tuple(
            PermissionSnapshot(
                id=row.permission_id,
                name=row.permission_name,
                path=row.path,
                method=HTTPMethod(row.method).value,
                module=row.module,
            )
            for row in rows
            if row.permission_id is not None
        )
        return RoleWithPermissions(id=rows[0].id, name=rows[0].name, permissions=permissions)

    @classmethod
    def can_access(cls, db: Session, role_id: str, path: str, method: str) -> bool:
        role = cls.resolve(db, role_id, path, method)
        return role is not None and role.has_permissions


permission_resolver = PermissionResolver()
