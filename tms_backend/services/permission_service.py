"""Permission service: CRUD with (path, method) uniqueness among live rows.

The service checks first for a friendly error; the ``uq_permissions_active_key``
constraint decides when two writers race.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from tms_backend.core.constants import HTTPMethod
from tms_backend.core.exceptions import (
    ConflictError,
    NotFoundError,
    UnprocessableEntityError,
    field_error,
)
from tms_backend.models.permission import Permission
from tms_backend.repositories.permission_repository import PermissionRepository
from tms_backend.schemas.schemas import PermissionCreate, PermissionUpdate
from tms_backend.services.lifecycle import lifecycle_service

logger = logging.getLogger("tms")

PERMISSION_EXISTS_ERRORS = [
    field_error("path", "Permission already exists"),
    field_error("method", "Permission already exists"),
]


class PermissionService:

    @staticmethod
    def _ensure_endpoint_free(
        repo: PermissionRepository, path: str, method: HTTPMethod, exclude_id: Optional[str] = None
    ) -> None:
        if repo.find_active_by_endpoint(path, method, exclude_id=exclude_id):
            raise ConflictError("Permission already exists", errors=PERMISSION_EXISTS_ERRORS)

    @staticmethod
    def resolve_many(db: Session, permission_ids: List[str]) -> List[Permission]:
        """Live permissions for ``permission_ids``; any missing id is a field error."""
        unique_ids = list(dict.fromkeys(permission_ids))
        permissions = PermissionRepository(db).get_many(unique_ids)
        missing = set(unique_ids) - {p.id for p in permissions}
        if missing:
            raise UnprocessableEntityError(
                "Permission not found",
                errors=[
                    field_error("permission_ids", f"Permission {pid} not found or deleted")
                    for pid in sorted(missing)
                ],
            )
        return permissions

    @staticmethod
    def list_permissions(
        db: Session,
        page: int = 1,
        page_size: int = 20,
        include_deleted: bool = False,
        module: Optional[str] = None,
        method: Optional[HTTPMethod] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        filters = []
        if module:
            filters.append(Permission.module == module)
        if method:
            filters.append(Permission.method == method)
        if search:
            like = f"%{search}%"
            filters.append(or_(Permission.name.ilike(like), Permission.path.ilike(like)))
        return PermissionRepository(db).paginate(
            page=page,
            page_size=page_size,
            include_deleted=include_deleted,
            filters=filters,
            order_by=Permission.path,
        )

    @staticmethod
    def get_permission(db: Session, permission_id: str, include_deleted: bool = False) -> Permission:
        permission = PermissionRepository(db).get(permission_id, include_deleted=include_deleted)
        if not permission:
            raise NotFoundError("Permission not found")
        return permission

    @staticmethod
    def create_permission(db: Session, data: PermissionCreate, actor_id: str) -> Permission:
        repo = PermissionRepository(db)
        PermissionService._ensure_endpoint_free(repo, data.path, data.method)
        permission = Permission(
            **data.model_dump(),
            is_active=True,
            created_by_id=actor_id,
        )
        permission = repo.add(permission, conflict_errors=PERMISSION_EXISTS_ERRORS)
        logger.info("Permission %s %s created", permission.method.value, permission.path)
        return permission

    @staticmethod
    def update_permission(
        db: Session, permission_id: str, data: PermissionUpdate, actor_id: str
    ) -> Permission:
        repo = PermissionRepository(db)
        permission = PermissionService.get_permission(db, permission_id)
        changes = data.model_dump(exclude_unset=True)
        path = changes.get("path", permission.path)
        method = changes.get("method", permission.method)
        if path != permission.path or method != permission.method:
            PermissionService._ensure_endpoint_free(repo, path, method, exclude_id=permission.id)
        for field, value in changes.items():
            setattr(permission, field, value)
        permission.updated_by_id = actor_id
        return repo.save(permission, conflict_errors=PERMISSION_EXISTS_ERRORS)

    @staticmethod
    def delete_permission(db: Session, permission_id: str, actor_id: str, hard: bool = False) -> None:
        """Soft delete revokes the endpoint from every role at once."""
        permission = PermissionService.get_permission(db, permission_id, include_deleted=hard)
        if hard:
            lifecycle_service.hard_delete(db, permission)
        else:
            lifecycle_service.disable(db, permission, actor_id)
        logger.info("Permission %s deleted (hard=%s)", permission_id, hard)

    @staticmethod
    def enable_permission(db: Session, permission_id: str, actor_id: str) -> Permission:
        repo = PermissionRepository(db)
        permission = PermissionService.get_permission(db, permission_id, include_deleted=True)
        if permission.deleted_at is not None:
            PermissionService._ensure_endpoint_free(
                repo, permission.path, permission.method, exclude_id=permission.id
            )
        lifecycle_service.enable(db, permission, actor_id, commit=False)
        return repo.save(permission, conflict_errors=PERMISSION_EXISTS_ERRORS)


permission_service = PermissionService()
