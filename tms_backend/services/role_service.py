"""Role service: CRUD, permission assignment and base-role protection."""

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from tms_backend.core.constants import BASE_ROLES
from tms_backend.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnprocessableEntityError,
    field_error,
)
from tms_backend.models.role import Role
from tms_backend.repositories.role_repository import RoleRepository
from tms_backend.schemas.schemas import RoleCreate, RoleUpdate
from tms_backend.services.cache_service import role_id_cache
from tms_backend.services.lifecycle import lifecycle_service
from tms_backend.services.permission_service import permission_service

logger = logging.getLogger("tms")

ROLE_EXISTS_ERRORS = [field_error("name", "Role already exists")]


class RoleService:

    @staticmethod
    def _ensure_not_base_role(role: Role) -> None:
        if role.name in BASE_ROLES:
            raise ForbiddenError("Prohibited action on base role")

    @staticmethod
    def _ensure_name_free(repo: RoleRepository, name: str) -> None:
        if repo.get_by_name(name, include_deleted=True):
            raise ConflictError("Role already exists", errors=ROLE_EXISTS_ERRORS)

    @staticmethod
    def list_roles(db: Session, include_deleted: bool = False) -> List[Dict[str, Any]]:
        repo = RoleRepository(db)
        roles = repo.list(include_deleted=include_deleted, order_by=Role.name)
        counts = repo.user_counts([role.id for role in roles])
        return [RoleService._summary(role, counts.get(role.id, 0)) for role in roles]

    @staticmethod
    def _summary(role: Role, user_count: int) -> Dict[str, Any]:
        return {
            "id": role.id,
            "name": role.name,
            "description": role.description,
            "is_active": role.is_active,
            "user_count": user_count,
            "created_at": role.created_at,
            "updated_at": role.updated_at,
            "deleted_at": role.deleted_at,
        }

    @staticmethod
    def get_role(db: Session, role_id: str, include_deleted: bool = False) -> Role:
        role = RoleRepository(db).get(role_id, include_deleted=include_deleted)
        if not role:
            raise NotFoundError("Role not found")
        return role

    @staticmethod
    def get_role_detail(db: Session, role_id: str, include_deleted: bool = False) -> Dict[str, Any]:
        """Role with its non-deleted permissions and counts."""
        repo = RoleRepository(db)
        role = RoleService.get_role(db, role_id, include_deleted=include_deleted)
        permissions = repo.active_permissions(role.id)
        detail = RoleService._summary(role, repo.user_counts([role.id])[role.id])
        detail["permissions"] = permissions
        detail["permission_count"] = len(permissions)
        return detail

    @staticmethod
    def create_role(db: Session, data: RoleCreate, actor_id: str) -> Dict[str, Any]:
        repo = RoleRepository(db)
        RoleService._ensure_name_free(repo, data.name)
        role = Role(
            name=data.name,
            description=data.description,
            is_active=True,
            created_by_id=actor_id,
        )
        role.permissions = permission_service.resolve_many(db, data.permission_ids)
        role = repo.add(role, conflict_errors=ROLE_EXISTS_ERRORS)
        logger.info("Role %s created with %d permission(s)", role.name, len(data.permission_ids))
        return RoleService.get_role_detail(db, role.id)

    @staticmethod
    def update_role(db: Session, role_id: str, data: RoleUpdate, actor_id: str) -> Dict[str, Any]:
        repo = RoleRepository(db)
        role = RoleService.get_role(db, role_id)
        RoleService._ensure_not_base_role(role)
        changes = data.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] != role.name:
            RoleService._ensure_name_free(repo, changes["name"])
            role_id_cache.invalidate(role.name)
            role.name = changes["name"]
        if "description" in changes:
            role.description = changes["description"]
        if changes.get("permission_ids") is not None:
            role.permissions = permission_service.resolve_many(db, changes["permission_ids"])
        role.updated_by_id = actor_id
        repo.save(role, conflict_errors=ROLE_EXISTS_ERRORS)
        return RoleService.get_role_detail(db, role.id)

    @staticmethod
    def delete_role(db: Session, role_id: str, actor_id: str, hard: bool = False) -> None:
        role = RoleService.get_role(db, role_id, include_deleted=hard)
        RoleService._ensure_not_base_role(role)
        role_id_cache.invalidate(role.name)
        if hard:
            lifecycle_service.hard_delete(db, role)
        else:
            lifecycle_service.disable(db, role, actor_id)
        logger.info("Role %s deleted (hard=%s)", role.name, hard)

    @staticmethod
    def enable_role(db: Session, role_id: str, actor_id: str) -> Dict[str, Any]:
        role = RoleService.get_role(db, role_id, include_deleted=True)
        lifecycle_service.enable(db, role, actor_id)
        role_id_cache.invalidate(role.name)
        return RoleService.get_role_detail(db, role.id)

    @staticmethod
    def add_permissions(
        db: Session, role_id: str, permission_ids: List[str], actor_id: str
    ) -> Dict[str, Any]:
        repo = RoleRepository(db)
        role = RoleService.get_role(db, role_id)
        current = {p.id for p in role.permissions}
        for permission in permission_service.resolve_many(db, permission_ids):
            if permission.id not in current:
                role.permissions.append(permission)
        role.updated_by_id = actor_id
        repo.save(role)
        return RoleService.get_role_detail(db, role.id)

    @staticmethod
    def remove_permissions(
        db: Session, role_id: str, permission_ids: List[str], actor_id: str
    ) -> Dict[str, Any]:
        repo = RoleRepository(db)
        role = RoleService.get_role(db, role_id)
        to_remove = set(permission_ids)
        not_granted = to_remove - {p.id for p in role.permissions}
        if not_granted:
            raise UnprocessableEntityError(
                "Permission not granted to role",
                errors=[
                    field_error("permission_ids", f"Permission {pid} is not granted to this role")
                    for pid in sorted(not_granted)
                ],
            )
        role.permissions = [p for p in role.permissions if p.id not in to_remove]
        role.updated_by_id = actor_id
        repo.save(role)
        return RoleService.get_role_detail(db, role.id)


role_service = RoleService()
