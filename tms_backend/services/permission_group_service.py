"""Permission group service: feature bundles shown when composing a role."""

import logging
import re
import sys
from itertools import groupby
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from tms_backend.core.exceptions import ConflictError, NotFoundError, field_error
from tms_backend.models.permission_group import PermissionGroup
from tms_backend.repositories.permission_group_repository import PermissionGroupRepository
from tms_backend.schemas.schemas import PermissionGroupCreate, PermissionGroupUpdate
from tms_backend.services.lifecycle import lifecycle_service
from tms_backend.services.permission_service import permission_service

logger = logging.getLogger("tms")

CODE_EXISTS_ERRORS = [field_error("code", "Permission group code already exists")]


def code_order(code: str) -> int:
    """Numeric part of a code (``PERM-07`` -> 7); codes without digits sort last."""
    digits = re.sub(r"\D", "", code)
    return int(digits) if digits else sys.maxsize


class PermissionGroupService:

    @staticmethod
    def _ensure_code_free(repo: PermissionGroupRepository, code: str) -> None:
        if repo.get_by_code(code):
            raise ConflictError("Permission group code already exists", errors=CODE_EXISTS_ERRORS)

    @staticmethod
    def get_group(db: Session, group_id: str) -> PermissionGroup:
        group = PermissionGroupRepository(db).get(group_id)
        if not group:
            raise NotFoundError(f"Permission group {group_id} not found")
        return group

    @staticmethod
    def list_groups(db: Session) -> List[Dict[str, Any]]:
        """Groups collected under their heading, headings ordered by their lowest code."""
        repo = PermissionGroupRepository(db)
        groups = repo.list(order_by=PermissionGroup.group_name)
        counts = repo.permission_counts([g.id for g in groups])

        collections = []
        for heading, members in groupby(groups, key=lambda g: g.group_name):
            items = sorted(members, key=lambda g: (code_order(g.code), g.code))
            collections.append({
                "group_name": heading,
                "permission_groups": [
                    {"id": g.id, "code": g.code, "name": g.name, "permission_count": counts[g.id]}
                    for g in items
                ],
            })
        collections.sort(key=lambda c: (code_order(c["permission_groups"][0]["code"]), c["group_name"]))
        return collections

    @staticmethod
    def get_group_detail(db: Session, group_id: str) -> Dict[str, Any]:
        group = PermissionGroupService.get_group(db, group_id)
        permissions = PermissionGroupRepository(db).active_permissions(group.id)
        return {
            "id": group.id,
            "group_name": group.group_name,
            "name": group.name,
            "code": group.code,
            "permission_count": len(permissions),
            "permissions": permissions,
            "created_at": group.created_at,
            "updated_at": group.updated_at,
        }

    @staticmethod
    def create_group(db: Session, data: PermissionGroupCreate, actor_id: str) -> Dict[str, Any]:
        repo = PermissionGroupRepository(db)
        PermissionGroupService._ensure_code_free(repo, data.code)
        group = repo.add(
            PermissionGroup(**data.model_dump(), created_by_id=actor_id),
            conflict_errors=CODE_EXISTS_ERRORS,
        )
        logger.info("Permission group %s created under %s", group.code, group.group_name)
        return PermissionGroupService.get_group_detail(db, group.id)

    @staticmethod
    def update_group(
        db: Session, group_id: str, data: PermissionGroupUpdate, actor_id: str
    ) -> Dict[str, Any]:
        repo = PermissionGroupRepository(db)
        group = PermissionGroupService.get_group(db, group_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "code" in changes and changes["code"] != group.code:
            PermissionGroupService._ensure_code_free(repo, changes["code"])
        for field, value in changes.items():
            setattr(group, field, value)
        group.updated_by_id = actor_id
        repo.save(group, conflict_errors=CODE_EXISTS_ERRORS)
        return PermissionGroupService.get_group_detail(db, group.id)

    @staticmethod
    def delete_group(db: Session, group_id: str) -> None:
        """Removes the group and its links; the permissions themselves stay."""
        group = PermissionGroupService.get_group(db, group_id)
        lifecycle_service.hard_delete(db, group)
        logger.info("Permission group %s deleted", group_id)

    @staticmethod
    def assign_permissions(
        db: Session, group_id: str, permission_ids: List[str], actor_id: str
    ) -> Dict[str, Any]:
        group = PermissionGroupService.get_group(db, group_id)
        permissions = permission_service.resolve_many(db, permission_ids) if permission_ids else []
        group.permissions = permissions
        group.updated_by_id = actor_id
        PermissionGroupRepository(db).save(group)
        logger.info("Permission group %s now holds %d permission(s)", group.code, len(permissions))
        return PermissionGroupService.get_group_detail(db, group.id)


permission_group_service = PermissionGroupService()
