"""Seed base roles and their default permission sets."""

import logging

from sqlalchemy.orm import Session

from tms_backend.core.constants import (
    DEFAULT_ROLE_PERMISSION_NAMES,
    ROLE_EXTRA_PERMISSION_NAMES,
    RoleName,
)
from tms_backend.models.permission import Permission
from tms_backend.models.role import Role
from tms_backend.services.cache_service import role_id_cache

logger = logging.getLogger("tms")

ROLE_DESCRIPTIONS = {
    RoleName.ADMINISTRATOR.value: "Full system access",
    RoleName.DEPARTMENT_HEAD.value: "Manages a training department, its courses and trainers",
    RoleName.SQA_AUDITOR.value: "Safety & quality auditor handling reports",
    RoleName.TRAINER.value: "Teaches subjects and evaluates trainees",
    RoleName.TRAINEE.value: "Attends courses",
    RoleName.ACADEMIC_DEPARTMENT.value: "Academic office handling requests and approvals",
}


def seed_roles(db: Session) -> None:
    """Insert missing roles and grant their default permissions.

    The administrator gets every live permission. Other roles only gain
    missing defaults; permissions granted later through the API are kept.
    """
    live_permissions = db.query(Permission).filter(Permission.deleted_at.is_(None)).all()
    by_name = {p.name: p for p in live_permissions}

    for role_name in RoleName:
        role = db.query(Role).filter(Role.name == role_name.value).first()
        if role is None:
            role = Role(name=role_name.value, description=ROLE_DESCRIPTIONS[role_name.value], is_active=True)
            db.add(role)
            logger.info("Created role %s", role_name.value)

        if role_name is RoleName.ADMINISTRATOR:
            role.permissions = list(live_permissions)
            continue

        wanted = DEFAULT_ROLE_PERMISSION_NAMES + ROLE_EXTRA_PERMISSION_NAMES.get(role_name.value, [])
        granted = {p.id for p in role.permissions}
        for name in wanted:
            permission = by_name.get(name)
            if permission is None:
                logger.warning("Permission %s not found; run the permission sync first", name)
                continue
            if permission.id not in granted:
                role.permissions.append(permission)
                granted.add(permission.id)

    db.commit()
    role_id_cache.invalidate()
    logger.info("Seeded %d roles", len(RoleName))
