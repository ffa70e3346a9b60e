"""Seed the administrator user from env vars."""

import logging

from sqlalchemy.orm import Session

from tms_backend.core.config import settings
from tms_backend.core.constants import RoleName, UserStatus
from tms_backend.core.security import hash_password
from tms_backend.models.role import Role
from tms_backend.models.user import User
from tms_backend.services.eid_service import eid_service

logger = logging.getLogger("tms")


def seed_admin(db: Session) -> None:
    """Create the administrator user if not already present."""
    admin_role = db.query(Role).filter(Role.name == RoleName.ADMINISTRATOR.value).first()
    if not admin_role:
        logger.warning("ADMINISTRATOR role not found. Run seed_roles first.")
        return

    existing = db.query(User).filter(User.email == str(settings.ADMIN_EMAIL)).first()
    if existing:
        logger.info("Administrator '%s' already exists, skipping.", settings.ADMIN_EMAIL)
        return

    admin = User(
        eid=eid_service.generate(db, RoleName.ADMINISTRATOR.value),
        email=str(settings.ADMIN_EMAIL),
        password_hash=hash_password(settings.ADMIN_PASSWORD),
        first_name=settings.ADMIN_FIRST_NAME,
        middle_name=settings.ADMIN_MIDDLE_NAME,
        last_name=settings.ADMIN_LAST_NAME,
        status=UserStatus.ACTIVE,
        role_id=admin_role.id,
    )
    db.add(admin)
    db.commit()
    logger.info("Created administrator %s (%s)", admin.email, admin.eid)
