"""User service: CRUD, bulk creation with EID ranges, disable/enable."""

import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from tms_backend.core.access_gate import AccessContext
from tms_backend.core.constants import UserStatus
from tms_backend.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    SelfOperationError,
    TMSError,
    UnprocessableEntityError,
    field_error,
)
from tms_backend.core.security import hash_password, initial_password
from tms_backend.models.role import Role
from tms_backend.models.user import User
from tms_backend.repositories.department_repository import DepartmentRepository
from tms_backend.repositories.role_repository import RoleRepository, SharedRoleRepository
from tms_backend.repositories.user_repository import UserRepository
from tms_backend.schemas.schemas import UserBulkCreate, UserCreate, UserUpdate
from tms_backend.services.auth_service import auth_service
from tms_backend.services.eid_service import eid_service
from tms_backend.services.lifecycle import lifecycle_service

logger = logging.getLogger("tms")

EMAIL_EXISTS_ERRORS = [field_error("email", "Email already exists")]
EID_EXISTS_ERRORS = [field_error("eid", "Employee id already exists")]
USER_CONFLICT_ERRORS = {"eid": EID_EXISTS_ERRORS, "email": EMAIL_EXISTS_ERRORS}


class UserService:

    @staticmethod
    def list_users(
        db: Session,
        page: int = 1,
        page_size: int = 20,
        include_deleted: bool = False,
        role_id: Optional[str] = None,
        department_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        filters = []
        if role_id:
            filters.append(User.role_id == role_id)
        if department_id:
            filters.append(User.department_id == department_id)
        if search:
            like = f"%{search}%"
            filters.append(or_(
                User.eid.ilike(like),
                User.email.ilike(like),
                User.first_name.ilike(like),
                User.last_name.ilike(like),
            ))
        return UserRepository(db).paginate(
            page=page,
            page_size=page_size,
            include_deleted=include_deleted,
            filters=filters,
            order_by=User.eid,
        )

    @staticmethod
    def list_trainees(db: Session, page: int = 1, page_size: int = 20,
                      search: Optional[str] = None) -> Dict[str, Any]:
        trainee_role_id = SharedRoleRepository(db).get_trainee_role_id()
        return UserService.list_users(
            db, page=page, page_size=page_size, role_id=trainee_role_id, search=search
        )

    @staticmethod
    def get_user(db: Session, user_id: str, include_deleted: bool = False) -> User:
        user = UserRepository(db).get(user_id, include_deleted=include_deleted)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def _load_role(db: Session, role_id: str, ctx: AccessContext) -> Role:
        """Active target role; only administrators may hand out the administrator role."""
        role = RoleRepository(db).get(role_id)
        if role is None or not role.is_active:
            raise UnprocessableEntityError(
                "Role not found", errors=[field_error("role_id", "Role not found or disabled")]
            )
        if role.id == SharedRoleRepository(db).get_admin_role_id() and not ctx.is_admin:
            raise ForbiddenError("Only administrators can create administrator users")
        return role

    @staticmethod
    def _check_department(db: Session, department_id: Optional[str]) -> None:
        if department_id and DepartmentRepository(db).get(department_id) is None:
            raise UnprocessableEntityError(
                "Department not found",
                errors=[field_error("department_id", "Department not found or disabled")],
            )

    @staticmethod
    def _build_user(data: UserCreate, eid: str, actor_id: str) -> User:
        return User(
            eid=eid,
            first_name=data.first_name,
            middle_name=data.middle_name,
            last_name=data.last_name,
            email=str(data.email),
            password_hash=hash_password(initial_password(eid)),
            status=UserStatus.ACTIVE,
            gender=data.gender,
            phone_number=data.phone_number,
            address=data.address,
            role_id=data.role_id,
            department_id=data.department_id,
            created_by_id=actor_id,
        )

    @staticmethod
    def create_user(db: Session, data: UserCreate, ctx: AccessContext) -> User:
        repo = UserRepository(db)
        role = UserService._load_role(db, data.role_id, ctx)
        UserService._check_department(db, data.department_id)
        if repo.get_by_email(str(data.email)):
            raise ConflictError("Email already exists", errors=EMAIL_EXISTS_ERRORS)

        eid = eid_service.generate(db, role.name)
        user = repo.add(UserService._build_user(data, eid, ctx.user_id), conflict_errors=USER_CONFLICT_ERRORS)
        logger.info("User %s created with role %s", user.eid, role.name)
        return user

    @staticmethod
    def bulk_create_users(db: Session, data: UserBulkCreate, ctx: AccessContext) -> Dict[str, Any]:
        """Create many users; one EID range is reserved per role.

        Invalid rows are reported in ``failed`` and do not block the others.
        """
        repo = UserRepository(db)
        failed = []
        existing = repo.existing_emails([str(u.email) for u in data.users])
        seen = set()
        groups: "OrderedDict[str, List[tuple]]" = OrderedDict()
        roles: Dict[str, Role] = {}

        for index, item in enumerate(data.users):
            email = str(item.email)
            try:
                if email in existing or email in seen:
                    raise ConflictError("Email already exists", errors=EMAIL_EXISTS_ERRORS)
                if item.role_id not in roles:
                    roles[item.role_id] = UserService._load_role(db, item.role_id, ctx)
                UserService._check_department(db, item.department_id)
            except TMSError as e:
                failed.append({"index": index, "email": email, "error": e.message})
                continue
            seen.add(email)
            groups.setdefault(item.role_id, []).append((index, item))

        # Reserve every range before adding rows; each reservation commits.
        reserved = {
            role_id: eid_service.generate(db, roles[role_id].name, count=len(items))
            for role_id, items in groups.items()
        }
        created = []
        for role_id, items in groups.items():
            for eid, (_, item) in zip(reserved[role_id], items):
                user = UserService._build_user(item, eid, ctx.user_id)
                db.add(user)
                created.append(user)
        if created:
            repo.commit(conflict_errors=USER_CONFLICT_ERRORS)
            for user in created:
                db.refresh(user)
        logger.info("Bulk user creation: %d created, %d failed", len(created), len(failed))
        return {"created": created, "failed": failed}

    @staticmethod
    def update_user(db: Session, user_id: str, data: UserUpdate, ctx: AccessContext) -> User:
        repo = UserRepository(db)
        user = UserService.get_user(db, user_id)
        changes = data.model_dump(exclude_unset=True)

        if "email" in changes and changes["email"] != user.email:
            changes["email"] = str(changes["email"])
            if repo.get_by_email(changes["email"]):
                raise ConflictError("Email already exists", errors=EMAIL_EXISTS_ERRORS)
        if "department_id" in changes:
            UserService._check_department(db, changes["department_id"])
        if changes.get("role_id") and changes["role_id"] != user.role_id:
            role = UserService._load_role(db, changes["role_id"], ctx)
            if not eid_service.matches_role(user.eid, role.name):
                user.eid = eid_service.generate(db, role.name)

        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_by_id = ctx.user_id
        return repo.save(user, conflict_errors=USER_CONFLICT_ERRORS)

    @staticmethod
    def disable_user(db: Session, user_id: str, actor_id: str, hard: bool = False) -> None:
        if user_id == actor_id:
            raise SelfOperationError("You cannot disable yourself")
        user = UserService.get_user(db, user_id, include_deleted=hard)
        if hard:
            lifecycle_service.hard_delete(db, user)
        else:
            lifecycle_service.disable(db, user, actor_id)
            auth_service.logout(db, user.id)
        logger.info("User %s disabled (hard=%s)", user_id, hard)

    @staticmethod
    def enable_user(db: Session, user_id: str, actor_id: str) -> User:
        user = UserService.get_user(db, user_id, include_deleted=True)
        return lifecycle_service.enable(db, user, actor_id)


user_service = UserService()
