"""Department service: CRUD, department heads and trainer assignment."""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from tms_backend.core.constants import RoleName
from tms_backend.core.exceptions import (
    ConflictError,
    NotFoundError,
    UnprocessableEntityError,
    field_error,
)
from tms_backend.models.department import Department
from tms_backend.models.role import Role
from tms_backend.models.user import User
from tms_backend.repositories.department_repository import DepartmentRepository
from tms_backend.repositories.user_repository import UserRepository
from tms_backend.schemas.schemas import DepartmentCreate, DepartmentUpdate
from tms_backend.services.lifecycle import lifecycle_service

logger = logging.getLogger("tms")

DEPARTMENT_EXISTS_ERRORS = [
    field_error("name", "Department name or code already exists"),
    field_error("code", "Department name or code already exists"),
]


class DepartmentService:

    @staticmethod
    def list_departments(
        db: Session, include_deleted: bool = False, search: Optional[str] = None
    ) -> List[Department]:
        filters = []
        if search:
            like = f"%{search}%"
            filters.append(or_(Department.name.ilike(like), Department.code.ilike(like)))
        return DepartmentRepository(db).list(
            include_deleted=include_deleted, filters=filters, order_by=Department.name
        )

    @staticmethod
    def get_department(db: Session, department_id: str, include_deleted: bool = False) -> Department:
        department = DepartmentRepository(db).get(department_id, include_deleted=include_deleted)
        if not department:
            raise NotFoundError("Department not found")
        return department

    @staticmethod
    def list_department_heads(db: Session) -> List[User]:
        return UserRepository(db).list(
            filters=[User.role.has(Role.name == RoleName.DEPARTMENT_HEAD.value)],
            order_by=User.eid,
        )

    @staticmethod
    def _validate_head(db: Session, head_user_id: str) -> User:
        head = UserRepository(db).get(head_user_id)
        if head is None or head.role.name != RoleName.DEPARTMENT_HEAD.value:
            raise UnprocessableEntityError(
                "Invalid department head",
                errors=[field_error("head_user_id", "User must exist and have the DEPARTMENT_HEAD role")],
            )
        return head

    @staticmethod
    def _ensure_unique(repo: DepartmentRepository, name: Optional[str], code: Optional[str],
                       exclude_id: Optional[str] = None) -> None:
        errors = []
        if name:
            existing = repo.get_by_name(name)
            if existing and existing.id != exclude_id:
                errors.append(field_error("name", "Department name already exists"))
        if code:
            existing = repo.get_by_code(code)
            if existing and existing.id != exclude_id:
                errors.append(field_error("code", "Department code already exists"))
        if errors:
            raise ConflictError("Department already exists", errors=errors)

    @staticmethod
    def create_department(db: Session, data: DepartmentCreate, actor_id: str) -> Department:
        repo = DepartmentRepository(db)
        DepartmentService._ensure_unique(repo, data.name, data.code)
        head = DepartmentService._validate_head(db, data.head_user_id) if data.head_user_id else None
        department = Department(
            name=data.name,
            code=data.code,
            description=data.description,
            head_user_id=head.id if head else None,
            is_active=True,
            created_by_id=actor_id,
        )
        department = repo.add(department, conflict_errors=DEPARTMENT_EXISTS_ERRORS)
        if head is not None:
            head.department_id = department.id
            repo.commit()
        logger.info("Department %s created", department.code)
        return department

    @staticmethod
    def update_department(
        db: Session, department_id: str, data: DepartmentUpdate, actor_id: str
    ) -> Department:
        repo = DepartmentRepository(db)
        department = DepartmentService.get_department(db, department_id)
        changes = data.model_dump(exclude_unset=True)
        DepartmentService._ensure_unique(
            repo, changes.get("name"), changes.get("code"), exclude_id=department.id
        )
        if changes.get("head_user_id"):
            head = DepartmentService._validate_head(db, changes["head_user_id"])
            head.department_id = department.id
        for field, value in changes.items():
            setattr(department, field, value)
        department.updated_by_id = actor_id
        return repo.save(department, conflict_errors=DEPARTMENT_EXISTS_ERRORS)

    @staticmethod
    def delete_department(db: Session, department_id: str, actor_id: str, hard: bool = False) -> None:
        department = DepartmentService.get_department(db, department_id, include_deleted=hard)
        if hard:
            lifecycle_service.hard_delete(db, department)
        else:
            lifecycle_service.disable(db, department, actor_id)
        logger.info("Department %s deleted (hard=%s)", department_id, hard)

    @staticmethod
    def enable_department(db: Session, department_id: str, actor_id: str) -> Department:
        department = DepartmentService.get_department(db, department_id, include_deleted=True)
        return lifecycle_service.enable(db, department, actor_id)

    @staticmethod
    def _trainers_by_eid(db: Session, eids: List[str]) -> List[User]:
        unique_eids = list(dict.fromkeys(eids))
        users = UserRepository(db).get_by_eids(unique_eids)
        found = {u.eid: u for u in users}
        errors = [
            field_error("trainer_eids", f"Trainer {eid} not found")
            for eid in unique_eids if eid not in found
        ]
        errors += [
            field_error("trainer_eids", f"User {u.eid} is not a trainer")
            for u in users if u.role.name != RoleName.TRAINER.value
        ]
        if errors:
            raise UnprocessableEntityError("Invalid trainers", errors=errors)
        return users

    @staticmethod
    def add_trainers(db: Session, department_id: str, eids: List[str], actor_id: str) -> List[User]:
        department = DepartmentService.get_department(db, department_id)
        trainers = DepartmentService._trainers_by_eid(db, eids)
        for trainer in trainers:
            trainer.department_id = department.id
            trainer.updated_by_id = actor_id
        DepartmentRepository(db).commit()
        logger.info("Added %d trainer(s) to department %s", len(trainers), department.code)
        return trainers

    @staticmethod
    def remove_trainers(db: Session, department_id: str, eids: List[str], actor_id: str) -> List[User]:
        department = DepartmentService.get_department(db, department_id)
        trainers = DepartmentService._trainers_by_eid(db, eids)
        outsiders = [t.eid for t in trainers if t.department_id != department.id]
        if outsiders:
            raise UnprocessableEntityError(
                "Trainer not in department",
                errors=[field_error("trainer_eids", f"Trainer {eid} is not in this department")
                        for eid in outsiders],
            )
        for trainer in trainers:
            trainer.department_id = None
            trainer.updated_by_id = actor_id
        DepartmentRepository(db).commit()
        logger.info("Removed %d trainer(s) from department %s", len(trainers), department.code)
        return trainers


department_service = DepartmentService()
