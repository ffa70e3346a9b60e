"""Soft-delete / enable / hard-delete transitions shared by every entity."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tms_backend.core.exceptions import (
    AlreadyActiveError,
    AlreadyDisabledError,
    UnprocessableEntityError,
)
from tms_backend.repositories.base import is_foreign_key_violation


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class LifecycleService:
    """ACTIVE (``deleted_at`` null) <-> DISABLED (``deleted_at`` set)."""

    @staticmethod
    def disable(db: Session, entity: Any, actor_id: str, commit: bool = True) -> Any:
        if entity.is_disabled:
            raise AlreadyDisabledError(f"{type(entity).__name__} is already disabled")
        entity.deleted_at = _now()
        entity.deleted_by_id = actor_id
        entity.set_active(False)
        if commit:
            db.commit()
            db.refresh(entity)
        return entity

    @staticmethod
    def enable(db: Session, entity: Any, actor_id: str, commit: bool = True) -> Any:
        if not entity.is_disabled:
            raise AlreadyActiveError(f"{type(entity).__name__} is already active")
        entity.deleted_at = None
        entity.deleted_by_id = None
        entity.updated_by_id = actor_id
        entity.set_active(True)
        if commit:
            db.commit()
            db.refresh(entity)
        return entity

    @staticmethod
    def hard_delete(db: Session, entity: Any) -> None:
        """Physically remove the row. Not reversible."""
        db.delete(entity)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if is_foreign_key_violation(e):
                raise UnprocessableEntityError(
                    f"{type(entity).__name__} is still referenced and cannot be deleted"
                )
            raise


lifecycle_service = LifecycleService()
