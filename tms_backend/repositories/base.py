"""Base repository: soft-delete aware queries and IntegrityError translation."""

import logging
import re
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar, Union

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from tms_backend.core.exceptions import ConflictError, UnprocessableEntityError, field_error
from tms_backend.db.filters import build_list_filters

logger = logging.getLogger("tms")

ModelT = TypeVar("ModelT")
ConflictErrors = Union[List[dict], Dict[str, List[dict]], None]


def is_unique_violation(exc: IntegrityError) -> bool:
    """MySQL 1062 ("Duplicate entry") or SQLite "UNIQUE constraint failed"."""
    text = str(exc.orig).lower()
    return "duplicate entry" in text or "unique constraint" in text


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    """MySQL 1451/1452 or SQLite "FOREIGN KEY constraint failed"."""
    return "foreign key constraint" in str(exc.orig).lower()


def violated_key(exc: IntegrityError) -> str:
    """Constraint part of the driver message: ``users.ix_users_eid`` or ``users.eid``."""
    text = str(exc.orig)
    for marker in ("for key", "failed:"):
        if marker in text:
            return text.split(marker, 1)[1]
    return text


def conflict_errors_for(exc: IntegrityError, conflict_errors: ConflictErrors) -> List[dict]:
    if isinstance(conflict_errors, dict):
        key = violated_key(exc)
        for column, errors in conflict_errors.items():
            if re.search(rf"[._]{re.escape(column)}\b", key):
                return errors
        conflict_errors = None
    return conflict_errors or [field_error("id", "Resource already exists")]


class BaseRepository(Generic[ModelT]):
    """Common data access for one model."""

    model: Any = None
    has_soft_delete: bool = True

    def __init__(self, db: Session):
        self.db = db

    def _filters(
        self,
        include_deleted: bool,
        filters: Optional[Iterable[ColumnElement]] = None,
    ) -> List[ColumnElement]:
        if not self.has_soft_delete:
            return list(filters or [])
        return build_list_filters(
            self.model, include_deleted=include_deleted, base_filters=filters
        )

    def get(self, entity_id: str, include_deleted: bool = False) -> Optional[ModelT]:
        criteria = self._filters(include_deleted, [self.model.id == entity_id])
        return self.db.query(self.model).filter(*criteria).first()

    def find_one(self, *filters: ColumnElement, include_deleted: bool = False) -> Optional[ModelT]:
        return self.db.query(self.model).filter(*self._filters(include_deleted, filters)).first()

    def list(
        self,
        *,
        include_deleted: bool = False,
        filters: Optional[Iterable[ColumnElement]] = None,
        order_by: Any = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[ModelT]:
        query = self.db.query(self.model).filter(*self._filters(include_deleted, filters))
        query = query.order_by(order_by if order_by is not None else self.model.created_at.desc())
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        return query.all()

    def count(
        self,
        *,
        include_deleted: bool = False,
        filters: Optional[Iterable[ColumnElement]] = None,
    ) -> int:
        return (
            self.db.query(func.count(self.model.id))
            .filter(*self._filters(include_deleted, filters))
            .scalar()
        )

    def paginate(
        self,
        *,
        page: int = 1,
        page_size: int = 20,
        include_deleted: bool = False,
        filters: Optional[Iterable[ColumnElement]] = None,
        order_by: Any = None,
    ) -> dict[str, Any]:
        filters = list(filters or [])
        items = self.list(
            include_deleted=include_deleted,
            filters=filters,
            order_by=order_by,
            offset=(page - 1) * page_size,
            limit=page_size,
        )
        total = self.count(include_deleted=include_deleted, filters=filters)
        return {"items": items, "total": total, "page": page, "page_size": page_size}

    def add(self, entity: ModelT, conflict_errors: ConflictErrors = None) -> ModelT:
        self.db.add(entity)
        self.commit(conflict_errors)
        self.db.refresh(entity)
        return entity

    def save(self, entity: ModelT, conflict_errors: ConflictErrors = None) -> ModelT:
        self.commit(conflict_errors)
        self.db.refresh(entity)
        return entity

    def delete(self, entity: ModelT) -> None:
        self.db.delete(entity)
        self.commit()

    def commit(self, conflict_errors: ConflictErrors = None) -> None:
        """Commit, turning constraint failures into 422 errors.

        ``conflict_errors`` is either the field errors for any unique
        violation, or a mapping of column name to field errors when the
        model has more than one unique column.
        """
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if is_unique_violation(e):
                raise ConflictError(errors=conflict_errors_for(e, conflict_errors))
            if is_foreign_key_violation(e):
                raise UnprocessableEntityError(
                    "Related record does not exist or is still referenced"
                )
            logger.error("Unexpected integrity error on %s: %s", self.model.__name__, e)
            raise
