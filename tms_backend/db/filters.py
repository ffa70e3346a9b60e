"""Shared soft-delete filter construction used by every repository."""

from typing import Any, Callable, Iterable, Optional

from sqlalchemy.sql.elements import ColumnElement


def build_list_filters(
    model: Any,
    *,
    include_deleted: bool = False,
    deleted_column: str = "deleted_at",
    base_filters: Optional[Iterable[ColumnElement]] = None,
    extend: Optional[Callable[[bool], Iterable[ColumnElement]]] = None,
) -> list[ColumnElement]:
    """Return the WHERE criteria for a list/find query on ``model``.

    Rows whose ``deleted_column`` is set are excluded unless
    ``include_deleted`` is true. ``extend`` receives the flag and may add
    entity-specific criteria.
    """
    filters = list(base_filters or [])
    if not include_deleted:
        filters.append(getattr(model, deleted_column).is_(None))
    if extend is not None:
        filters.extend(extend(include_deleted))
    return filters
