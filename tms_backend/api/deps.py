"""Shared router dependencies."""

from fastapi import Depends, Query

from tms_backend.core.access_gate import AccessContext, access_gate
from tms_backend.core.exceptions import ForbiddenError


def include_deleted_flag(
    include_deleted: bool = Query(False, alias="includeDeleted"),
    ctx: AccessContext = Depends(access_gate),
) -> bool:
    """Deleted rows are only listed for administrators; others get the flag ignored."""
    return include_deleted and ctx.is_admin


def hard_delete_flag(
    hard: bool = Query(False),
    ctx: AccessContext = Depends(access_gate),
) -> bool:
    if hard and not ctx.is_admin:
        raise ForbiddenError("Only administrators can permanently delete records")
    return hard


class Pagination:
    def __init__(
        self,
        page: int = Query(1, ge=1),
        page_size: int = Query(20, ge=1, le=100),
    ):
        self.page = page
        self.page_size = page_size
