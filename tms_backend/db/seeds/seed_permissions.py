"""Sync Permission rows with the registered API routes."""

import logging
from typing import Iterable

from fastapi.routing import APIRoute
from sqlalchemy.orm import Session

from tms_backend.core.constants import HTTPMethod
from tms_backend.models.permission import Permission

logger = logging.getLogger("tms")

API_PREFIX = "/api"


def route_module(path: str) -> str:
    """First path segment after the API prefix, e.g. ``/api/roles/{role_id}`` -> ``ROLES``."""
    trimmed = path[len(API_PREFIX):] if path.startswith(API_PREFIX) else path
    return trimmed.strip("/").split("/")[0].upper()


def sync_permissions(db: Session, routes: Iterable) -> int:
    """Create a permission for every ``(path, method)`` route that has none.

    Soft-deleted permissions are left alone; an administrator disabled them.
    """
    existing = {
        (p.path, p.method.value)
        for p in db.query(Permission).filter(Permission.deleted_at.is_(None)).all()
    }
    added = 0
    for route in routes:
        if not isinstance(route, APIRoute) or not route.path.startswith(API_PREFIX):
            continue
        for method in sorted(route.methods):
            if (route.path, method) in existing or method not in HTTPMethod.__members__:
                continue
            db.add(Permission(
                name=f"{method} {route.path}",
                description=route.summary or route.name,
                path=route.path,
                method=HTTPMethod(method),
                module=route_module(route.path),
                is_active=True,
            ))
            existing.add((route.path, method))
            added += 1
    db.commit()
    logger.info("Permission sync: %d added, %d total", added, len(existing))
    return added
