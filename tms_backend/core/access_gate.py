"""Per-request access control: bearer token + route permission check."""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from tms_backend.core.constants import RoleName
from tms_backend.core.exceptions import ForbiddenError, UnauthenticatedError
from tms_backend.core.security import decode_access_token, extract_bearer
from tms_backend.db.session import get_db
from tms_backend.services.permission_resolver import (
    PermissionResolver,
    RoleWithPermissions,
    permission_resolver,
)

logger = logging.getLogger("tms")


class AccessTokenPayload(BaseModel):
    userId: str
    roleId: str
    roleName: str
    iat: int
    exp: int


@dataclass(frozen=True)
class AccessContext:
    """What a handler knows about the authorized caller."""
    user: AccessTokenPayload
    role: RoleWithPermissions

    @property
    def user_id(self) -> str:
        return self.user.userId

    @property
    def role_name(self) -> str:
        return self.role.name

    @property
    def is_admin(self) -> bool:
        return self.role.name == RoleName.ADMINISTRATOR.value


class AccessGate:
    """FastAPI dependency guarding every protected router.

    Authentication failures are 401; an unknown, inactive or deleted role
    and a role without a permission for the matched route template are 403.
    The same instance is used everywhere so FastAPI evaluates it once per
    request even when a handler also asks for the context.
    """

    def __init__(self, resolver: PermissionResolver = permission_resolver):
        self.resolver = resolver

    def __call__(self, request: Request, db: Session = Depends(get_db)) -> AccessContext:
        token = extract_bearer(request.headers.get("Authorization"))
        claims = decode_access_token(token)
        try:
            payload = AccessTokenPayload(**claims)
        except ValidationError:
            raise UnauthenticatedError("Invalid token payload")

        path = self._route_path(request)
        method = request.method
        role = self.resolver.resolve(db, payload.roleId, path, method)
        if role is None:
            logger.info("Access denied: role %s not found or inactive (%s %s)", payload.roleId, method, path)
            raise ForbiddenError("Role not found or inactive")
        if not role.has_permissions:
            logger.info("Access denied: role %s lacks %s %s", role.name, method, path)
            raise ForbiddenError("You do not have permission to access this resource")

        request.state.user = payload
        request.state.role_permissions = role
        return AccessContext(user=payload, role=role)

    @staticmethod
    def _route_path(request: Request) -> str:
        route: Optional[object] = request.scope.get("route")
        return getattr(route, "path", None) or request.url.path


access_gate = AccessGate()
