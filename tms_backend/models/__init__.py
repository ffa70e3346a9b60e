"""Models package; importing it registers every table on the metadata."""

from tms_backend.models.role import Role, role_permissions
from tms_backend.models.permission import Permission
from tms_backend.models.permission_group import PermissionGroup, permission_group_permissions
from tms_backend.models.user import User, RefreshToken
from tms_backend.models.department import Department
from tms_backend.models.course import Course, Subject
from tms_backend.models.report import Report, Request
from tms_backend.models.eid_sequence import EidSequence

__all__ = [
    "Role", "role_permissions", "Permission", "PermissionGroup", "permission_group_permissions",
    "User", "RefreshToken",
    "Department", "Course", "Subject", "Report", "Request", "EidSequence",
]
