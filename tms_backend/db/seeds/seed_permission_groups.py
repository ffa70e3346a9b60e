"""Seed the feature permission groups and link them to synced permissions."""

import logging

from sqlalchemy.orm import Session

from tms_backend.models.permission import Permission
from tms_backend.models.permission_group import PermissionGroup

logger = logging.getLogger("tms")

# (feature group, code, name, permission names)
PERMISSION_GROUPS = [
    ("User & Access Management", "PERM-01", "View All Users", [
        "GET /api/users", "GET /api/users/trainees", "GET /api/users/{user_id}",
    ]),
    ("User & Access Management", "PERM-02", "Create User Account", ["POST /api/users"]),
    ("User & Access Management", "PERM-03", "Bulk Import User Accounts", ["POST /api/users/bulk"]),
    ("User & Access Management", "PERM-04", "Update User", ["PUT /api/users/{user_id}"]),
    ("User & Access Management", "PERM-05", "Disable/Enable User", [
        "DELETE /api/users/{user_id}", "PATCH /api/users/{user_id}/enable",
    ]),
    ("User & Access Management", "PERM-06", "View All Roles", [
        "GET /api/roles", "GET /api/roles/{role_id}",
        "GET /api/permissions", "GET /api/permissions/{permission_id}",
        "GET /api/permission-groups", "GET /api/permission-groups/{permission_group_id}",
    ]),
    ("User & Access Management", "PERM-07", "Create Role", ["POST /api/roles"]),
    ("User & Access Management", "PERM-08", "Update Role", [
        "PUT /api/roles/{role_id}",
        "PATCH /api/roles/{role_id}/add-permissions",
        "PATCH /api/roles/{role_id}/remove-permissions",
    ]),
    ("User & Access Management", "PERM-09", "Disable/Enable Role", [
        "DELETE /api/roles/{role_id}", "PATCH /api/roles/{role_id}/enable",
    ]),
    ("User & Access Management", "PERM-10", "View Profile", ["GET /api/profile"]),
    ("User & Access Management", "PERM-11", "Configure Signature", [
        "POST /api/media/images/upload/{media_type}", "POST /api/media/images/upload/presigned-url",
    ]),
    ("User & Access Management", "PERM-12", "Update Profile", [
        "PUT /api/profile", "PUT /api/profile/reset-password",
    ]),
    ("Academic Management", "PERM-13", "View All Departments", [
        "GET /api/departments", "GET /api/departments/heads", "GET /api/departments/{department_id}",
    ]),
    ("Academic Management", "PERM-14", "Create Department", ["POST /api/departments"]),
    ("Academic Management", "PERM-15", "Update Department", [
        "PUT /api/departments/{department_id}",
        "PATCH /api/departments/{department_id}/add-trainers",
        "PATCH /api/departments/{department_id}/remove-trainers",
    ]),
    ("Academic Management", "PERM-16", "Disable/Enable Department", [
        "DELETE /api/departments/{department_id}", "PATCH /api/departments/{department_id}/enable",
    ]),
    ("Academic Management", "PERM-18", "View All Courses", [
        "GET /api/courses", "GET /api/courses/{course_id}",
    ]),
    ("Academic Management", "PERM-19", "Create Course", ["POST /api/courses"]),
    ("Academic Management", "PERM-20", "Update Course", ["PUT /api/courses/{course_id}"]),
    ("Academic Management", "PERM-21", "Archive Course", [
        "DELETE /api/courses/{course_id}", "PATCH /api/courses/{course_id}/enable",
    ]),
    ("Academic Management", "PERM-24", "View All Subjects", [
        "GET /api/subjects", "GET /api/subjects/{subject_id}",
    ]),
    ("Academic Management", "PERM-26", "Add Single Subject", ["POST /api/subjects"]),
    ("Academic Management", "PERM-27", "Update Subject", ["PUT /api/subjects/{subject_id}"]),
    ("Academic Management", "PERM-28", "Disable Subject", [
        "DELETE /api/subjects/{subject_id}", "PATCH /api/subjects/{subject_id}/enable",
    ]),
    ("Reporting & Analytics", "PERM-55", "View All Incident/Feedback Report", [
        "GET /api/reports", "GET /api/reports/{report_id}",
    ]),
    ("Reporting & Analytics", "PERM-56", "Submit Incident/Feedback Report", ["POST /api/reports"]),
    ("Reporting & Analytics", "PERM-57", "Cancel Incident/Feedback Report", [
        "PATCH /api/reports/{report_id}/cancel",
    ]),
    ("Reporting & Analytics", "PERM-58", "Review Incident/Feedback Report", [
        "PATCH /api/reports/{report_id}/acknowledge", "PATCH /api/reports/{report_id}/respond",
    ]),
    ("Reporting & Analytics", "PERM-59", "View My Issue List", ["GET /api/reports/my-reports"]),
]


def seed_permission_groups(db: Session) -> int:
    """Upsert groups by code and add any missing links.

    Links an administrator added through the API are kept.
    """
    by_name = {
        p.name: p for p in db.query(Permission).filter(Permission.deleted_at.is_(None)).all()
    }
    created = 0
    for group_name, code, name, permission_names in PERMISSION_GROUPS:
        group = db.query(PermissionGroup).filter(PermissionGroup.code == code).first()
        if group is None:
            group = PermissionGroup(code=code, group_name=group_name, name=name)
            db.add(group)
            created += 1
        else:
            group.group_name = group_name
            group.name = name

        linked = {p.id for p in group.permissions}
        for permission_name in permission_names:
            permission = by_name.get(permission_name)
            if permission is None:
                logger.warning("Permission %s not found; run the permission sync first", permission_name)
                continue
            if permission.id not in linked:
                group.permissions.append(permission)
                linked.add(permission.id)

    db.commit()
    logger.info("Permission groups: %d created, %d total", created, len(PERMISSION_GROUPS))
    return created
