"""Shared enums and constant tables."""

import enum


class RoleName(str, enum.Enum):
    ADMINISTRATOR = "ADMINISTRATOR"
    DEPARTMENT_HEAD = "DEPARTMENT_HEAD"
    SQA_AUDITOR = "SQA_AUDITOR"
    TRAINER = "TRAINER"
    TRAINEE = "TRAINEE"
    ACADEMIC_DEPARTMENT = "ACADEMIC_DEPARTMENT"


# Seed roles that may not be renamed or deleted through the API.
BASE_ROLES = frozenset({
    RoleName.ADMINISTRATOR.value,
    RoleName.DEPARTMENT_HEAD.value,
    RoleName.SQA_AUDITOR.value,
    RoleName.TRAINER.value,
    RoleName.TRAINEE.value,
})


class HTTPMethod(str, enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class UserStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    DISABLED = "DISABLED"
    SUSPENDED = "SUSPENDED"


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class CourseLevel(str, enum.Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class AcademicStatus(str, enum.Enum):
    """Lifecycle status shared by courses and subjects."""
    PLANNED = "PLANNED"
    ON_GOING = "ON_GOING"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class ReportType(str, enum.Enum):
    SAFETY_REPORT = "SAFETY_REPORT"
    INSTRUCTOR_REPORT = "INSTRUCTOR_REPORT"
    FATIGUE_REPORT = "FATIGUE_REPORT"
    TRAINING_PROGRAM_REPORT = "TRAINING_PROGRAM_REPORT"
    FACILITIES_REPORT = "FACILITIES_REPORT"
    COURSE_ORGANIZATION_REPORT = "COURSE_ORGANIZATION_REPORT"
    FEEDBACK = "FEEDBACK"
    OTHER = "OTHER"


class Severity(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ReportStatus(str, enum.Enum):
    SUBMITTED = "SUBMITTED"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    RESOLVED = "RESOLVED"
    CANCELLED = "CANCELLED"


class RequestType(str, enum.Enum):
    SAFETY_REPORT = "SAFETY_REPORT"
    INCIDENT_REPORT = "INCIDENT_REPORT"
    FEEDBACK_REPORT = "FEEDBACK_REPORT"
    ASSESSMENT_APPROVAL_REQUEST = "ASSESSMENT_APPROVAL_REQUEST"


class RequestStatus(str, enum.Enum):
    CREATED = "CREATED"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    RESOLVED = "RESOLVED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class MediaType(str, enum.Enum):
    AVATAR = "avatar"
    SIGNATURE = "signature"
    COURSE = "course"
    REPORT = "report"
    TEMPLATE = "template"


# Endpoints every seeded role can call, as "METHOD /path" permission names.
DEFAULT_ROLE_PERMISSION_NAMES = [
    "POST /api/media/images/upload/{media_type}",
    "POST /api/media/images/upload/presigned-url",
    "POST /api/media/docs/upload/{media_type}",
    "POST /api/media/docs/upload/presigned-url",
    "GET /api/profile",
    "PUT /api/profile",
    "PUT /api/profile/reset-password",
    "POST /api/auth/logout",
    "GET /api/reports/my-reports",
    "POST /api/reports",
    "PATCH /api/reports/{report_id}/cancel",
    "GET /api/requests/my-requests",
    "POST /api/requests",
    "GET /api/users/{user_id}",
    "GET /api/roles/{role_id}",
]

# Role specific additions on top of DEFAULT_ROLE_PERMISSION_NAMES.
# ADMINISTRATOR is granted every synced permission instead.
ROLE_EXTRA_PERMISSION_NAMES = {
    RoleName.DEPARTMENT_HEAD.value: [
        "GET /api/departments",
        "GET /api/departments/{department_id}",
        "PATCH /api/departments/{department_id}/add-trainers",
        "PATCH /api/departments/{department_id}/remove-trainers",
        "GET /api/courses",
        "GET /api/courses/{course_id}",
        "POST /api/courses",
        "PUT /api/courses/{course_id}",
        "GET /api/subjects",
        "GET /api/subjects/{subject_id}",
        "POST /api/subjects",
        "PUT /api/subjects/{subject_id}",
        "GET /api/users",
        "GET /api/users/trainees",
    ],
    RoleName.ACADEMIC_DEPARTMENT.value: [
        "GET /api/departments",
        "GET /api/courses",
        "GET /api/courses/{course_id}",
        "GET /api/subjects",
        "GET /api/subjects/{subject_id}",
        "GET /api/users",
        "GET /api/users/trainees",
        "GET /api/requests",
        "GET /api/requests/{request_id}",
        "PATCH /api/requests/{request_id}/status",
    ],
    RoleName.SQA_AUDITOR.value: [
        "GET /api/reports",
        "GET /api/reports/{report_id}",
        "PATCH /api/reports/{report_id}/acknowledge",
        "PATCH /api/reports/{report_id}/respond",
    ],
    RoleName.TRAINER.value: [
        "GET /api/courses",
        "GET /api/courses/{course_id}",
        "GET /api/subjects",
        "GET /api/subjects/{subject_id}",
        "GET /api/users/trainees",
    ],
    RoleName.TRAINEE.value: [
        "GET /api/courses",
        "GET /api/courses/{course_id}",
    ],
}
