"""Pydantic schemas for API request/response serialization."""

from datetime import date, datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from tms_backend.core.constants import (
    AcademicStatus,
    CourseLevel,
    Gender,
    HTTPMethod,
    MediaType,
    ReportStatus,
    ReportType,
    RequestStatus,
    RequestType,
    Severity,
    UserStatus,
)

T = TypeVar("T")


# ---- Envelopes ----
class MessageResponse(BaseModel):
    message: str

class Envelope(BaseModel, Generic[T]):
    """Success envelope ``{message, data}``."""
    message: str = "Success"
    data: Optional[T] = None

class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int = 1
    page_size: int = 20


# ---- Auth ----
class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)

class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user: Optional[Dict[str, Any]] = None

class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=100)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


# ---- Permission ----
class PermissionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=250)
    description: Optional[str] = Field(None, max_length=500)
    path: str = Field(..., min_length=1, max_length=500)
    method: HTTPMethod
    module: str = Field(..., min_length=1, max_length=100)

    @field_validator("path")
    @classmethod
    def path_is_absolute(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("Path must start with '/'")
        return v

class PermissionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=250)
    description: Optional[str] = Field(None, max_length=500)
    path: Optional[str] = Field(None, min_length=1, max_length=500)
    method: Optional[HTTPMethod] = None
    module: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("path")
    @classmethod
    def path_is_absolute(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith("/"):
            raise ValueError("Path must start with '/'")
        return v

class PermissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    path: str
    method: HTTPMethod
    module: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


# ---- Role ----
class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    permission_ids: List[str] = Field(..., min_length=1)

class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    permission_ids: Optional[List[str]] = Field(None, min_length=1)

class RolePermissionsChange(BaseModel):
    permission_ids: List[str] = Field(..., min_length=1)

class RoleBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str

class RoleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    is_active: bool
    user_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

class RoleDetailOut(RoleOut):
    permission_count: int = 0
    permissions: List[PermissionOut] = []


# ---- Permission group ----
class PermissionGroupCreate(BaseModel):
    group_name: str = Field(..., min_length=1, max_length=200)
    name: str = Field(..., min_length=1, max_length=250)
    code: str = Field(..., min_length=1, max_length=20)

class PermissionGroupUpdate(BaseModel):
    group_name: Optional[str] = Field(None, min_length=1, max_length=200)
    name: Optional[str] = Field(None, min_length=1, max_length=250)
    code: Optional[str] = Field(None, min_length=1, max_length=20)

class PermissionGroupAssign(BaseModel):
    """Replaces the group's permissions; an empty list clears them."""
    permission_ids: List[str] = Field(default_factory=list)

class PermissionGroupItem(BaseModel):
    id: str
    code: str
    name: str
    permission_count: int = 0

class PermissionGroupCollection(BaseModel):
    group_name: str
    permission_groups: List[PermissionGroupItem]

class PermissionGroupDetailOut(BaseModel):
    id: str
    group_name: str
    name: str
    code: str
    permission_count: int = 0
    permissions: List[PermissionOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---- User ----
class UserBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    eid: str
    first_name: str
    last_name: str
    email: str

class UserCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    middle_name: Optional[str] = Field(None, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role_id: str
    department_id: Optional[str] = None
    gender: Optional[Gender] = None
    phone_number: Optional[str] = Field(None, min_length=9, max_length=15)
    address: Optional[str] = Field(None, max_length=255)

class UserBulkCreate(BaseModel):
    users: List[UserCreate] = Field(..., min_length=1, max_length=500)

class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    middle_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role_id: Optional[str] = None
    department_id: Optional[str] = None
    gender: Optional[Gender] = None
    phone_number: Optional[str] = Field(None, min_length=9, max_length=15)
    address: Optional[str] = Field(None, max_length=255)

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    eid: str
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    email: str
    status: UserStatus
    gender: Optional[Gender] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    avatar_url: Optional[str] = None
    signature_image_url: Optional[str] = None
    role: Optional[RoleBrief] = None
    department_id: Optional[str] = None
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

class BulkFailure(BaseModel):
    index: int
    email: str
    error: str

class BulkCreateResult(BaseModel):
    created: List[UserOut]
    failed: List[BulkFailure]


# ---- Profile ----
class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    middle_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    gender: Optional[Gender] = None
    phone_number: Optional[str] = Field(None, min_length=9, max_length=15)
    address: Optional[str] = Field(None, max_length=255)
    avatar_url: Optional[str] = Field(None, max_length=500)
    signature_image_url: Optional[str] = Field(None, max_length=500)

class ChangePasswordRequest(BaseModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=100)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


# ---- Department ----
class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=1000)
    head_user_id: Optional[str] = None

class DepartmentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=1000)
    head_user_id: Optional[str] = None

class DepartmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: str
    description: Optional[str] = None
    is_active: bool
    head_user: Optional[UserBrief] = None
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

class TrainerEidsRequest(BaseModel):
    trainer_eids: List[str] = Field(..., min_length=1)


# ---- Course / Subject ----
class _DateRange(BaseModel):
    @model_validator(mode="after")
    def end_after_start(self):
        start = getattr(self, "start_date", None)
        end = getattr(self, "end_date", None)
        if start and end and end < start:
            raise ValueError("end_date must not be before start_date")
        return self

class CourseCreate(_DateRange):
    department_id: str
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=20)
    description: Optional[str] = None
    max_num_trainee: int = Field(..., gt=0)
    venue: Optional[str] = Field(None, max_length=255)
    note: Optional[str] = None
    pass_score: Optional[float] = Field(None, ge=0, le=100)
    start_date: date
    end_date: date
    level: CourseLevel

class CourseUpdate(_DateRange):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    description: Optional[str] = None
    max_num_trainee: Optional[int] = Field(None, gt=0)
    venue: Optional[str] = Field(None, max_length=255)
    note: Optional[str] = None
    pass_score: Optional[float] = Field(None, ge=0, le=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    level: Optional[CourseLevel] = None
    status: Optional[AcademicStatus] = None

class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    department_id: str
    name: str
    code: str
    description: Optional[str] = None
    max_num_trainee: int
    venue: Optional[str] = None
    note: Optional[str] = None
    pass_score: Optional[float] = None
    start_date: date
    end_date: date
    level: CourseLevel
    status: AcademicStatus
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

class SubjectCreate(_DateRange):
    course_id: str
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    start_date: date
    end_date: date

class SubjectUpdate(_DateRange):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[AcademicStatus] = None

class SubjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    name: str
    code: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    status: AcademicStatus
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


# ---- Report ----
class ReportCreate(BaseModel):
    request_type: ReportType
    severity: Optional[Severity] = None
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=4000)
    actions_taken: Optional[str] = Field(None, max_length=2000)
    is_anonymous: bool = False

class ReportRespond(BaseModel):
    response: str = Field(..., min_length=1, max_length=4000)

class ReportOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    request_type: ReportType
    severity: Optional[Severity] = None
    title: Optional[str] = None
    description: Optional[str] = None
    actions_taken: Optional[str] = None
    is_anonymous: bool
    status: ReportStatus
    created_by: Optional[UserBrief] = None
    managed_by: Optional[UserBrief] = None
    response: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---- Request ----
class RequestCreate(BaseModel):
    request_type: RequestType
    severity: Optional[Severity] = None
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=4000)
    actions_taken: Optional[str] = Field(None, max_length=2000)
    is_anonymous: bool = False

class RequestStatusUpdate(BaseModel):
    status: RequestStatus
    response: Optional[str] = Field(None, max_length=4000)

class RequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    request_type: RequestType
    severity: Optional[Severity] = None
    title: Optional[str] = None
    description: Optional[str] = None
    actions_taken: Optional[str] = None
    is_anonymous: bool
    status: RequestStatus
    created_by: Optional[UserBrief] = None
    managed_by: Optional[UserBrief] = None
    response: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---- Media ----
class PresignedUrlRequest(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., min_length=1, max_length=100)
    media_type: MediaType

class PresignedUrlOut(BaseModel):
    upload_url: str
    object_url: str
    key: str
    expires_in: int

class UploadedFileOut(BaseModel):
    url: str
    key: str
    content_type: str
    size: int
