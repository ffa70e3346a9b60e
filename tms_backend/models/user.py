"""User model."""

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, func
from sqlalchemy.orm import relationship

from tms_backend.core.constants import Gender, UserStatus
from tms_backend.db.base import AuditMixin, Base, SoftDeleteMixin, new_uuid


class User(AuditMixin, SoftDeleteMixin, Base):
    """Platform user; authorization derives from its single role."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_uuid)
    eid = Column(String(8), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    status = Column(Enum(UserStatus, native_enum=False, length=20), default=UserStatus.ACTIVE, nullable=False)
    gender = Column(Enum(Gender, native_enum=False, length=10), nullable=True)
    phone_number = Column(String(15), nullable=True)
    address = Column(String(255), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    signature_image_url = Column(String(500), nullable=True)
    role_id = Column(String(36), ForeignKey("roles.id"), nullable=False, index=True)
    department_id = Column(String(36), ForeignKey("departments.id"), nullable=True, index=True)
    last_login_at = Column(DateTime, nullable=True)

    role = relationship("Role", back_populates="users", lazy="joined")
    department = relationship("Department", foreign_keys=[department_id], lazy="select")

    def set_active(self, active: bool) -> None:
        self.status = UserStatus.ACTIVE if active else UserStatus.DISABLED

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.middle_name, self.last_name) if p)


class RefreshToken(Base):
    """Stored refresh token hash for the JWT auth flow."""
    __tablename__ = "refresh_tokens"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime, nullable=False)
    revoked_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
