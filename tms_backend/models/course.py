"""Course and subject models."""

from sqlalchemy import Column, Date, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from tms_backend.core.constants import AcademicStatus, CourseLevel
from tms_backend.db.base import AuditMixin, Base, SoftDeleteMixin, new_uuid


class Course(AuditMixin, SoftDeleteMixin, Base):
    """Training course owned by a department."""
    __tablename__ = "courses"

    id = Column(String(36), primary_key=True, default=new_uuid)
    department_id = Column(String(36), ForeignKey("departments.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    code = Column(String(20), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    max_num_trainee = Column(Integer, nullable=False)
    venue = Column(String(255), nullable=True)
    note = Column(Text, nullable=True)
    pass_score = Column(Float, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    level = Column(Enum(CourseLevel, native_enum=False, length=20), nullable=False)
    status = Column(
        Enum(AcademicStatus, native_enum=False, length=20),
        default=AcademicStatus.PLANNED,
        nullable=False,
    )

    department = relationship("Department", back_populates="courses", lazy="joined")
    subjects = relationship("Subject", back_populates="course", lazy="raise")


class Subject(AuditMixin, SoftDeleteMixin, Base):
    """Subject taught inside a course."""
    __tablename__ = "subjects"

    id = Column(String(36), primary_key=True, default=new_uuid)
    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(
        Enum(AcademicStatus, native_enum=False, length=20),
        default=AcademicStatus.PLANNED,
        nullable=False,
    )

    course = relationship("Course", back_populates="subjects", lazy="joined")
