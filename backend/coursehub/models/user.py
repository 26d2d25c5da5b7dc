"""
User model for Coursehub.

Defines the users table with authentication fields, role, and the
set-valued relationship fields for enrollment and teacher following.
"""

from datetime import datetime
from enum import Enum
from typing import List
import uuid

from sqlalchemy import Integer, String, DateTime, JSON, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from coursehub.core.database import Base
from .base import utcnow


class UserRole(str, Enum):
    """Account roles."""
    STUDENT = "student"
    TEACHER = "teacher"


class User(Base):
    """
    User account, either a student or a teacher.
    """
    __tablename__ = "users"

    # Primary key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Authentication fields
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.STUDENT.value, nullable=False)

    # Relationship sets (students only)
    following_teachers: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    enrolled_courses: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)

    # Optimistic concurrency for the relationship sets
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    # Table constraints
    __table_args__ = (
        CheckConstraint("role IN ('student', 'teacher')", name="check_user_role"),
        Index("idx_user_role", "role"),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name='{self.name}', role='{self.role}')>"

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT.value

    @property
    def is_teacher(self) -> bool:
        return self.role == UserRole.TEACHER.value

    def is_enrolled_in(self, course_id: str) -> bool:
        return course_id in (self.enrolled_courses or [])

    def is_following(self, teacher_id: str) -> bool:
        return teacher_id in (self.following_teachers or [])
