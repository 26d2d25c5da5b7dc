"""
Course models for Coursehub.

Defines Course, Lesson and Topic. The hierarchy is kept through immutable
parent pointers (Lesson.course_id, Topic.lesson_id) rather than embedded
children; ordinals are unique within each parent.
"""

from datetime import datetime
from typing import Optional, List
from enum import Enum
import uuid

from sqlalchemy import (
    Integer, String, DateTime, Text, JSON,
    ForeignKey, UniqueConstraint, Index, CheckConstraint
)
from sqlalchemy.orm import Mapped, mapped_column

from coursehub.core.database import Base
from .base import utcnow


class CourseLevel(str, Enum):
    """Difficulty levels for courses."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class TopicType(str, Enum):
    """Types of topics in a lesson."""
    CONTENT = "content"
    QUIZ = "quiz"


def _new_id() -> str:
    return str(uuid.uuid4())


class Course(Base):
    """
    Course owned by a teacher.
    """
    __tablename__ = "courses"

    # Primary key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    # Basic information
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(1000), nullable=False)
    level: Mapped[str] = mapped_column(
        String(20),
        default=CourseLevel.BEGINNER.value,
        nullable=False
    )

    # Owner, immutable after creation
    teacher_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)

    # Enrollment and engagement
    students: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    likes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Bumped on every ORM update; a write based on a stale read fails
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
        CheckConstraint("likes >= 0", name="check_course_likes_positive"),
        CheckConstraint("view_count >= 0", name="check_course_views_positive"),
        Index("idx_course_teacher", "teacher_id"),
        Index("idx_course_level", "level"),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title='{self.title}', teacher_id={self.teacher_id})>"

    def has_student(self, student_id: str) -> bool:
        return student_id in (self.students or [])


class Lesson(Base):
    """
    Lesson within a course.
    """
    __tablename__ = "lessons"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Course relationship
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint("course_id", "order", name="uq_lesson_course_order"),
    )

    def __repr__(self) -> str:
        return f"<Lesson(id={self.id}, title='{self.title}', course_id={self.course_id}, order={self.order})>"


class Topic(Base):
    """
    Topic within a lesson. Either plain content or a quiz.
    """
    __tablename__ = "topics"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(20), default=TopicType.CONTENT.value, nullable=False)

    # Lesson relationship
    lesson_id: Mapped[str] = mapped_column(String(36), ForeignKey("lessons.id"), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False)

    # [{"question": str, "options": [{"text": str, "is_correct": bool}]}]
    quiz: Mapped[List[dict]] = mapped_column(JSON, default=list, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint("lesson_id", "order", name="uq_topic_lesson_order"),
        CheckConstraint("type IN ('content', 'quiz')", name="check_topic_type"),
    )

    def __repr__(self) -> str:
        return f"<Topic(id={self.id}, title='{self.title}', type='{self.type}', order={self.order})>"

    @property
    def is_quiz(self) -> bool:
        return self.type == TopicType.QUIZ.value
