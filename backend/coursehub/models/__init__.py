"""
Database models for Coursehub.

This module contains all SQLAlchemy models for the application:
- User accounts (students and teachers)
- Course content structure (Course, Lesson, Topic)
"""

from coursehub.core.database import Base

# Import all models to ensure they're registered with SQLAlchemy
from .user import User, UserRole
from .course import Course, CourseLevel, Lesson, Topic, TopicType

# Export all models
__all__ = [
    "Base",
    "User",
    "UserRole",
    "Course",
    "CourseLevel",
    "Lesson",
    "Topic",
    "TopicType"
]
