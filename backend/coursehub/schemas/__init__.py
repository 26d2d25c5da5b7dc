"""
Pydantic schemas for Coursehub request and response bodies.
"""

from .auth import PasswordChange, ProfileUpdate, Token, UserLogin, UserRegister, UserResponse
from .course import (
    AccountSummary,
    CourseAnalytics,
    CourseCreate,
    CourseOutline,
    CourseRead,
    CourseUpdate,
    LessonCreate,
    LessonOutline,
    LessonRead,
    LessonUpdate,
    QuizOption,
    QuizQuestion,
    ReorderRequest,
    TopicCreate,
    TopicRead,
    TopicUpdate,
)
from .query import PageMeta, PageResponse, QueryOptions

__all__ = [
    "PasswordChange",
    "ProfileUpdate",
    "Token",
    "UserLogin",
    "UserRegister",
    "UserResponse",
    "AccountSummary",
    "CourseAnalytics",
    "CourseCreate",
    "CourseOutline",
    "CourseRead",
    "CourseUpdate",
    "LessonCreate",
    "LessonOutline",
    "LessonRead",
    "LessonUpdate",
    "QuizOption",
    "QuizQuestion",
    "ReorderRequest",
    "TopicCreate",
    "TopicRead",
    "TopicUpdate",
    "PageMeta",
    "PageResponse",
    "QueryOptions"
]
