"""
Course, lesson and topic schemas for Coursehub.

Input models validate shapes before any store call; read models are built
from ORM records.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from coursehub.models.course import CourseLevel, TopicType


class InputModel(BaseModel):
    """Base for request payloads: surrounding whitespace never counts as content."""
    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True)


class QuizOption(InputModel):
    text: str = Field(..., min_length=1)
    is_correct: bool = False


class QuizQuestion(InputModel):
    question: str = Field(..., min_length=1)
    options: List[QuizOption] = Field(..., min_length=2)


def check_quiz(topic_type: str, quiz: Optional[List]) -> None:
    """A quiz topic needs at least one question."""
    if topic_type == TopicType.QUIZ.value and not quiz:
        raise ValueError("Quiz questions are required for quiz type topics")


# Courses
class CourseCreate(InputModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    level: CourseLevel = CourseLevel.BEGINNER


class CourseUpdate(InputModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    level: Optional[CourseLevel] = None


class CourseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    level: CourseLevel
    teacher_id: str
    students: List[str] = []
    likes: int
    view_count: int
    created_at: datetime
    updated_at: datetime


# Lessons
class LessonCreate(InputModel):
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1)
    order: Optional[int] = Field(None, ge=1)


class LessonUpdate(InputModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    content: Optional[str] = Field(None, min_length=1)
    order: Optional[int] = Field(None, ge=1)


class LessonRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    course_id: str
    order: int
    created_at: datetime
    updated_at: datetime


# Topics
class TopicCreate(InputModel):
    title: str = Field(..., min_length=1, max_length=100)
    type: TopicType = TopicType.CONTENT
    content: Optional[str] = None
    quiz: List[QuizQuestion] = []
    order: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def check_type_payload(self) -> "TopicCreate":
        if self.type == TopicType.CONTENT.value and not self.content:
            raise ValueError("Content is required for content type topics")
        check_quiz(self.type, self.quiz)
        return self


class TopicUpdate(InputModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[TopicType] = None
    content: Optional[str] = None
    quiz: Optional[List[QuizQuestion]] = None
    order: Optional[int] = Field(None, ge=1)


class TopicRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: Optional[str] = None
    lesson_id: str
    order: int
    type: TopicType
    quiz: List[QuizQuestion] = []
    created_at: datetime
    updated_at: datetime


# Reordering
class ReorderRequest(InputModel):
    ids: List[str] = Field(..., min_length=1)

    @field_validator("ids")
    @classmethod
    def unique_ids(cls, v: List[str]) -> List[str]:
        if len(set(v)) != len(v):
            raise ValueError("ids must not contain duplicates")
        return v


# Outlines and analytics
class AccountSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str


class LessonOutline(LessonRead):
    topics: List[TopicRead] = []


class CourseOutline(CourseRead):
    teacher: Optional[AccountSummary] = None
    lessons: List[LessonOutline] = []


class CourseAnalytics(BaseModel):
    course_id: str
    title: str
    student_count: int
    likes: int
    view_count: int
    students: List[AccountSummary] = []
