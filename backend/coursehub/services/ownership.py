"""
Ownership chain resolution.

Walks the parent pointers Topic -> Lesson -> Course and checks that the
acting teacher owns the course at the root. Every call re-fetches the whole
chain; nothing is cached between requests.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from coursehub.core.errors import ForbiddenError, NotFoundError
from coursehub.models.course import Course, Lesson, Topic
from coursehub.store.base import EntityStore


logger = logging.getLogger(__name__)


class EntityKind(str, Enum):
    """Levels of the content hierarchy."""
    COURSE = "course"
    LESSON = "lesson"
    TOPIC = "topic"


@dataclass(frozen=True)
class OwnershipChain:
    """The resolved chain up to the owning course."""
    course: Course
    lesson: Optional[Lesson] = None
    topic: Optional[Topic] = None


class OwnershipResolver:
    """Authorizes mutations beneath a course for its owning teacher."""

    def __init__(
        self,
        courses: EntityStore[Course],
        lessons: EntityStore[Lesson],
        topics: EntityStore[Topic],
    ):
        self.courses = courses
        self.lessons = lessons
        self.topics = topics

    async def _course(self, course_id: str) -> Course:
        course = await self.courses.find_by_id(course_id)
        if course is None:
            raise NotFoundError("Course not found", entity=EntityKind.COURSE.value, entity_id=course_id)
        return course

    async def _lesson(self, lesson_id: str) -> Lesson:
        lesson = await self.lessons.find_by_id(lesson_id)
        if lesson is None:
            raise NotFoundError("Lesson not found", entity=EntityKind.LESSON.value, entity_id=lesson_id)
        return lesson

    async def _topic(self, topic_id: str) -> Topic:
        topic = await self.topics.find_by_id(topic_id)
        if topic is None:
            raise NotFoundError("Topic not found", entity=EntityKind.TOPIC.value, entity_id=topic_id)
        return topic

    @staticmethod
    def _check_owner(course: Course, teacher_id: str, message: Optional[str]) -> None:
        if course.teacher_id != teacher_id:
            logger.info(f"Teacher {teacher_id} denied mutation on course {course.id}")
            raise ForbiddenError(message or "You can only modify your own courses")

    async def authorize_course(self, teacher_id: str, course_id: str, message: Optional[str] = None) -> OwnershipChain:
        course = await self._course(course_id)
        self._check_owner(course, teacher_id, message)
        return OwnershipChain(course=course)

    async def authorize_lesson(self, teacher_id: str, lesson_id: str, message: Optional[str] = None) -> OwnershipChain:
        lesson = await self._lesson(lesson_id)
        course = await self._course(lesson.course_id)
        self._check_owner(course, teacher_id, message)
        return OwnershipChain(course=course, lesson=lesson)

    async def authorize_topic(self, teacher_id: str, topic_id: str, message: Optional[str] = None) -> OwnershipChain:
        topic = await self._topic(topic_id)
        lesson = await self._lesson(topic.lesson_id)
        course = await self._course(lesson.course_id)
        self._check_owner(course, teacher_id, message)
        return OwnershipChain(course=course, lesson=lesson, topic=topic)

    async def authorize_mutation(
        self,
        teacher_id: str,
        kind: EntityKind,
        entity_id: str,
        message: Optional[str] = None
    ) -> OwnershipChain:
        """
        Resolve the chain for any level of the hierarchy.

        Raises:
            NotFoundError: naming the first missing link of the chain
            ForbiddenError: the course belongs to another teacher
        """
        kind = EntityKind(kind)
        if kind is EntityKind.COURSE:
            return await self.authorize_course(teacher_id, entity_id, message)
        if kind is EntityKind.LESSON:
            return await self.authorize_lesson(teacher_id, entity_id, message)
        return await self.authorize_topic(teacher_id, entity_id, message)
