"""
Teacher-facing operations on courses, lessons and topics.

Every mutation beneath a course goes through the ownership resolver first,
then the ordinal allocator for creates and reorders, then the store.
"""

import logging
from typing import Any, List, Mapping, Union

from coursehub.core.database import Database
from coursehub.core.errors import ForbiddenError, NotFoundError, ValidationFailedError
from coursehub.models.course import Course, Lesson, Topic, TopicType
from coursehub.models.user import User
from coursehub.schemas.course import (
    AccountSummary,
    CourseAnalytics,
    CourseCreate,
    CourseOutline,
    CourseUpdate,
    LessonCreate,
    LessonUpdate,
    TopicCreate,
    TopicUpdate,
    check_quiz,
)
from coursehub.schemas.query import QueryOptions
from coursehub.store.base import EntityStore
from .cascade import CascadeDeleter, CascadeReport
from .common import parse_input
from .ordinals import OrdinalAllocator
from .outline import OutlineBuilder
from .ownership import OwnershipResolver
from .query_builder import Page, QueryBuilder


logger = logging.getLogger(__name__)

Payload = Union[Mapping[str, Any], Any]

COURSE_SEARCH_FIELDS = ["title", "description", "level"]
COURSE_SORT_FIELDS = ["title", "level", "likes", "view_count", "created_at", "updated_at"]

Options = Union[QueryOptions, Mapping[str, Any], None]


def course_query_options(options: Options) -> QueryOptions:
    """Parse listing options and declare the course search and sort fields."""
    options = parse_input(QueryOptions, options or {})
    update = {"sort_fields": COURSE_SORT_FIELDS}
    if not options.search_fields:
        update["search_fields"] = COURSE_SEARCH_FIELDS
    return options.model_copy(update=update)


class TeacherService:
    """Course authoring for the owning teacher."""

    def __init__(
        self,
        database: Database,
        users: EntityStore[User],
        courses: EntityStore[Course],
        lessons: EntityStore[Lesson],
        topics: EntityStore[Topic],
        course_queries: QueryBuilder[Course],
        resolver: OwnershipResolver,
        lesson_orders: OrdinalAllocator,
        topic_orders: OrdinalAllocator,
        cascade: CascadeDeleter,
        outlines: OutlineBuilder,
    ):
        self.database = database
        self.users = users
        self.courses = courses
        self.lessons = lessons
        self.topics = topics
        self.course_queries = course_queries
        self.resolver = resolver
        self.lesson_orders = lesson_orders
        self.topic_orders = topic_orders
        self.cascade = cascade
        self.outlines = outlines

    # Courses

    async def create_course(self, teacher_id: str, payload: Payload) -> Course:
        data = parse_input(CourseCreate, payload)

        teacher = await self.users.find_by_id(teacher_id)
        if teacher is None:
            raise NotFoundError("Teacher not found", entity="teacher", entity_id=teacher_id)
        if not teacher.is_teacher:
            raise ForbiddenError("Only teachers can create courses")

        course = await self.courses.create({**data.model_dump(), "teacher_id": teacher_id})
        logger.info(f"Teacher {teacher_id} created course {course.id}")
        return course

    async def update_course(self, course_id: str, teacher_id: str, payload: Payload) -> Course:
        data = parse_input(CourseUpdate, payload)
        await self.resolver.authorize_course(teacher_id, course_id, "You can only update your own courses")

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        course = await self.courses.update_by_id(course_id, changes)
        if course is None:
            raise NotFoundError("Course not found", entity="course", entity_id=course_id)
        return course

    async def delete_course(self, course_id: str, teacher_id: str) -> CascadeReport:
        await self.resolver.authorize_course(teacher_id, course_id, "You can only delete your own courses")
        return await self.cascade.delete_course_subtree(course_id)

    async def list_courses(self, teacher_id: str, options: Options = None) -> Page[Course]:
        return await self.course_queries.query(
            course_query_options(options), fixed_filters={"teacher_id": teacher_id}
        )

    async def get_course_details(self, course_id: str, teacher_id: str) -> CourseOutline:
        chain = await self.resolver.authorize_course(
            teacher_id, course_id, "You can only view details of your own courses"
        )
        return await self.outlines.build(chain.course)

    async def course_analytics(self, course_id: str, teacher_id: str) -> CourseAnalytics:
        chain = await self.resolver.authorize_course(
            teacher_id, course_id, "You can only view analytics for your own courses"
        )
        course = chain.course
        students = await self.users.find({"id": list(course.students or [])}, sort={"name": "asc"})
        return CourseAnalytics(
            course_id=course.id,
            title=course.title,
            student_count=len(course.students or []),
            likes=course.likes,
            view_count=course.view_count,
            students=[AccountSummary.model_validate(student) for student in students],
        )

    # Lessons

    async def create_lesson(self, course_id: str, teacher_id: str, payload: Payload) -> Lesson:
        data = parse_input(LessonCreate, payload)
        await self.resolver.authorize_course(teacher_id, course_id, "You can only add lessons to your own courses")

        async with self.database.transaction():
            order = await self.lesson_orders.allocate(course_id, data.order)
            lesson = await self.lessons.create({
                **data.model_dump(exclude={"order"}),
                "course_id": course_id,
                "order": order,
            })

        logger.info(f"Lesson {lesson.id} created in course {course_id} at order {order}")
        return lesson

    async def update_lesson(self, lesson_id: str, teacher_id: str, payload: Payload) -> Lesson:
        data = parse_input(LessonUpdate, payload)
        chain = await self.resolver.authorize_lesson(
            teacher_id, lesson_id, "You can only update lessons in your own courses"
        )
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        async with self.database.transaction():
            if "order" in changes and changes["order"] != chain.lesson.order:
                await self.lesson_orders.validate_order(chain.course.id, changes["order"], excluding_id=lesson_id)
            lesson = await self.lessons.update_by_id(lesson_id, changes)

        if lesson is None:
            raise NotFoundError("Lesson not found", entity="lesson", entity_id=lesson_id)
        return lesson

    async def delete_lesson(self, lesson_id: str, teacher_id: str) -> CascadeReport:
        await self.resolver.authorize_lesson(teacher_id, lesson_id, "You can only delete lessons in your own courses")
        return await self.cascade.delete_lesson_subtree(lesson_id)

    async def reorder_lessons(self, course_id: str, teacher_id: str, lesson_ids: List[str]) -> List[Lesson]:
        await self.resolver.authorize_course(teacher_id, course_id, "You can only reorder lessons in your own courses")
        return await self.lesson_orders.reorder(course_id, lesson_ids)

    # Topics

    async def create_topic(self, lesson_id: str, teacher_id: str, payload: Payload) -> Topic:
        data = parse_input(TopicCreate, payload)
        await self.resolver.authorize_lesson(teacher_id, lesson_id, "You can only add topics to your own courses")

        async with self.database.transaction():
            order = await self.topic_orders.allocate(lesson_id, data.order)
            topic = await self.topics.create({
                **data.model_dump(exclude={"order"}),
                "lesson_id": lesson_id,
                "order": order,
            })

        logger.info(f"Topic {topic.id} created in lesson {lesson_id} at order {order}")
        return topic

    async def update_topic(self, topic_id: str, teacher_id: str, payload: Payload) -> Topic:
        data = parse_input(TopicUpdate, payload)
        chain = await self.resolver.authorize_topic(
            teacher_id, topic_id, "You can only update topics in your own courses"
        )
        current = chain.topic
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        # The merged topic must still satisfy the quiz rules
        topic_type = changes.get("type", current.type)
        quiz = changes.get("quiz", current.quiz)
        try:
            check_quiz(topic_type, quiz)
        except ValueError as exc:
            raise ValidationFailedError(f"Validation Error: {exc}") from exc
        if topic_type == TopicType.CONTENT.value and not changes.get("content", current.content):
            raise ValidationFailedError("Validation Error: Content is required for content type topics")

        async with self.database.transaction():
            if "order" in changes and changes["order"] != current.order:
                await self.topic_orders.validate_order(current.lesson_id, changes["order"], excluding_id=topic_id)
            topic = await self.topics.update_by_id(topic_id, changes)

        if topic is None:
            raise NotFoundError("Topic not found", entity="topic", entity_id=topic_id)
        return topic

    async def delete_topic(self, topic_id: str, teacher_id: str) -> None:
        await self.resolver.authorize_topic(teacher_id, topic_id, "You can only delete topics in your own courses")
        if not await self.topics.delete_by_id(topic_id):
            raise NotFoundError("Topic not found", entity="topic", entity_id=topic_id)
        logger.info(f"Topic {topic_id} deleted")

    async def reorder_topics(self, lesson_id: str, teacher_id: str, topic_ids: List[str]) -> List[Topic]:
        await self.resolver.authorize_lesson(teacher_id, lesson_id, "You can only reorder topics in your own courses")
        return await self.topic_orders.reorder(lesson_id, topic_ids)
