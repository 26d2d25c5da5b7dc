"""
Student-facing operations: browsing the catalogue, course details and the
relationship mutators.
"""

import logging
from typing import List

from coursehub.core.errors import NotFoundError
from coursehub.models.course import Course
from coursehub.models.user import User
from coursehub.schemas.course import CourseOutline
from coursehub.store.base import EntityStore
from .outline import OutlineBuilder
from .query_builder import Page, QueryBuilder
from .relationships import RelationshipService
from .teacher_service import Options, course_query_options


logger = logging.getLogger(__name__)


class StudentService:
    """Catalogue access for students."""

    def __init__(
        self,
        users: EntityStore[User],
        courses: EntityStore[Course],
        course_queries: QueryBuilder[Course],
        relationships: RelationshipService,
        outlines: OutlineBuilder,
    ):
        self.users = users
        self.courses = courses
        self.course_queries = course_queries
        self.relationships = relationships
        self.outlines = outlines

    async def list_courses(self, options: Options = None) -> Page[Course]:
        return await self.course_queries.query(course_query_options(options))

    async def get_course_details(self, course_id: str, student_id: str) -> CourseOutline:
        """
        Full outline of a course.

        Viewing a course the student is not enrolled in counts as a view.
        """
        course = await self.courses.find_by_id(course_id)
        if course is None:
            raise NotFoundError("Course not found", entity="course", entity_id=course_id)

        if not course.has_student(student_id):
            course = await self.courses.increment(course_id, "view_count")
            if course is None:
                raise NotFoundError("Course not found", entity="course", entity_id=course_id)
            logger.debug(f"Course {course_id} viewed by non-enrolled student {student_id}")

        return await self.outlines.build(course)

    async def enrolled_courses(self, student_id: str, options: Options = None) -> Page[Course]:
        student = await self.users.find_by_id(student_id)
        if student is None:
            raise NotFoundError("Student not found", entity="student", entity_id=student_id)

        return await self.course_queries.query(
            course_query_options(options),
            fixed_filters={"id": list(student.enrolled_courses or [])},
        )

    async def enroll(self, student_id: str, course_id: str) -> Course:
        return await self.relationships.enroll(student_id, course_id)

    async def like(self, student_id: str, course_id: str) -> Course:
        return await self.relationships.like(student_id, course_id)

    async def follow(self, student_id: str, teacher_id: str) -> User:
        return await self.relationships.follow(student_id, teacher_id)

    async def unfollow(self, student_id: str, teacher_id: str) -> User:
        return await self.relationships.unfollow(student_id, teacher_id)

    async def followed_teachers(self, student_id: str) -> List[User]:
        return await self.relationships.followed_teachers(student_id)
