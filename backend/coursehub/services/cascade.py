"""
Cascade deletion of course and lesson subtrees.

Enumeration is top-down, deletion bottom-up (topics, then lessons, then the
course) inside one transaction, so a failure part-way leaves nothing
deleted and no orphan is ever visible.
"""

import logging
from dataclasses import dataclass

from coursehub.core.database import Database
from coursehub.core.errors import NotFoundError
from coursehub.models.course import Course, Lesson, Topic
from coursehub.models.user import User
from coursehub.store.base import EntityStore


logger = logging.getLogger(__name__)


@dataclass
class CascadeReport:
    lessons_deleted: int = 0
    topics_deleted: int = 0
    students_detached: int = 0


class CascadeDeleter:
    """Deletes a course or lesson together with everything beneath it."""

    def __init__(
        self,
        database: Database,
        courses: EntityStore[Course],
        lessons: EntityStore[Lesson],
        topics: EntityStore[Topic],
        users: EntityStore[User],
    ):
        self.database = database
        self.courses = courses
        self.lessons = lessons
        self.topics = topics
        self.users = users

    async def _delete_lesson(self, lesson_id: str, report: CascadeReport) -> bool:
        report.topics_deleted += await self.topics.delete_many({"lesson_id": lesson_id})
        deleted = await self.lessons.delete_by_id(lesson_id)
        if deleted:
            report.lessons_deleted += 1
        return deleted

    async def _detach_students(self, course: Course, report: CascadeReport) -> None:
        if not course.students:
            return
        students = await self.users.find({"id": list(course.students)})
        for student in students:
            remaining = [cid for cid in (student.enrolled_courses or []) if cid != course.id]
            if len(remaining) != len(student.enrolled_courses or []):
                await self.users.update_by_id(student.id, {"enrolled_courses": remaining})
                report.students_detached += 1

    async def delete_lesson_subtree(self, lesson_id: str) -> CascadeReport:
        report = CascadeReport()
        async with self.database.transaction():
            if not await self._delete_lesson(lesson_id, report):
                raise NotFoundError("Lesson not found", entity="lesson", entity_id=lesson_id)

        logger.info(f"Deleted lesson {lesson_id} with {report.topics_deleted} topics")
        return report

    async def delete_course_subtree(self, course_id: str) -> CascadeReport:
        async def delete_subtree() -> CascadeReport:
            report = CascadeReport()
            # The row lock keeps enrollments out until the course is gone
            course = await self.courses.find_by_id(course_id, for_update=True)
            if course is None:
                raise NotFoundError("Course not found", entity="course", entity_id=course_id)

            lessons = await self.lessons.find({"course_id": course_id}, sort={"order": "asc"})
            for lesson in lessons:
                await self._delete_lesson(lesson.id, report)

            await self._detach_students(course, report)
            await self.courses.delete_by_id(course_id)
            return report

        report = await self.database.run_transaction(delete_subtree)
        logger.info(
            f"Deleted course {course_id}: {report.lessons_deleted} lessons, "
            f"{report.topics_deleted} topics, {report.students_detached} enrollments removed"
        )
        return report
