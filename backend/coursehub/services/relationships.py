"""
Set-membership relationships between students, courses and teachers.

Enrollment touches both the course and the student record; both writes run
in one transaction so the two sides never disagree. Every read-modify-write
of a set-valued field reads the row under lock and runs through
``Database.run_transaction``, so concurrent changes to the same set are
applied one after another instead of overwriting each other.
"""

import logging
from typing import List

from coursehub.core.database import Database
from coursehub.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationFailedError
from coursehub.models.course import Course
from coursehub.models.user import User
from coursehub.store.base import EntityStore


logger = logging.getLogger(__name__)


class RelationshipService:
    """Enrollment, likes and teacher following."""

    def __init__(self, database: Database, courses: EntityStore[Course], users: EntityStore[User]):
        self.database = database
        self.courses = courses
        self.users = users

    async def _course(self, course_id: str, for_update: bool = False) -> Course:
        course = await self.courses.find_by_id(course_id, for_update=for_update)
        if course is None:
            raise NotFoundError("Course not found", entity="course", entity_id=course_id)
        return course

    async def _student(self, student_id: str, message: str, for_update: bool = False) -> User:
        student = await self.users.find_by_id(student_id, for_update=for_update)
        if student is None:
            raise NotFoundError("Student not found", entity="student", entity_id=student_id)
        if not student.is_student:
            raise ForbiddenError(message)
        return student

    async def _teacher(self, teacher_id: str) -> User:
        teacher = await self.users.find_by_id(teacher_id)
        if teacher is None:
            raise NotFoundError("Teacher not found", entity="teacher", entity_id=teacher_id)
        if not teacher.is_teacher:
            raise ValidationFailedError("You can only follow teachers")
        return teacher

    async def enroll(self, student_id: str, course_id: str) -> Course:
        """
        Enroll a student in a course.

        Both rows are read under lock and written in one transaction, which
        is re-run when a concurrent enrollment wrote either row first.

        Raises:
            NotFoundError: course or student missing
            ForbiddenError: the actor is not a student
            ConflictError: already enrolled
        """
        async def add_enrollment() -> Course:
            course = await self._course(course_id, for_update=True)
            student = await self._student(student_id, "Only students can enroll in courses", for_update=True)

            if course.has_student(student_id):
                raise ConflictError("Student is already enrolled in this course")

            course = await self.courses.update_by_id(
                course_id, {"students": [*(course.students or []), student_id]}
            )
            if not student.is_enrolled_in(course_id):
                await self.users.update_by_id(
                    student_id, {"enrolled_courses": [*(student.enrolled_courses or []), course_id]}
                )
            return course

        course = await self.database.run_transaction(add_enrollment)
        logger.info(f"Student {student_id} enrolled in course {course_id}")
        return course

    async def is_enrolled(self, student_id: str, course_id: str) -> bool:
        course = await self._course(course_id)
        return course.has_student(student_id)

    async def like(self, student_id: str, course_id: str) -> Course:
        """Increment the like counter of a course the student is enrolled in."""
        course = await self._course(course_id)
        await self._student(student_id, "Only students can like courses")

        if not course.has_student(student_id):
            raise ForbiddenError("You must be enrolled in the course to like it")

        course = await self.courses.increment(course_id, "likes")
        if course is None:
            raise NotFoundError("Course not found", entity="course", entity_id=course_id)
        return course

    async def follow(self, student_id: str, teacher_id: str) -> User:
        await self._teacher(teacher_id)

        async def add_follow() -> User:
            student = await self._student(student_id, "Only students can follow teachers", for_update=True)
            if student.is_following(teacher_id):
                raise ConflictError("Already following this teacher")
            return await self.users.update_by_id(
                student_id, {"following_teachers": [*(student.following_teachers or []), teacher_id]}
            )

        student = await self.database.run_transaction(add_follow)
        logger.info(f"Student {student_id} now follows teacher {teacher_id}")
        return student

    async def unfollow(self, student_id: str, teacher_id: str) -> User:
        await self._teacher(teacher_id)

        async def remove_follow() -> User:
            student = await self._student(student_id, "Only students can unfollow teachers", for_update=True)
            if not student.is_following(teacher_id):
                raise ConflictError("Not following this teacher")
            remaining = [tid for tid in student.following_teachers if tid != teacher_id]
            return await self.users.update_by_id(student_id, {"following_teachers": remaining})

        student = await self.database.run_transaction(remove_follow)
        logger.info(f"Student {student_id} unfollowed teacher {teacher_id}")
        return student

    async def followed_teachers(self, student_id: str) -> List[User]:
        student = await self.users.find_by_id(student_id)
        if student is None:
            raise NotFoundError("Student not found", entity="student", entity_id=student_id)
        if not student.following_teachers:
            return []
        teachers = await self.users.find({"id": list(student.following_teachers)})
        # Keep the order in which they were followed
        position = {tid: index for index, tid in enumerate(student.following_teachers)}
        return sorted(teachers, key=lambda teacher: position[teacher.id])
