"""Nested course outlines: course, owning teacher, lessons and their topics."""

from collections import defaultdict
from typing import Dict, List

from coursehub.models.course import Course, Lesson, Topic
from coursehub.models.user import User
from coursehub.schemas.course import (
    AccountSummary,
    CourseOutline,
    CourseRead,
    LessonOutline,
    LessonRead,
    TopicRead,
)
from coursehub.store.base import EntityStore


class OutlineBuilder:
    def __init__(
        self,
        users: EntityStore[User],
        lessons: EntityStore[Lesson],
        topics: EntityStore[Topic],
    ):
        self.users = users
        self.lessons = lessons
        self.topics = topics

    async def build(self, course: Course) -> CourseOutline:
        """Lessons and topics come back in ascending order."""
        teacher = await self.users.find_by_id(course.teacher_id)
        lessons = await self.lessons.find({"course_id": course.id}, sort={"order": "asc"})

        topics_by_lesson: Dict[str, List[Topic]] = defaultdict(list)
        if lessons:
            topics = await self.topics.find(
                {"lesson_id": [lesson.id for lesson in lessons]},
                sort={"lesson_id": "asc", "order": "asc"},
            )
            for topic in topics:
                topics_by_lesson[topic.lesson_id].append(topic)

        lesson_outlines = [
            LessonOutline(
                **LessonRead.model_validate(lesson).model_dump(),
                topics=[TopicRead.model_validate(topic) for topic in topics_by_lesson[lesson.id]],
            )
            for lesson in lessons
        ]
        return CourseOutline(
            **CourseRead.model_validate(course).model_dump(),
            teacher=AccountSummary.model_validate(teacher) if teacher is not None else None,
            lessons=lesson_outlines,
        )
