"""
Teacher router for Coursehub.

Course, lesson and topic authoring plus course analytics. Every endpoint
requires the teacher role; ownership of the course is checked by the service.
"""

from dataclasses import asdict
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status

from coursehub.core.security import Identity
from coursehub.models.user import UserRole
from coursehub.schemas.course import (
    CourseAnalytics,
    CourseCreate,
    CourseOutline,
    CourseRead,
    CourseUpdate,
    LessonCreate,
    LessonRead,
    LessonUpdate,
    ReorderRequest,
    TopicCreate,
    TopicRead,
    TopicUpdate,
)
from coursehub.schemas.query import PageResponse, QueryOptions
from coursehub.services import Services
from .deps import DeadlineRoute, course_list_options, get_services, page_response, require_role


router = APIRouter(route_class=DeadlineRoute)

require_teacher = require_role(UserRole.TEACHER)


# Courses
@router.post("/courses", response_model=CourseRead, status_code=status.HTTP_201_CREATED)
async def create_course(
    course_data: CourseCreate,
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
):
    return await services.teacher.create_course(teacher.account_id, course_data)


@router.get("/courses", response_model=PageResponse[CourseRead])
async def list_courses(
    options: QueryOptions = Depends(course_list_options),
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
) -> Dict[str, Any]:
    """
    List the caller's own courses with search, sorting and pagination.
    """
    page = await services.teacher.list_courses(teacher.account_id, options)
    return page_response(page, CourseRead)


@router.get("/courses/{course_id}", response_model=CourseOutline)
async def get_course_details(
    course_id: str,
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
):
    return await services.teacher.get_course_details(course_id, teacher.account_id)


@router.put("/courses/{course_id}", response_model=CourseRead)
async def update_course(
    course_id: str,
    course_data: CourseUpdate,
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
):
    return await services.teacher.update_course(course_id, teacher.account_id, course_data)


@router.delete("/courses/{course_id}")
async def delete_course(
    course_id: str,
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
) -> Dict[str, Any]:
    """
    Delete a course together with its lessons and topics.
    """
    report = await services.teacher.delete_course(course_id, teacher.account_id)
    return {"message": "Course deleted successfully", **asdict(report)}


# Lessons
@router.post("/courses/{course_id}/lessons", response_model=LessonRead, status_code=status.HTTP_201_CREATED)
async def create_lesson(
    course_id: str,
    lesson_data: LessonCreate,
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
):
    return await services.teacher.create_lesson(course_id, teacher.account_id, lesson_data)


@router.put("/courses/{course_id}/lessons/order", response_model=List[LessonRead])
async def reorder_lessons(
    course_id: str,
    reorder: ReorderRequest,
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
):
    return await services.teacher.reorder_lessons(course_id, teacher.account_id, reorder.ids)


@router.put("/lessons/{lesson_id}", response_model=LessonRead)
async def update_lesson(
    lesson_id: str,
    lesson_data: LessonUpdate,
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
):
    return await services.teacher.update_lesson(lesson_id, teacher.account_id, lesson_data)


@router.delete("/lessons/{lesson_id}")
async def delete_lesson(
    lesson_id: str,
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
) -> Dict[str, Any]:
    report = await services.teacher.delete_lesson(lesson_id, teacher.account_id)
    return {"message": "Lesson deleted successfully", **asdict(report)}


# Topics
@router.post("/lessons/{lesson_id}/topics", response_model=TopicRead, status_code=status.HTTP_201_CREATED)
async def create_topic(
    lesson_id: str,
    topic_data: TopicCreate,
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
):
    return await services.teacher.create_topic(lesson_id, teacher.account_id, topic_data)


@router.put("/lessons/{lesson_id}/topics/order", response_model=List[TopicRead])
async def reorder_topics(
    lesson_id: str,
    reorder: ReorderRequest,
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
):
    return await services.teacher.reorder_topics(lesson_id, teacher.account_id, reorder.ids)


@router.put("/topics/{topic_id}", response_model=TopicRead)
async def update_topic(
    topic_id: str,
    topic_data: TopicUpdate,
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
):
    return await services.teacher.update_topic(topic_id, teacher.account_id, topic_data)


@router.delete("/topics/{topic_id}")
async def delete_topic(
    topic_id: str,
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
) -> Dict[str, str]:
    await services.teacher.delete_topic(topic_id, teacher.account_id)
    return {"message": "Topic deleted successfully"}


# Analytics
@router.get("/analytics/courses/{course_id}", response_model=CourseAnalytics)
async def course_analytics(
    course_id: str,
    teacher: Identity = Depends(require_teacher),
    services: Services = Depends(get_services)
):
    return await services.teacher.course_analytics(course_id, teacher.account_id)
