"""
Student router for Coursehub.

Catalogue browsing, enrollment, likes and teacher following. Every endpoint
requires the student role.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from coursehub.core.security import Identity
from coursehub.models.user import UserRole
from coursehub.schemas.course import AccountSummary, CourseOutline, CourseRead
from coursehub.schemas.query import PageResponse, QueryOptions
from coursehub.services import Services
from .deps import DeadlineRoute, course_list_options, get_services, page_response, require_role


router = APIRouter(route_class=DeadlineRoute)

require_student = require_role(UserRole.STUDENT)


# Courses
@router.get("/courses", response_model=PageResponse[CourseRead])
async def list_courses(
    options: QueryOptions = Depends(course_list_options),
    student: Identity = Depends(require_student),
    services: Services = Depends(get_services)
) -> Dict[str, Any]:
    """
    Browse every course with search, sorting and pagination.
    """
    page = await services.student.list_courses(options)
    return page_response(page, CourseRead)


@router.get("/courses/{course_id}", response_model=CourseOutline)
async def get_course_details(
    course_id: str,
    student: Identity = Depends(require_student),
    services: Services = Depends(get_services)
):
    return await services.student.get_course_details(course_id, student.account_id)


@router.post("/courses/{course_id}/enroll", response_model=CourseRead)
async def enroll(
    course_id: str,
    student: Identity = Depends(require_student),
    services: Services = Depends(get_services)
):
    return await services.student.enroll(student.account_id, course_id)


@router.post("/courses/{course_id}/like", response_model=CourseRead)
async def like_course(
    course_id: str,
    student: Identity = Depends(require_student),
    services: Services = Depends(get_services)
):
    return await services.student.like(student.account_id, course_id)


@router.get("/enrolled-courses", response_model=PageResponse[CourseRead])
async def enrolled_courses(
    options: QueryOptions = Depends(course_list_options),
    student: Identity = Depends(require_student),
    services: Services = Depends(get_services)
) -> Dict[str, Any]:
    page = await services.student.enrolled_courses(student.account_id, options)
    return page_response(page, CourseRead)


# Teachers
@router.post("/teachers/{teacher_id}/follow")
async def follow_teacher(
    teacher_id: str,
    student: Identity = Depends(require_student),
    services: Services = Depends(get_services)
) -> Dict[str, str]:
    await services.student.follow(student.account_id, teacher_id)
    return {"message": "Teacher followed successfully"}


@router.delete("/teachers/{teacher_id}/unfollow")
async def unfollow_teacher(
    teacher_id: str,
    student: Identity = Depends(require_student),
    services: Services = Depends(get_services)
) -> Dict[str, str]:
    await services.student.unfollow(student.account_id, teacher_id)
    return {"message": "Teacher unfollowed successfully"}


@router.get("/followed-teachers", response_model=List[AccountSummary])
async def followed_teachers(
    student: Identity = Depends(require_student),
    services: Services = Depends(get_services)
):
    return await services.student.followed_teachers(student.account_id)
