"""
API routers for Coursehub.

This module contains all API endpoint routers:
- auth: Registration, login and profile endpoints
- teacher: Course, lesson and topic authoring
- student: Catalogue, enrollment, likes and following
"""

from fastapi import APIRouter

# Import individual routers
from .auth import router as auth_router
from .student import router as student_router
from .teacher import router as teacher_router

# Create main API router
api_router = APIRouter()

# Include all routers with their prefixes
api_router.include_router(
    auth_router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    teacher_router,
    prefix="/teacher",
    tags=["teacher"]
)

api_router.include_router(
    student_router,
    prefix="/student",
    tags=["student"]
)

# Export all routers
__all__ = [
    "api_router",
    "auth_router",
    "student_router",
    "teacher_router"
]
