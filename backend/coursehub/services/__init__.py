"""
Service layer for Coursehub.

build_services wires one set of stores and components around a Database:
- Query builder for paginated listings
- Ownership chain resolver and ordinal allocators
- Cascade deletion and relationship mutators
- Teacher, student and auth services used by the routers
"""

from dataclasses import dataclass

from coursehub.core.config import Settings
from coursehub.core.database import Database
from coursehub.models import Course, Lesson, Topic, User
from coursehub.store import SqlEntityStore
from .auth_service import AuthService
from .cascade import CascadeDeleter, CascadeReport
from .ordinals import OrdinalAllocator
from .outline import OutlineBuilder
from .ownership import EntityKind, OwnershipChain, OwnershipResolver
from .query_builder import Page, QueryBuilder
from .relationships import RelationshipService
from .student_service import StudentService
from .teacher_service import TeacherService


@dataclass
class Services:
    """Everything the HTTP layer needs, built once per application."""
    database: Database
    users: SqlEntityStore
    courses: SqlEntityStore
    lessons: SqlEntityStore
    topics: SqlEntityStore
    resolver: OwnershipResolver
    cascade: CascadeDeleter
    relationships: RelationshipService
    auth: AuthService
    teacher: TeacherService
    student: StudentService


def build_services(database: Database, settings: Settings) -> Services:
    users = SqlEntityStore(database, User)
    courses = SqlEntityStore(database, Course)
    lessons = SqlEntityStore(database, Lesson)
    topics = SqlEntityStore(database, Topic)

    course_queries = QueryBuilder(courses, settings)
    resolver = OwnershipResolver(courses, lessons, topics)
    cascade = CascadeDeleter(database, courses, lessons, topics, users)
    relationships = RelationshipService(database, courses, users)
    outlines = OutlineBuilder(users, lessons, topics)

    teacher = TeacherService(
        database=database,
        users=users,
        courses=courses,
        lessons=lessons,
        topics=topics,
        course_queries=course_queries,
        resolver=resolver,
        lesson_orders=OrdinalAllocator(database, lessons, "course_id"),
        topic_orders=OrdinalAllocator(database, topics, "lesson_id"),
        cascade=cascade,
        outlines=outlines,
    )
    student = StudentService(
        users=users,
        courses=courses,
        course_queries=course_queries,
        relationships=relationships,
        outlines=outlines,
    )

    return Services(
        database=database,
        users=users,
        courses=courses,
        lessons=lessons,
        topics=topics,
        resolver=resolver,
        cascade=cascade,
        relationships=relationships,
        auth=AuthService(users, settings),
        teacher=teacher,
        student=student,
    )


__all__ = [
    "Services",
    "build_services",
    "AuthService",
    "CascadeDeleter",
    "CascadeReport",
    "EntityKind",
    "OrdinalAllocator",
    "OutlineBuilder",
    "OwnershipChain",
    "OwnershipResolver",
    "Page",
    "QueryBuilder",
    "RelationshipService",
    "StudentService",
    "TeacherService"
]
