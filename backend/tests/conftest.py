"""
Pytest configuration for backend tests.

Every test gets its own file-backed SQLite database and a fresh set of
services. AnyIO runs the async tests on the asyncio backend.
"""

import itertools

import pytest

import coursehub.models  # noqa: F401  registers the tables on the metadata
from coursehub.core.config import Settings
from coursehub.core.database import Database
from coursehub.models.user import UserRole
from coursehub.services import build_services


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'coursehub.db'}",
        SECRET_KEY="test-secret-key",
        AUTO_CREATE_TABLES=False,
        REQUEST_TIMEOUT_SECONDS=10.0,
    )


@pytest.fixture
async def database(settings, anyio_backend):
    db = Database(settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def services(database, settings, anyio_backend):
    return build_services(database, settings)


@pytest.fixture
def make_user(services):
    """Create accounts straight through the store; no password hashing."""
    counter = itertools.count(1)

    async def _make_user(role: UserRole = UserRole.STUDENT, name=None):
        n = next(counter)
        return await services.users.create({
            "name": name or f"{role.value.title()} {n}",
            "email": f"{role.value}{n}@coursehub.io",
            "hashed_password": "not-a-real-hash",
            "role": role.value,
        })

    return _make_user


@pytest.fixture
async def teacher(make_user, anyio_backend):
    return await make_user(UserRole.TEACHER, name="Ada Teacher")


@pytest.fixture
async def other_teacher(make_user, anyio_backend):
    return await make_user(UserRole.TEACHER, name="Grace Teacher")


@pytest.fixture
async def student(make_user, anyio_backend):
    return await make_user(UserRole.STUDENT, name="Sam Student")


@pytest.fixture
def make_course(services):
    counter = itertools.count(1)

    async def _make_course(owner, title=None, description=None, level="beginner"):
        n = next(counter)
        return await services.teacher.create_course(owner.id, {
            "title": title or f"Course {n}",
            "description": description or f"Description of course {n}",
            "level": level,
        })

    return _make_course


@pytest.fixture
def make_lesson(services):
    async def _make_lesson(course, owner, title="Lesson", order=None):
        payload = {"title": title, "content": f"{title} content"}
        if order is not None:
            payload["order"] = order
        return await services.teacher.create_lesson(course.id, owner.id, payload)

    return _make_lesson


@pytest.fixture
def make_topic(services):
    async def _make_topic(lesson, owner, title="Topic", order=None):
        payload = {"title": title, "type": "content", "content": f"{title} body"}
        if order is not None:
            payload["order"] = order
        return await services.teacher.create_topic(lesson.id, owner.id, payload)

    return _make_topic
