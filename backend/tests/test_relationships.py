"""
Enrollment, likes and teacher following.
"""

import asyncio

import pytest

from coursehub.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    TransientError,
    ValidationFailedError,
)
from coursehub.models.user import UserRole


pytestmark = pytest.mark.anyio


async def test_enroll_updates_both_sides(services, teacher, student, make_course):
    course = await make_course(teacher)

    enrolled = await services.student.enroll(student.id, course.id)

    assert enrolled.students == [student.id]
    assert (await services.users.find_by_id(student.id)).enrolled_courses == [course.id]
    assert await services.relationships.is_enrolled(student.id, course.id)


async def test_second_enroll_is_a_conflict(services, teacher, student, make_course):
    course = await make_course(teacher)
    await services.student.enroll(student.id, course.id)

    with pytest.raises(ConflictError):
        await services.student.enroll(student.id, course.id)

    stored = await services.courses.find_by_id(course.id)
    assert stored.students.count(student.id) == 1
    assert (await services.users.find_by_id(student.id)).enrolled_courses == [course.id]


async def test_enroll_is_all_or_nothing(services, teacher, student, make_course, monkeypatch):
    course = await make_course(teacher)

    async def unavailable(id, fields):
        raise TransientError("Data store unavailable")

    monkeypatch.setattr(services.users, "update_by_id", unavailable)

    with pytest.raises(TransientError):
        await services.student.enroll(student.id, course.id)

    monkeypatch.undo()
    assert (await services.courses.find_by_id(course.id)).students == []
    assert (await services.users.find_by_id(student.id)).enrolled_courses == []


async def test_concurrent_enrollments_keep_every_student(services, teacher, make_user, make_course):
    course = await make_course(teacher)
    students = [await make_user(UserRole.STUDENT) for _ in range(4)]

    await asyncio.gather(*(services.student.enroll(student.id, course.id) for student in students))

    stored = await services.courses.find_by_id(course.id)
    assert sorted(stored.students) == sorted(student.id for student in students)
    for student in students:
        assert (await services.users.find_by_id(student.id)).enrolled_courses == [course.id]


async def test_racing_duplicate_enrollment_is_a_conflict(services, teacher, student, make_course):
    course = await make_course(teacher)

    results = await asyncio.gather(
        services.student.enroll(student.id, course.id),
        services.student.enroll(student.id, course.id),
        return_exceptions=True,
    )

    assert sum(isinstance(result, ConflictError) for result in results) == 1
    assert (await services.courses.find_by_id(course.id)).students == [student.id]
    assert (await services.users.find_by_id(student.id)).enrolled_courses == [course.id]


async def test_only_students_enroll(services, teacher, other_teacher, make_course):
    course = await make_course(teacher)

    with pytest.raises(ForbiddenError):
        await services.relationships.enroll(other_teacher.id, course.id)


async def test_enroll_in_missing_course(services, student):
    with pytest.raises(NotFoundError) as exc_info:
        await services.student.enroll(student.id, "missing")

    assert exc_info.value.entity == "course"


async def test_like_requires_enrollment(services, teacher, student, make_course):
    course = await make_course(teacher)

    with pytest.raises(ForbiddenError):
        await services.student.like(student.id, course.id)

    assert (await services.courses.find_by_id(course.id)).likes == 0


async def test_likes_accumulate(services, teacher, student, make_course):
    course = await make_course(teacher)
    await services.student.enroll(student.id, course.id)

    await services.student.like(student.id, course.id)
    liked = await services.student.like(student.id, course.id)

    assert liked.likes == 2


async def test_follow_and_unfollow(services, teacher, other_teacher, student):
    await services.student.follow(student.id, other_teacher.id)
    updated = await services.student.follow(student.id, teacher.id)

    assert updated.following_teachers == [other_teacher.id, teacher.id]
    followed = await services.student.followed_teachers(student.id)
    assert [t.id for t in followed] == [other_teacher.id, teacher.id]

    updated = await services.student.unfollow(student.id, other_teacher.id)
    assert updated.following_teachers == [teacher.id]


async def test_follow_twice_is_a_conflict(services, teacher, student):
    await services.student.follow(student.id, teacher.id)

    with pytest.raises(ConflictError):
        await services.student.follow(student.id, teacher.id)

    assert (await services.users.find_by_id(student.id)).following_teachers == [teacher.id]


async def test_unfollow_without_following_is_a_conflict(services, teacher, student):
    with pytest.raises(ConflictError):
        await services.student.unfollow(student.id, teacher.id)


async def test_follow_target_must_be_a_teacher(services, student, make_user):
    classmate = await make_user(UserRole.STUDENT)

    with pytest.raises(ValidationFailedError):
        await services.student.follow(student.id, classmate.id)


async def test_teachers_cannot_follow(services, teacher, other_teacher):
    with pytest.raises(ForbiddenError):
        await services.relationships.follow(teacher.id, other_teacher.id)


async def test_follow_missing_teacher(services, student):
    with pytest.raises(NotFoundError):
        await services.student.follow(student.id, "missing")


async def test_followed_teachers_empty(services, student):
    assert await services.student.followed_teachers(student.id) == []


async def test_concurrent_follows_keep_every_teacher(services, student, make_user):
    teachers = [await make_user(UserRole.TEACHER) for _ in range(4)]

    await asyncio.gather(*(services.student.follow(student.id, teacher.id) for teacher in teachers))

    stored = await services.users.find_by_id(student.id)
    assert sorted(stored.following_teachers) == sorted(teacher.id for teacher in teachers)


async def test_concurrent_unfollows_remove_every_teacher(services, student, make_user):
    teachers = [await make_user(UserRole.TEACHER) for _ in range(4)]
    for teacher in teachers:
        await services.student.follow(student.id, teacher.id)

    await asyncio.gather(*(services.student.unfollow(student.id, teacher.id) for teacher in teachers))

    assert (await services.users.find_by_id(student.id)).following_teachers == []
