"""
Cascade deletion of course and lesson subtrees.
"""

import pytest

from coursehub.core.errors import NotFoundError, TransientError


pytestmark = pytest.mark.anyio


@pytest.fixture
async def populated_course(services, teacher, make_course, make_lesson, make_topic, anyio_backend):
    course = await make_course(teacher)
    lessons = []
    for n in range(2):
        lesson = await make_lesson(course, teacher, title=f"Lesson {n}")
        for m in range(3):
            await make_topic(lesson, teacher, title=f"Topic {n}.{m}")
        lessons.append(lesson)
    return course, lessons


async def _topics_under(services, lessons):
    return await services.topics.count({"lesson_id": [lesson.id for lesson in lessons]})


async def test_course_delete_removes_every_lesson_and_topic(services, teacher, populated_course):
    course, lessons = populated_course

    report = await services.teacher.delete_course(course.id, teacher.id)

    assert report.lessons_deleted == 2
    assert report.topics_deleted == 6
    assert await services.courses.find_by_id(course.id) is None
    assert await services.lessons.count({"course_id": course.id}) == 0
    assert await _topics_under(services, lessons) == 0


async def test_course_delete_leaves_other_courses_alone(services, teacher, make_course, make_lesson, populated_course):
    course, _ = populated_course
    survivor = await make_course(teacher, title="Survivor")
    await make_lesson(survivor, teacher)

    await services.teacher.delete_course(course.id, teacher.id)

    assert await services.lessons.count({"course_id": survivor.id}) == 1


async def test_course_delete_detaches_enrolled_students(services, teacher, student, populated_course):
    course, _ = populated_course
    await services.student.enroll(student.id, course.id)

    report = await services.teacher.delete_course(course.id, teacher.id)

    assert report.students_detached == 1
    assert course.id not in (await services.users.find_by_id(student.id)).enrolled_courses


async def test_failure_part_way_deletes_nothing(services, teacher, populated_course, monkeypatch):
    course, lessons = populated_course

    async def unavailable(id):
        raise TransientError("Data store unavailable")

    monkeypatch.setattr(services.courses, "delete_by_id", unavailable)

    with pytest.raises(TransientError):
        await services.teacher.delete_course(course.id, teacher.id)

    monkeypatch.undo()
    assert await services.courses.find_by_id(course.id) is not None
    assert await services.lessons.count({"course_id": course.id}) == 2
    assert await _topics_under(services, lessons) == 6


async def test_lesson_delete_removes_only_its_topics(services, teacher, populated_course):
    _, (first, second) = populated_course

    report = await services.teacher.delete_lesson(first.id, teacher.id)

    assert report.lessons_deleted == 1
    assert report.topics_deleted == 3
    assert await services.topics.count({"lesson_id": first.id}) == 0
    assert await services.topics.count({"lesson_id": second.id}) == 3


async def test_delete_missing_course(services):
    with pytest.raises(NotFoundError):
        await services.cascade.delete_course_subtree("missing")


async def test_delete_single_topic(services, teacher, populated_course):
    _, (lesson, _) = populated_course
    topic = await services.topics.find_one({"lesson_id": lesson.id}, sort={"order": "asc"})

    await services.teacher.delete_topic(topic.id, teacher.id)

    assert await services.topics.find_by_id(topic.id) is None
    assert await services.topics.count({"lesson_id": lesson.id}) == 2
