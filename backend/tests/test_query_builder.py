"""
Paginated course listings: defaults, page arithmetic, search and filters.
"""

import math

import pytest

from coursehub.core.errors import ValidationFailedError
from coursehub.services import QueryBuilder


pytestmark = pytest.mark.anyio


async def _make_courses(make_course, owner, count):
    return [await make_course(owner, title=f"Course {n:02d}") for n in range(count)]


async def test_defaults_apply_when_page_and_limit_missing(services, teacher, make_course):
    await _make_courses(make_course, teacher, 12)

    page = await services.teacher.list_courses(teacher.id)

    assert page.page == 1
    assert page.limit == 10
    assert page.total == 12
    assert page.total_pages == 2
    assert len(page.items) == 10


@pytest.mark.parametrize("page_value, limit_value", [(0, 0), (-3, -1), (None, None)])
async def test_non_positive_page_and_limit_fall_back_to_defaults(
    services, teacher, make_course, page_value, limit_value
):
    await _make_courses(make_course, teacher, 3)

    page = await services.teacher.list_courses(teacher.id, {"page": page_value, "limit": limit_value})

    assert (page.page, page.limit) == (1, 10)
    assert len(page.items) == 3


async def test_iterating_all_pages_yields_every_record_once(services, teacher, make_course):
    courses = await _make_courses(make_course, teacher, 12)

    seen = []
    first = await services.teacher.list_courses(teacher.id, {"limit": 5})
    assert first.total_pages == math.ceil(first.total / 5) == 3
    for number in range(1, first.total_pages + 1):
        page = await services.teacher.list_courses(teacher.id, {"page": number, "limit": 5})
        seen.extend(course.id for course in page.items)

    assert len(seen) == first.total == 12
    assert set(seen) == {course.id for course in courses}


async def test_page_past_the_end_is_empty(services, teacher, make_course):
    await _make_courses(make_course, teacher, 4)

    page = await services.teacher.list_courses(teacher.id, {"page": 3, "limit": 5})

    assert page.items == []
    assert page.total == 4
    assert page.total_pages == 1


async def test_limit_is_bounded_by_max_page_limit(services, settings, teacher, make_course):
    await _make_courses(make_course, teacher, 2)

    page = await services.teacher.list_courses(teacher.id, {"limit": 5000})

    assert page.limit == settings.MAX_PAGE_LIMIT


async def test_search_is_case_insensitive_substring_across_fields(services, teacher, make_course):
    python_title = await make_course(teacher, title="Intro to Python")
    python_description = await make_course(teacher, title="Scripting", description="Automate with PYTHON")
    await make_course(teacher, title="Rust basics", description="Ownership and borrowing")

    page = await services.teacher.list_courses(teacher.id, {"search_term": "pyth"})

    assert {course.id for course in page.items} == {python_title.id, python_description.id}
    assert page.total == 2


async def test_search_matches_level(services, teacher, make_course):
    advanced = await make_course(teacher, title="Compilers", level="advanced")
    await make_course(teacher, title="Algebra", level="beginner")

    page = await services.teacher.list_courses(teacher.id, {"search_term": "ADVANCED"})

    assert [course.id for course in page.items] == [advanced.id]


async def test_search_treats_wildcards_literally(services, teacher, make_course):
    percent = await make_course(teacher, title="100% Python")
    await make_course(teacher, title="Plain Python")

    page = await services.teacher.list_courses(teacher.id, {"search_term": "%"})

    assert [course.id for course in page.items] == [percent.id]


async def test_fixed_filters_override_caller_filters(services, teacher, other_teacher, make_course):
    mine = await make_course(teacher)
    await make_course(other_teacher)

    page = await services.teacher.list_courses(teacher.id, {"filters": {"teacher_id": other_teacher.id}})

    assert [course.id for course in page.items] == [mine.id]


async def test_filters_and_sort(services, settings, teacher, make_course):
    await make_course(teacher, title="Beta", level="advanced")
    await make_course(teacher, title="Alpha", level="advanced")
    await make_course(teacher, title="Gamma", level="beginner")

    builder = QueryBuilder(services.courses, settings)
    page = await builder.query({"filters": {"level": "advanced"}, "sort": {"title": "asc"}})

    assert [course.title for course in page.items] == ["Alpha", "Beta"]


async def test_unknown_filter_field_is_rejected(services, settings, teacher):
    builder = QueryBuilder(services.courses, settings)

    with pytest.raises(ValidationFailedError):
        await builder.query({"filters": {"colour": "blue"}})


async def test_student_listing_sees_every_teacher(services, teacher, other_teacher, make_course):
    await make_course(teacher)
    await make_course(other_teacher)

    page = await services.student.list_courses()

    assert page.total == 2


async def test_course_listing_sorts_on_declared_fields(services, teacher, make_course):
    for title in ("Beta", "Alpha", "Gamma"):
        await make_course(teacher, title=title)

    page = await services.teacher.list_courses(teacher.id, {"sort": {"title": -1}})

    assert [course.title for course in page.items] == ["Gamma", "Beta", "Alpha"]


@pytest.mark.parametrize("field", ["students", "teacher_id", "colour"])
async def test_course_listing_rejects_undeclared_sort_fields(services, teacher, field):
    with pytest.raises(ValidationFailedError):
        await services.teacher.list_courses(teacher.id, {"sort": {field: "asc"}})

    with pytest.raises(ValidationFailedError):
        await services.student.list_courses({"sort": {field: "asc"}})
