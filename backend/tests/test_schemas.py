"""
Input validation for topics, lessons, reorder requests and query options.
"""

import pytest
from pydantic import ValidationError

from coursehub.core.errors import ValidationFailedError
from coursehub.schemas import LessonCreate, ReorderRequest, TopicCreate
from coursehub.schemas.query import QueryOptions
from coursehub.services.common import parse_input
from coursehub.store.filters import SortDirection


QUESTION = {"question": "Pick one", "options": [{"text": "A", "is_correct": True}, {"text": "B"}]}


def test_content_topic_requires_content():
    with pytest.raises(ValidationError):
        TopicCreate(title="Empty", type="content")


def test_quiz_topic_requires_questions():
    with pytest.raises(ValidationError):
        TopicCreate(title="Quiz", type="quiz")


def test_quiz_question_needs_two_options():
    with pytest.raises(ValidationError):
        TopicCreate(title="Quiz", type="quiz", quiz=[{"question": "Only one", "options": [{"text": "A"}]}])


def test_valid_quiz_topic():
    topic = TopicCreate(title="Quiz", type="quiz", quiz=[QUESTION])

    assert topic.type == "quiz"
    assert topic.quiz[0].options[0].is_correct
    assert topic.order is None


def test_blank_titles_are_rejected():
    with pytest.raises(ValidationError):
        LessonCreate(title="   ", content="Body")


def test_explicit_order_must_be_positive():
    with pytest.raises(ValidationError):
        LessonCreate(title="Intro", content="Body", order=0)


def test_reorder_ids_must_be_unique():
    with pytest.raises(ValidationError):
        ReorderRequest(ids=["a", "b", "a"])


def test_parse_input_reports_validation_failed():
    with pytest.raises(ValidationFailedError) as exc_info:
        parse_input(TopicCreate, {"title": "Quiz", "type": "quiz"})

    assert exc_info.value.message.startswith("Validation Error:")
    assert "Quiz questions are required" in exc_info.value.message


def test_parse_input_passes_models_through():
    lesson = LessonCreate(title="Intro", content="Body")

    assert parse_input(LessonCreate, lesson) is lesson


def test_query_options_accept_named_and_numeric_sort_directions():
    options = QueryOptions.model_validate({"sort": {"title": 1, "likes": "desc"}})

    assert options.sort == {"title": 1, "likes": SortDirection.DESC}


def test_query_options_reject_unknown_sort_directions():
    with pytest.raises(ValidationError):
        QueryOptions.model_validate({"sort": {"title": 2}})
