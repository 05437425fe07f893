"""Tests for data model classes."""
from datetime import date, datetime

import pytest

from leet_tracker.models import (
    CreateProblemRequest, Difficulty, PatternStats, Problem, ProblemStats, Status, percentage,
)
from tests.conftest import make_problem


def test_status_parse_variants():
    assert Status.parse(2) == Status.FIRST_REVIEW
    assert Status.parse("2") == Status.FIRST_REVIEW
    assert Status.parse("FirstReview") == Status.FIRST_REVIEW
    assert Status.parse("First Review") == Status.FIRST_REVIEW
    assert Status.parse("mastered") == Status.MASTERED


def test_status_parse_rejects_unknown():
    with pytest.raises(ValueError):
        Status.parse("Forgotten")
    with pytest.raises(ValueError):
        Status.parse(9)


def test_status_labels():
    assert Status.SECOND_REVIEW.label == "Second Review"
    assert Status.SECOND_REVIEW.shorthand == "Second"
    assert Status.SECOND_REVIEW.wire_name == "SecondReview"
    assert Difficulty.MEDIUM.label == "Medium"


def test_problem_from_api_snake_case():
    p = Problem.from_api({
        "id": 7, "problem_number": 1, "title": "Two Sum", "difficulty": 1, "status": 2,
        "pattern": "Hash Table", "notes": None, "date_attempted": "2025-01-01",
        "first_review_date": "2025-01-04T10:00:00", "second_review_date": None,
        "created_at": "2025-01-01T08:00:00",
    })
    assert p.id == 7
    assert p.difficulty == Difficulty.EASY
    assert p.status == Status.FIRST_REVIEW
    assert p.notes == ""
    assert p.date_attempted == date(2025, 1, 1)
    assert p.first_review_date == date(2025, 1, 4)
    assert p.second_review_date is None
    assert p.created_at == datetime(2025, 1, 1, 8, 0)
    assert p.updated_at is None


def test_problem_from_api_camel_case_and_labels():
    p = Problem.from_api({
        "id": 3, "problemNumber": 70, "title": "Climbing Stairs", "difficulty": "Easy",
        "status": "SecondReview", "pattern": "DP", "dateAttempted": "2024-12-01",
        "secondReviewDate": "2024-12-15",
    })
    assert p.problem_number == 70
    assert p.status == Status.SECOND_REVIEW
    assert p.second_review_date == date(2024, 12, 15)


def test_problem_from_api_missing_id_raises():
    with pytest.raises(KeyError):
        Problem.from_api({"problem_number": 1, "title": "x", "difficulty": 1})


def test_to_dict_uses_ordinals():
    data = make_problem(status=Status.MASTERED).to_dict()
    assert data["status"] == 4
    assert data["date_attempted"] == "2025-01-01"
    assert data["first_review_date"] is None


def test_create_request_body_omits_empty_notes():
    req = CreateProblemRequest(problem_number=1, title="Two Sum", difficulty=Difficulty.EASY, pattern="Hash")
    assert req.to_api() == {"problem_number": 1, "title": "Two Sum", "difficulty": 1, "pattern": "Hash"}
    req.notes = "remember complement"
    assert req.to_api()["notes"] == "remember complement"


def test_stats_from_api_defaults_missing_counts():
    stats = ProblemStats.from_api({"total_problems": 5, "reviewsDueToday": 2})
    assert stats.total_problems == 5
    assert stats.reviews_due_today == 2
    assert stats.hard_count == 0


def test_stats_from_problems():
    problems = [
        make_problem(1, status=Status.MASTERED, difficulty=Difficulty.HARD),
        make_problem(2, date_attempted=date(2025, 1, 1)),
        make_problem(3, date_attempted=date(2025, 1, 10)),
    ]
    stats = ProblemStats.from_problems(problems, today=date(2025, 1, 5))
    assert stats.total_problems == 3
    assert stats.mastered_count == 1
    assert stats.new_count == 2
    assert stats.hard_count == 1
    assert stats.easy_count == 2
    assert stats.reviews_due_today == 1


def test_percentage_rounds_half_up():
    assert percentage(1, 8) == 13  # 12.5
    assert percentage(0, 0) == 0
    assert PatternStats("Tree", count=3, mastered=2).mastery_percentage == 67
