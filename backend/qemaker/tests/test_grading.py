"""Tests for scoring submissions and the admission/timer policy."""

import pathlib
import sys
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

# Allow importing the qemaker package
sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from qemaker.grading import (
    AttemptLimitReached,
    QuizUnavailable,
    check_admission,
    compute_deadline,
    grade_answers,
    grade_submission,
    is_past_deadline,
    normalize_identity,
    percentage_of,
    seconds_remaining,
)
from qemaker.parser import parse_quiz_text
from qemaker.schemas import StudentIdentity


def _quiz(text="1. 2+2?\na. 3\nb. 4 - correct\nc. 5\n=====", **kwargs):
    questions = [q.model_dump() for q in parse_quiz_text(text)]
    defaults = dict(questions=questions, is_active=True, max_attempts=1, time_limit_minutes=0)
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def test_correct_answer_scores_full_marks():
    result = grade_submission(_quiz(), {1: "b"}, prior_attempts=0)
    assert (result.score, result.total, result.percentage) == (1, 1, 100)
    assert len(result.answers) == 1
    assert result.answers[0].is_correct is True
    assert result.answers[0].question == "2+2?"


def test_wrong_answer_resolves_option_texts():
    result = grade_submission(_quiz(), {1: "a"}, prior_attempts=0)
    assert result.score == 0
    assert result.percentage == 0
    record = result.answers[0]
    assert record.question_number == 1
    assert record.chosen == "a"
    assert record.chosen_text == "3"
    assert record.correct == "b"
    assert record.correct_text == "4"
    assert record.is_correct is False


def test_unanswered_question_still_recorded():
    result = grade_submission(_quiz(), {}, prior_attempts=0)
    assert (result.score, result.total, result.percentage) == (0, 1, 0)
    record = result.answers[0]
    assert record.question_number == 1
    assert record.chosen == ""
    assert record.chosen_text == ""
    assert record.is_correct is False


def test_every_question_gets_a_record_in_order():
    text = "\n=====\n".join(
        f"{n}. Q{n}\na. x - correct\nb. y" for n in range(1, 5)
    )
    result = grade_submission(_quiz(text), {2: "a", 4: "b"}, prior_attempts=0)
    assert [r.question_number for r in result.answers] == [1, 2, 3, 4]
    assert [r.is_correct for r in result.answers] == [False, True, False, False]
    assert 0 <= result.score <= result.total
    assert result.percentage == 25


def test_question_without_correct_answer_never_scores():
    result = grade_submission(_quiz("1. Q\na. x\nb. y"), {1: "a"}, prior_attempts=0)
    record = result.answers[0]
    assert record.is_correct is False
    assert record.correct == ""
    assert record.correct_text == ""


def test_unknown_label_is_kept_with_empty_text():
    record = grade_submission(_quiz(), {1: "d"}, prior_attempts=0).answers[0]
    assert record.chosen == "d"
    assert record.chosen_text == ""
    assert record.is_correct is False


def test_zero_question_quiz_grades_to_zero():
    result = grade_answers([], {1: "a"})
    assert (result.score, result.total, result.percentage) == (0, 0, 0)
    assert result.answers == []


@pytest.mark.parametrize(
    "score,total,expected",
    [(0, 0, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (3, 8, 38), (5, 5, 100)],
)
def test_percentage_rounds_half_up(score, total, expected):
    assert percentage_of(score, total) == expected


def test_inactive_quiz_is_refused():
    with pytest.raises(QuizUnavailable):
        grade_submission(_quiz(is_active=False), {1: "b"}, prior_attempts=0)
    with pytest.raises(QuizUnavailable):
        check_admission(None, 0)


def test_single_attempt_quiz_refuses_second_attempt():
    check_admission(_quiz(max_attempts=1), 0)
    with pytest.raises(AttemptLimitReached) as exc_info:
        grade_submission(_quiz(max_attempts=1), {1: "b"}, prior_attempts=1)
    detail = exc_info.value.detail()
    assert detail["code"] == "attempt_limit_reached"
    assert detail["attempts"] == 1
    assert detail["max_attempts"] == 1
    assert "1 time " in detail["message"]


def test_retakes_up_to_the_limit():
    quiz = _quiz(max_attempts=2)
    check_admission(quiz, 0)
    check_admission(quiz, 1)
    with pytest.raises(AttemptLimitReached):
        check_admission(quiz, 2)


def test_identity_normalization():
    student = StudentIdentity(
        email="  Jane.Doe@Example.COM ",
        full_name=" Jane Doe ",
        section=" A ",
        year_course=" BSCS 2 ",
    )
    normalized = normalize_identity(student)
    assert normalized.email == "jane.doe@example.com"
    assert normalized.full_name == "Jane Doe"
    assert normalized.section == "A"
    assert normalized.year_course == "BSCS 2"


def test_identity_requires_fields():
    with pytest.raises(ValueError):
        StudentIdentity(email="not-an-email", full_name="x", section="a", year_course="b")
    with pytest.raises(ValueError):
        StudentIdentity(email="a@b.co", full_name="   ", section="a", year_course="b")


def test_deadline_helpers():
    start = datetime(2026, 1, 1, 9, 0, 0)
    assert compute_deadline(start, 0) is None
    deadline = compute_deadline(start, 30)
    assert deadline == start + timedelta(minutes=30)

    assert seconds_remaining(None, start) is None
    assert seconds_remaining(deadline, start) == 1800
    assert seconds_remaining(deadline, start + timedelta(seconds=0.5)) == 1800
    assert seconds_remaining(deadline, start + timedelta(hours=1)) == 0

    assert is_past_deadline(None, start + timedelta(days=1)) is False
    assert is_past_deadline(deadline, start + timedelta(minutes=29)) is False
    assert is_past_deadline(deadline, deadline) is True
