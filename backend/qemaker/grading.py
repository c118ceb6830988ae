"""Grading engine and attempt/time admission policy.

Everything here is pure: callers fetch the authoritative quiz and the prior
attempt count from the store, and persist the result themselves. Refusals
are raised as :class:`AdmissionRefused` subclasses so route handlers can map
each one to a specific response.
"""

import math
from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping, Optional

from qemaker.schemas.question import Question
from qemaker.schemas.submission import AnswerRecord, GradedSubmission, StudentIdentity


class AdmissionRefused(Exception):
    """Base class for reasons a quiz attempt may not proceed."""

    code = "admission_refused"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def detail(self) -> dict:
        return {"code": self.code, "message": self.message}


class QuizUnavailable(AdmissionRefused):
    """Quiz is missing or inactive; the two cases are deliberately not told apart."""

    code = "quiz_unavailable"

    def __init__(self):
        super().__init__("Quiz not available")


class AttemptLimitReached(AdmissionRefused):
    code = "attempt_limit_reached"

    def __init__(self, attempts: int, max_attempts: int):
        self.attempts = attempts
        self.max_attempts = max_attempts
        super().__init__(
            f"You already took this quiz {attempts} time{_plural(attempts)} and "
            f"have reached the maximum of {max_attempts} attempt{_plural(max_attempts)}. "
            "No more retakes allowed."
        )

    def detail(self) -> dict:
        detail = super().detail()
        detail.update(attempts=self.attempts, max_attempts=self.max_attempts)
        return detail


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage_of(score: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(100 * score / total)


def normalize_identity(student: StudentIdentity) -> StudentIdentity:
    """Trim every field and lowercase the email, the attempt-count key."""
    return student.model_copy(
        update={
            "email": student.email.strip().lower(),
            "full_name": student.full_name.strip(),
            "section": student.section.strip(),
            "year_course": student.year_course.strip(),
        }
    )


def load_questions(raw_questions: Iterable[Any]) -> list[Question]:
    """Accept stored question dicts or ``Question`` objects."""
    return [
        q if isinstance(q, Question) else Question.model_validate(q)
        for q in raw_questions
    ]


def check_admission(quiz: Any, prior_attempts: int) -> None:
    """Raise unless ``quiz`` is active and the student has attempts left."""
    if quiz is None or not quiz.is_active:
        raise QuizUnavailable()
    if prior_attempts >= quiz.max_attempts:
        raise AttemptLimitReached(prior_attempts, quiz.max_attempts)


def _option_text(question: Question, label: Optional[str]) -> str:
    if not label:
        return ""
    for option in question.options:
        if option.label == label:
            return option.text
    return ""


def grade_answers(
    questions: Iterable[Question], answers: Mapping[int, str]
) -> GradedSubmission:
    """Score ``answers`` (question number -> label) against ``questions``.

    Every question yields exactly one record, answered or not.
    """
    records = []
    for question in questions:
        chosen = answers.get(question.number) or ""
        records.append(
            AnswerRecord(
                question_number=question.number,
                question=question.question,
                chosen=chosen,
                chosen_text=_option_text(question, chosen),
                correct=question.correct_answer or "",
                correct_text=_option_text(question, question.correct_answer),
                is_correct=bool(chosen) and chosen == question.correct_answer,
            )
        )
    score = sum(1 for record in records if record.is_correct)
    total = len(records)
    return GradedSubmission(
        answers=records,
        score=score,
        total=total,
        percentage=percentage_of(score, total),
    )


def grade_submission(
    quiz: Any, answers: Mapping[int, str], prior_attempts: int
) -> GradedSubmission:
    """Run the admission check for one attempt, then grade it.

    ``quiz`` must be the trusted, answer-bearing quiz and ``prior_attempts``
    the number of stored submissions for the student's normalized email.
    """
    check_admission(quiz, prior_attempts)
    return grade_answers(load_questions(quiz.questions), answers)


# -- time limit -------------------------------------------------------------


def compute_deadline(
    started_at: datetime, time_limit_minutes: int
) -> Optional[datetime]:
    if not time_limit_minutes or time_limit_minutes <= 0:
        return None
    return started_at + timedelta(minutes=time_limit_minutes)


def seconds_remaining(deadline: Optional[datetime], now: datetime) -> Optional[int]:
    if deadline is None:
        return None
    return max(0, math.ceil((deadline - now).total_seconds()))


def is_past_deadline(deadline: Optional[datetime], now: datetime) -> bool:
    """Late submissions are still accepted; callers flag them as automatic."""
    return deadline is not None and now >= deadline
