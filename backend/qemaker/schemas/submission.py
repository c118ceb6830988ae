"""Schemas for student identity, graded answers and stored submissions."""

import re
from typing import Dict, List
from datetime import datetime
from pydantic import BaseModel, field_validator

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class StudentIdentity(BaseModel):
    email: str
    full_name: str
    section: str
    year_course: str

    @field_validator("email")
    @classmethod
    def email_looks_valid(cls, value: str) -> str:
        if not _EMAIL_PATTERN.match(value.strip()):
            raise ValueError("Invalid email format")
        return value

    @field_validator("full_name", "section", "year_course")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Required")
        return value


class AnswerRecord(BaseModel):
    model_config = {"frozen": True}

    question_number: int
    question: str
    chosen: str
    chosen_text: str
    correct: str
    correct_text: str
    is_correct: bool


class GradedSubmission(BaseModel):
    """Outcome of grading one attempt, before it is stored."""

    model_config = {"frozen": True}

    answers: List[AnswerRecord]
    score: int
    total: int
    percentage: int


class SubmissionCreate(BaseModel):
    student: StudentIdentity
    answers: Dict[int, str] = {}


class SubmissionRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    quiz_id: int
    class_id: int
    class_code: str
    email: str
    full_name: str
    section: str
    year_course: str
    answers: List[AnswerRecord]
    score: int
    total: int
    percentage: int
    attempt_number: int
    auto_submitted: bool = False
    submitted_at: datetime


class SubmissionResult(SubmissionRead):
    max_attempts: int
    passed: bool


class ClassSubmissionRead(SubmissionRead):
    quiz_title: str


class AttemptStatus(BaseModel):
    attempts: int
    max_attempts: int
    remaining: int
