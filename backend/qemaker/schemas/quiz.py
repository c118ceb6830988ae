"""Request and response models for quiz authoring and taking."""

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from .question import Question, StudentQuestion


class QuizPreviewRequest(BaseModel):
    raw_input: str


class QuizCreate(BaseModel):
    title: str = Field(min_length=1)
    class_id: int
    raw_input: str
    max_attempts: Optional[int] = Field(default=None, ge=1)
    time_limit_minutes: Optional[int] = Field(default=None, ge=0)


class QuizRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    title: str
    class_id: int
    class_code: str
    questions: List[Question]
    raw_input: Optional[str] = None
    is_active: bool
    max_attempts: int
    time_limit_minutes: int
    created_at: datetime


class QuizTitleUpdate(BaseModel):
    title: str = Field(min_length=1)


class CorrectAnswerUpdate(BaseModel):
    correct_answer: str


class QuizPolicyUpdate(BaseModel):
    max_attempts: Optional[int] = Field(default=None, ge=1)
    time_limit_minutes: Optional[int] = Field(default=None, ge=0)


class StudentQuizRead(BaseModel):
    """Quiz as served to students: correct answers are never included."""

    id: int
    title: str
    class_code: str
    class_name: str
    questions: List[StudentQuestion]
    max_attempts: int
    time_limit_minutes: int
