"""Schemas for parsed quiz questions and the authoring preview."""

from typing import List, Optional
from pydantic import BaseModel


class QuizOption(BaseModel):
    model_config = {"frozen": True}

    label: str  # 'a' | 'b' | 'c' | 'd'
    text: str


class Question(BaseModel):
    """One quiz item as produced by the parser.

    ``number`` is assigned in parse order. ``correct_answer`` is the label of
    the option marked correct, or ``None`` when no option was marked.
    """

    model_config = {"frozen": True}

    number: int
    question: str
    options: List[QuizOption]
    correct_answer: Optional[str] = None


class StudentQuestion(BaseModel):
    """Question shape exposed to students; it has no correct answer field."""

    number: int
    question: str
    options: List[QuizOption]


class ParseReport(BaseModel):
    questions: List[Question]
    warnings: List[str] = []
