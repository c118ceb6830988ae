"""Database models used by QEMaker.

The models are defined with SQLModel (built on SQLAlchemy and Pydantic)
and represent admins, their classes and quizzes, and student submissions.
Question and answer arrays are stored as JSON columns.
"""

from typing import Optional, List
from datetime import datetime
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, UniqueConstraint


class Admin(SQLModel, table=True):
    """Educator account allowed to author quizzes."""

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(unique=True, index=True)
    password_hash: str
    picture: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Classroom(SQLModel, table=True):
    """Class owned by an admin; students join with its short code."""

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    code: str = Field(unique=True, index=True)
    admin_id: int = Field(foreign_key="admin.id", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Quiz(SQLModel, table=True):
    """Named set of parsed questions belonging to a class."""

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    class_id: int = Field(foreign_key="classroom.id", index=True)
    class_code: str
    admin_id: int = Field(foreign_key="admin.id", index=True)
    questions: List[dict] = Field(sa_column=Column(JSON), default_factory=list)
    raw_input: Optional[str] = None
    is_active: bool = True
    max_attempts: int = 1  # 1 = no retakes
    time_limit_minutes: int = 0  # 0 = unlimited
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Submission(SQLModel, table=True):
    """One graded attempt; never modified after it is written."""

    # A given attempt ordinal can only be claimed once per student and quiz,
    # so concurrent submissions cannot exceed the attempt limit.
    __table_args__ = (
        UniqueConstraint(
            "quiz_id", "email", "attempt_number", name="uq_submission_attempt"
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    quiz_id: int = Field(foreign_key="quiz.id", index=True)
    class_id: int = Field(foreign_key="classroom.id", index=True)
    class_code: str
    email: str = Field(index=True)  # normalized: trimmed + lowercase
    full_name: str
    section: str
    year_course: str
    answers: List[dict] = Field(sa_column=Column(JSON), default_factory=list)
    score: int = 0
    total: int = 0
    percentage: int = 0
    attempt_number: int = 1
    auto_submitted: bool = False
    submitted_at: datetime = Field(default_factory=datetime.utcnow)


class QuizProgress(SQLModel, table=True):
    """Saved state of an attempt in progress, used to resume after a reload."""

    __table_args__ = (
        UniqueConstraint("quiz_id", "email", name="uq_progress_student"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    quiz_id: int = Field(foreign_key="quiz.id", index=True)
    email: str
    answers: dict = Field(sa_column=Column(JSON), default_factory=dict)
    current_index: int = 0
    started_at: datetime = Field(default_factory=datetime.utcnow)
    deadline: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Settings(SQLModel, table=True):
    """Singleton table storing site-wide configuration values."""

    id: Optional[int] = Field(default=1, primary_key=True)
    site_name: str = "QEMaker"
    pass_threshold: int = 75
    default_max_attempts: int = 1
    default_time_limit_minutes: int = 0
    timer_warning_seconds: int = 300
