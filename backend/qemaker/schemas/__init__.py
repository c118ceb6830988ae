"""Convenience imports for all schema classes used by the API."""

from .admin import AdminCreate, AdminResponse, AdminLogin
from .classroom import ClassroomCreate, ClassroomRead, StudentRead, ClassStudentRead
from .question import QuizOption, Question, StudentQuestion, ParseReport
from .quiz import (
    QuizPreviewRequest,
    QuizCreate,
    QuizRead,
    QuizTitleUpdate,
    CorrectAnswerUpdate,
    QuizPolicyUpdate,
    StudentQuizRead,
)
from .submission import (
    StudentIdentity,
    AnswerRecord,
    GradedSubmission,
    SubmissionCreate,
    SubmissionRead,
    SubmissionResult,
    ClassSubmissionRead,
    AttemptStatus,
)
from .progress import ProgressSave, ProgressRead, AttemptStart
from .settings import SettingsRead, SettingsUpdate

__all__ = [
    "AdminCreate",
    "AdminResponse",
    "AdminLogin",
    "ClassroomCreate",
    "ClassroomRead",
    "StudentRead",
    "ClassStudentRead",
    "QuizOption",
    "Question",
    "StudentQuestion",
    "ParseReport",
    "QuizPreviewRequest",
    "QuizCreate",
    "QuizRead",
    "QuizTitleUpdate",
    "CorrectAnswerUpdate",
    "QuizPolicyUpdate",
    "StudentQuizRead",
    "StudentIdentity",
    "AnswerRecord",
    "GradedSubmission",
    "SubmissionCreate",
    "SubmissionRead",
    "SubmissionResult",
    "ClassSubmissionRead",
    "AttemptStatus",
    "ProgressSave",
    "ProgressRead",
    "AttemptStart",
    "SettingsRead",
    "SettingsUpdate",
]
