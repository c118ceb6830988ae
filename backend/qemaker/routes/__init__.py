"""Aggregate import for all API route modules."""

from . import (
    auth,
    classes,
    quizzes,
    students,
    take,
    settings,
)

__all__ = [
    "auth",
    "classes",
    "quizzes",
    "students",
    "take",
    "settings",
]
