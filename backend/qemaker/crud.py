"""Asynchronous CRUD helpers for the application's data models.

Each function in this module encapsulates a specific database operation
using SQLModel and SQLAlchemy.  Centralizing the logic keeps route
handlers light and makes behavior easier to test.
"""

import logging
import secrets
import string

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, delete
from sqlalchemy import func

from qemaker.models import Admin, Classroom, Quiz, Submission, QuizProgress, Settings
from qemaker.grading import check_admission, load_questions, round_half_up
from qemaker.schemas import (
    ClassStudentRead,
    GradedSubmission,
    Question,
    StudentIdentity,
    StudentRead,
)

logger = logging.getLogger(__name__)

CLASS_CODE_ALPHABET = string.ascii_uppercase + string.digits
CLASS_CODE_LENGTH = 8


# -- settings ---------------------------------------------------------------


async def get_settings(db: AsyncSession) -> Settings:
    """Fetch the singleton settings record, creating it if necessary."""
    result = await db.execute(select(Settings).where(Settings.id == 1))
    settings = result.scalar_one_or_none()
    if not settings:
        settings = Settings()
        db.add(settings)
        await db.commit()
        await db.refresh(settings)
    return settings


async def save_settings(db: AsyncSession, settings: Settings) -> Settings:
    """Persist settings changes and return the refreshed object."""

    db.add(settings)
    await db.commit()
    await db.refresh(settings)
    return settings


# -- admins -----------------------------------------------------------------


async def create_admin(db: AsyncSession, admin: Admin) -> Admin:
    """Create a new admin; ``admin.password_hash`` must already be hashed."""

    admin.email = admin.email.strip().lower()
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    return admin


# -- classes ----------------------------------------------------------------


async def generate_unique_code(db: AsyncSession) -> str:
    """Return a random class code not used by any existing class."""
    while True:
        code = "".join(
            secrets.choice(CLASS_CODE_ALPHABET) for _ in range(CLASS_CODE_LENGTH)
        )
        result = await db.execute(select(Classroom.id).where(Classroom.code == code))
        if result.first() is None:
            return code


async def create_classroom(db: AsyncSession, admin_id: int, name: str) -> Classroom:
    classroom = Classroom(
        name=name.strip(), code=await generate_unique_code(db), admin_id=admin_id
    )
    db.add(classroom)
    await db.commit()
    await db.refresh(classroom)
    return classroom


async def get_classrooms_by_admin(db: AsyncSession, admin_id: int) -> list[Classroom]:
    result = await db.execute(
        select(Classroom)
        .where(Classroom.admin_id == admin_id)
        .order_by(Classroom.created_at.desc(), Classroom.id.desc())
    )
    return result.scalars().all()


async def get_classroom(db: AsyncSession, class_id: int) -> Classroom | None:
    result = await db.execute(select(Classroom).where(Classroom.id == class_id))
    return result.scalar_one_or_none()


async def delete_classroom(db: AsyncSession, classroom: Classroom) -> None:
    """Delete a class together with its quizzes, submissions and progress."""
    quiz_ids = select(Quiz.id).where(Quiz.class_id == classroom.id)
    await db.execute(delete(QuizProgress).where(QuizProgress.quiz_id.in_(quiz_ids)))
    await db.execute(delete(Submission).where(Submission.class_id == classroom.id))
    await db.execute(delete(Quiz).where(Quiz.class_id == classroom.id))
    await db.delete(classroom)
    await db.commit()


# -- quizzes ----------------------------------------------------------------


async def create_quiz(db: AsyncSession, quiz: Quiz) -> Quiz:
    db.add(quiz)
    await db.commit()
    await db.refresh(quiz)
    return quiz


async def get_quiz(db: AsyncSession, quiz_id: int) -> Quiz | None:
    result = await db.execute(select(Quiz).where(Quiz.id == quiz_id))
    return result.scalar_one_or_none()


async def get_quizzes_by_admin(db: AsyncSession, admin_id: int) -> list[Quiz]:
    result = await db.execute(
        select(Quiz)
        .where(Quiz.admin_id == admin_id)
        .order_by(Quiz.created_at.desc(), Quiz.id.desc())
    )
    return result.scalars().all()


async def get_quizzes_by_class(
    db: AsyncSession, class_id: int, admin_id: int
) -> list[Quiz]:
    result = await db.execute(
        select(Quiz)
        .where(Quiz.class_id == class_id, Quiz.admin_id == admin_id)
        .order_by(Quiz.created_at.desc(), Quiz.id.desc())
    )
    return result.scalars().all()


async def save_quiz(db: AsyncSession, quiz: Quiz) -> Quiz:
    db.add(quiz)
    await db.commit()
    await db.refresh(quiz)
    return quiz


async def delete_quiz(db: AsyncSession, quiz: Quiz) -> None:
    await db.execute(delete(QuizProgress).where(QuizProgress.quiz_id == quiz.id))
    await db.execute(delete(Submission).where(Submission.quiz_id == quiz.id))
    await db.delete(quiz)
    await db.commit()


def replace_correct_answer(
    questions: list[Question], number: int, correct_answer: str
) -> list[Question]:
    """Return ``questions`` with one question's correct answer overwritten.

    Raises ``LookupError`` for an unknown question number and ``ValueError``
    when ``correct_answer`` is not one of that question's option labels.
    """
    label = correct_answer.strip().lower()
    updated = []
    found = False
    for question in questions:
        if question.number == number:
            if label not in {option.label for option in question.options}:
                raise ValueError(
                    f"'{label}' is not an option of question {number}"
                )
            question = question.model_copy(update={"correct_answer": label})
            found = True
        updated.append(question)
    if not found:
        raise LookupError(f"Question {number} not found")
    return updated


async def update_correct_answer(
    db: AsyncSession, quiz: Quiz, number: int, correct_answer: str
) -> Quiz:
    questions = replace_correct_answer(
        load_questions(quiz.questions), number, correct_answer
    )
    # Assign a new list so the JSON column is flagged as changed.
    quiz.questions = [q.model_dump() for q in questions]
    return await save_quiz(db, quiz)


# -- submissions ------------------------------------------------------------


async def count_prior_submissions(db: AsyncSession, quiz_id: int, email: str) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Submission)
        .where(Submission.quiz_id == quiz_id, Submission.email == email)
    )
    return result.scalar() or 0


async def record_submission(
    db: AsyncSession,
    quiz: Quiz,
    student: StudentIdentity,
    graded: GradedSubmission,
    auto_submitted: bool = False,
) -> Submission:
    """Admit and store one graded attempt.

    The count, the admission check and the insert repeat until the insert
    claims a free attempt ordinal. Each conflict means another attempt was
    stored first, so the loop ends with either a stored submission or an
    ``AttemptLimitReached`` refusal.
    """
    quiz_id = quiz.id
    while True:
        attempts = await count_prior_submissions(db, quiz_id, student.email)
        check_admission(quiz, attempts)
        submission = Submission(
            quiz_id=quiz_id,
            class_id=quiz.class_id,
            class_code=quiz.class_code,
            email=student.email,
            full_name=student.full_name,
            section=student.section,
            year_course=student.year_course,
            answers=[record.model_dump() for record in graded.answers],
            score=graded.score,
            total=graded.total,
            percentage=graded.percentage,
            attempt_number=attempts + 1,
            auto_submitted=auto_submitted,
        )
        db.add(submission)
        try:
            await db.commit()
        except IntegrityError:
            # Rollback expires every loaded instance; reload the quiz policy.
            await db.rollback()
            await db.refresh(quiz)
            logger.warning(
                "Attempt %s on quiz %s for %s was taken concurrently; rechecking",
                attempts + 1,
                quiz_id,
                student.email,
            )
            continue
        await db.refresh(submission)
        return submission


async def get_submissions_by_quiz(db: AsyncSession, quiz_id: int) -> list[Submission]:
    result = await db.execute(
        select(Submission)
        .where(Submission.quiz_id == quiz_id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
    )
    return result.scalars().all()


async def get_submissions_by_class(
    db: AsyncSession, class_id: int, admin_id: int
) -> list[tuple[Submission, str]]:
    """Return ``(submission, quiz title)`` pairs for a class, newest first."""
    result = await db.execute(
        select(Submission, Quiz.title)
        .join(Quiz, Quiz.id == Submission.quiz_id)
        .where(Quiz.class_id == class_id, Quiz.admin_id == admin_id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
    )
    return [(row[0], row[1]) for row in result.all()]


async def get_students_for_admin(db: AsyncSession, admin_id: int) -> list[StudentRead]:
    """De-duplicate students by email across all of an admin's quizzes.

    Name, section and course come from the most recent submission.
    """
    result = await db.execute(
        select(Submission)
        .join(Quiz, Quiz.id == Submission.quiz_id)
        .where(Quiz.admin_id == admin_id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
    )
    students: dict[str, StudentRead] = {}
    for sub in result.scalars().all():
        if sub.email not in students:
            students[sub.email] = StudentRead(
                email=sub.email,
                full_name=sub.full_name,
                section=sub.section,
                year_course=sub.year_course,
                submissions_count=0,
            )
        students[sub.email].submissions_count += 1
    return list(students.values())


async def get_students_by_class(
    db: AsyncSession, class_id: int, admin_id: int
) -> list[ClassStudentRead]:
    """Per-student summary for one class, newest activity first."""
    students: dict[str, ClassStudentRead] = {}
    totals: dict[str, int] = {}
    for sub, title in await get_submissions_by_class(db, class_id, admin_id):
        student = students.get(sub.email)
        if student is None:
            student = ClassStudentRead(
                email=sub.email,
                full_name=sub.full_name,
                section=sub.section,
                year_course=sub.year_course,
                submissions_count=0,
                last_submitted_at=sub.submitted_at,
                avg_percentage=0,
                quizzes_taken=[],
            )
            students[sub.email] = student
        student.submissions_count += 1
        totals[sub.email] = totals.get(sub.email, 0) + sub.percentage
        student.avg_percentage = round_half_up(
            totals[sub.email] / student.submissions_count
        )
        if title not in student.quizzes_taken:
            student.quizzes_taken.append(title)
    return list(students.values())
