"""Public endpoints used by students to take a quiz.

Nothing served from here ever includes a correct answer. Grading always
re-reads the authoritative quiz from the database.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from qemaker.database import get_session
from qemaker.models import Quiz, QuizProgress
from qemaker.grading import (
    AdmissionRefused,
    AttemptLimitReached,
    QuizUnavailable,
    check_admission,
    grade_submission,
    is_past_deadline,
    load_questions,
    normalize_identity,
    seconds_remaining,
)
from qemaker.progress import ProgressStore, get_progress_store, progress_answers
from qemaker.schemas import (
    AttemptStart,
    AttemptStatus,
    ProgressRead,
    ProgressSave,
    StudentIdentity,
    StudentQuestion,
    StudentQuizRead,
    SubmissionCreate,
    SubmissionResult,
)
from qemaker.crud import (
    count_prior_submissions,
    get_classroom,
    get_quiz,
    get_settings,
    record_submission,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/take", tags=["take"])

_REFUSAL_STATUS = {
    QuizUnavailable: status.HTTP_404_NOT_FOUND,
    AttemptLimitReached: status.HTTP_403_FORBIDDEN,
}


def _refusal(exc: AdmissionRefused) -> HTTPException:
    return HTTPException(
        status_code=_REFUSAL_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST),
        detail=exc.detail(),
    )


async def _get_available_quiz(db: AsyncSession, quiz_id: int) -> Quiz:
    quiz = await get_quiz(db, quiz_id)
    if quiz is None or not quiz.is_active:
        raise _refusal(QuizUnavailable())
    return quiz


def _progress_read(progress: QuizProgress, now: datetime) -> dict:
    return dict(
        answers=progress_answers(progress),
        current_index=progress.current_index,
        started_at=progress.started_at,
        deadline=progress.deadline,
        seconds_remaining=seconds_remaining(progress.deadline, now),
    )


@router.get("/{quiz_id}", response_model=StudentQuizRead)
async def read_quiz_for_student(quiz_id: int, db: AsyncSession = Depends(get_session)):
    quiz = await _get_available_quiz(db, quiz_id)
    classroom = await get_classroom(db, quiz.class_id)
    return StudentQuizRead(
        id=quiz.id,
        title=quiz.title,
        class_code=quiz.class_code,
        class_name=classroom.name if classroom else "",
        questions=[
            StudentQuestion(number=q.number, question=q.question, options=q.options)
            for q in load_questions(quiz.questions)
        ],
        max_attempts=quiz.max_attempts,
        time_limit_minutes=quiz.time_limit_minutes,
    )


@router.post("/{quiz_id}/check", response_model=AttemptStatus)
async def check_attempts(
    quiz_id: int,
    student: StudentIdentity,
    db: AsyncSession = Depends(get_session),
):
    """Report how many attempts the student has used before they begin."""
    quiz = await _get_available_quiz(db, quiz_id)
    identity = normalize_identity(student)
    attempts = await count_prior_submissions(db, quiz.id, identity.email)
    try:
        check_admission(quiz, attempts)
    except AdmissionRefused as exc:
        logger.info("Quiz %s refused %s: %s", quiz.id, identity.email, exc.code)
        raise _refusal(exc)
    return AttemptStatus(
        attempts=attempts,
        max_attempts=quiz.max_attempts,
        remaining=quiz.max_attempts - attempts,
    )


@router.post("/{quiz_id}/start", response_model=AttemptStart)
async def start_attempt(
    quiz_id: int,
    student: StudentIdentity,
    db: AsyncSession = Depends(get_session),
    progress_store: ProgressStore = Depends(get_progress_store),
):
    """Admit the student and start (or resume) the attempt and its timer."""
    quiz = await _get_available_quiz(db, quiz_id)
    identity = normalize_identity(student)
    attempts = await count_prior_submissions(db, quiz.id, identity.email)
    try:
        check_admission(quiz, attempts)
    except AdmissionRefused as exc:
        logger.info("Quiz %s refused %s: %s", quiz.id, identity.email, exc.code)
        raise _refusal(exc)
    progress = await progress_store.start(quiz.id, identity.email, quiz.time_limit_minutes)
    return AttemptStart(
        **_progress_read(progress, datetime.utcnow()),
        attempts=attempts,
        max_attempts=quiz.max_attempts,
    )


@router.get("/{quiz_id}/progress", response_model=ProgressRead)
async def load_progress(
    quiz_id: int,
    email: str,
    progress_store: ProgressStore = Depends(get_progress_store),
):
    progress = await progress_store.load(quiz_id, email.strip().lower())
    if progress is None:
        raise HTTPException(status_code=404, detail="No attempt in progress")
    return ProgressRead(**_progress_read(progress, datetime.utcnow()))


@router.put("/{quiz_id}/progress", response_model=ProgressRead)
async def save_progress(
    quiz_id: int,
    data: ProgressSave,
    db: AsyncSession = Depends(get_session),
    progress_store: ProgressStore = Depends(get_progress_store),
):
    await _get_available_quiz(db, quiz_id)
    email = data.email.strip().lower()
    if await progress_store.load(quiz_id, email) is None:
        raise HTTPException(status_code=404, detail="No attempt in progress")
    progress = await progress_store.save(quiz_id, email, data.answers, data.current_index)
    return ProgressRead(**_progress_read(progress, datetime.utcnow()))


@router.delete("/{quiz_id}/progress", status_code=status.HTTP_204_NO_CONTENT)
async def reset_progress(
    quiz_id: int,
    email: str,
    progress_store: ProgressStore = Depends(get_progress_store),
):
    """Start the answers over; the attempt's deadline keeps running."""
    await progress_store.reset(quiz_id, email.strip().lower())


@router.post("/{quiz_id}/submit", response_model=SubmissionResult)
async def submit_quiz(
    quiz_id: int,
    data: SubmissionCreate,
    db: AsyncSession = Depends(get_session),
    progress_store: ProgressStore = Depends(get_progress_store),
):
    """Grade and store one attempt.

    Answers arriving after the attempt's deadline are still accepted as the
    automatic final submission and flagged ``auto_submitted``.
    """
    identity = normalize_identity(data.student)
    quiz = await get_quiz(db, quiz_id)
    try:
        attempts = (
            await count_prior_submissions(db, quiz.id, identity.email) if quiz else 0
        )
        graded = grade_submission(quiz, data.answers, attempts)
        progress = await progress_store.load(quiz.id, identity.email)
        auto_submitted = progress is not None and is_past_deadline(
            progress.deadline, datetime.utcnow()
        )
        submission = await record_submission(db, quiz, identity, graded, auto_submitted)
    except AdmissionRefused as exc:
        logger.warning("Submission to quiz %s by %s refused: %s", quiz_id, identity.email, exc.code)
        raise _refusal(exc)
    await progress_store.clear(quiz.id, identity.email)
    settings = await get_settings(db)
    logger.info(
        "Quiz %s attempt %s by %s scored %s/%s%s",
        quiz.id,
        submission.attempt_number,
        identity.email,
        submission.score,
        submission.total,
        " (auto-submitted)" if auto_submitted else "",
    )
    return SubmissionResult(
        **submission.model_dump(),
        max_attempts=quiz.max_attempts,
        passed=submission.percentage >= settings.pass_threshold,
    )
