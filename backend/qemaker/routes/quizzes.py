"""Admin endpoints for authoring and managing quizzes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from qemaker.database import get_session
from qemaker.auth import get_current_admin
from qemaker.models import Admin, Quiz
from qemaker.parser import parse_quiz_report, parse_quiz_text
from qemaker.schemas import (
    CorrectAnswerUpdate,
    ParseReport,
    QuizCreate,
    QuizPolicyUpdate,
    QuizPreviewRequest,
    QuizRead,
    QuizTitleUpdate,
    SubmissionRead,
)
from qemaker.crud import (
    create_quiz,
    delete_quiz,
    get_quiz,
    get_quizzes_by_admin,
    get_settings,
    get_submissions_by_quiz,
    save_quiz,
    update_correct_answer,
)
from qemaker.routes.classes import get_owned_classroom

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quizzes", tags=["quizzes"])


async def _get_owned_quiz(db: AsyncSession, quiz_id: int, admin: Admin) -> Quiz:
    quiz = await get_quiz(db, quiz_id)
    if not quiz or quiz.admin_id != admin.id:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return quiz


@router.post("/preview", response_model=ParseReport)
async def preview_quiz(
    data: QuizPreviewRequest,
    current_admin: Admin = Depends(get_current_admin),
):
    """Live preview of how pasted text will be parsed."""
    return parse_quiz_report(data.raw_input)


@router.post("/", response_model=QuizRead)
async def create_quiz_route(
    data: QuizCreate,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    classroom = await get_owned_classroom(db, data.class_id, current_admin)
    questions = parse_quiz_text(data.raw_input)
    if not questions:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "no_valid_questions",
                "message": "No valid questions found. Check your formatting.",
            },
        )
    settings = await get_settings(db)
    quiz = Quiz(
        title=data.title.strip(),
        class_id=classroom.id,
        class_code=classroom.code,
        admin_id=current_admin.id,
        questions=[q.model_dump() for q in questions],
        raw_input=data.raw_input,
        is_active=True,
        max_attempts=(
            data.max_attempts
            if data.max_attempts is not None
            else settings.default_max_attempts
        ),
        time_limit_minutes=(
            data.time_limit_minutes
            if data.time_limit_minutes is not None
            else settings.default_time_limit_minutes
        ),
    )
    quiz = await create_quiz(db, quiz)
    logger.info(
        "Admin %s created quiz %s with %s questions",
        current_admin.email,
        quiz.id,
        len(questions),
    )
    return quiz


@router.get("/", response_model=list[QuizRead])
async def list_quizzes(
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    return await get_quizzes_by_admin(db, current_admin.id)


@router.get("/{quiz_id}", response_model=QuizRead)
async def read_quiz(
    quiz_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    return await _get_owned_quiz(db, quiz_id, current_admin)


@router.post("/{quiz_id}/toggle", response_model=QuizRead)
async def toggle_quiz(
    quiz_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    """Flip the quiz between accepting and refusing students."""
    quiz = await _get_owned_quiz(db, quiz_id, current_admin)
    quiz.is_active = not quiz.is_active
    logger.info("Quiz %s is_active set to %s", quiz.id, quiz.is_active)
    return await save_quiz(db, quiz)


@router.put("/{quiz_id}/title", response_model=QuizRead)
async def update_title(
    quiz_id: int,
    data: QuizTitleUpdate,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    quiz = await _get_owned_quiz(db, quiz_id, current_admin)
    quiz.title = data.title.strip()
    return await save_quiz(db, quiz)


@router.put("/{quiz_id}/questions/{number}/answer", response_model=QuizRead)
async def update_answer(
    quiz_id: int,
    number: int,
    data: CorrectAnswerUpdate,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    """Overwrite the correct answer of one question.

    Existing submissions keep the grading they were given.
    """
    quiz = await _get_owned_quiz(db, quiz_id, current_admin)
    try:
        quiz = await update_correct_answer(db, quiz, number, data.correct_answer)
    except LookupError:
        raise HTTPException(status_code=404, detail="Question not found")
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "invalid_answer_label", "message": str(exc)},
        )
    logger.info("Quiz %s question %s answer set to %s", quiz.id, number, data.correct_answer)
    return quiz


@router.put("/{quiz_id}/policy", response_model=QuizRead)
async def update_policy(
    quiz_id: int,
    data: QuizPolicyUpdate,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    """Change the attempt limit and/or time limit."""
    quiz = await _get_owned_quiz(db, quiz_id, current_admin)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(quiz, field, value)
    return await save_quiz(db, quiz)


@router.delete("/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quiz_route(
    quiz_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    quiz = await _get_owned_quiz(db, quiz_id, current_admin)
    await delete_quiz(db, quiz)
    logger.info("Admin %s deleted quiz %s", current_admin.email, quiz_id)


@router.get("/{quiz_id}/submissions", response_model=list[SubmissionRead])
async def list_quiz_submissions(
    quiz_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    quiz = await _get_owned_quiz(db, quiz_id, current_admin)
    return await get_submissions_by_quiz(db, quiz.id)
