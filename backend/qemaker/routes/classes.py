"""Admin endpoints for classes and their per-class reports."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from qemaker.database import get_session
from qemaker.auth import get_current_admin
from qemaker.models import Admin, Classroom
from qemaker.schemas import (
    ClassroomCreate,
    ClassroomRead,
    ClassStudentRead,
    ClassSubmissionRead,
    QuizRead,
    SubmissionRead,
)
from qemaker.crud import (
    create_classroom,
    get_classrooms_by_admin,
    get_classroom,
    delete_classroom,
    get_quizzes_by_class,
    get_students_by_class,
    get_submissions_by_class,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/classes", tags=["classes"])


async def get_owned_classroom(db: AsyncSession, class_id: int, admin: Admin) -> Classroom:
    classroom = await get_classroom(db, class_id)
    if not classroom or classroom.admin_id != admin.id:
        raise HTTPException(status_code=404, detail="Class not found")
    return classroom


@router.post("/", response_model=ClassroomRead)
async def create_class_route(
    data: ClassroomCreate,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    classroom = await create_classroom(db, current_admin.id, data.name)
    logger.info("Admin %s created class %s (%s)", current_admin.email, classroom.id, classroom.code)
    return classroom


@router.get("/", response_model=list[ClassroomRead])
async def list_classes(
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    return await get_classrooms_by_admin(db, current_admin.id)


@router.get("/{class_id}", response_model=ClassroomRead)
async def read_class(
    class_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    return await get_owned_classroom(db, class_id, current_admin)


@router.delete("/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_class_route(
    class_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    classroom = await get_owned_classroom(db, class_id, current_admin)
    await delete_classroom(db, classroom)
    logger.info("Admin %s deleted class %s", current_admin.email, class_id)


@router.get("/{class_id}/quizzes", response_model=list[QuizRead])
async def list_class_quizzes(
    class_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    await get_owned_classroom(db, class_id, current_admin)
    return await get_quizzes_by_class(db, class_id, current_admin.id)


@router.get("/{class_id}/students", response_model=list[ClassStudentRead])
async def list_class_students(
    class_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    await get_owned_classroom(db, class_id, current_admin)
    return await get_students_by_class(db, class_id, current_admin.id)


@router.get("/{class_id}/submissions", response_model=list[ClassSubmissionRead])
async def list_class_submissions(
    class_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    await get_owned_classroom(db, class_id, current_admin)
    rows = await get_submissions_by_class(db, class_id, current_admin.id)
    return [
        ClassSubmissionRead(
            **SubmissionRead.model_validate(sub).model_dump(), quiz_title=title
        )
        for sub, title in rows
    ]
