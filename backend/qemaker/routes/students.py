from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qemaker.database import get_session
from qemaker.auth import get_current_admin
from qemaker.models import Admin
from qemaker.schemas import StudentRead
from qemaker.crud import get_students_for_admin

router = APIRouter(prefix="/students", tags=["students"])


@router.get("/", response_model=list[StudentRead])
async def list_students(
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    """Everyone who has submitted any of the current admin's quizzes."""
    return await get_students_for_admin(db, current_admin.id)
