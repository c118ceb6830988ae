"""Server-side storage for in-progress quiz attempts.

A student's partial answers, current question and timer deadline are saved
here so that a reload or crash can resume the attempt instead of restarting
it. Route handlers receive a :class:`ProgressStore` through the
``get_progress_store`` dependency; grading never touches it.
"""

import logging
from datetime import datetime
from typing import Mapping, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, delete

from qemaker.database import get_session
from qemaker.grading import compute_deadline
from qemaker.models import QuizProgress

logger = logging.getLogger(__name__)


class ProgressStore:
    """Save, load and clear progress rows keyed by (quiz, normalized email)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load(self, quiz_id: int, email: str) -> Optional[QuizProgress]:
        result = await self.db.execute(
            select(QuizProgress).where(
                QuizProgress.quiz_id == quiz_id, QuizProgress.email == email
            )
        )
        return result.scalar_one_or_none()

    async def start(
        self,
        quiz_id: int,
        email: str,
        time_limit_minutes: int,
        now: Optional[datetime] = None,
    ) -> QuizProgress:
        """Return the existing progress row or create one.

        The deadline is fixed the first time an attempt starts; resuming
        never extends it.
        """
        progress = await self.load(quiz_id, email)
        if progress is not None:
            return progress
        now = now or datetime.utcnow()
        progress = QuizProgress(
            quiz_id=quiz_id,
            email=email,
            started_at=now,
            deadline=compute_deadline(now, time_limit_minutes),
            updated_at=now,
        )
        self.db.add(progress)
        await self.db.commit()
        await self.db.refresh(progress)
        logger.info("Started attempt on quiz %s for %s", quiz_id, email)
        return progress

    async def save(
        self,
        quiz_id: int,
        email: str,
        answers: Mapping[int, str],
        current_index: int,
        deadline: Optional[datetime] = None,
    ) -> QuizProgress:
        progress = await self.load(quiz_id, email)
        if progress is None:
            progress = QuizProgress(quiz_id=quiz_id, email=email, deadline=deadline)
        elif deadline is not None:
            progress.deadline = deadline
        # JSON object keys are strings; they are converted back on read.
        progress.answers = {str(number): label for number, label in answers.items()}
        progress.current_index = current_index
        progress.updated_at = datetime.utcnow()
        self.db.add(progress)
        await self.db.commit()
        await self.db.refresh(progress)
        return progress

    async def reset(self, quiz_id: int, email: str) -> Optional[QuizProgress]:
        """Discard saved answers but keep the attempt's start and deadline."""
        progress = await self.load(quiz_id, email)
        if progress is None:
            return None
        progress.answers = {}
        progress.current_index = 0
        progress.updated_at = datetime.utcnow()
        self.db.add(progress)
        await self.db.commit()
        await self.db.refresh(progress)
        return progress

    async def clear(self, quiz_id: int, email: str) -> None:
        """Remove the progress row once the attempt has been submitted."""
        await self.db.execute(
            delete(QuizProgress).where(
                QuizProgress.quiz_id == quiz_id, QuizProgress.email == email
            )
        )
        await self.db.commit()


def progress_answers(progress: QuizProgress) -> dict[int, str]:
    return {int(number): label for number, label in (progress.answers or {}).items()}


async def get_progress_store(db: AsyncSession = Depends(get_session)) -> ProgressStore:
    return ProgressStore(db)
