"""Schemas for saving and resuming an in-progress quiz attempt."""

from typing import Dict, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class ProgressSave(BaseModel):
    email: str
    answers: Dict[int, str] = {}
    current_index: int = Field(default=0, ge=0)


class ProgressRead(BaseModel):
    answers: Dict[int, str]
    current_index: int
    started_at: datetime
    deadline: Optional[datetime] = None
    seconds_remaining: Optional[int] = None


class AttemptStart(ProgressRead):
    attempts: int
    max_attempts: int
