from typing import List
from datetime import datetime
from pydantic import BaseModel, Field


class ClassroomCreate(BaseModel):
    name: str = Field(min_length=1)


class ClassroomRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    code: str
    created_at: datetime


class StudentRead(BaseModel):
    email: str
    full_name: str
    section: str
    year_course: str
    submissions_count: int


class ClassStudentRead(StudentRead):
    last_submitted_at: datetime
    avg_percentage: int
    quizzes_taken: List[str]
