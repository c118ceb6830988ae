from typing import Optional
from pydantic import BaseModel, EmailStr


class AdminCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    picture: Optional[str] = None


class AdminResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    email: EmailStr
    picture: Optional[str] = None


class AdminLogin(BaseModel):
    email: EmailStr
    password: str
