# qemaker/auth.py
"""Admin authentication: password hashing, bearer tokens and the email allow-list."""

import os
from datetime import datetime, timedelta
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from qemaker.models import Admin
from qemaker.database import get_session

SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Any address on this domain may sign in; others must be whitelisted.
ADMIN_EMAIL_DOMAIN = os.getenv("ADMIN_EMAIL_DOMAIN", "pcu.edu.ph").lower().lstrip("@")
ADMIN_WHITELIST = [
    e.strip().lower()
    for e in os.getenv("ADMIN_WHITELIST", "").split(",")
    if e.strip()
]

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/token")


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def is_authorized_email(email: str) -> bool:
    lower = email.strip().lower()
    if ADMIN_EMAIL_DOMAIN and lower.endswith("@" + ADMIN_EMAIL_DOMAIN):
        return True
    return lower in ADMIN_WHITELIST


async def get_admin_by_email(db: AsyncSession, email: str):
    result = await db.execute(select(Admin).where(Admin.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def authenticate_admin(db: AsyncSession, email: str, password: str):
    admin = await get_admin_by_email(db, email)
    if not admin or not verify_password(password, admin.password_hash):
        return None
    return admin


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


async def get_current_admin(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_session),
) -> Admin:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        email: str = payload.get("sub")
        if email is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception
    admin = await get_admin_by_email(db, email)
    if admin is None:
        raise credentials_exception
    # The allow-list may have shrunk since the token was issued.
    if not is_authorized_email(admin.email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "code": "auth_email_not_allowed",
                "message": "Your email is not authorized to access the admin panel.",
            },
        )
    return admin
