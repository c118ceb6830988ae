# qemaker/routes/auth.py
"""Authentication endpoints: login, token generation and registration."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from qemaker.auth import (
    create_access_token,
    authenticate_admin,
    get_admin_by_email,
    get_current_admin,
    get_password_hash,
    is_authorized_email,
)
from qemaker.database import get_session
from qemaker.models import Admin
from qemaker.crud import create_admin
from qemaker.schemas import AdminCreate, AdminResponse, AdminLogin

logger = logging.getLogger(__name__)
router = APIRouter(tags=["auth"])


def _not_allowed(email: str) -> HTTPException:
    logger.warning("Rejected admin access for unlisted email %s", email)
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "code": "auth_email_not_allowed",
            "message": "Your email is not authorized to access the admin panel.",
        },
    )


def _invalid_credentials() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "code": "auth_invalid_credentials",
            "message": "Invalid email or password",
        },
    )


@router.post("/token")
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_session),
):
    """OAuth2 password flow used by interactive docs and external clients."""

    admin = await authenticate_admin(db, form_data.username, form_data.password)
    if not admin:
        logger.warning("Failed OAuth login for %s", form_data.username)
        raise _invalid_credentials()
    if not is_authorized_email(admin.email):
        raise _not_allowed(admin.email)
    logger.info("Admin %s logged in via OAuth form", admin.email)
    access_token = create_access_token(data={"sub": admin.email})
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/login")
async def login(admin_in: AdminLogin, db: AsyncSession = Depends(get_session)):
    """JSON-based login used by the frontend."""

    admin = await authenticate_admin(db, admin_in.email, admin_in.password)
    if not admin:
        logger.warning("Failed login for %s", admin_in.email)
        raise _invalid_credentials()
    if not is_authorized_email(admin.email):
        raise _not_allowed(admin.email)
    logger.info("Admin %s logged in", admin.email)
    access_token = create_access_token(data={"sub": admin.email})
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/register", response_model=AdminResponse)
async def register(admin_in: AdminCreate, db: AsyncSession = Depends(get_session)):
    """Register an admin account for an allow-listed email."""

    if not is_authorized_email(admin_in.email):
        raise _not_allowed(admin_in.email)
    if await get_admin_by_email(db, admin_in.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "auth_email_registered",
                "message": "Email is already registered.",
            },
        )
    admin = Admin(
        name=admin_in.name.strip() or admin_in.email.split("@")[0],
        email=admin_in.email,
        password_hash=get_password_hash(admin_in.password),
        picture=admin_in.picture,
    )
    admin = await create_admin(db, admin)
    logger.info("Admin %s registered", admin.email)
    return admin


@router.get("/me", response_model=AdminResponse)
async def read_current_admin(current_admin: Admin = Depends(get_current_admin)):
    """Return details for the authenticated admin."""
    return current_admin
