"""FastAPI application entry point.

This module wires together the API routers, configures logging and
middleware, and exposes the ASGI application object used by the server.
"""

import os
import logging
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from qemaker.routes import (
    auth,
    classes,
    quizzes,
    students,
    take,
    settings,
)
from qemaker.database import create_db_and_tables, async_session, get_session
from qemaker.crud import get_settings

# The log level can be controlled with an environment variable so
# deployments can adjust verbosity without code changes.
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, LOG_LEVEL))
logger = logging.getLogger(__name__)

app = FastAPI(title="QEMaker API")

# CORS setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup():
    """Create tables and make sure the settings row exists."""

    await create_db_and_tables()
    async with async_session() as session:
        await get_settings(session)
    logger.info("QEMaker API started")


app.include_router(auth.router)
app.include_router(classes.router)
app.include_router(quizzes.router)
app.include_router(students.router)
app.include_router(take.router)
app.include_router(settings.router)


@app.get("/")
async def read_root(db: AsyncSession = Depends(get_session)):
    s = await get_settings(db)
    return {"message": f"Welcome to {s.site_name} API"}


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler that logs the stack trace once."""
    logger.exception("Unhandled error during request %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "code": "internal_server_error",
            "message": "An unexpected error occurred",
        },
    )
