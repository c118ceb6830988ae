"""Tests for admin registration, login and the email allow-list."""

import asyncio
import importlib
import pathlib
import sys
from datetime import datetime

from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlmodel import SQLModel

# Allow importing the qemaker package
sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from qemaker.main import app
from qemaker.database import get_session
from qemaker import auth


async def _setup_test_db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    TestSession = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_session():
        async with TestSession() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    return TestSession


def test_register_login_and_me():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await client.post(
                "/register",
                json={
                    "name": "Teacher",
                    "email": "Teacher@PCU.edu.ph",
                    "password": "pass",
                },
            )
            assert resp.status_code == 200
            assert resp.json()["email"] == "teacher@pcu.edu.ph"

            # Same address again, different case
            resp = await client.post(
                "/register",
                json={"name": "Again", "email": "teacher@pcu.edu.ph", "password": "x"},
            )
            assert resp.status_code == 400
            assert resp.json()["detail"]["code"] == "auth_email_registered"

            resp = await client.post(
                "/login", json={"email": "teacher@pcu.edu.ph", "password": "wrong"}
            )
            assert resp.status_code == 401
            assert resp.json()["detail"]["code"] == "auth_invalid_credentials"

            resp = await client.post(
                "/login", json={"email": "teacher@pcu.edu.ph", "password": "pass"}
            )
            assert resp.status_code == 200
            headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}

            resp = await client.get("/me", headers=headers)
            assert resp.status_code == 200
            assert resp.json()["name"] == "Teacher"

            # OAuth2 form flow
            resp = await client.post(
                "/token",
                data={"username": "teacher@pcu.edu.ph", "password": "pass"},
            )
            assert resp.status_code == 200
            assert resp.json()["token_type"] == "bearer"

            resp = await client.get("/me")
            assert resp.status_code == 401

    asyncio.run(run())


def test_email_allow_list(monkeypatch):
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await client.post(
                "/register",
                json={"name": "Outsider", "email": "someone@gmail.com", "password": "pass"},
            )
            assert resp.status_code == 403
            assert resp.json()["detail"]["code"] == "auth_email_not_allowed"

            monkeypatch.setattr(auth, "ADMIN_WHITELIST", ["someone@gmail.com"])
            resp = await client.post(
                "/register",
                json={"name": "Guest", "email": "someone@gmail.com", "password": "pass"},
            )
            assert resp.status_code == 200

            resp = await client.post(
                "/login", json={"email": "someone@gmail.com", "password": "pass"}
            )
            assert resp.status_code == 200
            headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}
            assert (await client.get("/me", headers=headers)).status_code == 200

            # Removing the address from the whitelist locks the account out
            monkeypatch.setattr(auth, "ADMIN_WHITELIST", [])
            resp = await client.get("/me", headers=headers)
            assert resp.status_code == 403
            resp = await client.post(
                "/login", json={"email": "someone@gmail.com", "password": "pass"}
            )
            assert resp.status_code == 403

    asyncio.run(run())


def test_is_authorized_email():
    assert auth.is_authorized_email("prof@pcu.edu.ph")
    assert auth.is_authorized_email("  PROF@PCU.EDU.PH ")
    assert not auth.is_authorized_email("prof@pcu.edu.ph.evil.com")
    assert not auth.is_authorized_email("prof@gmail.com")


def test_access_token_expiration_respects_env(monkeypatch):
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1")
    importlib.reload(auth)

    token = auth.create_access_token(data={"sub": "test"})
    decoded = jwt.decode(token, auth.SECRET_KEY, algorithms=[auth.ALGORITHM])
    exp = datetime.utcfromtimestamp(decoded["exp"])
    delta = exp - datetime.utcnow()
    assert 45 <= delta.total_seconds() <= 75

    monkeypatch.delenv("ACCESS_TOKEN_EXPIRE_MINUTES", raising=False)
    importlib.reload(auth)


def test_password_that_looks_hashed_is_still_hashed():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await client.post(
                "/register",
                json={
                    "name": "Teacher",
                    "email": "teacher@pcu.edu.ph",
                    "password": "$2b$mypassword",
                },
            )
            assert resp.status_code == 200
            resp = await client.post(
                "/login",
                json={"email": "teacher@pcu.edu.ph", "password": "$2b$mypassword"},
            )
            assert resp.status_code == 200
            assert "access_token" in resp.json()

    asyncio.run(run())
