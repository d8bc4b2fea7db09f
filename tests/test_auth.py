"""Authentication tests.

Covers:
- Registration returns a token and the public user
- Duplicate e-mail and short password are rejected
- Login succeeds with the e-mail as username and fails on a wrong password
- Protected routes reject missing, expired and foreign tokens
"""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest
from fastapi import status
from httpx import AsyncClient

from core.security import create_access_token, decode_token
from models.users import User


REGISTER_URL = "/api/v1/auth/register"
LOGIN_URL = "/api/v1/auth/login"
PROTECTED_URL = "/api/v1/ideas"


@pytest.mark.asyncio
async def test_register_returns_token_and_user(db_client: AsyncClient) -> None:
    resp = await db_client.post(
        REGISTER_URL,
        json={"email": "Founder@Example.com", "password": "longenough", "name": "Ada"},
    )

    assert resp.status_code == status.HTTP_201_CREATED
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["user"] == {"email": "founder@example.com", "name": "Ada"}
    assert decode_token(body["access_token"]).email == "founder@example.com"


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts(db_client: AsyncClient) -> None:
    payload = {"email": "dup@example.com", "password": "longenough"}
    first = await db_client.post(REGISTER_URL, json=payload)
    assert first.status_code == status.HTTP_201_CREATED

    again = await db_client.post(
        REGISTER_URL, json={**payload, "email": "DUP@example.com"}
    )
    assert again.status_code == status.HTTP_409_CONFLICT
    assert again.json()["success"] is False


@pytest.mark.asyncio
async def test_register_short_password_is_invalid(db_client: AsyncClient) -> None:
    resp = await db_client.post(
        REGISTER_URL, json={"email": "short@example.com", "password": "1234567"}
    )
    assert resp.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert resp.json()["error"]["type"] == "validation_error"


@pytest.mark.asyncio
async def test_login_with_email(db_client: AsyncClient, demo_user: User) -> None:
    resp = await db_client.post(
        LOGIN_URL, data={"username": demo_user.email, "password": "password123"}
    )

    assert resp.status_code == status.HTTP_200_OK
    token = resp.json()["access_token"]
    assert decode_token(token).sub == str(demo_user.id)


@pytest.mark.asyncio
async def test_login_wrong_password(db_client: AsyncClient, demo_user: User) -> None:
    resp = await db_client.post(
        LOGIN_URL, data={"username": demo_user.email, "password": "wrong-password"}
    )
    assert resp.status_code == status.HTTP_401_UNAUTHORIZED
    assert resp.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_login_unknown_user(db_client: AsyncClient) -> None:
    resp = await db_client.post(
        LOGIN_URL, data={"username": "nobody@example.com", "password": "whatever1"}
    )
    assert resp.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_protected_route_requires_token(db_client: AsyncClient) -> None:
    resp = await db_client.get(PROTECTED_URL)
    assert resp.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_protected_route_accepts_valid_token(
    db_client: AsyncClient, demo_user: User
) -> None:
    token = create_access_token({"sub": str(demo_user.id)})
    resp = await db_client.get(
        PROTECTED_URL, headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == status.HTTP_200_OK
    assert resp.json()["data"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "claims,expires",
    [
        ({"sub": "user"}, timedelta(minutes=5)),  # not a UUID
        ({"sub": str(uuid4())}, timedelta(minutes=5)),  # unknown user
        ({"email": "a@example.com"}, timedelta(minutes=5)),  # no subject
    ],
)
async def test_protected_route_rejects_bad_tokens(
    db_client: AsyncClient, claims: dict, expires: timedelta
) -> None:
    token = create_access_token(claims, expires_delta=expires)
    resp = await db_client.get(
        PROTECTED_URL, headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_expired_token_is_rejected(
    db_client: AsyncClient, demo_user: User
) -> None:
    token = create_access_token(
        {"sub": str(demo_user.id)}, expires_delta=timedelta(seconds=-5)
    )
    resp = await db_client.get(
        PROTECTED_URL, headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == status.HTTP_401_UNAUTHORIZED
