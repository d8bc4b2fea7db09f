"""Bearer-token authentication for the protected routers."""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from core.security import decode_token
from crud.user import get_user_by_id
from dependencies.db import DbSession
from models.users import User


logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def user_id_from_token(token: str) -> UUID:
    """Return the UUID in the token's ``sub`` claim.

    Raises:
        HTTPException: 401 when the token is invalid or ``sub`` is not a UUID.
    """
    claims = decode_token(token)
    try:
        return UUID(claims.sub or "")
    except ValueError as exc:
        logger.debug("Token subject %r is not a user id", claims.sub)
        raise unauthorized() from exc


async def get_current_user(
    db: DbSession,
    token: Annotated[str, Depends(oauth2_scheme)],
) -> User:
    """Load the user the bearer token was issued to; 401 if it no longer exists."""
    user = await get_user_by_id(db, user_id_from_token(token))
    if user is None:
        logger.debug("Token issued to an unknown user")
        raise unauthorized()
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
