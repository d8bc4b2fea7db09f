"""Password hashing and bearer-token helpers for the auth routes.

Tokens are HS256 JWTs whose ``sub`` is the user's UUID; ``email`` and
``scopes`` are optional claims carried through to :class:`TokenData`.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerifyMismatchError
from fastapi import HTTPException, status
from jose import JWTError, jwt

from core.config import get_settings
from schemas.auth import TokenData


logger = logging.getLogger(__name__)

# Argon2id with library defaults; one instance is enough for the process
hasher = PasswordHasher()


def get_password_hash(password: str) -> str:
    return hasher.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Check ``plain`` against a stored Argon2 hash.

    A mismatch and an unreadable hash both count as a failed login.
    """
    try:
        return hasher.verify(hashed, plain)
    except (VerifyMismatchError, HashingError, InvalidHashError):
        return False


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(
    data: dict[str, Any], expires_delta: timedelta | None = None
) -> str:
    """Sign ``data`` plus an ``exp`` claim.

    The lifetime defaults to ``ACCESS_TOKEN_EXPIRE_MINUTES``.
    """
    settings = get_settings()
    lifetime = expires_delta or timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    claims = {**data, "exp": datetime.now(UTC) + lifetime}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> TokenData:
    """Verify signature and expiry, then return the token's claims.

    Raises:
        HTTPException: 401 for a bad signature, an expired token or a
            token without a subject.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError as err:
        raise _credentials_error("Could not validate credentials") from err

    subject = claims.get("sub")
    if subject is None:
        logger.debug("Rejected token without a subject claim")
        raise _credentials_error("Token missing subject")

    scopes = claims.get("scopes")
    return TokenData(
        sub=str(subject),
        email=claims.get("email"),
        scopes=scopes if isinstance(scopes, list) else [],
    )
