"""Registration and login routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from core.exceptions import DuplicateUserError
from core.ratelimit import check_rate_limit
from core.security import create_access_token, get_password_hash
from crud.user import authenticate_user, create_user
from dependencies.db import DbSession
from models.users import User
from schemas.auth import AuthResponse, Token, UserPublic, UserRegister


router = APIRouter(prefix="/auth", tags=["auth"])

PasswordForm = Annotated[OAuth2PasswordRequestForm, Depends()]

_logger = logging.getLogger(__name__)


def _token_for(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "email": user.email})


@router.post("/login", response_model=Token, dependencies=[Depends(check_rate_limit)])
async def login(form_data: PasswordForm, db: DbSession) -> Token:
    """
    OAuth2-compatible token login, get an access token for future requests.

    - **username**: The user's e-mail address
    - **password**: The user's password
    """
    user = await authenticate_user(db, form_data.username, form_data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Token(access_token=_token_for(user), token_type="bearer")


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=201,
    dependencies=[Depends(check_rate_limit)],
)
async def register(payload: UserRegister, db: DbSession) -> AuthResponse:
    """
    Register a new user account and log it in.

    - **email**: Valid email address
    - **password**: At least 8 characters
    - **name**: Optional display name
    """
    hashed_password = get_password_hash(payload.password)

    try:
        user = await create_user(
            db=db,
            email=payload.email,
            hashed_password=hashed_password,
            name=payload.name,
        )
    except DuplicateUserError as err:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        ) from err

    _logger.info("Registered user %s", user.id)
    return AuthResponse(
        access_token=_token_for(user),
        token_type="bearer",
        user=UserPublic(email=user.email, name=user.name),
    )
