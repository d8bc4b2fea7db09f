from pydantic import BaseModel, EmailStr, Field


class Token(BaseModel):
    access_token: str = Field(..., description="Access token for authentication")
    token_type: str = Field(..., description="Type of the token, e.g., 'bearer'")


class TokenData(BaseModel):
    sub: str | None = Field(
        default=None,
        description="Subject (user identifier) of the token",
    )
    email: str | None = Field(
        default=None, description="E-mail address the token was issued for"
    )
    scopes: list[str] = Field(
        default_factory=list,
        description="Scopes/permissions associated with the token",
    )


class UserPublic(BaseModel):
    """User fields that are safe to return to the client."""

    email: str
    name: str | None = None


class AuthResponse(Token):
    """Response model for register, extending Token with user info."""

    user: UserPublic


class UserRegister(BaseModel):
    """Schema for user registration."""

    email: EmailStr = Field(..., description="Valid email address")
    password: str = Field(
        ...,
        min_length=8,
        description="Password with minimum length of 8 characters",
    )
    name: str | None = Field(
        default=None, max_length=100, description="Optional display name"
    )
