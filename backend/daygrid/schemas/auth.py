"""
Daygrid Backend - Authentication Schemas
==========================================

What:  Request bodies for sign-up / sign-in / refresh and the token response.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class SignUpRequest(BaseModel):
    email: EmailStr = Field(description="Account email (case-insensitive, unique)")
    password: str = Field(min_length=1, max_length=128, description="Account password")
    username: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Desired username. Generated from the email when omitted.",
    )

    @field_validator("username")
    @classmethod
    def blank_username_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class TokenResponse(BaseModel):
    """
    Returned by sign-up, sign-in and refresh.

    The client sends `access_token` as `Authorization: Bearer <token>` and
    trades `refresh_token` for a new pair before the access token expires.
    """
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Access token lifetime in seconds")
    user_id: str = Field(description="ID of the signed-in profile")
