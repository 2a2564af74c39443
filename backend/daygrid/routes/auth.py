"""
Daygrid Backend - Authentication Routes
=========================================

What:  Sign-up, sign-in, token refresh, sign-out and "who am I".
How:   Thin wrappers around AuthService; tokens are stateless JWTs.
Who:   Called by the app's sign-in and sign-up screens and its session restore.

Session Flow:
    signup / signin ──▶ {access_token, refresh_token}
    every request   ──▶ Authorization: Bearer <access_token>
    near expiry     ──▶ POST /api/auth/refresh {refresh_token}
    signout         ──▶ client discards both tokens
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid.database import get_db_session
from daygrid.models import Profile
from daygrid.schemas.auth import RefreshRequest, SignInRequest, SignUpRequest, TokenResponse
from daygrid.schemas.common import ErrorResponse
from daygrid.schemas.profile import OwnProfileResponse
from daygrid.security import get_current_user
from daygrid.services.auth_service import auth_service
from daygrid.services.profile_service import profile_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/signup",
    status_code=201,
    response_model=TokenResponse,
    responses={
        400: {"description": "Password too short", "model": ErrorResponse},
        409: {"description": "Email or username already registered", "model": ErrorResponse},
    },
    summary="Create an account",
    description=(
        "Registers a new account and returns a token pair. When no username is given, "
        "one is generated from the email address."
    ),
)
async def sign_up(
    body: SignUpRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    return await auth_service.sign_up(
        db=db, email=body.email, password=body.password, username=body.username
    )


@router.post(
    "/signin",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Sign in with email and password",
)
async def sign_in(
    body: SignInRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    return await auth_service.sign_in(db=db, email=body.email, password=body.password)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    responses={401: {"description": "Refresh token invalid or expired", "model": ErrorResponse}},
    summary="Exchange a refresh token for a new token pair",
)
async def refresh(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    return await auth_service.refresh(db=db, refresh_token=body.refresh_token)


@router.post(
    "/signout",
    status_code=204,
    responses={401: {"description": "Not signed in", "model": ErrorResponse}},
    summary="Sign out",
)
async def sign_out(current_user: Profile = Depends(get_current_user)) -> None:
    """
    Tokens are not stored server-side, so signing out only confirms the
    token was valid; the client drops its copies.
    """
    logger.info("Profile %s signed out", current_user.id)


@router.get(
    "/me",
    response_model=OwnProfileResponse,
    responses={401: {"description": "Not signed in", "model": ErrorResponse}},
    summary="Current signed-in profile",
)
async def me(current_user: Profile = Depends(get_current_user)) -> OwnProfileResponse:
    return profile_service.own_profile(current_user)
