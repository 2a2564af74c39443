"""
Daygrid Backend - Profile Routes
==================================

What:  The signed-in user's own profile, and read-only views of other profiles.
Who:   Called by the profile screen, the edit-profile screen and user pages.

Route Inventory:
    GET    /api/profile                      own profile (email, tasks, slots)
    PATCH  /api/profile                      edit username / name / avatar URL
    POST   /api/profile/avatar               upload a new avatar image
    DELETE /api/profile                      delete the account
    GET    /api/profiles/{user_id}           public view of any profile
    GET    /api/profiles/{user_id}/posts     posts for a profile tab
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid.database import get_db_session
from daygrid.models import Profile
from daygrid.schemas.common import ErrorResponse
from daygrid.schemas.post import PostListResponse, PostSection
from daygrid.schemas.profile import (
    OwnProfileResponse,
    ProfileUpdateRequest,
    PublicProfileResponse,
)
from daygrid.security import get_current_user
from daygrid.services.post_service import post_service
from daygrid.services.profile_service import profile_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Profiles"])


@router.get(
    "/profile",
    response_model=OwnProfileResponse,
    summary="Get your own profile",
)
async def get_own_profile(
    current_user: Profile = Depends(get_current_user),
) -> OwnProfileResponse:
    return profile_service.own_profile(current_user)


@router.patch(
    "/profile",
    response_model=OwnProfileResponse,
    responses={
        400: {"description": "Username missing", "model": ErrorResponse},
        409: {"description": "Username already taken", "model": ErrorResponse},
    },
    summary="Edit your profile",
)
async def update_profile(
    body: ProfileUpdateRequest,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> OwnProfileResponse:
    return await profile_service.update_profile(
        db=db,
        profile=current_user,
        username=body.username,
        name=body.name,
        avatar=body.avatar,
    )


@router.post(
    "/profile/avatar",
    response_model=OwnProfileResponse,
    responses={400: {"description": "Invalid file type or size", "model": ErrorResponse}},
    summary="Upload a new avatar",
    description="Upload a PNG or JPEG image (max 10MB) and make it your avatar.",
)
async def upload_avatar(
    file: UploadFile = File(..., description="Avatar image (PNG, JPG or JPEG)"),
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> OwnProfileResponse:
    content = await file.read()
    try:
        return await profile_service.upload_avatar(
            db=db,
            profile=current_user,
            filename=file.filename or "avatar.jpg",
            content=content,
            content_length=file.size,
        )
    finally:
        await file.close()


@router.delete(
    "/profile",
    status_code=204,
    summary="Delete your account",
    description="Deletes the profile together with its posts, likes and comments.",
)
async def delete_account(
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> None:
    await profile_service.delete_account(db=db, profile=current_user)


@router.get(
    "/profiles/{user_id}",
    response_model=PublicProfileResponse,
    responses={404: {"description": "Profile not found", "model": ErrorResponse}},
    summary="Get another user's public profile",
)
async def get_profile(
    user_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PublicProfileResponse:
    return await profile_service.get_profile(db=db, user_id=user_id)


@router.get(
    "/profiles/{user_id}/posts",
    response_model=PostListResponse,
    responses={404: {"description": "Profile not found", "model": ErrorResponse}},
    summary="List a profile's posts",
    description=(
        "Posts for one profile tab, newest first. Owners see their private posts "
        "under `all` and `completed`; everyone else only ever sees public posts."
    ),
)
async def list_profile_posts(
    user_id: UUID,
    section: PostSection = Query(default=PostSection.ALL, description="Profile tab"),
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PostListResponse:
    return await post_service.list_user_posts(
        db=db, viewer=current_user, user_id=user_id, section=section
    )
