"""
Daygrid Backend - Like and Comment Routes
===========================================

What:  Likes and comment threads on posts.
Who:   Called by the heart button and the comments sheet on a post.

Route Inventory:
    GET    /api/posts/{post_id}/likes       like status + count
    POST   /api/posts/{post_id}/likes       like (idempotent)
    DELETE /api/posts/{post_id}/likes       unlike (idempotent)
    GET    /api/posts/{post_id}/comments    thread, oldest first
    POST   /api/posts/{post_id}/comments    add a comment
    PATCH  /api/comments/{comment_id}       edit your comment
    DELETE /api/comments/{comment_id}       delete your comment

Every route answers 404 for posts the caller cannot see.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid.database import get_db_session
from daygrid.models import Profile
from daygrid.schemas.common import ErrorResponse
from daygrid.schemas.post import (
    CommentCreateRequest,
    CommentListResponse,
    CommentResponse,
    CommentUpdateRequest,
    LikeStatusResponse,
)
from daygrid.security import get_current_user
from daygrid.services.comment_service import comment_service
from daygrid.services.like_service import like_service

router = APIRouter(prefix="/api", tags=["Likes & Comments"])

_NOT_FOUND = {404: {"description": "Post not found", "model": ErrorResponse}}


@router.get(
    "/posts/{post_id}/likes",
    response_model=LikeStatusResponse,
    responses=_NOT_FOUND,
    summary="Like status of a post",
)
async def like_status(
    post_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> LikeStatusResponse:
    return await like_service.status(db=db, user=current_user, post_id=post_id)


@router.post(
    "/posts/{post_id}/likes",
    response_model=LikeStatusResponse,
    responses=_NOT_FOUND,
    summary="Like a post",
)
async def like_post(
    post_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> LikeStatusResponse:
    return await like_service.like(db=db, user=current_user, post_id=post_id)


@router.delete(
    "/posts/{post_id}/likes",
    response_model=LikeStatusResponse,
    responses=_NOT_FOUND,
    summary="Remove your like",
)
async def unlike_post(
    post_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> LikeStatusResponse:
    return await like_service.unlike(db=db, user=current_user, post_id=post_id)


@router.get(
    "/posts/{post_id}/comments",
    response_model=CommentListResponse,
    responses=_NOT_FOUND,
    summary="List comments on a post",
)
async def list_comments(
    post_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CommentListResponse:
    return await comment_service.list_comments(db=db, viewer=current_user, post_id=post_id)


@router.post(
    "/posts/{post_id}/comments",
    status_code=201,
    response_model=CommentResponse,
    responses={
        400: {"description": "Empty or too long", "model": ErrorResponse},
        **_NOT_FOUND,
    },
    summary="Comment on a post",
)
async def add_comment(
    post_id: UUID,
    body: CommentCreateRequest,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.add_comment(
        db=db, user=current_user, post_id=post_id, content=body.content
    )


@router.patch(
    "/comments/{comment_id}",
    response_model=CommentResponse,
    responses={
        400: {"description": "Empty or too long", "model": ErrorResponse},
        403: {"description": "Not your comment", "model": ErrorResponse},
        404: {"description": "Comment not found", "model": ErrorResponse},
    },
    summary="Edit your comment",
)
async def update_comment(
    comment_id: UUID,
    body: CommentUpdateRequest,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.update_comment(
        db=db, user=current_user, comment_id=comment_id, content=body.content
    )


@router.delete(
    "/comments/{comment_id}",
    status_code=204,
    responses={
        403: {"description": "Not your comment", "model": ErrorResponse},
        404: {"description": "Comment not found", "model": ErrorResponse},
    },
    summary="Delete your comment",
)
async def delete_comment(
    comment_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> None:
    await comment_service.delete_comment(db=db, user=current_user, comment_id=comment_id)
