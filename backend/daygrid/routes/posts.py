"""
Daygrid Backend - Post Routes
===============================

What:  Public feed, post detail, privacy toggle and deletion.
Who:   Called by the feed screen, post detail screen and the owner's post menu.

Caching Strategy:
    - GET /api/posts/feed: no-cache (likes and comments change constantly)
    - GET /api/posts/{id}: private, short max-age (privacy can be toggled)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid.database import get_db_session
from daygrid.models import Profile
from daygrid.schemas.common import ErrorResponse
from daygrid.schemas.post import FeedResponse, PostResponse, PrivacyUpdateRequest
from daygrid.security import get_current_user
from daygrid.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["Posts"])


@router.get(
    "/feed",
    response_model=FeedResponse,
    summary="Public feed",
    description=(
        "Public posts from every user, newest first, with author, like count, "
        "comment count and whether you liked each post. Cursor-paginated."
    ),
)
async def feed(
    response: Response,
    limit: int = Query(default=20, ge=1, le=100, description="Items per page (max 100)"),
    cursor: str | None = Query(
        default=None,
        description=(
            "Pagination cursor: `next_cursor` from the previous page. "
            "Omit for the first page."
        ),
    ),
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> FeedResponse:
    """
    Example client usage (infinite scroll):
        Page 1: GET /api/posts/feed?limit=20
        Page 2: GET /api/posts/feed?limit=20&cursor=<next_cursor from page 1>
    """
    result = await post_service.feed(db=db, viewer=current_user, limit=limit, cursor=cursor)
    response.headers["Cache-Control"] = "no-cache"
    return result


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Get a post",
)
async def get_post(
    post_id: UUID,
    response: Response,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    result = await post_service.get_post(db=db, viewer=current_user, post_id=post_id)
    response.headers["Cache-Control"] = "private, max-age=60"
    return result


@router.patch(
    "/{post_id}/privacy",
    response_model=PostResponse,
    responses={
        403: {"description": "Not your post", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="Make a post public or private",
)
async def update_privacy(
    post_id: UUID,
    body: PrivacyUpdateRequest,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.update_privacy(
        db=db, profile=current_user, post_id=post_id, public=body.public
    )


@router.delete(
    "/{post_id}",
    status_code=204,
    responses={
        403: {"description": "Not your post", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="Delete a post",
    description="Deletes the post together with its likes and comments.",
)
async def delete_post(
    post_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> None:
    await post_service.delete_post(db=db, profile=current_user, post_id=post_id)
