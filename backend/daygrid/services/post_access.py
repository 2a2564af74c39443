"""
Daygrid Backend - Post Access Rules
=====================================

What:  Loads a post on behalf of a user, applying visibility and ownership.
Who:   Shared by PostService, LikeService and CommentService.

Rules:
    - A post is visible to its owner, and to everyone else only when public.
    - Invisible posts raise NotFoundError, same as missing ones.
    - Mutations of the post itself require ownership (PermissionDeniedError).
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from daygrid.exceptions import NotFoundError, PermissionDeniedError
from daygrid.models import Post


def can_view(post: Post, viewer_id: UUID) -> bool:
    return post.public or post.user_id == viewer_id


async def get_visible_post(db: AsyncSession, viewer_id: UUID, post_id: UUID) -> Post:
    post = await db.get(Post, post_id)
    if post is None or not can_view(post, viewer_id):
        raise NotFoundError(resource="post", resource_id=str(post_id))
    return post


async def get_owned_post(db: AsyncSession, user_id: UUID, post_id: UUID) -> Post:
    post = await get_visible_post(db, user_id, post_id)
    if post.user_id != user_id:
        raise PermissionDeniedError(message="You can only change your own posts")
    return post
