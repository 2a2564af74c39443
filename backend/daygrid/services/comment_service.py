"""
Daygrid Backend - Comment Service
===================================

What:  Comment threads under posts: list, add, edit, delete, count.
Who:   Called by the comment routes and by PostService when building the feed.

Rules:
    - Content is trimmed, non-empty, at most settings.comment_max_length
    - Commenting and reading require the post to be visible to the caller
    - Only the author may edit or delete a comment
    - Threads are listed oldest first
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid.config import settings
from daygrid.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from daygrid.models import Comment, Profile
from daygrid.schemas.post import AuthorSummary, CommentListResponse, CommentResponse
from daygrid.services.post_access import get_visible_post

logger = logging.getLogger(__name__)


def _to_response(comment: Comment, author: Profile | None) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        user_id=comment.user_id,
        post_id=comment.post_id,
        content=comment.content,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        user=(
            AuthorSummary(id=author.id, username=author.username, avatar_url=author.avatar_url)
            if author
            else None
        ),
    )


class CommentService:

    def _clean_content(self, content: str) -> str:
        trimmed = content.strip()
        if not trimmed:
            raise ValidationError(message="Comment cannot be empty", field="content")
        if len(trimmed) > settings.comment_max_length:
            raise ValidationError(
                message=f"Comment must be at most {settings.comment_max_length} characters",
                field="content",
                context={"max_length": settings.comment_max_length},
            )
        return trimmed

    async def _get_authored(self, db: AsyncSession, user: Profile, comment_id: UUID) -> Comment:
        comment = await db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError(resource="comment", resource_id=str(comment_id))
        # The comment's post must still be visible to the caller
        await get_visible_post(db, user.id, comment.post_id)
        if comment.user_id != user.id:
            raise PermissionDeniedError(message="You can only change your own comments")
        return comment

    async def _flush(self, db: AsyncSession, message: str, **context) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error writing comment %s: %s", context, str(e))
            raise DatabaseError(message=message, context={k: str(v) for k, v in context.items()})

    async def list_comments(
        self, db: AsyncSession, viewer: Profile, post_id: UUID
    ) -> CommentListResponse:
        await get_visible_post(db, viewer.id, post_id)
        result = await db.execute(
            select(Comment, Profile)
            .outerjoin(Profile, Profile.id == Comment.user_id)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        comments = [_to_response(comment, author) for comment, author in result.all()]
        return CommentListResponse(comments=comments, count=len(comments))

    async def add_comment(
        self, db: AsyncSession, user: Profile, post_id: UUID, content: str
    ) -> CommentResponse:
        cleaned = self._clean_content(content)
        await get_visible_post(db, user.id, post_id)

        comment = Comment(user_id=user.id, post_id=post_id, content=cleaned)
        db.add(comment)
        await self._flush(db, "Could not save your comment. Please try again.", post_id=post_id)
        logger.info("User %s commented on post %s", user.id, post_id)
        return _to_response(comment, user)

    async def update_comment(
        self, db: AsyncSession, user: Profile, comment_id: UUID, content: str
    ) -> CommentResponse:
        cleaned = self._clean_content(content)
        comment = await self._get_authored(db, user, comment_id)

        comment.content = cleaned
        comment.updated_at = datetime.now(timezone.utc)
        await self._flush(db, "Could not save your comment. Please try again.", comment_id=comment_id)
        return _to_response(comment, user)

    async def delete_comment(self, db: AsyncSession, user: Profile, comment_id: UUID) -> None:
        comment = await self._get_authored(db, user, comment_id)
        await db.delete(comment)
        await self._flush(db, "Could not delete the comment. Please try again.", comment_id=comment_id)
        logger.info("User %s deleted comment %s", user.id, comment_id)

    async def comment_count(self, db: AsyncSession, post_id: UUID) -> int:
        result = await db.execute(
            select(func.count(Comment.id)).where(Comment.post_id == post_id)
        )
        return result.scalar() or 0

    async def comment_counts(
        self, db: AsyncSession, post_ids: Sequence[UUID]
    ) -> Dict[UUID, int]:
        """Comment count per post; every requested ID is present, defaulting to 0."""
        counts: Dict[UUID, int] = {post_id: 0 for post_id in post_ids}
        if not counts:
            return counts
        result = await db.execute(
            select(Comment.post_id, func.count(Comment.id))
            .where(Comment.post_id.in_(list(counts)))
            .group_by(Comment.post_id)
        )
        for post_id, count in result.all():
            counts[post_id] = count
        return counts


comment_service = CommentService()
