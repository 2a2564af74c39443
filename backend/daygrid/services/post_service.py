"""
Daygrid Backend - Post Service
================================

What:  Published grid posts: creation, reading, profile sections, the public
       feed, privacy toggling and deletion.
Who:   Called by GridService (publish) and the /api/posts and /api/profiles routes.

Visibility:
    A post is visible to its owner, and to everyone else only while public.
    Reading an invisible post raises NotFoundError so private posts are never
    disclosed. Changing a post requires ownership (PermissionDeniedError).

Feed pagination:
    Keyset on (created_at, id), newest first, fetching limit + 1 rows to
    compute has_more without a COUNT query. The cursor is the urlsafe base64
    of "<iso created_at>|<post id>" so posts sharing a timestamp are never
    skipped and the token needs no URL escaping.
"""

import base64
import binascii
import logging
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, delete, desc, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid.exceptions import DatabaseError, NotFoundError
from daygrid.models import Comment, Like, Post, Profile
from daygrid.schemas.post import (
    AuthorSummary,
    FeedItem,
    FeedResponse,
    PostListResponse,
    PostResponse,
    PostSection,
)
from daygrid.services.comment_service import comment_service
from daygrid.services.like_service import like_service
from daygrid.services.post_access import get_owned_post, get_visible_post

logger = logging.getLogger(__name__)

MIN_FEED_LIMIT = 1
MAX_FEED_LIMIT = 100


def encode_cursor(created_at: datetime, post_id: UUID) -> str:
    raw = f"{created_at.isoformat()}|{post_id}".encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(cursor: str) -> Optional[Tuple[datetime, UUID]]:
    """Inverse of encode_cursor; None for anything malformed."""
    try:
        raw = base64.urlsafe_b64decode(cursor + "=" * (-len(cursor) % 4)).decode("utf-8")
        created_at, post_id = raw.split("|", 1)
        return datetime.fromisoformat(created_at), UUID(post_id)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None


class PostService:

    async def create_post(
        self,
        db: AsyncSession,
        profile: Profile,
        image_url: str,
        completed: bool,
        public: bool = False,
        caption: Optional[str] = None,
    ) -> PostResponse:
        post = Post(
            user_id=profile.id,
            image=image_url,
            completed=completed,
            public=public,
            caption=(caption.strip() or None) if caption else None,
        )
        db.add(post)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating post for %s: %s", profile.id, str(e))
            raise DatabaseError(
                message="Could not publish the post. Please try again.",
                context={"user_id": str(profile.id)},
            )
        logger.info(
            "Post %s created by %s (completed=%s, public=%s)",
            post.id, profile.id, completed, public,
        )
        return PostResponse.model_validate(post)

    async def get_post(self, db: AsyncSession, viewer: Profile, post_id: UUID) -> PostResponse:
        post = await get_visible_post(db, viewer.id, post_id)
        return PostResponse.model_validate(post)

    async def list_user_posts(
        self,
        db: AsyncSession,
        viewer: Profile,
        user_id: UUID,
        section: PostSection = PostSection.ALL,
    ) -> PostListResponse:
        """
        Posts shown on a profile tab, newest first.

        `public` and `all` differ only for the owner; everyone else sees
        public posts in every section.

        Raises:
            NotFoundError when `user_id` has no profile.
        """
        if await db.get(Profile, user_id) is None:
            raise NotFoundError(resource="profile", resource_id=str(user_id))

        query = select(Post).where(Post.user_id == user_id)
        if section == PostSection.PUBLIC or viewer.id != user_id:
            query = query.where(Post.public.is_(True))
        if section == PostSection.COMPLETED:
            query = query.where(Post.completed.is_(True))
        query = query.order_by(desc(Post.created_at), desc(Post.id))

        result = await db.execute(query)
        posts = [PostResponse.model_validate(post) for post in result.scalars().all()]
        return PostListResponse(posts=posts, section=section)

    async def feed(
        self,
        db: AsyncSession,
        viewer: Profile,
        limit: int = 20,
        cursor: Optional[str] = None,
    ) -> FeedResponse:
        """
        Public posts from every user, newest first.

        Args:
            limit:  Page size, clamped to 1-100.
            cursor: `next_cursor` from the previous page. A malformed cursor
                    is ignored and the first page returned.
        """
        limit = max(MIN_FEED_LIMIT, min(limit, MAX_FEED_LIMIT))

        query = (
            select(Post, Profile)
            .join(Profile, Profile.id == Post.user_id)
            .where(Post.public.is_(True))
        )
        position = decode_cursor(cursor) if cursor else None
        if position:
            cursor_dt, cursor_id = position
            query = query.where(
                or_(
                    Post.created_at < cursor_dt,
                    and_(Post.created_at == cursor_dt, Post.id < cursor_id),
                )
            )

        query = query.order_by(desc(Post.created_at), desc(Post.id)).limit(limit + 1)
        rows = list((await db.execute(query)).all())

        has_more = len(rows) > limit
        if has_more:
            rows = rows[:limit]

        post_ids = [post.id for post, _ in rows]
        like_counts = await like_service.like_counts(db, post_ids)
        comment_counts = await comment_service.comment_counts(db, post_ids)
        liked = set(await like_service.liked_post_ids(db, viewer.id, post_ids))

        items: List[FeedItem] = [
            FeedItem(
                **PostResponse.model_validate(post).model_dump(),
                user=AuthorSummary(
                    id=author.id, username=author.username, avatar_url=author.avatar_url
                ),
                like_count=like_counts[post.id],
                comment_count=comment_counts[post.id],
                liked_by_me=post.id in liked,
            )
            for post, author in rows
        ]

        next_cursor = None
        if has_more and rows:
            last = rows[-1][0]
            next_cursor = encode_cursor(last.created_at, last.id)

        return FeedResponse(posts=items, next_cursor=next_cursor, has_more=has_more)

    async def update_privacy(
        self, db: AsyncSession, profile: Profile, post_id: UUID, public: bool
    ) -> PostResponse:
        post = await get_owned_post(db, profile.id, post_id)
        post.public = public
        try:
            await db.flush()
            await db.refresh(post)
        except SQLAlchemyError as e:
            logger.error("Database error updating post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not update the post. Please try again.",
                context={"post_id": str(post_id)},
            )
        logger.info("Post %s is now %s", post_id, "public" if public else "private")
        return PostResponse.model_validate(post)

    async def delete_post(self, db: AsyncSession, profile: Profile, post_id: UUID) -> None:
        """Delete an owned post together with its likes and comments."""
        post = await get_owned_post(db, profile.id, post_id)
        try:
            await db.execute(delete(Comment).where(Comment.post_id == post.id))
            await db.execute(delete(Like).where(Like.post_id == post.id))
            await db.delete(post)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not delete the post. Please try again.",
                context={"post_id": str(post_id)},
            )
        logger.info("Post %s deleted by %s", post_id, profile.id)


post_service = PostService()
