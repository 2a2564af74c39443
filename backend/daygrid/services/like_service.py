"""
Daygrid Backend - Like Service
================================

What:  Like / unlike posts and count likes, singly or for a page of posts.
Who:   Called by the like routes and by PostService when building the feed.

Both like and unlike are idempotent: liking twice leaves one row, unliking
something never liked is a no-op.
"""

import logging
from typing import Dict, List, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid.exceptions import DatabaseError
from daygrid.models import Like, Profile
from daygrid.schemas.post import LikeStatusResponse
from daygrid.services.post_access import get_visible_post

logger = logging.getLogger(__name__)


class LikeService:

    async def has_liked(self, db: AsyncSession, user_id: UUID, post_id: UUID) -> bool:
        result = await db.execute(
            select(Like.id).where(Like.user_id == user_id, Like.post_id == post_id)
        )
        return result.scalar_one_or_none() is not None

    async def like_count(self, db: AsyncSession, post_id: UUID) -> int:
        result = await db.execute(select(func.count(Like.id)).where(Like.post_id == post_id))
        return result.scalar() or 0

    async def like_counts(self, db: AsyncSession, post_ids: Sequence[UUID]) -> Dict[UUID, int]:
        """Like count per post; every requested ID is present, defaulting to 0."""
        counts: Dict[UUID, int] = {post_id: 0 for post_id in post_ids}
        if not counts:
            return counts
        result = await db.execute(
            select(Like.post_id, func.count(Like.id))
            .where(Like.post_id.in_(list(counts)))
            .group_by(Like.post_id)
        )
        for post_id, count in result.all():
            counts[post_id] = count
        return counts

    async def liked_post_ids(
        self, db: AsyncSession, user_id: UUID, post_ids: Sequence[UUID]
    ) -> List[UUID]:
        """The subset of `post_ids` that `user_id` has liked."""
        if not post_ids:
            return []
        result = await db.execute(
            select(Like.post_id).where(Like.user_id == user_id, Like.post_id.in_(list(post_ids)))
        )
        return list(result.scalars().all())

    async def status(self, db: AsyncSession, user: Profile, post_id: UUID) -> LikeStatusResponse:
        await get_visible_post(db, user.id, post_id)
        return LikeStatusResponse(
            post_id=post_id,
            liked=await self.has_liked(db, user.id, post_id),
            like_count=await self.like_count(db, post_id),
        )

    async def like(self, db: AsyncSession, user: Profile, post_id: UUID) -> LikeStatusResponse:
        """
        Raises:
            NotFoundError when the post is missing or not visible to the user.
        """
        await get_visible_post(db, user.id, post_id)

        if not await self.has_liked(db, user.id, post_id):
            try:
                async with db.begin_nested():
                    db.add(Like(user_id=user.id, post_id=post_id))
            except IntegrityError:
                # A concurrent request inserted the same like first
                logger.debug("Duplicate like ignored: user=%s post=%s", user.id, post_id)
            except SQLAlchemyError as e:
                logger.error("Database error liking post %s: %s", post_id, str(e))
                raise DatabaseError(
                    message="Could not like the post. Please try again.",
                    context={"post_id": str(post_id)},
                )
            else:
                logger.info("User %s liked post %s", user.id, post_id)

        return await self.status(db, user, post_id)

    async def unlike(self, db: AsyncSession, user: Profile, post_id: UUID) -> LikeStatusResponse:
        await get_visible_post(db, user.id, post_id)
        try:
            await db.execute(
                delete(Like).where(Like.user_id == user.id, Like.post_id == post_id)
            )
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error unliking post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not remove the like. Please try again.",
                context={"post_id": str(post_id)},
            )
        return await self.status(db, user, post_id)


like_service = LikeService()
