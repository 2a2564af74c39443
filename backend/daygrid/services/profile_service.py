"""
Daygrid Backend - Profile Service
===================================

What:  Profile reads, edits, avatar uploads and account deletion.
Who:   Called by the /api/profile and /api/profiles routes.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from daygrid.models import Comment, Like, Post, Profile
from daygrid.schemas.profile import OwnProfileResponse, PublicProfileResponse
from daygrid.services.file_service import file_service

logger = logging.getLogger(__name__)


class ProfileService:

    async def get_profile(self, db: AsyncSession, user_id: UUID) -> PublicProfileResponse:
        """
        Raises:
            NotFoundError when no profile has this ID.
        """
        profile = await db.get(Profile, user_id)
        if profile is None:
            raise NotFoundError(resource="profile", resource_id=str(user_id))
        return PublicProfileResponse.model_validate(profile)

    def own_profile(self, profile: Profile) -> OwnProfileResponse:
        return OwnProfileResponse.model_validate(profile)

    async def update_profile(
        self,
        db: AsyncSession,
        profile: Profile,
        username: str,
        name: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> OwnProfileResponse:
        """
        Apply an edit from the profile screen.

        Raises:
            ValidationError: username blank after trimming
            ConflictError:   username belongs to another profile
        """
        username = username.strip()
        if not username:
            raise ValidationError(message="Username is required", field="username")

        if username.lower() != profile.username.lower():
            taken = await db.execute(
                select(Profile.id).where(
                    func.lower(Profile.username) == username.lower(),
                    Profile.id != profile.id,
                )
            )
            if taken.scalar_one_or_none() is not None:
                raise ConflictError(message="That username is already taken", field="username")

        profile.username = username
        if name is not None:
            profile.full_name = name.strip() or None
        if avatar is not None:
            profile.avatar_url = avatar.strip() or None

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating profile %s: %s", profile.id, str(e))
            raise DatabaseError(
                message="Could not save your profile. Please try again.",
                context={"user_id": str(profile.id)},
            )
        logger.info("Profile %s updated", profile.id)
        return self.own_profile(profile)

    async def upload_avatar(
        self,
        db: AsyncSession,
        profile: Profile,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> OwnProfileResponse:
        stored = await file_service.validate_and_store(
            filename=filename, content=content, content_length=content_length
        )
        try:
            profile.avatar_url = stored.url
            await db.flush()
        except SQLAlchemyError as e:
            await file_service.cleanup_file(stored.absolute_path)
            logger.error("Database error saving avatar for %s: %s", profile.id, str(e))
            raise DatabaseError(
                message="Could not save your avatar. Please try again.",
                context={"user_id": str(profile.id)},
            )
        logger.info("Profile %s avatar set to %s", profile.id, stored.relative_path)
        return self.own_profile(profile)

    async def delete_account(self, db: AsyncSession, profile: Profile) -> None:
        """
        Delete the profile with its posts, likes and comments.

        Likes and comments left by other users on this profile's posts go too.
        Rows are removed explicitly so SQLite (no FK enforcement by default)
        behaves like PostgreSQL's ON DELETE CASCADE.
        """
        own_posts = select(Post.id).where(Post.user_id == profile.id)

        try:
            await db.execute(
                delete(Comment).where(
                    or_(Comment.user_id == profile.id, Comment.post_id.in_(own_posts))
                )
            )
            await db.execute(
                delete(Like).where(or_(Like.user_id == profile.id, Like.post_id.in_(own_posts)))
            )
            await db.execute(delete(Post).where(Post.user_id == profile.id))
            await db.delete(profile)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting account %s: %s", profile.id, str(e))
            raise DatabaseError(
                message="Could not delete your account. Please try again.",
                context={"user_id": str(profile.id)},
            )
        logger.info("Account %s deleted", profile.id)


profile_service = ProfileService()
