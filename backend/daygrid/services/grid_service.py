"""
Daygrid Backend - Daily Grid Service
======================================

What:  Fills the signed-in user's grid with photos and publishes it as a post.
How:   Composes FileService (upload), the grid layout rules and PostService.
Who:   Called by the /api/grid routes.

Publish Flow (POST /api/grid/publish):
    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐
    │ Check grid   │───▶│ Upload       │───▶│ Create post  │
    │ (layout +    │    │ collage      │    │ completed =  │
    │  ≥ 1 photo)  │    │ (FileService)│    │ is_complete  │
    └──────────────┘    └──────────────┘    └──────────────┘

    The collage itself is rendered by the client from the cells it shows;
    the server records whether every cell was filled at publish time.
    If creating the post fails, the uploaded collage is removed again.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid import grid
from daygrid.exceptions import DatabaseError, NotFoundError, ValidationError
from daygrid.models import Profile
from daygrid.schemas.grid import GridCell, GridResponse
from daygrid.schemas.post import PostResponse
from daygrid.services.file_service import file_service
from daygrid.services.post_service import post_service

logger = logging.getLogger(__name__)


class GridService:

    def get_grid(self, profile: Profile) -> GridResponse:
        tasks = list(profile.tasks or [])
        images = grid.align_images(profile.daily_images, len(tasks))
        config = grid.grid_for_task_count(len(tasks))
        return GridResponse(
            rows=config.rows if config else None,
            cols=config.cols if config else None,
            cells=[
                GridCell(index=i, task=task, image=image)
                for i, (task, image) in enumerate(zip(tasks, images))
            ],
            filled=grid.filled_count(images),
            is_complete=grid.is_complete(len(tasks), images),
        )

    async def _save(self, db: AsyncSession, profile: Profile) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error saving grid for %s: %s", profile.id, str(e))
            raise DatabaseError(
                message="Could not save your grid. Please try again.",
                context={"user_id": str(profile.id)},
            )

    def _check_index(self, profile: Profile, index: int) -> int:
        task_count = len(profile.tasks or [])
        if not 0 <= index < task_count:
            raise NotFoundError(resource="grid cell", resource_id=str(index))
        return task_count

    async def place_image(
        self,
        db: AsyncSession,
        profile: Profile,
        index: int,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> GridResponse:
        """
        Upload a photo into cell `index`, replacing any photo already there.

        Raises:
            NotFoundError:   no task at `index`
            ValidationError: rejected upload
        """
        task_count = self._check_index(profile, index)

        stored = await file_service.validate_and_store(
            filename=filename, content=content, content_length=content_length
        )
        try:
            images = grid.align_images(profile.daily_images, task_count)
            images[index] = stored.url
            profile.daily_images = images
            await self._save(db, profile)
        except Exception:
            await file_service.cleanup_file(stored.absolute_path)
            raise

        logger.info("Profile %s filled cell %d with %s", profile.id, index, stored.relative_path)
        return self.get_grid(profile)

    async def clear_cell(self, db: AsyncSession, profile: Profile, index: int) -> GridResponse:
        task_count = self._check_index(profile, index)
        images = grid.align_images(profile.daily_images, task_count)
        images[index] = None
        profile.daily_images = images
        await self._save(db, profile)
        return self.get_grid(profile)

    async def reset_grid(self, db: AsyncSession, profile: Profile) -> GridResponse:
        """Empty every cell; the tasks stay."""
        profile.daily_images = grid.align_images([], len(profile.tasks or []))
        await self._save(db, profile)
        logger.info("Profile %s reset its grid", profile.id)
        return self.get_grid(profile)

    async def publish_grid(
        self,
        db: AsyncSession,
        profile: Profile,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
        public: bool = False,
        caption: Optional[str] = None,
    ) -> PostResponse:
        """
        Publish the current grid as a post, using the uploaded collage image.

        Raises:
            ValidationError when the task count has no layout or no cell has
            a photo yet, or when the collage upload is rejected.
        """
        current = self.get_grid(profile)
        if current.rows is None:
            raise ValidationError(
                message="Your tasks do not form a grid yet. Use 1-6 or 9 tasks.",
                field="tasks",
                context={"task_count": len(current.cells)},
            )
        if current.filled == 0:
            raise ValidationError(
                message="Add at least one photo to your grid before publishing.",
                field="grid",
            )

        stored = await file_service.validate_and_store(
            filename=filename, content=content, content_length=content_length
        )
        try:
            post = await post_service.create_post(
                db,
                profile,
                image_url=stored.url,
                completed=current.is_complete,
                public=public,
                caption=caption,
            )
        except Exception:
            await file_service.cleanup_file(stored.absolute_path)
            raise

        return post


grid_service = GridService()
