"""
Daygrid Backend - Task Service
================================

What:  Manages a profile's ordered task list and keeps its image slots in step.
Who:   Called by the /api/tasks routes.

Invariants maintained here:
    - 0 ≤ len(tasks) ≤ settings.max_tasks
    - every task is non-empty after trimming and ≤ settings.task_max_length
    - len(daily_images) ≤ len(tasks); slot i belongs to tasks[i]
"""

import logging
from typing import List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid import grid
from daygrid.config import settings
from daygrid.exceptions import DatabaseError, NotFoundError, ValidationError
from daygrid.models import Profile
from daygrid.schemas.grid import TaskListResponse

logger = logging.getLogger(__name__)


class TaskService:

    def _clean_title(self, title: str) -> str:
        trimmed = title.strip()
        if not trimmed:
            raise ValidationError(message="Task cannot be empty", field="title")
        if len(trimmed) > settings.task_max_length:
            raise ValidationError(
                message=f"Task must be at most {settings.task_max_length} characters",
                field="title",
                context={"max_length": settings.task_max_length},
            )
        return trimmed

    def _response(self, tasks: Sequence[str]) -> TaskListResponse:
        config = grid.grid_for_task_count(len(tasks))
        return TaskListResponse(
            tasks=list(tasks),
            max_tasks=settings.max_tasks,
            rows=config.rows if config else None,
            cols=config.cols if config else None,
        )

    async def _save(self, db: AsyncSession, profile: Profile) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error saving tasks for %s: %s", profile.id, str(e))
            raise DatabaseError(
                message="Could not save your tasks. Please try again.",
                context={"user_id": str(profile.id)},
            )

    def list_tasks(self, profile: Profile) -> TaskListResponse:
        return self._response(profile.tasks or [])

    async def add_task(self, db: AsyncSession, profile: Profile, title: str) -> TaskListResponse:
        """
        Append a task.

        Raises:
            ValidationError when the title is empty or too long, or the
            profile already has settings.max_tasks tasks.
        """
        cleaned = self._clean_title(title)
        current = list(profile.tasks or [])
        if len(current) >= settings.max_tasks:
            raise ValidationError(
                message=f"Maximum of {settings.max_tasks} tasks allowed",
                field="title",
                context={"max_tasks": settings.max_tasks},
            )

        profile.tasks = current + [cleaned]
        await self._save(db, profile)
        logger.info("Profile %s added task #%d", profile.id, len(profile.tasks))
        return self._response(profile.tasks)

    async def remove_task(self, db: AsyncSession, profile: Profile, index: int) -> TaskListResponse:
        """
        Remove the task at `index` together with its photo slot.

        Raises:
            NotFoundError when `index` does not address a task.
        """
        current = list(profile.tasks or [])
        if not 0 <= index < len(current):
            raise NotFoundError(resource="task", resource_id=str(index))

        del current[index]
        profile.tasks = current
        profile.daily_images = grid.align_images(
            grid.remove_slot(profile.daily_images, index), len(current)
        )
        await self._save(db, profile)
        logger.info("Profile %s removed task at index %d", profile.id, index)
        return self._response(profile.tasks)

    async def replace_tasks(
        self, db: AsyncSession, profile: Profile, titles: List[str]
    ) -> TaskListResponse:
        """
        Replace the whole list. Photo slots beyond the new count are dropped.

        Raises:
            ValidationError on any invalid title or more than max_tasks titles.
        """
        if len(titles) > settings.max_tasks:
            raise ValidationError(
                message=f"Maximum of {settings.max_tasks} tasks allowed",
                field="tasks",
                context={"max_tasks": settings.max_tasks},
            )
        cleaned = [self._clean_title(title) for title in titles]

        profile.tasks = cleaned
        profile.daily_images = grid.align_images(profile.daily_images, len(cleaned))
        await self._save(db, profile)
        return self._response(profile.tasks)


task_service = TaskService()
