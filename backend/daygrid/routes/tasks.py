"""
Daygrid Backend - Task Routes
===============================

What:  The signed-in user's ordered list of daily tasks.
Who:   Called by the task list screen.

The number of tasks decides the grid layout (see daygrid.grid); the response
carries `rows`/`cols` so the client can render it without a second request.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid.database import get_db_session
from daygrid.models import Profile
from daygrid.schemas.common import ErrorResponse
from daygrid.schemas.grid import TaskCreateRequest, TaskListResponse, TaskReplaceRequest
from daygrid.security import get_current_user
from daygrid.services.task_service import task_service

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])


@router.get("", response_model=TaskListResponse, summary="List your tasks")
async def list_tasks(current_user: Profile = Depends(get_current_user)) -> TaskListResponse:
    return task_service.list_tasks(current_user)


@router.post(
    "",
    status_code=201,
    response_model=TaskListResponse,
    responses={400: {"description": "Empty, too long, or task limit reached", "model": ErrorResponse}},
    summary="Add a task",
)
async def add_task(
    body: TaskCreateRequest,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TaskListResponse:
    return await task_service.add_task(db=db, profile=current_user, title=body.title)


@router.put(
    "",
    response_model=TaskListResponse,
    responses={400: {"description": "Invalid task or too many tasks", "model": ErrorResponse}},
    summary="Replace the whole task list",
)
async def replace_tasks(
    body: TaskReplaceRequest,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TaskListResponse:
    return await task_service.replace_tasks(db=db, profile=current_user, titles=body.tasks)


@router.delete(
    "/{index}",
    response_model=TaskListResponse,
    responses={404: {"description": "No task at this index", "model": ErrorResponse}},
    summary="Remove a task",
    description="Removes the task at `index` together with the photo in its grid cell.",
)
async def remove_task(
    index: int,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TaskListResponse:
    return await task_service.remove_task(db=db, profile=current_user, index=index)
