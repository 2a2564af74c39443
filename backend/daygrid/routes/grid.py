"""
Daygrid Backend - Daily Grid Routes
=====================================

What:  Fill grid cells with photos, clear them, and publish the grid as a post.
Who:   Called by the home screen grid and its publish dialog.

Request Flow (PUT /api/grid/cells/{index}):
    1. Client sends multipart/form-data with a 'file' field
    2. GridService validates the index, then FileService validates and stores
    3. The cell's slot gets the stored file's public URL
    4. The whole grid is returned so the client can redraw it
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid.database import get_db_session
from daygrid.models import Profile
from daygrid.schemas.common import ErrorResponse
from daygrid.schemas.grid import GridResponse
from daygrid.schemas.post import PostResponse
from daygrid.security import get_current_user
from daygrid.services.grid_service import grid_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/grid", tags=["Grid"])


@router.get("", response_model=GridResponse, summary="Get today's grid")
async def get_grid(current_user: Profile = Depends(get_current_user)) -> GridResponse:
    return grid_service.get_grid(current_user)


@router.put(
    "/cells/{index}",
    response_model=GridResponse,
    responses={
        400: {"description": "Invalid file type or size", "model": ErrorResponse},
        404: {"description": "No task at this index", "model": ErrorResponse},
    },
    summary="Put a photo in a grid cell",
    description="Upload a PNG or JPEG (max 10MB) into the cell at `index`, replacing any photo there.",
)
async def place_image(
    index: int,
    file: UploadFile = File(..., description="Photo for this cell (PNG, JPG or JPEG)"),
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> GridResponse:
    content = await file.read()
    logger.info(
        "Received cell upload: index=%d, filename=%s, size=%d bytes",
        index, file.filename or "unknown", len(content),
    )
    try:
        return await grid_service.place_image(
            db=db,
            profile=current_user,
            index=index,
            filename=file.filename or "photo.jpg",
            content=content,
            content_length=file.size,
        )
    finally:
        await file.close()


@router.delete(
    "/cells/{index}",
    response_model=GridResponse,
    responses={404: {"description": "No task at this index", "model": ErrorResponse}},
    summary="Clear a grid cell",
)
async def clear_cell(
    index: int,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> GridResponse:
    return await grid_service.clear_cell(db=db, profile=current_user, index=index)


@router.delete("", response_model=GridResponse, summary="Clear every cell")
async def reset_grid(
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> GridResponse:
    return await grid_service.reset_grid(db=db, profile=current_user)


@router.post(
    "/publish",
    status_code=201,
    response_model=PostResponse,
    responses={
        400: {"description": "Grid not ready or invalid collage", "model": ErrorResponse},
    },
    summary="Publish the grid as a post",
    description=(
        "Upload the collage rendered by the client. The post is marked completed "
        "when every cell has a photo, and is private unless `public` is true."
    ),
)
async def publish_grid(
    file: UploadFile = File(..., description="Collage image (PNG, JPG or JPEG)"),
    public: bool = Form(default=False),
    caption: Optional[str] = Form(default=None, max_length=500),
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    content = await file.read()
    try:
        return await grid_service.publish_grid(
            db=db,
            profile=current_user,
            filename=file.filename or "collage.jpg",
            content=content,
            content_length=file.size,
            public=public,
            caption=caption,
        )
    finally:
        await file.close()
