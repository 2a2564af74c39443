"""
Daygrid Backend - Media Route
===============================

What:  Serves uploaded photos, collages and avatars from storage_root.
Who:   Requested by <Image> components through the URLs stored on profiles
       and posts (settings.media_base_url + relative path).

Security:
    - Paths resolve inside storage_root; anything escaping it is rejected
    - Only files that exist are served; the rest answer 404
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from daygrid.schemas.common import ErrorResponse
from daygrid.services.file_service import file_service

router = APIRouter(tags=["Media"])


@router.get(
    "/media/{file_path:path}",
    summary="Serve an uploaded image",
    responses={
        200: {"description": "Image file"},
        400: {"description": "Invalid path", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
)
async def serve_media(file_path: str) -> FileResponse:
    full_path = file_service.resolve_media_path(file_path)
    return FileResponse(
        path=str(full_path),
        media_type=file_service.media_type_for(full_path),
        # Stored names are random UUIDs, so content never changes under a URL
        headers={"Cache-Control": "public, max-age=86400"},
    )
