"""
Daygrid Backend - Profile Schemas
===================================

What:  Public and private views of a Profile plus the update body.

Visibility:
    PublicProfileResponse: what any signed-in user may see about another user
    OwnProfileResponse:    adds email, tasks and image slots for the owner
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PublicProfileResponse(BaseModel):
    id: uuid.UUID
    username: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class OwnProfileResponse(PublicProfileResponse):
    email: str
    tasks: List[str] = Field(default_factory=list)
    daily_images: List[Optional[str]] = Field(default_factory=list)


class ProfileUpdateRequest(BaseModel):
    """
    Body of PATCH /api/profile.

    `username` is required on every save, matching the edit screen; `name`
    and `avatar` are optional and left untouched when omitted.
    """
    username: str = Field(max_length=50, description="New username (trimmed, unique)")
    name: Optional[str] = Field(default=None, max_length=120, description="Display name")
    avatar: Optional[str] = Field(default=None, max_length=1024, description="Avatar image URL")
