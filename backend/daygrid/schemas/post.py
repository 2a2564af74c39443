"""
Daygrid Backend - Post, Like and Comment Schemas
==================================================

What:  API contracts for posts, the public feed, likes and comments.

Pagination (feed):
    Keyset on (created_at, id). `next_cursor` is an opaque URL-safe token for
    the last item; the client passes it back as `cursor` for the next page.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class PostSection(str, Enum):
    """Profile tabs: public posts, completed grids, or everything."""
    PUBLIC = "public"
    COMPLETED = "completed"
    ALL = "all"


class AuthorSummary(BaseModel):
    id: uuid.UUID
    username: str
    avatar_url: Optional[str] = None


class PostResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    image: str
    completed: bool
    public: bool
    caption: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FeedItem(PostResponse):
    user: AuthorSummary
    like_count: int = 0
    comment_count: int = 0
    liked_by_me: bool = False


class FeedResponse(BaseModel):
    posts: List[FeedItem]
    next_cursor: Optional[str] = Field(
        default=None, description="Opaque cursor for the next page. Null if no more pages."
    )
    has_more: bool


class PostListResponse(BaseModel):
    posts: List[PostResponse]
    section: PostSection


class PrivacyUpdateRequest(BaseModel):
    public: bool = Field(description="True to show the post in the public feed")


class LikeStatusResponse(BaseModel):
    post_id: uuid.UUID
    liked: bool
    like_count: int


class CommentCreateRequest(BaseModel):
    content: str = Field(max_length=5000, description="Comment text; trimmed before saving")


class CommentUpdateRequest(BaseModel):
    content: str = Field(max_length=5000)


class CommentResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    post_id: uuid.UUID
    content: str
    created_at: datetime
    updated_at: datetime
    user: Optional[AuthorSummary] = None


class CommentListResponse(BaseModel):
    comments: List[CommentResponse]
    count: int
