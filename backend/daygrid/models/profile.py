"""
Daygrid Backend - Profile SQLAlchemy Model
============================================

What:  ORM model for the `profiles` table: one row per registered user.
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.
Who:   Used by the auth, profile, task and grid services.

Table Design:
    - UUID primary key, also the `sub` claim of issued tokens
    - email / username: unique, username is what other users see
    - tasks: ordered list of task titles (at most settings.max_tasks)
    - daily_images: ordered list of image URLs or nulls; slot i holds the
      photo for tasks[i], so its length never exceeds len(tasks)
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from daygrid.database import Base

USERNAME_MAX_LENGTH = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(Base):
    """
    A user account together with its journaling state.

    Lifecycle:
        1. Created by sign-up with empty tasks and images and the default avatar
        2. Tasks and image slots change many times a day through the grid screens
        3. Deleted (with posts, likes and comments) when the account is deleted
    """

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)

    username: Mapped[str] = mapped_column(
        String(USERNAME_MAX_LENGTH), nullable=False, unique=True, index=True
    )
    full_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True, default=None)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True, default=None)

    tasks: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    daily_images: Mapped[List[Optional[str]]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, username='{self.username}')>"
