"""
Daygrid Backend - Post SQLAlchemy Model
=========================================

What:  ORM model for the `posts` table: published snapshots of a user's grid.

Query Patterns:
    - Public feed: WHERE public ORDER BY created_at DESC LIMIT n
      → idx_posts_public_created_at
    - A user's posts: WHERE user_id = :id ORDER BY created_at DESC
      → idx_posts_user_created_at
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column

from daygrid.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    A published grid collage.

    `completed` is fixed at publish time (every cell had a photo);
    `public` can be toggled by the owner afterwards. New posts are private.
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )

    # Public URL of the collage image returned by the upload service
    image: Mapped[str] = mapped_column(String(1024), nullable=False)
    completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    caption: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        Index("idx_posts_user_created_at", "user_id", created_at.desc()),
        Index("idx_posts_public_created_at", "public", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, user_id={self.user_id}, "
            f"public={self.public}, completed={self.completed})>"
        )
