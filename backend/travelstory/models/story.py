"""
TravelStory Backend - Story SQLAlchemy Model
==============================================

What:  ORM model representing the `stories` table (one dated travel entry).
Why:   Maps story records to Python objects for StoryStore.
How:   Inherits from DeclarativeBase; Alembic reads this for migrations.
Who:   Created/queried/updated/deleted only through StoryStore.

Table Design Rationale:
    - user_id: owner reference, set once at creation and never reassigned.
      Every query in StoryStore filters on it, so it is indexed.
    - visited_location: JSON value (usually a list of place names). It is
      opaque to the service.
    - visited_location_text: the place names inside visited_location, one
      per line. Search matches here so JSON syntax never produces a hit.
    - image_url: absolute URL of an uploaded image or of the placeholder.
    - visited_date: user-supplied point in time (parsed from epoch ms).
    - is_favourite: drives "favourites first" ordering in search/filter.
    - created_at: system-assigned; used for insertion-order listing.

Query Patterns:
    - Owned lookup:  WHERE id = :id AND user_id = :owner
    - List:          WHERE user_id = :owner ORDER BY created_at
    - Search:        WHERE user_id = :owner AND (title|story|location_text ILIKE %q%)
                     ORDER BY is_favourite DESC
    - Date filter:   WHERE user_id = :owner AND visited_date BETWEEN :a AND :b
                     ORDER BY is_favourite DESC
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, String, Text, Uuid, false, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from travelstory.database import Base

if TYPE_CHECKING:
    from travelstory.models.user import User


class Story(Base):
    """
    A single travel-journal entry owned by one user.

    Lifecycle:
        1. Created by POST /add-daily-story (is_favourite = False)
        2. Fields replaced wholesale by POST /edit-story/{id}
        3. Favourite flag flipped by POST /update-is-favourite/{id}
        4. Removed by DELETE /delete-story/{id}; its image file is then
           deleted best-effort
    """

    __tablename__ = "stories"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning user; immutable after creation",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    story: Mapped[str] = mapped_column(Text, nullable=False)

    visited_location: Mapped[Any] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    # Kept in step with visited_location by StoryStore; never serialised
    visited_location_text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default="",
        comment="Place names of visited_location, one per line, for search",
    )

    image_url: Mapped[str] = mapped_column(
        String(2048),
        nullable=False,
        comment="Absolute URL of the uploaded image or the placeholder asset",
    )

    visited_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    is_favourite: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    owner: Mapped["User"] = relationship(back_populates="stories", lazy="noload")

    __table_args__ = (
        Index("idx_stories_user_id", "user_id"),
        Index("idx_stories_user_visited_date", "user_id", "visited_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Story(id={self.id}, user_id={self.user_id}, "
            f"title='{self.title}', is_favourite={self.is_favourite})>"
        )
