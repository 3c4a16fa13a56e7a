"""
TravelStory Backend - User SQLAlchemy Model
=============================================

What:  ORM model representing the `users` table.
Why:   Persists login identities; every story is bound to exactly one user.
Who:   Used by UserStore (lookup-by-email, create) and the access guard.

Table Design Rationale:
    - UUID primary key: opaque, non-sequential identifier carried in tokens
    - email: unique index; registration checks it, the index enforces it
    - password_hash: bcrypt digest, never the plaintext, never serialized
    - No update or delete paths exist for users in this service
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from travelstory.database import Base

if TYPE_CHECKING:
    from travelstory.models.story import Story


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt digest of the password",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # Stories go with their owner if a user row is ever removed by hand
    stories: Mapped[List["Story"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
