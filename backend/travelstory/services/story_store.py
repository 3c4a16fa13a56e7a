"""
TravelStory Backend - Story Store
===================================

What:  Persistence for story records, always scoped to one owner.
Why:   Ownership filtering lives in exactly one place. No method in this
       class can read or write a story without an owner id, so a story is
       never visible to or mutable by anyone but the user who created it.
How:   Wraps a request-scoped AsyncSession. Mutations are flushed; the
       session dependency commits at the end of the request unless the
       caller commits earlier through commit().
Who:   Used only by StoryService.

Ordering:
    find_all_by_owner:  insertion order (created_at, then id)
    search / date range: favourites first, then insertion order

Error handling:
    Every operation catches SQLAlchemyError, logs it and raises StorageError
    carrying the underlying message (HTTP 500).
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from travelstory.exceptions import StorageError
from travelstory.models.story import Story

logger = logging.getLogger(__name__)


def _storage_error(operation: str, error: SQLAlchemyError) -> StorageError:
    logger.error("Database error during %s: %s", operation, error)
    return StorageError(message=str(error), context={"operation": operation})


def location_search_text(value: Any) -> str:
    """
    Flatten a visited_location value into the text that search matches.

    Lists contribute their elements and dicts their values, recursively;
    each place name lands on its own line. None contributes nothing.
    """
    if value is None:
        return ""
    if isinstance(value, dict):
        value = list(value.values())
    if isinstance(value, (list, tuple)):
        parts = (location_search_text(item) for item in value)
        return "\n".join(part for part in parts if part)
    return str(value)


class StoryStore:
    """
    Owner-scoped CRUD and queries over the `stories` table.

    The owned-lookup primitive, find_by_id_and_owner(), is what edit,
    delete and favourite-toggle all go through.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def _owned(self, owner_id: uuid.UUID) -> Select:
        return select(Story).where(Story.user_id == owner_id)

    async def _all(self, query: Select, operation: str) -> List[Story]:
        try:
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise _storage_error(operation, e)

    async def create(self, owner_id: uuid.UUID, **fields: Any) -> Story:
        story = Story(
            user_id=owner_id,
            is_favourite=False,
            visited_location_text=location_search_text(fields.get("visited_location")),
            **fields,
        )
        try:
            self.db.add(story)
            await self.db.flush()
            # Pick up server-side defaults without a lazy load later
            await self.db.refresh(story)
        except SQLAlchemyError as e:
            raise _storage_error("create_story", e)
        return story

    async def find_by_id_and_owner(
        self, story_id: uuid.UUID, owner_id: uuid.UUID
    ) -> Optional[Story]:
        """Owned lookup: None when the story is absent OR belongs to someone else."""
        try:
            result = await self.db.execute(
                self._owned(owner_id).where(Story.id == story_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise _storage_error("find_story", e)

    async def find_all_by_owner(self, owner_id: uuid.UUID) -> List[Story]:
        query = self._owned(owner_id).order_by(Story.created_at, Story.id)
        return await self._all(query, "list_stories")

    async def update(self, story: Story, changes: Dict[str, Any]) -> Story:
        """
        Apply `changes` to a story obtained from find_by_id_and_owner().

        user_id is never accepted here; ownership does not transfer.
        """
        for name, value in changes.items():
            if name in ("id", "user_id", "created_at", "visited_location_text"):
                raise ValueError(f"Story.{name} is not directly writable")
            setattr(story, name, value)
        if "visited_location" in changes:
            story.visited_location_text = location_search_text(changes["visited_location"])
        try:
            await self.db.flush()
            await self.db.refresh(story)
        except SQLAlchemyError as e:
            raise _storage_error("update_story", e)
        return story

    async def delete(self, story: Story) -> None:
        try:
            await self.db.delete(story)
            await self.db.flush()
        except SQLAlchemyError as e:
            raise _storage_error("delete_story", e)

    async def commit(self) -> None:
        """
        Make pending changes durable now instead of at the end of the request.

        Needed before side effects outside the database (removing an image
        file) that must not happen if the transaction is lost.
        """
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise _storage_error("commit", e)

    async def search(self, owner_id: uuid.UUID, query: str) -> List[Story]:
        """
        Case-insensitive substring match on title OR story OR visited location.

        autoescape=True makes % and _ in the query match literally.
        Locations are matched through visited_location_text, the place names
        alone, so quotes and brackets of the stored JSON never match.
        """
        statement = (
            self._owned(owner_id)
            .where(
                or_(
                    Story.title.icontains(query, autoescape=True),
                    Story.story.icontains(query, autoescape=True),
                    Story.visited_location_text.icontains(query, autoescape=True),
                )
            )
            .order_by(Story.is_favourite.desc(), Story.created_at, Story.id)
        )
        return await self._all(statement, "search_stories")

    async def find_by_visited_date_range(
        self, owner_id: uuid.UUID, start: datetime, end: datetime
    ) -> List[Story]:
        """Inclusive [start, end]; an inverted range simply matches nothing."""
        statement = (
            self._owned(owner_id)
            .where(Story.visited_date >= start, Story.visited_date <= end)
            .order_by(Story.is_favourite.desc(), Story.created_at, Story.id)
        )
        return await self._all(statement, "filter_stories")
