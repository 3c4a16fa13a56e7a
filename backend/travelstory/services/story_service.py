"""
TravelStory Backend - Story Service (Business Logic Orchestrator)
===================================================================

What:  Implements the story operations: add, list, edit, delete,
       favourite toggle, text search and visited-date filtering.
Why:   Encapsulates validation, ownership and image reconciliation rules
       in one place, independent of HTTP concerns.
How:   Composes StoryStore (owner-scoped persistence) and ImageService
       (uploaded files). The acting owner id always comes from the access
       guard; it is never read from a request body.
Who:   Called by route handlers in routes/stories.py.

Orchestration Flow (DELETE /delete-story/{id}):
    ┌──────────────┐    ┌──────────────┐    ┌──────────────────────┐
    │ Owned lookup │───▶│ Delete row   │───▶│ Discard image file   │
    │ (StoryStore) │    │ (StoryStore) │    │ (best-effort, never  │
    └──────────────┘    └──────────────┘    │  fails the request)  │
                                            └──────────────────────┘

Validation happens here, before any store mutation:
    - required fields are checked first (None or "" counts as missing)
    - visitedDate / startDate / endDate must be integer epoch milliseconds
      (number or numeric string); anything else is a ValidationError
"""

import logging
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from fastapi import BackgroundTasks

from travelstory.exceptions import NotFoundError, ValidationError
from travelstory.models.story import Story
from travelstory.services.image_service import ImageService
from travelstory.services.story_store import StoryStore

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_INTEGER_RE = re.compile(r"^[+-]?\d+$")


def parse_epoch_ms(value: Any, field: str) -> datetime:
    """
    Convert an epoch-millisecond timestamp to an aware UTC datetime.

    Accepts ints and strings of digits. Booleans, floats with a fractional
    part, free text and out-of-range values raise ValidationError.
    """
    if isinstance(value, bool):
        raise ValidationError(message=f"{field} must be an epoch timestamp in milliseconds", field=field)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str) and _INTEGER_RE.match(value.strip()):
        value = int(value.strip())
    if not isinstance(value, int):
        raise ValidationError(
            message=f"{field} must be an epoch timestamp in milliseconds",
            field=field,
            context={"value": str(value)},
        )
    try:
        return EPOCH + timedelta(milliseconds=value)
    except OverflowError:
        raise ValidationError(
            message=f"{field} is out of range",
            field=field,
            context={"value": value},
        )


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


class StoryService:
    """
    Business logic for owner-scoped story operations.

    Every lookup goes through StoryStore, which filters on owner id, so
    another user's story and a nonexistent story both surface as the same
    NotFoundError (HTTP 404).
    """

    def __init__(self, stories: StoryStore, images: ImageService, placeholder_image_url: str):
        self.stories = stories
        self.images = images
        self.placeholder_image_url = placeholder_image_url

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _require(**fields: Any) -> None:
        missing = [name for name, value in fields.items() if _is_missing(value)]
        if missing:
            raise ValidationError(
                message="All fields are required",
                context={"missing": missing},
            )

    async def _get_owned(self, owner_id: uuid.UUID, story_id: uuid.UUID) -> Story:
        story = await self.stories.find_by_id_and_owner(story_id, owner_id)
        if story is None:
            raise NotFoundError(resource="Daily story", resource_id=str(story_id))
        return story

    # ── Operations ────────────────────────────────────────────────────────

    async def add_story(
        self,
        owner_id: uuid.UUID,
        title: Optional[str],
        story: Optional[str],
        visited_location: Any,
        image_url: Optional[str],
        visited_date: Any,
    ) -> Story:
        self._require(
            title=title,
            story=story,
            visitedLocation=visited_location,
            imageUrl=image_url,
            visitedDate=visited_date,
        )
        parsed_date = parse_epoch_ms(visited_date, "visitedDate")

        created = await self.stories.create(
            owner_id,
            title=title,
            story=story,
            visited_location=visited_location,
            image_url=image_url,
            visited_date=parsed_date,
        )
        logger.info("Story created: story_id=%s user_id=%s", created.id, owner_id)
        return created

    async def list_stories(self, owner_id: uuid.UUID) -> List[Story]:
        return await self.stories.find_all_by_owner(owner_id)

    async def edit_story(
        self,
        owner_id: uuid.UUID,
        story_id: uuid.UUID,
        title: Optional[str],
        story: Optional[str],
        visited_location: Any,
        image_url: Optional[str],
        visited_date: Any,
    ) -> Story:
        """
        Replace all mutable fields of an owned story.

        An empty imageUrl is not an error: the placeholder URL is stored
        instead, so an edited story always has a renderable image.
        """
        self._require(
            title=title,
            story=story,
            visitedLocation=visited_location,
            visitedDate=visited_date,
        )
        parsed_date = parse_epoch_ms(visited_date, "visitedDate")

        existing = await self._get_owned(owner_id, story_id)
        updated = await self.stories.update(
            existing,
            {
                "title": title,
                "story": story,
                "visited_location": visited_location,
                "image_url": image_url or self.placeholder_image_url,
                "visited_date": parsed_date,
            },
        )
        logger.info("Story updated: story_id=%s", story_id)
        return updated

    async def delete_story(
        self,
        owner_id: uuid.UUID,
        story_id: uuid.UUID,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> None:
        """
        Delete an owned story, then discard its image file.

        The deletion is committed before the file is touched, so a failed
        commit leaves both the story and its image in place. With
        `background_tasks` the file is removed after the response is sent;
        without, it is removed inline. Either way a file failure is only
        logged.
        """
        existing = await self._get_owned(owner_id, story_id)
        image_url = existing.image_url

        await self.stories.delete(existing)
        await self.stories.commit()
        logger.info("Story deleted: story_id=%s user_id=%s", story_id, owner_id)

        if background_tasks is not None:
            background_tasks.add_task(self.images.discard, image_url)
        else:
            await self.images.discard(image_url)

    async def set_favourite(
        self, owner_id: uuid.UUID, story_id: uuid.UUID, is_favourite: Optional[bool]
    ) -> Story:
        if is_favourite is None:
            raise ValidationError(message="isFavourite is required", field="isFavourite")
        existing = await self._get_owned(owner_id, story_id)
        return await self.stories.update(existing, {"is_favourite": bool(is_favourite)})

    async def search(self, owner_id: uuid.UUID, query: Optional[str]) -> List[Story]:
        if not query:
            raise ValidationError(message="query is required", field="query")
        return await self.stories.search(owner_id, query)

    async def filter_by_date_range(
        self, owner_id: uuid.UUID, start_date: Any, end_date: Any
    ) -> List[Story]:
        """
        Stories visited within [start, end] inclusive, favourites first.

        start > end is not an error; it returns an empty list.
        """
        bounds: Dict[str, Any] = {"startDate": start_date, "endDate": end_date}
        self._require(**bounds)
        start = parse_epoch_ms(start_date, "startDate")
        end = parse_epoch_ms(end_date, "endDate")
        if start > end:
            return []
        return await self.stories.find_by_visited_date_range(owner_id, start, end)
