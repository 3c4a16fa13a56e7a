"""
TravelStory Backend - Story Service Tests
===========================================

What:  Validation, ownership and image reconciliation rules of StoryService.

Test Strategy:
    ✅ Required fields and epoch-millisecond parsing
    ✅ Edit with an empty imageUrl stores the placeholder
    ✅ Another owner's story is indistinguishable from a missing one
    ✅ Story deletion survives a missing image file
    ✅ A failed delete commit keeps the image file
    ✅ Inverted date range → empty result, not an error
"""

import uuid
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from travelstory.exceptions import NotFoundError, StorageError, ValidationError
from travelstory.services.story_service import EPOCH, StoryService, parse_epoch_ms
from travelstory.services.story_store import StoryStore
from travelstory.services.user_store import UserStore

PLACEHOLDER = "http://test/assets/placeholder.jpg"
NOV_14_2023 = 1700000000000  # 2023-11-14T22:13:20Z


class TestParseEpochMs:

    def test_integer_milliseconds(self):
        assert parse_epoch_ms(NOV_14_2023, "visitedDate") == datetime(
            2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc
        )

    def test_numeric_string(self):
        assert parse_epoch_ms(str(NOV_14_2023), "visitedDate") == parse_epoch_ms(
            NOV_14_2023, "visitedDate"
        )

    def test_zero_is_the_epoch(self):
        assert parse_epoch_ms(0, "startDate") == EPOCH

    @pytest.mark.parametrize("value", ["yesterday", "12.5", True, 1.5, [1], ""])
    def test_non_integer_values_rejected(self, value):
        with pytest.raises(ValidationError):
            parse_epoch_ms(value, "visitedDate")

    def test_out_of_range_rejected(self):
        with pytest.raises(ValidationError, match="out of range"):
            parse_epoch_ms(10 ** 20, "visitedDate")


@pytest_asyncio.fixture
async def owners(db_session):
    users = UserStore(db_session)
    ann = await users.create(full_name="Ann", email="ann@x.io", password_hash="h")
    bob = await users.create(full_name="Bob", email="bob@x.io", password_hash="h")
    return ann.id, bob.id


@pytest.fixture
def service(db_session, image_service):
    return StoryService(StoryStore(db_session), image_service, PLACEHOLDER)


def _fields(**overrides):
    fields = {
        "title": "Trip",
        "story": "Great",
        "visited_location": ["Paris"],
        "image_url": "http://test/uploads/u1.jpg",
        "visited_date": NOV_14_2023,
    }
    fields.update(overrides)
    return fields


class TestAddAndEdit:

    @pytest.mark.asyncio
    async def test_add_story(self, service, owners):
        ann, _ = owners
        story = await service.add_story(ann, **_fields())

        assert story.title == "Trip"
        assert story.visited_location == ["Paris"]
        assert story.is_favourite is False
        assert [s.id for s in await service.list_stories(ann)] == [story.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "missing,key",
        [("title", "title"), ("image_url", "imageUrl"), ("visited_location", "visitedLocation")],
    )
    async def test_add_requires_every_field(self, service, owners, missing, key):
        ann, _ = owners
        with pytest.raises(ValidationError, match="All fields are required") as exc_info:
            await service.add_story(ann, **_fields(**{missing: ""}))
        assert exc_info.value.context["missing"] == [key]
        assert await service.list_stories(ann) == []

    @pytest.mark.asyncio
    async def test_add_rejects_non_numeric_date(self, service, owners):
        ann, _ = owners
        with pytest.raises(ValidationError):
            await service.add_story(ann, **_fields(visited_date="last summer"))

    @pytest.mark.asyncio
    async def test_edit_with_empty_image_stores_placeholder(self, service, owners):
        ann, _ = owners
        story = await service.add_story(ann, **_fields())

        edited = await service.edit_story(
            ann, story.id, **_fields(title="Trip 2", image_url="")
        )

        assert edited.title == "Trip 2"
        assert edited.image_url == PLACEHOLDER

    @pytest.mark.asyncio
    async def test_edit_of_foreign_story_is_not_found(self, service, owners):
        ann, bob = owners
        story = await service.add_story(ann, **_fields())

        with pytest.raises(NotFoundError):
            await service.edit_story(bob, story.id, **_fields(title="Hijack"))

        unchanged = await service.list_stories(ann)
        assert unchanged[0].title == "Trip"


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_story_and_image(self, service, owners, image_service, sample_image_bytes):
        ann, _ = owners
        url = await image_service.upload(sample_image_bytes, "photo.jpg")
        story = await service.add_story(ann, **_fields(image_url=url))

        await service.delete_story(ann, story.id)

        assert await service.list_stories(ann) == []
        assert not (Path(image_service.uploads_dir) / image_service.filename_from_url(url)).exists()

    @pytest.mark.asyncio
    async def test_delete_succeeds_when_image_already_gone(self, service, owners):
        ann, _ = owners
        story = await service.add_story(ann, **_fields(image_url="http://test/uploads/gone.jpg"))

        await service.delete_story(ann, story.id)

        assert await service.list_stories(ann) == []

    @pytest.mark.asyncio
    async def test_failed_commit_keeps_story_and_image(
        self, service, owners, db_session, image_service, sample_image_bytes
    ):
        ann, _ = owners
        url = await image_service.upload(sample_image_bytes, "photo.jpg")
        story_id = (await service.add_story(ann, **_fields(image_url=url))).id
        await db_session.commit()
        db_session.commit = AsyncMock(
            side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error"))
        )

        with pytest.raises(StorageError, match="disk I/O error"):
            await service.delete_story(ann, story_id)

        assert (Path(image_service.uploads_dir) / image_service.filename_from_url(url)).exists()
        assert [s.id for s in await service.list_stories(ann)] == [story_id]

    @pytest.mark.asyncio
    async def test_delete_of_unknown_story_is_not_found(self, service, owners):
        ann, _ = owners
        with pytest.raises(NotFoundError):
            await service.delete_story(ann, uuid.uuid4())


class TestFavouritesAndQueries:

    @pytest.mark.asyncio
    async def test_set_favourite(self, service, owners):
        ann, _ = owners
        story = await service.add_story(ann, **_fields())

        assert (await service.set_favourite(ann, story.id, True)).is_favourite is True
        assert (await service.set_favourite(ann, story.id, False)).is_favourite is False

    @pytest.mark.asyncio
    async def test_set_favourite_requires_value(self, service, owners):
        ann, _ = owners
        story = await service.add_story(ann, **_fields())
        with pytest.raises(ValidationError):
            await service.set_favourite(ann, story.id, None)

    @pytest.mark.asyncio
    async def test_search_requires_query(self, service, owners):
        ann, _ = owners
        with pytest.raises(ValidationError, match="query is required"):
            await service.search(ann, "")

    @pytest.mark.asyncio
    async def test_search_favourites_first(self, service, owners):
        ann, _ = owners
        await service.add_story(ann, **_fields(title="Paris one"))
        second = await service.add_story(ann, **_fields(title="Paris two"))
        await service.set_favourite(ann, second.id, True)

        results = await service.search(ann, "PARIS")
        assert [s.title for s in results] == ["Paris two", "Paris one"]

    @pytest.mark.asyncio
    async def test_filter_inverted_range_is_empty(self, service, owners):
        ann, _ = owners
        await service.add_story(ann, **_fields())
        assert await service.filter_by_date_range(ann, NOV_14_2023 + 1, NOV_14_2023) == []

    @pytest.mark.asyncio
    async def test_filter_accepts_string_bounds(self, service, owners):
        ann, _ = owners
        story = await service.add_story(ann, **_fields())
        results = await service.filter_by_date_range(ann, str(NOV_14_2023), str(NOV_14_2023))
        assert [s.id for s in results] == [story.id]

    @pytest.mark.asyncio
    async def test_filter_requires_both_bounds(self, service, owners):
        ann, _ = owners
        with pytest.raises(ValidationError):
            await service.filter_by_date_range(ann, NOV_14_2023, None)
