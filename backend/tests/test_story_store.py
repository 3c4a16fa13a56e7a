"""
TravelStory Backend - Story Store Tests
=========================================

What:  Owner scoping, ordering and query semantics of StoryStore against
       a real SQLite session.
"""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from travelstory.exceptions import StorageError
from travelstory.services.story_store import StoryStore
from travelstory.services.user_store import UserStore

DAY = datetime(2024, 5, 1, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def owners(db_session):
    users = UserStore(db_session)
    ann = await users.create(full_name="Ann", email="ann@x.io", password_hash="h")
    bob = await users.create(full_name="Bob", email="bob@x.io", password_hash="h")
    return ann.id, bob.id


@pytest.fixture
def store(db_session):
    return StoryStore(db_session)


async def _add(store, owner_id, title, story="text", location=None, visited=DAY):
    return await store.create(
        owner_id,
        title=title,
        story=story,
        visited_location=location if location is not None else ["Paris"],
        image_url="http://test/uploads/x.jpg",
        visited_date=visited,
    )


class TestOwnerScoping:

    @pytest.mark.asyncio
    async def test_new_story_is_not_favourite(self, store, owners):
        ann, _ = owners
        story = await _add(store, ann, "Trip")
        assert story.is_favourite is False
        assert story.user_id == ann

    @pytest.mark.asyncio
    async def test_lookup_by_other_owner_returns_none(self, store, owners):
        ann, bob = owners
        story = await _add(store, ann, "Trip")

        assert (await store.find_by_id_and_owner(story.id, ann)).id == story.id
        assert await store.find_by_id_and_owner(story.id, bob) is None
        assert await store.find_by_id_and_owner(uuid.uuid4(), ann) is None

    @pytest.mark.asyncio
    async def test_list_only_returns_own_stories_in_insertion_order(self, store, owners):
        ann, bob = owners
        await _add(store, ann, "First")
        await _add(store, bob, "Bob's")
        await _add(store, ann, "Second")

        titles = [s.title for s in await store.find_all_by_owner(ann)]
        assert titles == ["First", "Second"]

    @pytest.mark.asyncio
    async def test_update_refuses_owner_change(self, store, owners):
        ann, bob = owners
        story = await _add(store, ann, "Trip")
        with pytest.raises(ValueError):
            await store.update(story, {"user_id": bob})

    @pytest.mark.asyncio
    async def test_delete_removes_row(self, store, owners):
        ann, _ = owners
        story = await _add(store, ann, "Trip")
        await store.delete(story)
        assert await store.find_all_by_owner(ann) == []


class TestQueries:

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_across_fields(self, store, owners):
        ann, _ = owners
        await _add(store, ann, "Paris Trip", story="croissants", location=["France"])
        await _add(store, ann, "Beach", story="We went to PARIS later", location=["Spain"])
        await _add(store, ann, "Mountains", story="snow", location=["Paris, Texas"])
        await _add(store, ann, "Home", story="nothing", location=["Berlin"])

        titles = {s.title for s in await store.search(ann, "paris")}
        assert titles == {"Paris Trip", "Beach", "Mountains"}

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, store, owners):
        ann, _ = owners
        await _add(store, ann, "100% fun")
        await _add(store, ann, "Ordinary")

        assert [s.title for s in await store.search(ann, "%")] == ["100% fun"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ['"', "[", '", "', "]"])
    async def test_search_ignores_json_syntax_of_locations(self, store, owners, query):
        ann, _ = owners
        await _add(store, ann, "Trip", story="Great", location=["Paris", "Rome"])

        assert await store.search(ann, query) == []

    @pytest.mark.asyncio
    async def test_search_matches_location_values_not_keys(self, store, owners):
        ann, _ = owners
        await _add(store, ann, "Trip", story="Great", location={"city": "Lyon"})

        assert [s.title for s in await store.search(ann, "lyon")] == ["Trip"]
        assert await store.search(ann, "city") == []

    @pytest.mark.asyncio
    async def test_search_matches_quotes_inside_place_names(self, store, owners):
        ann, _ = owners
        await _add(store, ann, "Trip", story="Great", location=['Jardin "Secret"'])

        assert [s.title for s in await store.search(ann, '"Secret"')] == ["Trip"]

    @pytest.mark.asyncio
    async def test_search_follows_edited_locations(self, store, owners):
        ann, _ = owners
        story = await _add(store, ann, "Trip", story="Great", location=["Paris"])
        await store.update(story, {"visited_location": ["Oslo"]})

        assert await store.search(ann, "paris") == []
        assert [s.title for s in await store.search(ann, "oslo")] == ["Trip"]

    @pytest.mark.asyncio
    async def test_search_lists_favourites_first(self, store, owners):
        ann, _ = owners
        await _add(store, ann, "Trip one")
        second = await _add(store, ann, "Trip two")
        await store.update(second, {"is_favourite": True})

        assert [s.title for s in await store.search(ann, "trip")] == ["Trip two", "Trip one"]

    @pytest.mark.asyncio
    async def test_search_never_crosses_owners(self, store, owners):
        ann, bob = owners
        await _add(store, ann, "Trip")
        assert await store.search(bob, "trip") == []

    @pytest.mark.asyncio
    async def test_date_range_is_inclusive(self, store, owners):
        ann, _ = owners
        await _add(store, ann, "Before", visited=DAY - timedelta(days=1))
        await _add(store, ann, "Start", visited=DAY)
        await _add(store, ann, "End", visited=DAY + timedelta(days=2))
        await _add(store, ann, "After", visited=DAY + timedelta(days=3))

        stories = await store.find_by_visited_date_range(ann, DAY, DAY + timedelta(days=2))
        assert [s.title for s in stories] == ["Start", "End"]


class TestStorageFailures:

    @pytest.mark.asyncio
    async def test_database_error_becomes_storage_error(self, store):
        store.db = AsyncMock()
        store.db.execute.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))

        with pytest.raises(StorageError, match="database is locked") as exc_info:
            await store.find_all_by_owner(uuid.uuid4())
        assert exc_info.value.context == {"operation": "list_stories"}
