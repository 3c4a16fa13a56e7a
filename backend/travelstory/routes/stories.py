"""
TravelStory Backend - Story Route Handlers
============================================

What:  The authenticated story endpoints.
Why:   Every handler takes OwnerId first, so the access guard runs before
       anything else and the acting identity is always the token's owner.

Route Inventory:
    POST   /add-daily-story              create
    GET    /get-all-stories              list (insertion order)
    POST   /edit-story/{story_id}        replace fields
    DELETE /delete-story/{story_id}      delete + background image cleanup
    POST   /update-is-favourite/{story_id}
    GET    /search?query=...             favourites first
    GET    /daily-story/filter?startDate=&endDate=   favourites first

Story ids that are not UUIDs cannot name any story, so they produce the
same 404 as an unknown or foreign id.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Query

from travelstory.dependencies import OwnerId, StoryServiceDep
from travelstory.exceptions import NotFoundError
from travelstory.models.story import Story
from travelstory.schemas.common import ErrorResponse, MessageResponse
from travelstory.schemas.story import (
    FavouriteRequest,
    StoriesEnvelope,
    StoryEnvelope,
    StoryListEnvelope,
    StoryRequest,
    StoryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Stories"])

_AUTH_ERRORS = {401: {"description": "Not authenticated", "model": ErrorResponse}}
_OWNED_ERRORS = {
    **_AUTH_ERRORS,
    404: {"description": "Story not found (or not yours)", "model": ErrorResponse},
}


def _story_uuid(story_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(story_id)
    except ValueError:
        raise NotFoundError(resource="Daily story", resource_id=story_id)


def _as_responses(stories: List[Story]) -> List[StoryResponse]:
    return [StoryResponse.model_validate(s) for s in stories]


@router.post(
    "/add-daily-story",
    status_code=201,
    response_model=StoryEnvelope,
    responses={**_AUTH_ERRORS, 400: {"description": "Missing or invalid field", "model": ErrorResponse}},
    summary="Create a travel story",
)
async def add_daily_story(
    owner_id: OwnerId, body: StoryRequest, service: StoryServiceDep
) -> StoryEnvelope:
    story = await service.add_story(
        owner_id,
        title=body.title,
        story=body.story,
        visited_location=body.visited_location,
        image_url=body.image_url,
        visited_date=body.visited_date,
    )
    return StoryEnvelope(story=StoryResponse.model_validate(story), message="Added Successfully")


@router.get(
    "/get-all-stories",
    response_model=StoryListEnvelope,
    responses=_AUTH_ERRORS,
    summary="List all of the caller's stories",
)
async def get_all_stories(owner_id: OwnerId, service: StoryServiceDep) -> StoryListEnvelope:
    stories = await service.list_stories(owner_id)
    return StoryListEnvelope(story=_as_responses(stories))


@router.post(
    "/edit-story/{story_id}",
    response_model=StoryEnvelope,
    responses={**_OWNED_ERRORS, 400: {"description": "Missing or invalid field", "model": ErrorResponse}},
    summary="Replace a story's fields",
    description="An empty imageUrl stores the placeholder image URL instead.",
)
async def edit_story(
    owner_id: OwnerId, story_id: str, body: StoryRequest, service: StoryServiceDep
) -> StoryEnvelope:
    story = await service.edit_story(
        owner_id,
        _story_uuid(story_id),
        title=body.title,
        story=body.story,
        visited_location=body.visited_location,
        image_url=body.image_url,
        visited_date=body.visited_date,
    )
    return StoryEnvelope(story=StoryResponse.model_validate(story), message="Update Successful")


@router.delete(
    "/delete-story/{story_id}",
    response_model=MessageResponse,
    responses=_OWNED_ERRORS,
    summary="Delete a story and its uploaded image",
)
async def delete_story(
    owner_id: OwnerId,
    story_id: str,
    background_tasks: BackgroundTasks,
    service: StoryServiceDep,
) -> MessageResponse:
    await service.delete_story(owner_id, _story_uuid(story_id), background_tasks=background_tasks)
    return MessageResponse(message="Travel story deleted successfully")


@router.post(
    "/update-is-favourite/{story_id}",
    response_model=StoryEnvelope,
    responses={**_OWNED_ERRORS, 400: {"description": "isFavourite missing", "model": ErrorResponse}},
    summary="Mark or unmark a story as favourite",
)
async def update_is_favourite(
    owner_id: OwnerId, story_id: str, body: FavouriteRequest, service: StoryServiceDep
) -> StoryEnvelope:
    story = await service.set_favourite(owner_id, _story_uuid(story_id), body.is_favourite)
    return StoryEnvelope(story=StoryResponse.model_validate(story), message="Update Successful")


@router.get(
    "/search",
    response_model=StoriesEnvelope,
    responses={**_AUTH_ERRORS, 400: {"description": "query missing", "model": ErrorResponse}},
    summary="Search stories by title, text or location",
)
async def search_stories(
    owner_id: OwnerId,
    service: StoryServiceDep,
    query: Optional[str] = Query(default=None, description="Case-insensitive substring"),
) -> StoriesEnvelope:
    stories = await service.search(owner_id, query)
    return StoriesEnvelope(stories=_as_responses(stories))


@router.get(
    "/daily-story/filter",
    response_model=StoriesEnvelope,
    responses={**_AUTH_ERRORS, 400: {"description": "Bad or missing date bound", "model": ErrorResponse}},
    summary="Stories visited within a date range",
)
async def filter_stories(
    owner_id: OwnerId,
    service: StoryServiceDep,
    start_date: Optional[str] = Query(default=None, alias="startDate", description="Epoch ms, inclusive"),
    end_date: Optional[str] = Query(default=None, alias="endDate", description="Epoch ms, inclusive"),
) -> StoriesEnvelope:
    stories = await service.filter_by_date_range(owner_id, start_date, end_date)
    return StoriesEnvelope(stories=_as_responses(stories))
