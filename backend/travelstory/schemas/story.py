"""
TravelStory Backend - Story & Image Schemas
=============================================

What:  Request bodies and response envelopes for story and image endpoints.
Who:   Route handlers use these as body types and response_model values.

Envelope keys follow the public API exactly:
    list  → {"story": [...]}
    search/filter → {"stories": [...]}
    create/edit/favourite → {"story": {...}, "message": "..."}
"""

import uuid
from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel

from travelstory.schemas.common import CamelModel


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class StoryRequest(CamelModel):
    """
    Body of POST /add-daily-story and POST /edit-story/{id}.

    visited_date is epoch milliseconds as a number or numeric string; it is
    parsed (and rejected if unparsable) by StoryService.
    """
    title: Optional[str] = None
    story: Optional[str] = None
    visited_location: Optional[Any] = None
    image_url: Optional[str] = None
    visited_date: Optional[Union[int, str]] = None


class FavouriteRequest(CamelModel):
    """Body of POST /update-is-favourite/{id}. Accepts true/false, 1/0, "true"/"false"."""
    is_favourite: Optional[bool] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class StoryResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    story: str
    visited_location: Any
    image_url: str
    visited_date: datetime
    is_favourite: bool
    created_at: datetime


class StoryEnvelope(CamelModel):
    story: StoryResponse
    message: str


class StoryListEnvelope(CamelModel):
    story: List[StoryResponse]


class StoriesEnvelope(CamelModel):
    stories: List[StoryResponse]


class ImageUploadResponse(CamelModel):
    image_url: str


class ImageDeleteResponse(BaseModel):
    """
    Outcome of DELETE /delete-image. Both outcomes are HTTP 200:
        deleted:   {"message": "Image deleted successfully"}
        not found: {"error": true, "message": "Image not found"}
    """
    message: str
    error: Optional[bool] = None
