"""
TravelStory Backend - Request Dependencies
============================================

What:  FastAPI dependencies that assemble services per request and the
       access guard that authenticates story/user routes.
Why:   Routes declare what they need; the session, stores and services are
       wired here, so tests can swap any piece with app.dependency_overrides.

Access guard (get_current_owner_id):
    1. Read "Authorization: Bearer <token>" (HTTPBearer, auto_error=False so
       a missing header becomes our own 401 rather than FastAPI's 403)
    2. TokenService.verify() → owner id, or AuthenticationError (401)
    3. The owner id is handed to the route as the acting identity

    Because it is a dependency, a rejected request never reaches the route
    body and never touches a story.

Intentionally unguarded: /create-account, /login, /image-upload,
/delete-image.
"""

import uuid
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from travelstory.config import settings
from travelstory.database import get_db_session
from travelstory.exceptions import AuthenticationError
from travelstory.services.auth_service import AuthService
from travelstory.services.image_service import ImageService, image_service
from travelstory.services.story_service import StoryService
from travelstory.services.story_store import StoryStore
from travelstory.services.token_service import TokenService, token_service
from travelstory.services.user_store import UserStore

bearer_scheme = HTTPBearer(auto_error=False)

DBSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_token_service() -> TokenService:
    return token_service


def get_image_service() -> ImageService:
    return image_service


async def get_current_owner_id(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> uuid.UUID:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Missing authentication token")
    return tokens.verify(credentials.credentials)


def get_auth_service(
    db: DBSession,
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthService:
    return AuthService(UserStore(db), tokens)


def get_story_service(
    db: DBSession,
    images: Annotated[ImageService, Depends(get_image_service)],
) -> StoryService:
    return StoryService(StoryStore(db), images, settings.placeholder_image_url)


OwnerId = Annotated[uuid.UUID, Depends(get_current_owner_id)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
StoryServiceDep = Annotated[StoryService, Depends(get_story_service)]
ImageServiceDep = Annotated[ImageService, Depends(get_image_service)]
