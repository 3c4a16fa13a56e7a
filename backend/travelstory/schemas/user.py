"""
TravelStory Backend - Identity Schemas
========================================

What:  Request bodies for create-account/login and the user projections
       returned to clients.
Why:   The password hash lives on the ORM row only; these models decide
       exactly which user fields ever leave the server.

Request fields are all optional at the schema level. Presence is checked by
AuthService so that a missing field is a 400 ValidationError with the
service's message rather than a framework-generated error.
"""

import uuid
from datetime import datetime
from typing import Optional

from travelstory.schemas.common import CamelModel


class CreateAccountRequest(CamelModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class PublicUser(CamelModel):
    """Projection returned alongside a token: {"fullName", "email"}."""
    full_name: str
    email: str


class UserProfile(CamelModel):
    """The persisted user record as returned by GET /get-user (minus the hash)."""
    id: uuid.UUID
    full_name: str
    email: str
    created_at: datetime


class AuthResponse(CamelModel):
    """
    Shared shape of create-account (201) and login (200):
        {"error": false, "user": {...}, "accessToken": "...", "message": "..."}
    """
    error: bool = False
    user: PublicUser
    access_token: str
    message: str


class CurrentUserResponse(CamelModel):
    user: UserProfile
    message: str = ""
