"""
TravelStory Backend - Identity Store
======================================

What:  Persistence for user accounts: lookup by email, lookup by id, create.
Why:   Keeps SQL out of AuthService and the access guard.
How:   Thin wrapper around a request-scoped AsyncSession. Writes are flushed
       (not committed); the session dependency commits at the end of the
       request.

Error handling:
    SQLAlchemy errors are logged and re-raised as StorageError (HTTP 500).
    A duplicate email that slips past AuthService's pre-check (two concurrent
    registrations) is caught by the unique index and reported as ConflictError.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from travelstory.exceptions import ConflictError, StorageError
from travelstory.models.user import User

logger = logging.getLogger(__name__)


class UserStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> Optional[User]:
        try:
            result = await self.db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user by email: %s", e)
            raise StorageError(message=str(e), context={"operation": "find_by_email"})

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        try:
            result = await self.db.execute(select(User).where(User.id == user_id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, e)
            raise StorageError(message=str(e), context={"operation": "find_by_id"})

    async def create(self, full_name: str, email: str, password_hash: str) -> User:
        user = User(full_name=full_name, email=email, password_hash=password_hash)
        try:
            self.db.add(user)
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError()
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", e)
            raise StorageError(message=str(e), context={"operation": "create_user"})
        return user
