"""
TravelStory Backend - Authentication Service
==============================================

What:  Account creation, login and current-user resolution.
Why:   The only place that sees plaintext passwords; everything downstream
       works with a user id taken from a verified token.
How:   Composes UserStore (persistence), bcrypt helpers (hashing) and
       TokenService (issuing tokens). Hashing runs in Starlette's
       threadpool because bcrypt is deliberately slow and CPU-bound.
Who:   Called by the /create-account, /login and /get-user routes.

Error policy:
    create_account: ValidationError (missing field) → ConflictError (email taken)
    login:          ValidationError (missing field) → NotFoundError (unknown email)
                    → InvalidCredentialsError (wrong password)
    current_user:   AuthenticationError if the token's user no longer exists
"""

import logging
import uuid
from typing import Optional, Tuple

from starlette.concurrency import run_in_threadpool

from travelstory.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from travelstory.models.user import User
from travelstory.services.passwords import hash_password, verify_password
from travelstory.services.token_service import TokenService
from travelstory.services.user_store import UserStore

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, users: UserStore, tokens: TokenService):
        self.users = users
        self.tokens = tokens

    async def create_account(
        self,
        full_name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> Tuple[User, str]:
        """
        Register a new user and sign them in.

        Returns:
            (user, access_token)
        """
        if not full_name or not email or not password:
            raise ValidationError(message="All fields are required")

        if await self.users.find_by_email(email) is not None:
            raise ConflictError(message="User already exists", context={"email": email})

        password_hash = await run_in_threadpool(hash_password, password)
        user = await self.users.create(
            full_name=full_name, email=email, password_hash=password_hash
        )
        logger.info("Account created: user_id=%s", user.id)
        return user, self.tokens.issue(user.id)

    async def login(self, email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        """
        Check credentials and issue a fresh token.

        An existing email with a wrong password is always InvalidCredentials,
        never NotFound.
        """
        if not email or not password:
            raise ValidationError(message="Email and Password are required")

        user = await self.users.find_by_email(email)
        if user is None:
            raise NotFoundError(resource="user")

        if not await run_in_threadpool(verify_password, password, user.password_hash):
            logger.info("Failed login: user_id=%s", user.id)
            raise InvalidCredentialsError()

        logger.info("Login: user_id=%s", user.id)
        return user, self.tokens.issue(user.id)

    async def current_user(self, owner_id: uuid.UUID) -> User:
        user = await self.users.find_by_id(owner_id)
        if user is None:
            # Valid signature but the account is gone: treat as unauthenticated
            raise AuthenticationError(message="User no longer exists")
        return user
