"""
TravelStory Backend - Session Token Service
=============================================

What:  Issues and verifies signed, time-bounded bearer tokens.
Why:   Possession of a valid token is the only authorization mechanism:
       there is no session table, no revocation list and no refresh token.
How:   HS256 JWT (python-jose) carrying exactly two claims:
           sub: the owner's user id
           exp: issuance time + configured lifetime (72h by default)
Who:   AuthService issues tokens; the access guard verifies them.

Failure policy:
    verify() never fails open. A malformed token, a bad signature, an
    expired token or a token without a subject all raise
    AuthenticationError, and callers do not learn which one it was.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from travelstory.config import settings
from travelstory.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class TokenService:
    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(hours=72),
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime

    def issue(self, owner_id: uuid.UUID, now: Optional[datetime] = None) -> str:
        """Sign a token for `owner_id` that expires `lifetime` after `now`."""
        issued_at = now or datetime.now(timezone.utc)
        claims: Dict[str, Any] = {
            "sub": str(owner_id),
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> uuid.UUID:
        """
        Return the owner id asserted by `token`.

        Raises:
            AuthenticationError: token is malformed, mis-signed, expired,
                                 or its subject is not a user id.
        """
        if not token:
            raise AuthenticationError()
        try:
            # jose checks the signature and the exp claim in one call
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug("Token rejected: %s", e)
            raise AuthenticationError(message="Invalid or expired token")

        subject = claims.get("sub")
        if "exp" not in claims or not subject:
            raise AuthenticationError(message="Invalid or expired token")
        try:
            return uuid.UUID(str(subject))
        except ValueError:
            raise AuthenticationError(message="Invalid or expired token")


# ── Singleton Instance ────────────────────────────────────────────────────
token_service = TokenService(
    secret=settings.access_token_secret,
    algorithm=settings.jwt_algorithm,
    lifetime=timedelta(hours=settings.access_token_expire_hours),
)
