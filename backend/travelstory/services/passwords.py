"""Password hashing helpers (bcrypt)."""

from typing import Optional

import bcrypt

from travelstory.config import settings


def _encode(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes and newer releases reject longer input
    return password.encode("utf-8")[:72]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with a fresh salt. Cost defaults to settings.bcrypt_rounds."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False
