"""
Password Hashing and Token Signing

Passwords are hashed with argon2 (random salt per hash, so the same
password hashes differently every time; only the hash is stored).

Access and refresh tokens are HS256 JWTs. Both carry the user id;
the ``type`` claim keeps a refresh token from being accepted where an
access token is expected.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from jose import JWTError, jwt

from skycomfort.core.config import get_settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a plain-text password."""
    return hasher.hash(password)


def verify_password(hashed: str, password: str) -> bool:
    """Check a plain-text password against a stored argon2 hash."""
    try:
        return hasher.verify(hashed, password)
    except VerifyMismatchError:
        return False
    except InvalidHashError:
        logger.error("Stored password hash is not a valid argon2 hash")
        return False
    except VerificationError as e:
        logger.warning(f"Password verification failed: {e}")
        return False


def create_token(
    user_id: int,
    token_type: str = ACCESS_TOKEN,
    extra_claims: Optional[dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Sign a token for a user.

    Args:
        user_id: Subject of the token
        token_type: ``access`` or ``refresh``
        extra_claims: Additional claims to embed
        expires_delta: Lifetime override (defaults come from settings)
    """
    settings = get_settings()

    if expires_delta is None:
        minutes = (
            settings.jwt_refresh_expires_minutes
            if token_type == REFRESH_TOKEN
            else settings.jwt_expires_minutes
        )
        expires_delta = timedelta(minutes=minutes)

    to_encode = dict(extra_claims or {})
    to_encode.update({
        "sub": str(user_id),
        "id": user_id,
        "type": token_type,
        "exp": datetime.now(timezone.utc) + expires_delta,
    })

    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, token_type: str = ACCESS_TOKEN) -> Optional[dict[str, Any]]:
    """
    Verify a token's signature, expiry and type.

    Returns:
        The claims, or None when the token is invalid, expired or of the
        wrong type.
    """
    settings = get_settings()

    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None

    if payload.get("type") != token_type:
        logger.debug(f"Token rejected: expected {token_type}, got {payload.get('type')}")
        return None

    return payload
