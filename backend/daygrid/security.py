"""
Daygrid Backend - Password Hashing and Access Tokens
======================================================

What:  bcrypt password hashing, JWT token pairs, and the `get_current_user`
       FastAPI dependency that turns a Bearer token into a Profile.
How:   Tokens are HS256-signed with settings.jwt_secret. Each carries
       `sub` (profile UUID), `type` (access | refresh), `iat` and `exp`.
       Access tokens authorize API calls; refresh tokens only mint new pairs.
Who:   AuthService issues tokens; every authenticated route depends on
       get_current_user.

Sign-out is stateless: the client discards its tokens and they expire.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid.config import settings
from daygrid.database import get_db_session
from daygrid.exceptions import AuthenticationError
from daygrid.models import Profile

logger = logging.getLogger(__name__)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


# ══════════════════════════════════════════════════════════════════════════
# Passwords
# ══════════════════════════════════════════════════════════════════════════

class PasswordHasher:
    """Password hashing with bcrypt; the salt is embedded in the hash."""

    def __init__(self, rounds: Optional[int] = None) -> None:
        self._rounds = rounds or settings.bcrypt_rounds

    def hash(self, password: str) -> str:
        """
        Raises:
            ValueError: If password is empty.
        """
        if not password:
            raise ValueError("Password cannot be empty")
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Return True when `password` matches; malformed hashes never match."""
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.warning("Password verification failed: %s", str(e))
            return False


password_hasher = PasswordHasher()


# ══════════════════════════════════════════════════════════════════════════
# Tokens
# ══════════════════════════════════════════════════════════════════════════

def _create_token(user_id: UUID, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: UUID) -> str:
    return _create_token(
        user_id, ACCESS_TOKEN, timedelta(minutes=settings.access_token_expire_minutes)
    )


def create_refresh_token(user_id: UUID) -> str:
    return _create_token(
        user_id, REFRESH_TOKEN, timedelta(days=settings.refresh_token_expire_days)
    )


def decode_token(token: str, expected_type: str) -> Dict[str, Any]:
    """
    Validate signature, expiry and token type.

    Returns:
        The decoded payload.

    Raises:
        AuthenticationError for expired, tampered, or wrong-type tokens.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(message="Your session has expired. Please sign in again.")
    except jwt.InvalidTokenError:
        raise AuthenticationError(message="Invalid authentication token")

    if payload.get("type") != expected_type:
        raise AuthenticationError(message="Invalid authentication token")
    return payload


def user_id_from_payload(payload: Dict[str, Any]) -> UUID:
    try:
        return UUID(str(payload.get("sub")))
    except ValueError:
        raise AuthenticationError(message="Invalid authentication token")


# ══════════════════════════════════════════════════════════════════════════
# Dependency
# ══════════════════════════════════════════════════════════════════════════

# auto_error=False so a missing header reaches our handler (401, not 403)
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Profile:
    """
    Resolve the Bearer access token to the signed-in Profile.

    Raises:
        AuthenticationError (401) when the header is missing, the token is
        invalid, or the profile no longer exists.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    payload = decode_token(credentials.credentials, ACCESS_TOKEN)
    user_id = user_id_from_payload(payload)

    profile = await db.get(Profile, user_id)
    if profile is None:
        logger.info("Token for deleted profile %s rejected", user_id)
        raise AuthenticationError(message="Account no longer exists")
    return profile
