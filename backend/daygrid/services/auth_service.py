"""
Daygrid Backend - Authentication Service
==========================================

What:  Account creation, sign-in and token refresh.
How:   Profiles store a bcrypt hash; successful calls return a JWT pair.
Who:   Called by the /api/auth routes.

Username generation:
    When sign-up omits a username, one is built from the email's local part
    (letters, digits, underscores, dots) plus `username_suffix_length`
    random alphanumeric characters, e.g. "jane.doe" → "jane.doe_x7Qa".
    Collisions are retried a few times before giving up.
"""

import logging
import re
import secrets
import string
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from daygrid.config import settings
from daygrid.exceptions import AuthenticationError, ConflictError, ValidationError
from daygrid.models import Profile
from daygrid.models.profile import USERNAME_MAX_LENGTH
from daygrid.schemas.auth import TokenResponse
from daygrid.security import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
    password_hasher,
    user_id_from_payload,
)

logger = logging.getLogger(__name__)

USERNAME_CHARACTERS = string.ascii_letters + string.digits
USERNAME_GENERATION_ATTEMPTS = 5
_UNSAFE_USERNAME_CHARS = re.compile(r"[^A-Za-z0-9_.]")


def generate_username(email: str, suffix_length: Optional[int] = None) -> str:
    length = suffix_length or settings.username_suffix_length
    # "<base>_<suffix>" has to fit the username column
    base_length = min(40, USERNAME_MAX_LENGTH - 1 - length)
    base = _UNSAFE_USERNAME_CHARS.sub("", email.split("@", 1)[0])[:base_length] or "user"
    suffix = "".join(secrets.choice(USERNAME_CHARACTERS) for _ in range(length))
    return f"{base}_{suffix}"


class AuthService:

    async def _username_taken(self, db: AsyncSession, username: str) -> bool:
        result = await db.execute(
            select(Profile.id).where(func.lower(Profile.username) == username.lower())
        )
        return result.scalar_one_or_none() is not None

    async def _pick_username(self, db: AsyncSession, email: str, requested: Optional[str]) -> str:
        if requested:
            if await self._username_taken(db, requested):
                raise ConflictError(message="That username is already taken", field="username")
            return requested

        for _ in range(USERNAME_GENERATION_ATTEMPTS):
            candidate = generate_username(email)
            if not await self._username_taken(db, candidate):
                return candidate
        raise ConflictError(
            message="Could not generate a unique username. Please choose one.",
            field="username",
        )

    def _issue_tokens(self, profile: Profile) -> TokenResponse:
        return TokenResponse(
            access_token=create_access_token(profile.id),
            refresh_token=create_refresh_token(profile.id),
            expires_in=settings.access_token_expire_minutes * 60,
            user_id=str(profile.id),
        )

    async def sign_up(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        username: Optional[str] = None,
    ) -> TokenResponse:
        """
        Create a profile and sign it in.

        Raises:
            ValidationError: password shorter than settings.password_min_length
            ConflictError:   email or username already registered
        """
        email = email.strip().lower()
        if len(password) < settings.password_min_length:
            raise ValidationError(
                message=f"Password must be at least {settings.password_min_length} characters.",
                field="password",
            )

        existing = await db.execute(select(Profile.id).where(Profile.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(message="An account with this email already exists", field="email")

        profile = Profile(
            email=email,
            password_hash=password_hasher.hash(password),
            username=await self._pick_username(db, email, username),
            avatar_url=settings.default_avatar_url,
            tasks=[],
            daily_images=[],
        )
        db.add(profile)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent sign-up for the same email/username
            raise ConflictError(message="An account with these details already exists")

        logger.info("Profile created: %s (%s)", profile.id, profile.username)
        return self._issue_tokens(profile)

    async def sign_in(self, db: AsyncSession, email: str, password: str) -> TokenResponse:
        """
        Raises:
            AuthenticationError with the same message for unknown email and
            wrong password.
        """
        result = await db.execute(select(Profile).where(Profile.email == email.strip().lower()))
        profile = result.scalar_one_or_none()

        if profile is None or not password_hasher.verify(password, profile.password_hash):
            logger.info("Failed sign-in for %s", email)
            raise AuthenticationError(message="Invalid email or password")

        return self._issue_tokens(profile)

    async def refresh(self, db: AsyncSession, refresh_token: str) -> TokenResponse:
        payload = decode_token(refresh_token, REFRESH_TOKEN)
        profile = await db.get(Profile, user_id_from_payload(payload))
        if profile is None:
            raise AuthenticationError(message="Account no longer exists")
        return self._issue_tokens(profile)


auth_service = AuthService()
