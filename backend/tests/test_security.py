"""
Daygrid Backend - Password and Token Tests
============================================

What:  bcrypt hashing and JWT issue/verify round trips, including the
       failure modes get_current_user relies on.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest

from daygrid.config import settings
from daygrid.exceptions import AuthenticationError
from daygrid.security import (
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    PasswordHasher,
    create_access_token,
    create_refresh_token,
    decode_token,
    user_id_from_payload,
)


class TestPasswordHasher:

    def setup_method(self):
        self.hasher = PasswordHasher(rounds=4)

    def test_hash_and_verify(self):
        hashed = self.hasher.hash("secret123")
        assert hashed != "secret123"
        assert self.hasher.verify("secret123", hashed) is True

    def test_wrong_password(self):
        hashed = self.hasher.hash("secret123")
        assert self.hasher.verify("secret124", hashed) is False

    def test_same_password_gets_different_salts(self):
        assert self.hasher.hash("secret123") != self.hasher.hash("secret123")

    def test_empty_password_rejected(self):
        with pytest.raises(ValueError):
            self.hasher.hash("")

    def test_malformed_hash_never_matches(self):
        assert self.hasher.verify("secret123", "not-a-bcrypt-hash") is False
        assert self.hasher.verify("secret123", "") is False


class TestTokens:

    def test_access_token_round_trip(self):
        user_id = uuid4()
        payload = decode_token(create_access_token(user_id), ACCESS_TOKEN)
        assert payload["type"] == ACCESS_TOKEN
        assert user_id_from_payload(payload) == user_id

    def test_refresh_token_is_not_an_access_token(self):
        token = create_refresh_token(uuid4())
        with pytest.raises(AuthenticationError):
            decode_token(token, ACCESS_TOKEN)
        assert decode_token(token, REFRESH_TOKEN)["type"] == REFRESH_TOKEN

    def test_expired_token(self):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {"sub": str(uuid4()), "type": ACCESS_TOKEN, "iat": past, "exp": past + timedelta(minutes=1)},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError, match="expired"):
            decode_token(token, ACCESS_TOKEN)

    def test_wrong_signature(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "type": ACCESS_TOKEN},
            "some-other-secret-of-sufficient-length-000",
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError, match="Invalid"):
            decode_token(token, ACCESS_TOKEN)

    def test_garbage_token(self):
        with pytest.raises(AuthenticationError):
            decode_token("not.a.jwt", ACCESS_TOKEN)

    def test_non_uuid_subject(self):
        with pytest.raises(AuthenticationError):
            user_id_from_payload({"sub": "nobody"})
