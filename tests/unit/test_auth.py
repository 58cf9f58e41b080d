import time
from unittest.mock import patch

import bcrypt
import jwt
import pytest
from fastapi import HTTPException

from regview.core.auth import (
    authenticate_user,
    create_access_token,
    verify_access_token,
    verify_password,
)


class TestPasswords:
    """Test cases for bcrypt password verification."""

    def setup_method(self):
        self.hashed = bcrypt.hashpw(b"hunter2", bcrypt.gensalt(rounds=4)).decode()

    def test_verify_password_match(self):
        assert verify_password("hunter2", self.hashed) is True

    def test_verify_password_mismatch(self):
        assert verify_password("wrong", self.hashed) is False

    def test_verify_password_invalid_hash(self):
        """Test that a malformed hash is treated as a mismatch instead of an error."""
        for hashed in ("", None, "not-a-bcrypt-hash"):
            assert verify_password("hunter2", hashed) is False, f"Failed for hash: {hashed!r}"

    def test_authenticate_configured_user(self):
        assert authenticate_user("admin", "s3cret") is True
        assert authenticate_user("admin", "nope") is False
        assert authenticate_user("someone", "s3cret") is False

    def test_authenticate_without_configuration(self):
        with patch("regview.core.auth.settings") as mock_settings:
            mock_settings.USERNAME = None
            mock_settings.HASHED_PASSWORD = None
            assert authenticate_user("admin", "s3cret") is False


class TestTokens:
    """Test cases for access token creation and verification."""

    def test_round_trip_subject(self):
        token = create_access_token("admin")
        assert verify_access_token(token) == "admin"

    def test_expired_token(self):
        token = create_access_token("admin", expires_in_minutes=-1)
        with pytest.raises(HTTPException) as exc_info:
            verify_access_token(token)
        assert exc_info.value.status_code == 401
        assert "expired" in exc_info.value.detail

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "admin", "exp": int(time.time()) + 60}, "other-secret", algorithm="HS256")
        with pytest.raises(HTTPException) as exc_info:
            verify_access_token(token)
        assert exc_info.value.detail == "Invalid token"

    def test_missing_subject(self):
        token = jwt.encode({"exp": int(time.time()) + 60}, "test-secret", algorithm="HS256")
        with pytest.raises(HTTPException):
            verify_access_token(token)
