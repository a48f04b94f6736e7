"""
Tests for the identity provider and role normalisation
"""

from datetime import timedelta

import pytest
from starlette.requests import Request

from forum.auth import (
    Identity,
    create_access_token,
    extract_token,
    hash_password,
    identity_from_token,
    verify_password,
)
from forum.constants.roles import DEFAULT_ROLE, Role, normalize_role


def make_request(headers: dict | None = None, cookie: str | None = None) -> Request:
    raw_headers = [(key.lower().encode(), value.encode()) for key, value in (headers or {}).items()]
    if cookie:
        raw_headers.append((b"cookie", cookie.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw_headers})


class TestNormalizeRole:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Player", Role.PLAYER),
            ("GameMaster", Role.GAME_MASTER),
            ("Admin", Role.ADMIN),
            ("user", Role.PLAYER),
            ("moderator", Role.GAME_MASTER),
            ("admin", Role.ADMIN),
            ("ADMIN", Role.ADMIN),
            (Role.ADMIN, Role.ADMIN),
        ],
    )
    def test_known_labels(self, raw, expected):
        assert normalize_role(raw) is expected

    @pytest.mark.parametrize("raw", [None, "", "superadmin", "editor"])
    def test_unknown_labels(self, raw):
        assert normalize_role(raw) is None

    def test_default_role(self):
        assert DEFAULT_ROLE is Role.PLAYER
        assert DEFAULT_ROLE.value == "Player"


class TestTokens:
    def test_round_trip(self):
        token = create_access_token({"sub": 42, "username": "aria", "role": Role.GAME_MASTER})
        assert identity_from_token(token) == Identity(user_id="42", username="aria", role=Role.GAME_MASTER)

    def test_legacy_role_claim_is_normalised(self):
        token = create_access_token({"sub": 7, "role": "moderator"})
        assert identity_from_token(token).role is Role.GAME_MASTER

    def test_missing_sub_is_rejected_at_creation(self):
        with pytest.raises(ValueError):
            create_access_token({"role": "Admin"})

    def test_expired_token_yields_no_identity(self):
        token = create_access_token({"sub": 1}, expires_delta=timedelta(seconds=-10))
        assert identity_from_token(token) is None

    def test_garbage_token_yields_no_identity(self):
        assert identity_from_token("definitely.not.jwt") is None

    def test_unknown_role_keeps_identity_without_role(self):
        token = create_access_token({"sub": 1, "role": "superadmin"})
        identity = identity_from_token(token)
        assert identity.user_id == "1"
        assert identity.role is None


class TestExtractToken:
    def test_bearer_header(self):
        assert extract_token(make_request({"Authorization": "Bearer abc.def"})) == "abc.def"

    def test_cookie_fallback(self):
        assert extract_token(make_request(cookie="token=xyz")) == "xyz"

    def test_header_wins_over_cookie(self):
        request = make_request({"Authorization": "Bearer from-header"}, cookie="token=from-cookie")
        assert extract_token(request) == "from-header"

    def test_no_credentials(self):
        assert extract_token(make_request()) is None


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed) is True
        assert verify_password("wrong horse", hashed) is False
