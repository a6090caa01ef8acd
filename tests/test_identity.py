"""Unverified JWT user id extraction."""

import jwt
import pytest

from kindroid_ai.errors import IdentityError
from kindroid_ai.identity import extract_user_id, strip_bearer

SECRET = "not-the-servers-secret-but-long-enough-for-hs256"


def make_token(claims: dict) -> str:
    return jwt.encode(claims, SECRET, algorithm="HS256")


def test_extracts_user_id_claim():
    assert extract_user_id(make_token({"user_id": "abc123"})) == "abc123"


def test_signature_is_not_verified():
    token = make_token({"user_id": "abc123"})
    header, payload, _ = token.split(".")
    assert extract_user_id(f"{header}.{payload}.bm90LWEtc2lnbmF0dXJl") == "abc123"


def test_accepts_bearer_prefix():
    assert extract_user_id("Bearer " + make_token({"user_id": "abc123"})) == "abc123"
    assert strip_bearer("plain-key") == "plain-key"


def test_expired_token_still_yields_user_id():
    assert extract_user_id(make_token({"user_id": "abc123", "exp": 1})) == "abc123"


@pytest.mark.parametrize("claims", [{}, {"sub": "abc123"}, {"user_id": 42}, {"user_id": ""}])
def test_missing_or_non_string_claim(claims):
    with pytest.raises(IdentityError):
        extract_user_id(make_token(claims))


@pytest.mark.parametrize("key", ["test_api_key", "", "a.b.c"])
def test_unparseable_token(key):
    with pytest.raises(IdentityError):
        extract_user_id(key)
