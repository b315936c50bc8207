"""Tests de validation des jetons d'accès."""

from __future__ import annotations

from pitch_history.domain.auth import create_access_token, decode_token

SECRET = "s3cret"


def test_token_roundtrip_with_name():
    token = create_access_token(SECRET, "HS256", 5, {"sub": "u1", "name": "Jane"})
    data = decode_token(token, SECRET, "HS256")
    assert data is not None
    assert data.sub == "u1"
    assert data.name == "Jane"


def test_wrong_secret_is_rejected():
    token = create_access_token(SECRET, "HS256", 5, {"sub": "u1"})
    assert decode_token(token, "other", "HS256") is None


def test_expired_token_is_rejected():
    token = create_access_token(SECRET, "HS256", -1, {"sub": "u1"})
    assert decode_token(token, SECRET, "HS256") is None


def test_token_without_subject_is_rejected():
    token = create_access_token(SECRET, "HS256", 5, {"name": "Jane"})
    assert decode_token(token, SECRET, "HS256") is None
