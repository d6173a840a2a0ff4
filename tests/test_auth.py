"""
Unit tests for token handling and the session reader.
"""

import jwt

from medbook.api.auth import (
    bearer_token,
    cleanup_expired_revocations,
    generate_token,
    read_session,
    revoke_token,
    revoked_tokens,
    verify_token,
)

SECRET = "test-secret"
USER = {"id": "64b7f0c2a1d3e4f5a6b7c8d9", "role": "doctor"}


# ── Tests: tokens ────────────────────────────────────────────────────

def test_generate_and_verify_token():
    token = generate_token(USER, SECRET, expiry_hours=1)
    payload = verify_token(token, SECRET)
    assert payload["sub"] == USER["id"]
    assert payload["role"] == "doctor"
    assert payload["jti"]


def test_verify_token_wrong_secret():
    token = generate_token(USER, SECRET, expiry_hours=1)
    assert verify_token(token, "other-secret") is None


def test_verify_token_expired():
    token = generate_token(USER, SECRET, expiry_hours=-1)
    assert verify_token(token, SECRET) is None


def test_verify_token_revoked():
    token = generate_token(USER, SECRET, expiry_hours=1)
    claims = jwt.decode(token, SECRET, algorithms=["HS256"])
    revoke_token(claims["jti"], claims["exp"])
    assert verify_token(token, SECRET) is None
    assert revoked_tokens[claims["jti"]] == claims["exp"]


def test_cleanup_forgets_only_expired_revocations():
    revoked_tokens["stale-jti"] = 100
    revoked_tokens["live-jti"] = 2 ** 40
    cleanup_expired_revocations(now=1000)
    assert "stale-jti" not in revoked_tokens
    assert "live-jti" in revoked_tokens
    del revoked_tokens["live-jti"]


# ── Tests: session reader ────────────────────────────────────────────

def test_bearer_token_parsing():
    assert bearer_token({"Authorization": "Bearer abc"}) == "abc"
    assert bearer_token({"Authorization": "Token abc"}) is None
    assert bearer_token({"Authorization": "Bearer"}) is None
    assert bearer_token({}) is None


def test_read_session_with_valid_token():
    token = generate_token(USER, SECRET, expiry_hours=1)
    session = read_session({"Authorization": f"Bearer {token}"}, SECRET)
    assert session.token == token
    assert session.role == "doctor"
    assert session.is_authenticated


def test_read_session_with_garbage_token_is_empty():
    session = read_session({"Authorization": "Bearer not-a-jwt"}, SECRET)
    assert session.token is None
    assert session.role is None
    assert not session.is_authenticated
