"""
JWT authentication helpers and decorators for the Flask API.
"""

import secrets
import time
from datetime import datetime, timedelta
from functools import wraps
from typing import Any, Dict, Mapping, Optional

import jwt
from flask import current_app, g, request

from medbook.access import authorize
from medbook.models import Session
from medbook.responses import AuthenticationError

# Revoked token ids (logout) mapped to their expiry (unix seconds).
# In-memory; use Redis when running several workers.
revoked_tokens: Dict[str, int] = {}


def generate_token(user: Dict[str, Any], secret_key: str, expiry_hours: int) -> str:
    """Generate a JWT token for an authenticated user."""
    now = datetime.utcnow()
    payload = {
        "sub": user["id"],
        "role": user["role"],
        "jti": secrets.token_hex(8),
        "iat": now,
        "exp": now + timedelta(hours=expiry_hours),
    }
    return jwt.encode(payload, secret_key, algorithm="HS256")


def verify_token(token: str, secret_key: str) -> Optional[Dict[str, Any]]:
    """Verify a JWT token and return the decoded payload (or None)."""
    try:
        payload = jwt.decode(token, secret_key, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
    if payload.get("jti") in revoked_tokens:
        return None
    return payload


def revoke_token(token_id: str, expires: int) -> None:
    """Reject *token_id* until it would have expired anyway."""
    revoked_tokens[token_id] = expires
    cleanup_expired_revocations()


def cleanup_expired_revocations(now: Optional[float] = None):
    """Forget revoked ids whose tokens have expired; JWT expiry rejects them already."""
    now = time.time() if now is None else now
    expired = [jti for jti, exp in revoked_tokens.items() if exp <= now]
    for jti in expired:
        del revoked_tokens[jti]
    if expired:
        print(f"[cleanup] Removed {len(expired)} expired revocations")


def bearer_token(headers: Mapping[str, str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    auth_header = headers.get("Authorization", "")
    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        return None
    return parts[1]


def read_session(headers: Mapping[str, str], secret_key: str) -> Session:
    """Session reader: token and role claim, or an empty Session if either is unusable."""
    token = bearer_token(headers)
    if not token:
        return Session()
    payload = verify_token(token, secret_key)
    if not payload:
        return Session()
    return Session(token=token, role=payload.get("role"))


def token_required(f):
    """Decorator that protects endpoints with JWT authentication."""
    @wraps(f)
    def decorated(*args, **kwargs):
        settings = current_app.config["SETTINGS"]
        store = current_app.config["STORE"]

        token = bearer_token(request.headers)
        if not token:
            raise AuthenticationError("Access denied. No token provided.")

        payload = verify_token(token, settings.secret_key)
        if not payload:
            raise AuthenticationError("Token is not valid")

        user = store.get("users", payload.get("sub", ""))
        if not user:
            raise AuthenticationError("Token is not valid - user not found")
        if not user.get("isActive", True):
            raise AuthenticationError("Account has been deactivated")

        # role on the stored user wins over a stale claim
        g.session = Session(token=token, role=user["role"])
        g.current_user = user
        g.token_id = payload.get("jti")
        g.token_expires = payload.get("exp")
        return f(*args, **kwargs)

    return decorated


def roles_required(*roles: str):
    """Decorator (use below ``token_required``) restricting an endpoint to *roles*."""
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            error = authorize(g.get("session", Session()), roles)
            if error is not None:
                raise error
            return f(*args, **kwargs)
        return decorated
    return decorator
