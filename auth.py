from __future__ import annotations

import hashlib
import os
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request
from jose import JWTError, jwt
from werkzeug.security import check_password_hash, generate_password_hash

ADMIN_COOKIE_NAME = "admin_session"
ADMIN_SESSION_SECRET = os.getenv("ADMIN_SESSION_SECRET", "change-me")
ADMIN_SESSION_MAX_AGE = int(os.getenv("ADMIN_SESSION_MAX_AGE", str(60 * 60 * 6)))
DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin123")
SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "").lower() in {"1", "true", "yes"}
ALGORITHM = "HS256"


def hash_password(value: str) -> str:
    return generate_password_hash(value)


def verify_password(password_hash: Optional[str], value: str) -> bool:
    if not password_hash or not value:
        return False
    try:
        return check_password_hash(password_hash, value)
    except ValueError:
        # Unknown hash method in the stored value.
        return False


def _fingerprint(password_hash: str) -> str:
    return hashlib.sha256(password_hash.encode("utf-8")).hexdigest()


def create_admin_token(settings: Any, now: Optional[datetime] = None) -> str:
    """Session token bound to the current password hash, so a password
    change invalidates every cookie issued before it."""
    issued = now or datetime.now(timezone.utc)
    payload = {
        "sub": "admin",
        "pwd": _fingerprint(settings.admin_password_hash),
        "iat": int(issued.timestamp()),
        "exp": int((issued + timedelta(seconds=ADMIN_SESSION_MAX_AGE)).timestamp()),
    }
    return jwt.encode(payload, ADMIN_SESSION_SECRET, algorithm=ALGORITHM)


def is_admin_authenticated(token: Optional[str], settings: Any) -> bool:
    if not token or settings is None:
        return False
    try:
        payload = jwt.decode(token, ADMIN_SESSION_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return False
    return payload.get("sub") == "admin" and payload.get("pwd") == _fingerprint(
        settings.admin_password_hash
    )


def set_admin_cookie(response, settings: Any):
    response.set_cookie(
        ADMIN_COOKIE_NAME,
        create_admin_token(settings),
        max_age=ADMIN_SESSION_MAX_AGE,
        httponly=True,
        samesite="Lax",
        secure=SESSION_COOKIE_SECURE,
        path="/",
    )
    return response


def clear_admin_cookie(response):
    response.set_cookie(
        ADMIN_COOKIE_NAME,
        "",
        max_age=0,
        httponly=True,
        samesite="Lax",
        secure=SESSION_COOKIE_SECURE,
        path="/",
    )
    return response


def admin_required(load_settings):
    """Decorator factory enforcing a valid admin cookie.

    ``load_settings`` returns the current settings record; the wrapped view
    receives it as the ``settings`` keyword argument.
    """

    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            settings = load_settings()
            token = request.cookies.get(ADMIN_COOKIE_NAME)
            if not is_admin_authenticated(token, settings):
                return jsonify({"error": "unauthorized"}), 401
            kwargs["settings"] = settings
            return f(*args, **kwargs)

        return decorated

    return decorator
