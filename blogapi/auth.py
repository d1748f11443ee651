"""
Authentication module for API access control.

Provides password hashing, signed session tokens and the FastAPI
dependencies that resolve the calling user. Supported credentials:
1. Session token - the ``session`` cookie set at sign-in, or an
   ``Authorization: Bearer <token>`` header carrying the same token
2. Internal API key - ``X-API-Key`` matching INTERNAL_API_KEY, treated as
   an admin caller without a user record (scheduled newsletter sends)
"""

import logging
import secrets

import bcrypt
from fastapi import Depends, Request, Response, Security
from fastapi.security import APIKeyHeader
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .config import config, get_db
from .database import Database, DBUser
from .exceptions import AuthenticationError, PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"

# Header name for the internal API key
API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)).decode()


def verify_password(password: str, stored: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode(), (stored or "").encode())
    except ValueError:
        # Malformed hash or a password over the bcrypt byte limit
        return False


def generate_token() -> str:
    """Generate a random URL-safe token for confirmation links."""
    return secrets.token_urlsafe(32)


def get_serializer() -> URLSafeTimedSerializer:
    """Build the session serializer; fails if SESSION_SECRET is not configured."""
    return URLSafeTimedSerializer(config.require("SESSION_SECRET"), salt="session")


def create_session_token(user_id: str) -> str:
    return get_serializer().dumps({"uid": user_id})


def read_session_token(token: str) -> str | None:
    """Return the user id inside a session token, or None if invalid or expired."""
    try:
        data = get_serializer().loads(token, max_age=config.SESSION_MAX_AGE)
    except SignatureExpired:
        logger.debug("Session token expired")
        return None
    except BadSignature:
        return None
    return data.get("uid") if isinstance(data, dict) else None


def set_session_cookie(response: Response, token: str):
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=config.SESSION_MAX_AGE,
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookie(response: Response):
    response.delete_cookie(SESSION_COOKIE)


def _session_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(SESSION_COOKIE)


def is_internal_key(api_key: str | None) -> bool:
    configured_key = config.INTERNAL_API_KEY
    if not configured_key or not api_key:
        return False
    return secrets.compare_digest(api_key, configured_key)


def get_optional_user(request: Request, db: Database = Depends(get_db)) -> DBUser | None:
    """Resolve the signed-in user, or None for anonymous requests."""
    token = _session_token(request)
    if not token:
        return None
    user_id = read_session_token(token)
    if not user_id:
        return None
    try:
        user = db.users.get_by_id(user_id)
    except ValidationError:
        return None
    if user is None or not user.is_active:
        return None
    return user


def get_current_user(user: DBUser | None = Depends(get_optional_user)) -> DBUser:
    """Require a signed-in user."""
    if user is None:
        raise AuthenticationError("Not authenticated. Please sign in.")
    return user


def require_admin(
    api_key: str | None = Security(API_KEY_HEADER),
    user: DBUser | None = Depends(get_optional_user),
) -> DBUser | None:
    """
    Require an admin caller.

    Returns the admin user, or None when the caller authenticated with the
    internal API key.
    """
    if is_internal_key(api_key):
        return None
    if user is None:
        raise AuthenticationError("Not authenticated. Please sign in.")
    if not user.is_admin:
        raise PermissionDeniedError("Admin access required")
    return user


def is_admin_request(
    api_key: str | None = Security(API_KEY_HEADER),
    user: DBUser | None = Depends(get_optional_user),
) -> bool:
    """Whether the caller has admin rights, without requiring them."""
    return is_internal_key(api_key) or bool(user and user.is_admin)
