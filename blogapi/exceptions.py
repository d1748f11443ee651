"""
Typed service errors and helpers for common error patterns.

Every error carries an explicit ErrorKind; the HTTP layer maps the kind to a
status code, so no caller has to inspect error messages.
"""

from enum import Enum
from typing import TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal"


HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.INTERNAL: 500,
}


class ServiceError(Exception):
    """Base class for errors raised by services and repositories."""
    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


class ValidationError(ServiceError):
    kind = ErrorKind.VALIDATION


class AuthenticationError(ServiceError):
    kind = ErrorKind.UNAUTHENTICATED


class PermissionDeniedError(ServiceError):
    kind = ErrorKind.FORBIDDEN


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(ServiceError):
    kind = ErrorKind.CONFLICT


class ConfigError(ServiceError):
    """A required setting or process-scoped service is missing."""
    kind = ErrorKind.INTERNAL


def require_resource(resource: T | None, detail: str = "Resource not found") -> T:
    """
    Raise NotFoundError if resource is None, otherwise return the resource.

    Usage:
        article = require_resource(db.articles.get(article_id), "Article not found")
    """
    if resource is None:
        raise NotFoundError(detail)
    return resource


def require_article(article: T | None) -> T:
    """Raise NotFoundError if article is None."""
    return require_resource(article, "Article not found")


def require_user(user: T | None) -> T:
    """Raise NotFoundError if user is None."""
    return require_resource(user, "User not found")


def require_subscriber(subscriber: T | None) -> T:
    """Raise NotFoundError if subscriber is None."""
    return require_resource(subscriber, "Subscriber not found")
