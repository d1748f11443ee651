"""
Rate limiting middleware for API protection.

Uses slowapi to limit requests per IP address, preventing:
- API abuse
- Comment, like and subscription spam
"""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from fastapi import Request
from fastapi.responses import JSONResponse

from .config import config
from .exceptions import ErrorKind

# Tighter limit for endpoints that send email
EMAIL_RATE_LIMIT = "5/minute"


def get_rate_limit() -> str:
    """Get rate limit from config, defaulting to 120/minute."""
    return f"{max(config.RATE_LIMIT_PER_MINUTE, 1)}/minute"


# Create limiter with IP-based key
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[get_rate_limit()],
    storage_uri="memory://",  # In-memory storage (resets on restart)
    enabled=config.RATE_LIMIT_PER_MINUTE > 0,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Custom handler for rate limit exceeded errors."""
    retry_after = getattr(exc, "retry_after", 60)
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": f"Rate limit exceeded: {exc.detail}",
            "error": ErrorKind.RATE_LIMITED.value,
        },
        headers={"Retry-After": str(retry_after)},
    )


def setup_rate_limiting(app):
    """
    Configure rate limiting for a FastAPI app.

    Call this during app startup to enable rate limiting.
    """
    # Add rate limiter state to app
    app.state.limiter = limiter

    # Add middleware
    app.add_middleware(SlowAPIMiddleware)

    # Add exception handler
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
