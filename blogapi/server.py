"""
Blog API Server

FastAPI application providing endpoints for:
- Articles (localized listings, search, detail, admin CRUD, likes, views)
- Comments (create, edit, delete, likes, reports)
- Newsletter subscriptions and digest delivery
- Accounts (registration, confirmation, password reset, sessions, profiles)
- Locale, categories and region detection

Run with: python -m uvicorn blogapi.server:app --port 5005
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import config, state
from .database import Database
from .exceptions import ErrorKind, HTTP_STATUS_BY_KIND, ServiceError
from .geolocation import GeoLocator
from .mailer import LoggingMailer
from .rate_limit import setup_rate_limiting
from .routes import (
    articles_router,
    auth_router,
    comments_router,
    misc_router,
    newsletter_router,
    subscribers_router,
    users_router,
)

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("pymongo").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

_KIND_BY_STATUS = {status: kind for kind, status in HTTP_STATUS_BY_KIND.items()}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup application resources."""
    # Startup - skip anything already initialized (e.g., by tests)
    created_db = False
    if state.db is None:
        state.db = Database(config.require("MONGODB_URI"), config.MONGODB_DATABASE)
        state.db.ensure_indexes()
        created_db = True
        logger.info(f"Connected to MongoDB database '{config.MONGODB_DATABASE}'")
    if state.mailer is None:
        state.mailer = LoggingMailer()
    if state.geolocator is None:
        state.geolocator = GeoLocator()

    if not config.SESSION_SECRET:
        logger.warning("SESSION_SECRET is not set; sign-in and sessions will fail")

    yield

    # Shutdown
    if created_db:
        state.db.close()
        state.db = None


# ─────────────────────────────────────────────────────────────
# Error envelope
# ─────────────────────────────────────────────────────────────

def _error_response(status_code: int, message: str, kind: ErrorKind | str) -> JSONResponse:
    kind_value = kind.value if isinstance(kind, ErrorKind) else kind
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": kind_value},
    )


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.kind == ErrorKind.INTERNAL:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _error_response(exc.status_code, exc.message, exc.kind)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return _error_response(400, "; ".join(details) or "Invalid request", ErrorKind.VALIDATION)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = _KIND_BY_STATUS.get(exc.status_code, ErrorKind.INTERNAL if exc.status_code >= 500 else ErrorKind.VALIDATION)
    return _error_response(exc.status_code, str(exc.detail), kind)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(500, "Internal server error", ErrorKind.INTERNAL)


app = FastAPI(
    title="Blog API",
    version=__version__,
    lifespan=lifespan
)

app.add_exception_handler(ServiceError, service_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

setup_rate_limiting(app)

# Include routers
app.include_router(misc_router, prefix=API_PREFIX)
app.include_router(articles_router, prefix=API_PREFIX)
app.include_router(comments_router, prefix=API_PREFIX)
app.include_router(subscribers_router, prefix=API_PREFIX)
app.include_router(newsletter_router, prefix=API_PREFIX)
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(users_router, prefix=API_PREFIX)
