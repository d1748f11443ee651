"""
Miscellaneous routes: health check, locale detection, categories, region.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from .. import __version__
from ..config import get_db, get_geolocator
from ..database import Database
from ..geolocation import GeoLocator
from ..localization import (
    DEFAULT_LOCALE,
    SUPPORTED_LOCALES,
    get_request_locale,
    locale_for_region,
    localized_categories,
)
from ..schemas import RegionResponse, StatusResponse, ok

logger = logging.getLogger(__name__)

router = APIRouter(tags=["misc"])


# ─────────────────────────────────────────────────────────────
# Health Check
# ─────────────────────────────────────────────────────────────

@router.get("/status")
async def health_check(db: Annotated[Database, Depends(get_db)]):
    """API health check."""
    try:
        database_ok = db.ping()
    except Exception as e:
        logger.warning(f"Database ping failed: {e}")
        database_ok = False
    return ok(StatusResponse(status="ok", version=__version__, database=database_ok))


# ─────────────────────────────────────────────────────────────
# Locale & Categories
# ─────────────────────────────────────────────────────────────

@router.get("/locale")
async def detect_locale(locale: Annotated[str, Depends(get_request_locale)]):
    """Locale chosen from ?locale= or Accept-Language."""
    return ok({"locale": locale, "default": DEFAULT_LOCALE, "supported": list(SUPPORTED_LOCALES)})


@router.get("/categories")
async def list_categories(locale: Annotated[str, Depends(get_request_locale)]):
    return ok(localized_categories(locale))


# ─────────────────────────────────────────────────────────────
# Geolocation
# ─────────────────────────────────────────────────────────────

@router.get("/geolocation/region")
async def get_region(request: Request, geolocator: Annotated[GeoLocator, Depends(get_geolocator)]):
    """Two-letter region of the caller and the content locale it suggests."""
    client_ip = request.client.host if request.client else None
    region = await geolocator.get_region(request.headers, client_ip)
    return ok(RegionResponse(region=region, locale=locale_for_region(region)))
