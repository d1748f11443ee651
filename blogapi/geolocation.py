"""
Region detection from edge headers and IP geolocation providers.

Lookup order:
1. ``x-vercel-ip-country`` / ``cf-ipcountry`` headers set by the edge
2. primary provider (ipapi.co style, ``country_code`` field)
3. fallback provider (ipinfo.io style, ``country`` field)
4. the configured default region

Provider results are cached per IP. Lookups never raise.
"""

import ipaddress
import logging
from typing import Mapping

import httpx

from .cache import MemoryCache
from .config import config

logger = logging.getLogger(__name__)

REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; blogapi/1.0)",
    "Accept": "application/json",
}

# Lookup key used when the caller's IP is private or unknown
AUTO = "auto"


def is_private_ip(ip: str | None) -> bool:
    if not ip or ip == "localhost":
        return True
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return True
    return address.is_private or address.is_loopback or address.is_link_local


def extract_client_ip(headers: Mapping[str, str], client_host: str | None = None) -> str | None:
    """Client IP from proxy headers, falling back to the socket peer."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    vercel = headers.get("x-vercel-forwarded-for")
    if vercel:
        first = vercel.split(",")[0].strip()
        if first:
            return first
    return client_host


class GeoLocator:
    """Resolves a two-letter region code for a request."""

    def __init__(
        self,
        primary_url: str | None = None,
        fallback_url: str | None = None,
        default_region: str | None = None,
        cache_ttl: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.primary_url = (primary_url or config.GEO_PRIMARY_URL).rstrip("/")
        self.fallback_url = (fallback_url or config.GEO_FALLBACK_URL).rstrip("/")
        self.default_region = (default_region or config.GEO_DEFAULT_REGION).upper()
        self.cache_ttl = cache_ttl if cache_ttl is not None else config.GEO_CACHE_TTL
        self.timeout = timeout if timeout is not None else config.GEO_TIMEOUT
        self._transport = transport
        self._cache = MemoryCache()

    async def get_region(self, headers: Mapping[str, str], client_ip: str | None = None) -> str:
        for header in ("x-vercel-ip-country", "cf-ipcountry"):
            value = headers.get(header)
            if value:
                return value.strip().upper()

        ip = extract_client_ip(headers, client_ip)
        key = AUTO if is_private_ip(ip) else ip
        cached = self._cache.get(key)
        if cached:
            return cached

        region = await self._lookup(key)
        self._cache.set(key, region, ttl=self.cache_ttl)
        return region

    async def _lookup(self, ip: str) -> str:
        async with httpx.AsyncClient(
            timeout=self.timeout, headers=REQUEST_HEADERS, transport=self._transport
        ) as client:
            region = await self._query_primary(client, ip)
            if region:
                return region
            region = await self._query_fallback(client, ip)
            if region:
                return region
        logger.info(f"Geolocation providers unavailable, using default region {self.default_region}")
        return self.default_region

    async def _query_primary(self, client: httpx.AsyncClient, ip: str) -> str | None:
        url = f"{self.primary_url}/json/" if ip == AUTO else f"{self.primary_url}/{ip}/json/"
        try:
            response = await client.get(url)
            if response.status_code == 429:
                logger.warning("Primary geolocation provider rate limited, trying fallback")
                return None
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Primary geolocation lookup failed: {e}")
            return None

        if not isinstance(data, dict):
            return None
        if data.get("error"):
            logger.warning(f"Primary geolocation provider error: {data.get('reason') or data.get('error')}")
            return None
        country = data.get("country_code")
        return country.upper() if isinstance(country, str) and country else None

    async def _query_fallback(self, client: httpx.AsyncClient, ip: str) -> str | None:
        url = f"{self.fallback_url}/json" if ip == AUTO else f"{self.fallback_url}/{ip}/json"
        try:
            response = await client.get(url)
            if response.status_code == 429:
                logger.warning("Fallback geolocation provider rate limited")
                return None
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Fallback geolocation lookup failed: {e}")
            return None

        if not isinstance(data, dict):
            return None
        country = data.get("country")
        return country.upper() if isinstance(country, str) and country else None
