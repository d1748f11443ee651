"""
Locale handling: supported locales, Accept-Language detection, and static
translation tables for categories and article URL patterns.
"""

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from .database.models import DBArticle

SUPPORTED_LOCALES = ("en", "pt", "es", "fr", "de", "it")
DEFAULT_LOCALE = "en"

URL_PATTERNS: dict[str, str] = {
    "en": "articles",
    "pt": "artigos",
    "es": "articulos",
    "fr": "articles",
    "de": "artikel",
    "it": "articoli",
}

# canonical category -> locale -> localized URL segment
CATEGORY_TRANSLATIONS: dict[str, dict[str, str]] = {
    "health": {"en": "health", "pt": "saude", "es": "salud", "fr": "sante", "de": "gesundheit", "it": "salute"},
    "fitness": {"en": "fitness", "pt": "fitness", "es": "fitness", "fr": "fitness", "de": "fitness", "it": "fitness"},
    "nutrition": {"en": "nutrition", "pt": "nutricao", "es": "nutricion", "fr": "nutrition", "de": "ernahrung", "it": "nutrizione"},
    "intimacy": {"en": "intimacy", "pt": "intimidade", "es": "intimidad", "fr": "intimite", "de": "intimitat", "it": "intimita"},
    "beauty": {"en": "beauty", "pt": "beleza", "es": "belleza", "fr": "beaute", "de": "schonheit", "it": "bellezza"},
    "weight-loss": {"en": "weight-loss", "pt": "perda-de-peso", "es": "perdida-de-peso", "fr": "perte-de-poids", "de": "gewichtsverlust", "it": "perdita-di-peso"},
    "life": {"en": "life", "pt": "vida", "es": "vida", "fr": "vie", "de": "leben", "it": "vita"},
}

# localized segment -> canonical category (reverse of the table above)
_CATEGORY_LOOKUP: dict[str, str] = {
    localized: category
    for category, translations in CATEGORY_TRANSLATIONS.items()
    for localized in translations.values()
}


def is_supported_locale(locale: str | None) -> bool:
    return locale in SUPPORTED_LOCALES


def normalize_locale(value: str | None) -> str:
    """Reduce a locale tag like 'es-ES' to a supported language code."""
    if not value:
        return DEFAULT_LOCALE
    language = value.strip().replace("_", "-").split("-")[0].lower()
    return language if language in SUPPORTED_LOCALES else DEFAULT_LOCALE


def detect_locale(accept_language: str | None) -> str:
    """
    Pick the best supported locale from an Accept-Language header.

    Entries are ordered by their q-value; the first supported language wins.
    Falls back to the default locale when nothing matches.
    """
    if not accept_language:
        return DEFAULT_LOCALE

    candidates: list[tuple[float, int, str]] = []
    for position, part in enumerate(accept_language.split(",")):
        piece = part.strip()
        if not piece:
            continue
        tag, _, params = piece.partition(";")
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                quality = 0.0
        candidates.append((quality, position, tag.strip()))

    # Highest quality first, header order breaks ties
    candidates.sort(key=lambda c: (-c[0], c[1]))
    for quality, _, tag in candidates:
        if quality <= 0:
            continue
        language = tag.split("-")[0].lower()
        if language in SUPPORTED_LOCALES:
            return language
    return DEFAULT_LOCALE


def category_to_locale(category: str, locale: str) -> str:
    """Translate a canonical category into the locale's URL segment."""
    return CATEGORY_TRANSLATIONS.get(category, {}).get(locale, category)


def category_from_localized(name: str | None) -> str | None:
    """Map any localized category name back to its canonical category."""
    if not name:
        return None
    return _CATEGORY_LOOKUP.get(name.strip().lower())


def localized_categories(locale: str) -> list[dict[str, str]]:
    """All categories with their localized names for one locale."""
    locale = normalize_locale(locale)
    return [
        {"category": category, "name": translations[locale]}
        for category, translations in CATEGORY_TRANSLATIONS.items()
    ]


def article_url(slug: str, locale: str, category: str, base_url: str) -> str:
    """Public URL of one language version of an article."""
    locale = normalize_locale(locale)
    return f"{base_url.rstrip('/')}/{locale}/{category_to_locale(category, locale)}/{slug}"


def alternate_urls(article: "DBArticle", base_url: str) -> dict[str, str]:
    """hreflang -> URL for every language version of an article."""
    alternates: dict[str, str] = {}
    for block in article.contents_by_language:
        if block.seo and block.seo.slug and block.seo.hreflang:
            alternates[block.seo.hreflang] = article_url(
                block.seo.slug, block.seo.hreflang, article.category, base_url
            )
    if "en" in alternates:
        alternates["x-default"] = alternates["en"]
    return alternates


def get_request_locale(request: Request, locale: str | None = None) -> str:
    """Dependency: explicit ?locale= wins, otherwise Accept-Language."""
    if locale:
        return normalize_locale(locale)
    return detect_locale(request.headers.get("accept-language"))


# Country code -> preferred content locale
REGION_LOCALES: dict[str, str] = {
    "BR": "pt", "PT": "pt", "AO": "pt", "MZ": "pt",
    "ES": "es", "MX": "es", "AR": "es", "CO": "es", "CL": "es", "PE": "es", "VE": "es", "UY": "es",
    "FR": "fr", "BE": "fr", "LU": "fr", "MC": "fr",
    "DE": "de", "AT": "de", "CH": "de", "LI": "de",
    "IT": "it", "SM": "it",
}


def locale_for_region(region: str | None) -> str:
    """Content locale suggested for a country code."""
    return REGION_LOCALES.get((region or "").upper(), DEFAULT_LOCALE)
