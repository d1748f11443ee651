"""
Tests for locale detection and translation tables.
"""

import pytest

from blogapi.database import DBArticle, DBLanguageContent, DBSeo
from blogapi.localization import (
    CATEGORY_TRANSLATIONS,
    SUPPORTED_LOCALES,
    URL_PATTERNS,
    alternate_urls,
    article_url,
    category_from_localized,
    category_to_locale,
    detect_locale,
    locale_for_region,
    normalize_locale,
)


class TestDetectLocale:
    """Tests for Accept-Language parsing."""

    @pytest.mark.parametrize(
        "header, expected",
        [
            (None, "en"),
            ("", "en"),
            ("fr-FR,fr;q=0.9,en;q=0.8", "fr"),
            ("ja,de;q=0.5", "de"),
            ("en;q=0.2,it;q=0.9", "it"),
            ("pt-BR", "pt"),
            ("zh-CN,ja", "en"),
            ("es;q=0", "en"),
            ("es;q=abc,de;q=0.1", "de"),
        ],
    )
    def test_detect(self, header, expected):
        assert detect_locale(header) == expected

    def test_header_order_breaks_ties(self):
        assert detect_locale("de,fr") == "de"


class TestNormalizeLocale:

    @pytest.mark.parametrize("value, expected", [("es-ES", "es"), ("PT_br", "pt"), ("xx", "en"), (None, "en")])
    def test_normalize(self, value, expected):
        assert normalize_locale(value) == expected


class TestTables:
    """Tests for the static translation tables."""

    def test_every_locale_has_url_pattern(self):
        assert set(URL_PATTERNS) == set(SUPPORTED_LOCALES)

    def test_every_category_translated(self):
        for translations in CATEGORY_TRANSLATIONS.values():
            assert set(translations) == set(SUPPORTED_LOCALES)

    def test_category_round_trip(self):
        assert category_to_locale("weight-loss", "de") == "gewichtsverlust"
        assert category_from_localized("Gewichtsverlust") == "weight-loss"
        assert category_from_localized("unknown") is None

    def test_region_locale(self):
        assert locale_for_region("br") == "pt"
        assert locale_for_region("AT") == "de"
        assert locale_for_region("JP") == "en"
        assert locale_for_region(None) == "en"


class TestUrls:
    """Tests for public article URLs."""

    def test_article_url(self):
        assert article_url("sono", "pt", "health", "https://blog.example/") == "https://blog.example/pt/saude/sono"

    def test_alternates_include_default(self):
        article = DBArticle(
            id="a1",
            category="life",
            contents_by_language=[
                DBLanguageContent(seo=DBSeo(slug="life-tips", hreflang="en")),
                DBLanguageContent(seo=DBSeo(slug="consejos", hreflang="es")),
            ],
        )
        alternates = alternate_urls(article, "https://blog.example")
        assert alternates == {
            "en": "https://blog.example/en/life/life-tips",
            "es": "https://blog.example/es/vida/consejos",
            "x-default": "https://blog.example/en/life/life-tips",
        }
