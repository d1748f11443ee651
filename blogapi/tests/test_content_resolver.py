"""
Tests for language block resolution.
"""

from blogapi.content_resolver import localize_article, resolve_content
from blogapi.database import DBArticle, DBLanguageContent, DBSeo


def block(hreflang: str, slug: str) -> DBLanguageContent:
    return DBLanguageContent(main_title=slug.title(), seo=DBSeo(slug=slug, hreflang=hreflang))


BLOCKS = [block("pt", "introducao"), block("en", "introduction"), block("es", "introduccion")]


class TestResolveContent:
    """Tests for resolve_content fallback order."""

    def test_exact_locale(self):
        assert resolve_content(BLOCKS, "es").seo.slug == "introduccion"

    def test_slug_wins_over_locale(self):
        """A slug selects its own block even when another locale is requested."""
        assert resolve_content(BLOCKS, "fr", slug="introduccion").seo.hreflang == "es"

    def test_unknown_slug_falls_back_to_locale(self):
        assert resolve_content(BLOCKS, "pt", slug="missing").seo.hreflang == "pt"

    def test_english_fallback(self):
        assert resolve_content(BLOCKS, "de").seo.hreflang == "en"

    def test_first_block_fallback(self):
        blocks = [block("it", "introduzione"), block("fr", "introduction-fr")]
        assert resolve_content(blocks, "de").seo.hreflang == "it"

    def test_no_blocks(self):
        assert resolve_content([], "en") is None


class TestLocalizeArticle:
    """Tests for localize_article."""

    def test_keeps_single_block(self):
        article = DBArticle(id="a1", contents_by_language=list(BLOCKS), category="health")
        localized = localize_article(article, "pt")
        assert [b.seo.hreflang for b in localized.contents_by_language] == ["pt"]
        assert len(article.contents_by_language) == 3
        assert localized.category == "health"

    def test_article_without_blocks(self):
        assert localize_article(DBArticle(id="a2", contents_by_language=[]), "en") is None
