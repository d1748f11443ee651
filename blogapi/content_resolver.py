"""
Locale-fallback resolution of an article's language blocks.
"""

from dataclasses import replace
from typing import Sequence

from .database.models import DBArticle, DBLanguageContent
from .localization import DEFAULT_LOCALE


def resolve_content(
    blocks: Sequence[DBLanguageContent],
    locale: str,
    slug: str | None = None,
) -> DBLanguageContent | None:
    """
    Pick the single language block to serve.

    Order of preference: the block owning ``slug``, the block for ``locale``,
    the English block, then the first block. Returns None only when there
    are no blocks at all.
    """
    if not blocks:
        return None

    if slug:
        for block in blocks:
            if block.seo.slug == slug:
                return block

    for block in blocks:
        if block.seo.hreflang == locale:
            return block

    if locale != DEFAULT_LOCALE:
        for block in blocks:
            if block.seo.hreflang == DEFAULT_LOCALE:
                return block

    return blocks[0]


def localize_article(article: DBArticle, locale: str, slug: str | None = None) -> DBArticle | None:
    """Copy of the article carrying only its resolved block, or None if it has none."""
    block = resolve_content(article.contents_by_language, locale, slug)
    if block is None:
        return None
    return replace(article, contents_by_language=[block])
