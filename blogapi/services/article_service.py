"""
Article service: business logic for article operations.

Handles filtered/paginated listing with locale fallback, lookups by slug and
id, admin CRUD (create, update, archive, restore, delete), likes, views and
aggregate statistics.
"""

import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any

from ..config import config
from ..constants import CATEGORIES
from ..content_resolver import localize_article
from ..database import Database, DBArticle, DBUser, to_object_id
from ..exceptions import ConflictError, NotFoundError, ValidationError, require_article
from ..localization import (
    DEFAULT_LOCALE,
    URL_PATTERNS,
    article_url,
    category_from_localized,
    category_to_locale,
    normalize_locale,
)
from ..schemas import ArticleCreateRequest, ArticleResponse, ArticleUpdateRequest, LanguageContentInput
from ..validators import validate_slug

logger = logging.getLogger(__name__)

SORT_FIELDS = ("created_at", "updated_at", "views")
ORDERS = ("asc", "desc")
FIELD_TIERS = ("featured", "dashboard", "full")
MAX_LIMIT = 100


@dataclass
class ArticleQuery:
    """Listing parameters shared by every article query."""
    page: int = 1
    limit: int = 10
    sort: str = "created_at"
    order: str = "desc"
    locale: str = DEFAULT_LOCALE
    category: str | None = None
    slug: str | None = None
    query: str | None = None
    exclude_ids: list[str] = field(default_factory=list)
    fields: str = "full"
    skip_count: bool = False
    include_archived: bool = False

    def validate(self):
        if self.page < 1:
            raise ValidationError("page must be at least 1")
        if not 1 <= self.limit <= MAX_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_LIMIT}")
        if self.sort not in SORT_FIELDS:
            raise ValidationError(f"sort must be one of: {', '.join(SORT_FIELDS)}")
        if self.order not in ORDERS:
            raise ValidationError("order must be 'asc' or 'desc'")
        if self.fields not in FIELD_TIERS:
            raise ValidationError(f"fields must be one of: {', '.join(FIELD_TIERS)}")
        if self.category and self.slug:
            raise ValidationError("Filter by category or by slug, not both")
        self.locale = normalize_locale(self.locale)


@dataclass
class Page:
    data: list[Any]
    page: int
    limit: int
    total_docs: int | None = None
    total_pages: int | None = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"data": self.data, "page": self.page, "limit": self.limit}
        if self.total_docs is not None:
            result["total_docs"] = self.total_docs
            result["total_pages"] = self.total_pages
        return result


def parse_exclude_ids(raw: str | None) -> list[str]:
    """Parse the ``exclude_ids`` query value: a JSON array of id strings."""
    if not raw:
        return []
    try:
        values = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError("exclude_ids must be a JSON array of ids")
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise ValidationError("exclude_ids must be a JSON array of ids")
    return values


def resolve_category(name: str) -> str:
    """Canonical category for a name given in any locale's spelling."""
    category = category_from_localized(name)
    if category is None:
        raise ValidationError(f"Unknown category: {name}")
    return category


class ArticleService:
    """Service for article-related business logic."""

    def __init__(self, db: Database, base_url: str | None = None):
        self.db = db
        self.base_url = base_url or config.BASE_URL

    # ─────────────────────────────────────────────────────────────
    # Listing & Filtering
    # ─────────────────────────────────────────────────────────────

    def _build_filter(self, q: ArticleQuery) -> dict:
        criteria: dict[str, Any] = {}
        if not q.include_archived:
            criteria["status"] = "published"
        if q.category:
            criteria["category"] = resolve_category(q.category)
        if q.slug:
            criteria["contents_by_language.seo.slug"] = q.slug
        if q.query:
            criteria["contents_by_language.main_title"] = {
                "$regex": re.escape(q.query.strip()),
                "$options": "i",
            }
        if q.exclude_ids:
            criteria["_id"] = self.db.articles.exclude_ids_query(q.exclude_ids)
        return criteria

    def _to_response(
        self,
        article: DBArticle,
        user_id: str | None,
        with_alternates: bool = False,
        fields: str = "full",
    ) -> ArticleResponse:
        return ArticleResponse.from_db(
            article,
            user_id=user_id,
            base_url=self.base_url if with_alternates else None,
            fields=fields,
        )

    def list_articles(self, q: ArticleQuery, user_id: str | None = None) -> Page:
        """
        Filtered, sorted and paginated listing.

        Every returned article carries exactly one language block, chosen by
        locale fallback; articles without any block are dropped.
        """
        q.validate()
        criteria = self._build_filter(q)
        articles = self.db.articles.find(
            criteria,
            sort=q.sort,
            order=q.order,
            skip=(q.page - 1) * q.limit,
            limit=q.limit,
            fields=q.fields,
        )

        data = []
        for article in articles:
            localized = localize_article(article, q.locale, q.slug)
            if localized is not None:
                data.append(self._to_response(localized, user_id, fields=q.fields))

        page = Page(data=data, page=q.page, limit=q.limit)
        if not q.skip_count:
            total = self.db.articles.count(criteria)
            page.total_docs = total
            page.total_pages = math.ceil(total / q.limit) if total else 0
        return page

    def search_articles(self, q: ArticleQuery, user_id: str | None = None) -> Page:
        """Paginated listing that requires a search query or a category."""
        if not (q.query and q.query.strip()) and not q.category:
            raise ValidationError("A search query or a category is required")
        return self.list_articles(q, user_id)

    def list_by_category(
        self,
        category: str,
        locale: str,
        limit: int = 10,
        exclude_ids: list[str] | None = None,
        user_id: str | None = None,
    ) -> list[ArticleResponse]:
        """Non-paginated category listing used for carousels."""
        q = ArticleQuery(
            category=category,
            locale=locale,
            limit=limit,
            exclude_ids=exclude_ids or [],
            fields="featured",
            skip_count=True,
        )
        return self.list_articles(q, user_id).data

    def liked_articles(self, user_id: str, q: ArticleQuery) -> Page:
        """Published articles the user has liked, newest first."""
        q.validate()
        criteria = self.db.articles.liked_by_query(user_id)
        articles = self.db.articles.find(
            criteria,
            sort=q.sort,
            order=q.order,
            skip=(q.page - 1) * q.limit,
            limit=q.limit,
            fields=q.fields,
        )
        data = [
            self._to_response(localized, user_id, fields=q.fields)
            for localized in (localize_article(a, q.locale) for a in articles)
            if localized is not None
        ]
        page = Page(data=data, page=q.page, limit=q.limit)
        if not q.skip_count:
            total = self.db.articles.count(criteria)
            page.total_docs = total
            page.total_pages = math.ceil(total / q.limit) if total else 0
        return page

    def dashboard(self, q: ArticleQuery) -> Page:
        """Admin listing: dashboard projection, archived articles included."""
        q.fields = "dashboard"
        q.include_archived = True
        return self.list_articles(q)

    # ─────────────────────────────────────────────────────────────
    # Single Article
    # ─────────────────────────────────────────────────────────────

    def get_by_slug(self, slug: str, locale: str, user_id: str | None = None) -> ArticleResponse:
        """
        Published article owning a slug, served in the slug's own language.

        A slug always selects its own block, so a Spanish slug requested
        with locale "fr" returns the Spanish content.
        """
        article = require_article(self.db.articles.get_by_slug(slug))
        localized = require_article(localize_article(article, normalize_locale(locale), slug))
        response = self._to_response(localized, user_id, with_alternates=True)
        response.alternates = self._to_response(article, user_id, with_alternates=True).alternates
        return response

    def get_by_id(
        self,
        article_id: str,
        locale: str | None = None,
        user_id: str | None = None,
        is_admin: bool = False,
    ) -> ArticleResponse:
        """Article by id; without a locale all language blocks are returned."""
        article = require_article(self.db.articles.get(article_id))
        if article.status != "published" and not is_admin:
            raise NotFoundError("Article not found")
        if locale:
            localized = require_article(localize_article(article, normalize_locale(locale)))
            response = self._to_response(localized, user_id)
            response.alternates = self._to_response(article, user_id, with_alternates=True).alternates
            return response
        return self._to_response(article, user_id, with_alternates=True)

    # ─────────────────────────────────────────────────────────────
    # Admin CRUD
    # ─────────────────────────────────────────────────────────────

    def _build_blocks(self, blocks: list[LanguageContentInput], category: str) -> list[dict]:
        """Validate language blocks and fill SEO defaults."""
        seen_locales: set[str] = set()
        seen_slugs: set[str] = set()
        documents = []
        for block in blocks:
            slug = validate_slug(block.seo.slug)
            hreflang = block.seo.hreflang
            if hreflang in seen_locales:
                raise ValidationError(f"Duplicate language block for '{hreflang}'")
            if slug in seen_slugs:
                raise ValidationError(f"Slug '{slug}' is used twice in this article")
            seen_locales.add(hreflang)
            seen_slugs.add(slug)

            documents.append({
                "main_title": block.main_title.strip(),
                "article_contents": [section.model_dump() for section in block.article_contents],
                "seo": {
                    "meta_title": block.seo.meta_title or block.main_title.strip(),
                    "meta_description": block.seo.meta_description,
                    "keywords": block.seo.keywords,
                    "slug": slug,
                    "hreflang": hreflang,
                    "url_pattern": block.seo.url_pattern or URL_PATTERNS[hreflang],
                    "canonical_url": block.seo.canonical_url
                    or article_url(slug, hreflang, category, self.base_url),
                    "type": block.seo.type or "article",
                },
            })
        return documents

    def _ensure_slugs_free(self, blocks: list[dict], exclude_id: str | None = None):
        slugs = [block["seo"]["slug"] for block in blocks]
        taken = self.db.articles.slugs_in_use(slugs, exclude_id=exclude_id)
        if taken:
            raise ConflictError(f"Slug already exists: {', '.join(sorted(taken))}")

    def create_article(self, request: ArticleCreateRequest, author: DBUser | None) -> ArticleResponse:
        category = resolve_category(request.category)
        blocks = self._build_blocks(request.contents_by_language, category)
        self._ensure_slugs_free(blocks)

        document: dict[str, Any] = {
            "contents_by_language": blocks,
            "category": category,
            "article_images": request.article_images,
            "status": "published",
            "unpublished_at": None,
            "created_by": to_object_id(author.id, "user id") if author else None,
        }
        article_id = self.db.articles.add(document)
        logger.info(f"Created article {article_id} in {category}")
        return self._to_response(require_article(self.db.articles.get(article_id)), None, with_alternates=True)

    def update_article(self, article_id: str, request: ArticleUpdateRequest) -> ArticleResponse:
        existing = require_article(self.db.articles.get(article_id))
        fields: dict[str, Any] = {}

        category = existing.category
        if request.category is not None:
            category = resolve_category(request.category)
            fields["category"] = category
        if request.contents_by_language is not None:
            blocks = self._build_blocks(request.contents_by_language, category)
            self._ensure_slugs_free(blocks, exclude_id=article_id)
            fields["contents_by_language"] = blocks
        if request.article_images is not None:
            fields["article_images"] = request.article_images

        if not fields:
            raise ValidationError("No fields to update")
        updated = require_article(self.db.articles.update(article_id, fields))
        logger.info(f"Updated article {article_id}: {', '.join(sorted(fields))}")
        return self._to_response(updated, None, with_alternates=True)

    def archive_article(self, article_id: str) -> ArticleResponse:
        article = require_article(self.db.articles.archive(article_id))
        logger.info(f"Archived article {article_id}")
        return self._to_response(article, None)

    def restore_article(self, article_id: str) -> ArticleResponse:
        article = require_article(self.db.articles.restore(article_id))
        logger.info(f"Restored article {article_id}")
        return self._to_response(article, None)

    def delete_article(self, article_id: str):
        if not self.db.articles.delete(article_id):
            raise NotFoundError("Article not found")
        logger.info(f"Deleted article {article_id}")

    # ─────────────────────────────────────────────────────────────
    # Engagement counters
    # ─────────────────────────────────────────────────────────────

    def toggle_like(self, article_id: str, user_id: str) -> dict:
        """Like the article if the user has not yet, otherwise unlike it."""
        liked = self.db.articles.is_liked_by(article_id, user_id)
        if liked is None:
            raise NotFoundError("Article not found")
        if liked:
            count = self.db.articles.remove_like(article_id, user_id)
        else:
            count = self.db.articles.add_like(article_id, user_id)
        if count is None:
            raise NotFoundError("Article not found")
        return {"liked": not liked, "like_count": count}

    def increment_views(self, article_id: str) -> int:
        views = self.db.articles.increment_views(article_id)
        if views is None:
            raise NotFoundError("Article not found")
        return views

    # ─────────────────────────────────────────────────────────────
    # Aggregates
    # ─────────────────────────────────────────────────────────────

    def counts_by_category(self, locale: str) -> list[dict]:
        """Published article count per category, with localized names."""
        locale = normalize_locale(locale)
        counts = self.db.articles.count_by_category({"status": "published"})
        return [
            {"category": category, "name": category_to_locale(category, locale), "count": counts.get(category, 0)}
            for category in CATEGORIES
        ]

    def statistics(self) -> dict[str, int]:
        return self.db.articles.statistics()
