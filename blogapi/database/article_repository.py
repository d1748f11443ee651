"""
Article repository - queries and atomic updates on the articles collection.
"""

from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..exceptions import ConflictError
from .connection import DatabaseConnection, to_object_id, utcnow
from .converters import doc_to_article
from .models import DBArticle

# Field projections for the listing tiers; None means the whole document
PROJECTIONS: dict[str, dict | None] = {
    "featured": {
        "category": 1,
        "article_images": 1,
        "created_at": 1,
        "updated_at": 1,
        "contents_by_language.main_title": 1,
        "contents_by_language.article_contents": 1,
        "contents_by_language.seo.slug": 1,
        "contents_by_language.seo.hreflang": 1,
    },
    "dashboard": {
        "category": 1,
        "created_at": 1,
        "updated_at": 1,
        "likes": 1,
        "comments._id": 1,
        "views": 1,
        "status": 1,
        "contents_by_language.main_title": 1,
        "contents_by_language.seo.slug": 1,
        "contents_by_language.seo.hreflang": 1,
    },
    "full": None,
}


class ArticleRepository:
    """Repository for article operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    @property
    def _articles(self):
        return self._db.articles

    def add(self, document: dict) -> str:
        """Insert a new article document. Returns its id."""
        now = utcnow()
        document.setdefault("likes", [])
        document.setdefault("comments", [])
        document.setdefault("views", 0)
        document.setdefault("status", "published")
        document["created_at"] = now
        document["updated_at"] = now
        try:
            result = self._articles.insert_one(document)
        except DuplicateKeyError:
            raise ConflictError("Slug already exists")
        return str(result.inserted_id)

    def get(self, article_id: str, fields: str = "full") -> DBArticle | None:
        """Get single article by ID."""
        doc = self._articles.find_one({"_id": to_object_id(article_id, "article id")}, PROJECTIONS[fields])
        return doc_to_article(doc) if doc else None

    def get_by_slug(self, slug: str, published_only: bool = True) -> DBArticle | None:
        """Get the article owning a slug in any of its language blocks."""
        query: dict = {"contents_by_language.seo.slug": slug}
        if published_only:
            query["status"] = "published"
        doc = self._articles.find_one(query)
        return doc_to_article(doc) if doc else None

    def slugs_in_use(self, slugs: list[str], exclude_id: str | None = None) -> set[str]:
        """Return which of the given slugs already belong to another article."""
        if not slugs:
            return set()
        query: dict = {"contents_by_language.seo.slug": {"$in": slugs}}
        if exclude_id:
            query["_id"] = {"$ne": to_object_id(exclude_id, "article id")}
        taken: set[str] = set()
        for doc in self._articles.find(query, {"contents_by_language.seo.slug": 1}):
            for block in doc.get("contents_by_language") or []:
                slug = (block.get("seo") or {}).get("slug")
                if slug in slugs:
                    taken.add(slug)
        return taken

    def find(
        self,
        query: dict,
        sort: str = "created_at",
        order: str = "desc",
        skip: int = 0,
        limit: int = 10,
        fields: str = "full",
    ) -> list[DBArticle]:
        """Run a filtered, sorted and paginated query."""
        direction = DESCENDING if order == "desc" else ASCENDING
        cursor = (
            self._articles.find(query, PROJECTIONS[fields])
            .sort([(sort, direction), ("_id", direction)])
            .skip(skip)
            .limit(limit)
        )
        return [doc_to_article(doc) for doc in cursor]

    def count(self, query: dict) -> int:
        return self._articles.count_documents(query)

    def update(self, article_id: str, fields: dict) -> DBArticle | None:
        """Set the given fields. Returns the updated article or None if missing."""
        fields = {**fields, "updated_at": utcnow()}
        try:
            doc = self._articles.find_one_and_update(
                {"_id": to_object_id(article_id, "article id")},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictError("Slug already exists")
        return doc_to_article(doc) if doc else None

    def archive(self, article_id: str) -> DBArticle | None:
        now = utcnow()
        return self.update(article_id, {"status": "archived", "unpublished_at": now})

    def restore(self, article_id: str) -> DBArticle | None:
        return self.update(article_id, {"status": "published", "unpublished_at": None})

    def delete(self, article_id: str) -> bool:
        """Permanently remove an article and its embedded comments."""
        result = self._articles.delete_one({"_id": to_object_id(article_id, "article id")})
        return result.deleted_count > 0

    # ─────────────────────────────────────────────────────────────
    # Likes and views
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def _published(article_id: str) -> dict:
        return {"_id": to_object_id(article_id, "article id"), "status": "published"}

    def is_liked_by(self, article_id: str, user_id: str) -> bool | None:
        """Whether the user likes the article; None when it is missing or archived."""
        doc = self._articles.find_one(self._published(article_id), {"likes": 1})
        if doc is None:
            return None
        return to_object_id(user_id, "user id") in (doc.get("likes") or [])

    def _update_likes(self, article_id: str, update: dict) -> int | None:
        doc = self._articles.find_one_and_update(
            self._published(article_id),
            update,
            projection={"likes": 1},
            return_document=ReturnDocument.AFTER,
        )
        return len(doc.get("likes") or []) if doc else None

    def add_like(self, article_id: str, user_id: str) -> int | None:
        """Add the user to the like set. Returns the new like count."""
        return self._update_likes(article_id, {"$addToSet": {"likes": to_object_id(user_id, "user id")}})

    def remove_like(self, article_id: str, user_id: str) -> int | None:
        """Remove the user from the like set. Returns the new like count."""
        return self._update_likes(article_id, {"$pull": {"likes": to_object_id(user_id, "user id")}})

    def increment_views(self, article_id: str) -> int | None:
        """Atomically bump the view counter. Returns the new count."""
        doc = self._articles.find_one_and_update(
            self._published(article_id),
            {"$inc": {"views": 1}},
            projection={"views": 1},
            return_document=ReturnDocument.AFTER,
        )
        return int(doc.get("views") or 0) if doc else None

    # ─────────────────────────────────────────────────────────────
    # Aggregates
    # ─────────────────────────────────────────────────────────────

    def count_by_category(self, query: dict) -> dict[str, int]:
        pipeline = [
            {"$match": query},
            {"$group": {"_id": "$category", "count": {"$sum": 1}}},
        ]
        return {
            row["_id"]: row["count"]
            for row in self._articles.aggregate(pipeline)
            if row["_id"]
        }

    def statistics(self) -> dict[str, int]:
        """Totals of articles, views, likes and comments across the collection."""
        stats = {
            "total_articles": 0,
            "published_articles": 0,
            "archived_articles": 0,
            "total_views": 0,
            "total_likes": 0,
            "total_comments": 0,
        }
        projection = {"status": 1, "views": 1, "likes": 1, "comments._id": 1}
        for doc in self._articles.find({}, projection):
            stats["total_articles"] += 1
            if doc.get("status", "published") == "archived":
                stats["archived_articles"] += 1
            else:
                stats["published_articles"] += 1
            stats["total_views"] += int(doc.get("views") or 0)
            stats["total_likes"] += len(doc.get("likes") or [])
            stats["total_comments"] += len(doc.get("comments") or [])
        return stats

    def liked_by_query(self, user_id: str) -> dict:
        return {"likes": to_object_id(user_id, "user id"), "status": "published"}

    @staticmethod
    def exclude_ids_query(exclude_ids: list[str]) -> dict:
        return {"$nin": [to_object_id(i, "exclude id") for i in exclude_ids]}
