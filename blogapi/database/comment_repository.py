"""
Comment repository - comments embedded in article documents.

All writes target the owning article with a single conditional update.
"""

from bson import ObjectId
from pymongo import ReturnDocument

from .connection import DatabaseConnection, to_object_id, utcnow
from .converters import doc_to_article, doc_to_comment
from .models import DBArticle, DBComment


class CommentRepository:
    """Repository for embedded comment operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    @property
    def _articles(self):
        return self._db.articles

    def get_article_for_comment(self, comment_id: str) -> DBArticle | None:
        """Find the article holding a comment."""
        doc = self._articles.find_one(
            {"comments._id": to_object_id(comment_id, "comment id")},
            {"comments": 1, "created_by": 1, "contents_by_language": 1, "category": 1},
        )
        return doc_to_article(doc) if doc else None

    def get(self, comment_id: str) -> tuple[DBArticle, DBComment] | None:
        """Return (article, comment) for a comment id, or None."""
        article = self.get_article_for_comment(comment_id)
        if article is None:
            return None
        for comment in article.comments:
            if comment.id == comment_id:
                return article, comment
        return None

    def add(self, article_id: str, user_id: str, text: str) -> DBComment | None:
        """
        Append a comment in one atomic update.

        The update only matches when the article exists, the user is not its
        author, and the user has not commented on it yet. Returns None when
        any of those conditions fails.
        """
        uid = to_object_id(user_id, "user id")
        now = utcnow()
        comment = {
            "_id": ObjectId(),
            "user_id": uid,
            "comment": text,
            "comment_likes": [],
            "comment_reports": [],
            "created_at": now,
            "updated_at": now,
        }
        doc = self._articles.find_one_and_update(
            {
                "_id": to_object_id(article_id, "article id"),
                "created_by": {"$ne": uid},
                "comments.user_id": {"$ne": uid},
            },
            {"$push": {"comments": comment}},
            projection={"_id": 1},
        )
        return doc_to_comment(comment) if doc else None

    def update_text(self, comment_id: str, text: str) -> bool:
        result = self._articles.update_one(
            {"comments._id": to_object_id(comment_id, "comment id")},
            {"$set": {"comments.$.comment": text, "comments.$.updated_at": utcnow()}},
        )
        return result.matched_count > 0

    def delete(self, comment_id: str, owner_id: str | None = None) -> bool:
        """
        Pull a comment from its article.

        With owner_id the comment is only removed if that user wrote it;
        without it (admin) any matching comment is removed.
        """
        cid = to_object_id(comment_id, "comment id")
        match: dict = {"_id": cid}
        if owner_id is not None:
            match["user_id"] = to_object_id(owner_id, "user id")
        result = self._articles.update_one(
            {"comments": {"$elemMatch": match}},
            {"$pull": {"comments": match}},
        )
        return result.modified_count > 0

    def _update_comment(self, comment_id: str, update: dict) -> DBComment | None:
        doc = self._articles.find_one_and_update(
            {"comments._id": to_object_id(comment_id, "comment id")},
            update,
            projection={"comments": 1},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            return None
        for comment in doc.get("comments") or []:
            if str(comment.get("_id")) == comment_id:
                return doc_to_comment(comment)
        return None

    def add_like(self, comment_id: str, user_id: str) -> DBComment | None:
        return self._update_comment(
            comment_id, {"$addToSet": {"comments.$.comment_likes": to_object_id(user_id, "user id")}}
        )

    def remove_like(self, comment_id: str, user_id: str) -> DBComment | None:
        return self._update_comment(
            comment_id, {"$pull": {"comments.$.comment_likes": to_object_id(user_id, "user id")}}
        )

    def add_report(self, comment_id: str, user_id: str, reason: str) -> DBComment | None:
        report = {
            "user_id": to_object_id(user_id, "user id"),
            "reason": reason,
            "reported_at": utcnow(),
        }
        return self._update_comment(comment_id, {"$push": {"comments.$.comment_reports": report}})
