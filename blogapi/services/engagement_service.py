"""
Engagement service: comments, comment likes and comment reports.

Writes are single conditional updates on the owning article, so concurrent
requests cannot produce duplicate comments or duplicate likes.
"""

import logging
from datetime import datetime

from fastapi import BackgroundTasks

from .. import mailer as messages
from ..database import Database, DBUser
from ..exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    require_article,
    require_resource,
)
from ..mailer import Mailer
from ..schemas import CommentResponse
from ..validators import validate_comment, validate_report_reason

logger = logging.getLogger(__name__)

COMMENT_CONFLICT_MESSAGE = "Article not found, you are the author, or you have already commented!"
COMMENT_DELETE_MISS_MESSAGE = "Comment not found or you don't have permission to delete it"


def notify_comment_reported(db: Database, mailer: Mailer, author_id: str, comment: str, reason: str):
    """
    Tell a comment's author that it was reported.

    Runs after the response is sent; failures are logged and never reach
    the reporter.
    """
    try:
        author = db.users.get_by_id(author_id)
        if author is None:
            logger.warning(f"Reported comment author {author_id} no longer exists, skipping notice")
            return
        mailer.deliver(
            messages.comment_report_notice(
                author.email, author.username, comment, reason, author.preferences.language
            )
        )
    except Exception:
        logger.exception(f"Failed to send comment report notice to user {author_id}")


class EngagementService:
    """Service for comment-related business logic."""

    def __init__(self, db: Database, mailer: Mailer):
        self.db = db
        self.mailer = mailer

    def list_comments(
        self,
        article_id: str,
        viewer: DBUser | None = None,
        is_admin: bool = False,
    ) -> list[CommentResponse]:
        """Comments of an article, newest first, with author usernames."""
        article = require_article(self.db.articles.get(article_id))
        if article.status != "published" and not is_admin:
            raise NotFoundError("Article not found")

        usernames = self.db.users.get_usernames([c.user_id for c in article.comments])
        viewer_id = viewer.id if viewer else None
        # Insertion order breaks timestamp ties
        ordered = sorted(
            enumerate(article.comments),
            key=lambda pair: (pair[1].created_at or datetime.min, pair[0]),
            reverse=True,
        )
        comments = [comment for _, comment in ordered]
        return [
            CommentResponse.from_db(
                comment,
                article_id=article.id,
                username=usernames.get(comment.user_id),
                user_id=viewer_id,
                include_reports=is_admin,
            )
            for comment in comments
        ]

    def add_comment(self, article_id: str, user: DBUser, text: str) -> CommentResponse:
        comment_text = validate_comment(text)
        comment = self.db.comments.add(article_id, user.id, comment_text)
        if comment is None:
            raise ConflictError(COMMENT_CONFLICT_MESSAGE)
        logger.info(f"User {user.id} commented on article {article_id}")
        return CommentResponse.from_db(comment, article_id=article_id, username=user.username, user_id=user.id)

    def edit_comment(self, comment_id: str, user: DBUser, text: str) -> CommentResponse:
        comment_text = validate_comment(text)
        article, comment = require_resource(self.db.comments.get(comment_id), "Comment not found")
        if comment.user_id != user.id and not user.is_admin:
            raise PermissionDeniedError("You can only edit your own comments")
        if not self.db.comments.update_text(comment_id, comment_text):
            raise NotFoundError("Comment not found")
        _, updated = require_resource(self.db.comments.get(comment_id), "Comment not found")
        return CommentResponse.from_db(updated, article_id=article.id, user_id=user.id)

    def delete_comment(self, comment_id: str, user: DBUser, is_admin: bool = False):
        """Owners delete their own comments; admins delete any."""
        owner_id = None if is_admin else user.id
        if not self.db.comments.delete(comment_id, owner_id):
            raise NotFoundError(COMMENT_DELETE_MISS_MESSAGE)
        logger.info(f"Comment {comment_id} deleted")

    def toggle_comment_like(self, comment_id: str, user: DBUser) -> dict:
        _, comment = require_resource(self.db.comments.get(comment_id), "Comment not found")
        liked = user.id in comment.comment_likes
        if liked:
            updated = self.db.comments.remove_like(comment_id, user.id)
        else:
            updated = self.db.comments.add_like(comment_id, user.id)
        updated = require_resource(updated, "Comment not found")
        return {"liked": not liked, "like_count": len(updated.comment_likes)}

    def report_comment(
        self,
        comment_id: str,
        user: DBUser,
        reason: str,
        background_tasks: BackgroundTasks | None = None,
    ):
        """
        Record a report and schedule a notice to the comment's author.

        A user can report a given comment once.
        """
        reason = validate_report_reason(reason)
        _, comment = require_resource(self.db.comments.get(comment_id), "Comment not found")
        if any(report.user_id == user.id for report in comment.comment_reports):
            raise ConflictError("You have already reported this comment!")
        require_resource(self.db.comments.add_report(comment_id, user.id, reason), "Comment not found")
        logger.info(f"Comment {comment_id} reported by {user.id} for {reason}")

        if background_tasks is not None:
            background_tasks.add_task(
                notify_comment_reported, self.db, self.mailer, comment.user_id, comment.comment, reason
            )
        else:
            notify_comment_reported(self.db, self.mailer, comment.user_id, comment.comment, reason)
