"""
Database module - MongoDB operations for articles, comments, users and subscribers.

Uses repository pattern for better separation of concerns.
"""

from .connection import DatabaseConnection, to_object_id, utcnow
from .models import (
    DBArticle,
    DBArticleSection,
    DBComment,
    DBCommentReport,
    DBLanguageContent,
    DBSeo,
    DBSubscriber,
    DBUser,
)
from .article_repository import ArticleRepository
from .comment_repository import CommentRepository
from .user_repository import UserRepository
from .subscriber_repository import SubscriberRepository
from .database import Database

__all__ = [
    "Database",
    "DatabaseConnection",
    "DBArticle",
    "DBArticleSection",
    "DBComment",
    "DBCommentReport",
    "DBLanguageContent",
    "DBSeo",
    "DBSubscriber",
    "DBUser",
    "ArticleRepository",
    "CommentRepository",
    "UserRepository",
    "SubscriberRepository",
    "to_object_id",
    "utcnow",
]
