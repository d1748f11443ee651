"""
Database facade - provides unified access to all repositories.
"""

from .article_repository import ArticleRepository
from .comment_repository import CommentRepository
from .connection import DatabaseConnection
from .subscriber_repository import SubscriberRepository
from .user_repository import UserRepository


class Database:
    """
    Unified database access facade.

    Services talk to the repositories directly (``db.articles``,
    ``db.comments`` ...); the facade owns the connection.
    """

    def __init__(self, uri: str | None = None, database_name: str = "blog", client=None):
        self._connection = DatabaseConnection(uri, database_name, client=client)

        # Initialize repositories
        self.articles = ArticleRepository(self._connection)
        self.comments = CommentRepository(self._connection)
        self.users = UserRepository(self._connection)
        self.subscribers = SubscriberRepository(self._connection)

    @property
    def connection(self) -> DatabaseConnection:
        return self._connection

    def ensure_indexes(self):
        self._connection.ensure_indexes()

    def ping(self) -> bool:
        return self._connection.ping()

    def close(self):
        self._connection.close()
