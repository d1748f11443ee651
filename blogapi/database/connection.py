"""
Database connection management and index initialization.
"""

import logging
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the driver returns by default."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_object_id(value: str | ObjectId, label: str = "id") -> ObjectId:
    """Parse a hex id, raising ValidationError for malformed values."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationError(f"Invalid {label}: {value}")


class DatabaseConnection:
    """Holds the MongoDB client and exposes the collections."""

    def __init__(self, uri: str | None = None, database_name: str = "blog", client=None):
        self.client = client if client is not None else MongoClient(
            uri,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            retryWrites=True,
        )
        self.db = self.client[database_name]

    @property
    def articles(self) -> Collection:
        return self.db["articles"]

    @property
    def users(self) -> Collection:
        return self.db["users"]

    @property
    def subscribers(self) -> Collection:
        return self.db["subscribers"]

    def ping(self) -> bool:
        self.client.admin.command("ping")
        return True

    def ensure_indexes(self):
        """Create the indexes the services rely on for uniqueness and lookups."""
        self.articles.create_index(
            [("contents_by_language.seo.slug", ASCENDING)], unique=True, name="unique_slug"
        )
        self.articles.create_index([("category", ASCENDING), ("created_at", DESCENDING)])
        self.articles.create_index([("status", ASCENDING)])
        self.articles.create_index([("likes", ASCENDING)])
        self.articles.create_index([("comments._id", ASCENDING)])

        self.users.create_index([("email", ASCENDING)], unique=True)
        self.users.create_index([("username", ASCENDING)], unique=True)
        self.users.create_index([("verification_token", ASCENDING)], sparse=True)
        self.users.create_index([("reset_password_token", ASCENDING)], sparse=True)

        self.subscribers.create_index([("email", ASCENDING)], unique=True)
        self.subscribers.create_index(
            [("email_verified", ASCENDING), ("subscription_preferences.frequency", ASCENDING)]
        )
        logger.info("MongoDB indexes ensured")

    def close(self):
        self.client.close()
