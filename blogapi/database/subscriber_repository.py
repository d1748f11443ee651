"""
Subscriber repository - newsletter subscription records.

State changes are single conditional updates keyed by the normalized email.
"""

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..exceptions import ConflictError
from .connection import DatabaseConnection, to_object_id, utcnow
from .converters import doc_to_subscriber
from .models import DBSubscriber


class SubscriberRepository:
    """Repository for subscriber operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    @property
    def _subscribers(self):
        return self._db.subscribers

    def get(self, subscriber_id: str) -> DBSubscriber | None:
        doc = self._subscribers.find_one({"_id": to_object_id(subscriber_id, "subscriber id")})
        return doc_to_subscriber(doc) if doc else None

    def get_by_email(self, email: str) -> DBSubscriber | None:
        doc = self._subscribers.find_one({"email": email})
        return doc_to_subscriber(doc) if doc else None

    def add(self, document: dict) -> DBSubscriber:
        now = utcnow()
        document["created_at"] = now
        document["updated_at"] = now
        try:
            self._subscribers.insert_one(document)
        except DuplicateKeyError:
            raise ConflictError("Email is already subscribed")
        return doc_to_subscriber(document)

    def resubscribe(
        self,
        email: str,
        verification_token: str,
        unsubscribe_token: str,
        preferences: dict,
    ) -> DBSubscriber | None:
        """Rotate tokens, replace preferences and reset to unverified."""
        doc = self._subscribers.find_one_and_update(
            {"email": email},
            {
                "$set": {
                    "email_verified": False,
                    "verification_token": verification_token,
                    "unsubscribe_token": unsubscribe_token,
                    "subscription_preferences": preferences,
                    "updated_at": utcnow(),
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        return doc_to_subscriber(doc) if doc else None

    def confirm(self, email: str, token: str) -> DBSubscriber | None:
        """Verify a subscriber only if the confirmation token matches."""
        doc = self._subscribers.find_one_and_update(
            {"email": email, "verification_token": token},
            {
                "$set": {
                    "email_verified": True,
                    "updated_at": utcnow(),
                },
                "$unset": {"verification_token": ""},
            },
            return_document=ReturnDocument.AFTER,
        )
        return doc_to_subscriber(doc) if doc else None

    def link_user(self, email: str, user_id: str):
        self._subscribers.update_one(
            {"email": email},
            {"$set": {"user_id": to_object_id(user_id, "user id"), "updated_at": utcnow()}},
        )

    def mark_verified(self, email: str):
        """Mark the subscriber linked to a confirmed account as verified."""
        self._subscribers.update_one(
            {"email": email},
            {"$set": {"email_verified": True, "updated_at": utcnow()}, "$unset": {"verification_token": ""}},
        )

    def unsubscribe(self, email: str, token: str | None = None) -> bool:
        """Deactivate a subscription; the record is kept."""
        query: dict = {"email": email}
        if token is not None:
            query["unsubscribe_token"] = token
        result = self._subscribers.update_one(
            query, {"$set": {"email_verified": False, "updated_at": utcnow()}}
        )
        return result.matched_count > 0

    def update_preferences(self, subscriber_id: str, preferences: dict) -> DBSubscriber | None:
        fields = {f"subscription_preferences.{key}": value for key, value in preferences.items()}
        fields["updated_at"] = utcnow()
        doc = self._subscribers.find_one_and_update(
            {"_id": to_object_id(subscriber_id, "subscriber id")},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return doc_to_subscriber(doc) if doc else None

    def get_verified(self, skip: int = 0, limit: int = 50) -> list[DBSubscriber]:
        cursor = (
            self._subscribers.find({"email_verified": True})
            .sort("created_at", -1)
            .skip(skip)
            .limit(limit)
        )
        return [doc_to_subscriber(doc) for doc in cursor]

    def count_verified(self) -> int:
        return self._subscribers.count_documents({"email_verified": True})

    def get_newsletter_recipients(self, frequency: str, category: str | None = None) -> list[DBSubscriber]:
        """Verified subscribers on a delivery frequency, optionally interested in one category."""
        query: dict = {"email_verified": True, "subscription_preferences.frequency": frequency}
        if category:
            query["subscription_preferences.categories"] = category
        return [doc_to_subscriber(doc) for doc in self._subscribers.find(query)]

    def delete(self, subscriber_id: str) -> bool:
        result = self._subscribers.delete_one({"_id": to_object_id(subscriber_id, "subscriber id")})
        return result.deleted_count > 0
