"""
Repository for user operations.
"""

from datetime import datetime

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..exceptions import ConflictError
from .connection import DatabaseConnection, to_object_id, utcnow
from .converters import doc_to_user
from .models import DBUser


class UserRepository:
    """Repository for user CRUD operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    @property
    def _users(self):
        return self._db.users

    def add(self, document: dict) -> str:
        """Insert a user document. Returns the new user ID."""
        now = utcnow()
        document["created_at"] = now
        document["updated_at"] = now
        try:
            result = self._users.insert_one(document)
        except DuplicateKeyError:
            raise ConflictError("Email or username already in use")
        return str(result.inserted_id)

    def get_by_id(self, user_id: str) -> DBUser | None:
        doc = self._users.find_one({"_id": to_object_id(user_id, "user id")})
        return doc_to_user(doc) if doc else None

    def get_by_email(self, email: str) -> DBUser | None:
        doc = self._users.find_one({"email": email})
        return doc_to_user(doc) if doc else None

    def get_by_username(self, username: str) -> DBUser | None:
        doc = self._users.find_one({"username": username})
        return doc_to_user(doc) if doc else None

    def get_by_verification_token(self, token: str) -> DBUser | None:
        doc = self._users.find_one({"verification_token": token})
        return doc_to_user(doc) if doc else None

    def get_usernames(self, user_ids: list[str]) -> dict[str, str]:
        """Map user id -> username for a batch of ids."""
        if not user_ids:
            return {}
        ids = [to_object_id(uid, "user id") for uid in set(user_ids)]
        cursor = self._users.find({"_id": {"$in": ids}}, {"username": 1})
        return {str(doc["_id"]): doc.get("username", "") for doc in cursor}

    def get_all(self, skip: int = 0, limit: int = 50) -> list[DBUser]:
        """Get users, newest first (for admin purposes)."""
        cursor = self._users.find({}).sort("created_at", -1).skip(skip).limit(limit)
        return [doc_to_user(doc) for doc in cursor]

    def count(self) -> int:
        return self._users.count_documents({})

    def update(self, user_id: str, fields: dict) -> DBUser | None:
        """Set fields on a user. Returns the updated user or None if missing."""
        fields = {**fields, "updated_at": utcnow()}
        try:
            doc = self._users.find_one_and_update(
                {"_id": to_object_id(user_id, "user id")},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictError("Email or username already in use")
        return doc_to_user(doc) if doc else None

    def update_last_login(self, user_id: str):
        """Update user's last login timestamp."""
        self._users.update_one(
            {"_id": to_object_id(user_id, "user id")},
            {"$set": {"last_login": utcnow()}},
        )

    def confirm_email(self, token: str) -> DBUser | None:
        """Mark the account holding this verification token as verified."""
        doc = self._users.find_one_and_update(
            {"verification_token": token, "email_verified": False},
            {
                "$set": {"email_verified": True, "updated_at": utcnow()},
                "$unset": {"verification_token": ""},
            },
            return_document=ReturnDocument.AFTER,
        )
        return doc_to_user(doc) if doc else None

    def set_reset_token(self, user_id: str, token: str, expires: datetime):
        self.update(user_id, {"reset_password_token": token, "reset_password_expires": expires})

    def reset_password(self, token: str, password_hash: str, now: datetime) -> bool:
        """Swap the password if the reset token is valid and unexpired; clears the token."""
        result = self._users.update_one(
            {"reset_password_token": token, "reset_password_expires": {"$gt": now}},
            {
                "$set": {"password": password_hash, "updated_at": utcnow()},
                "$unset": {"reset_password_token": "", "reset_password_expires": ""},
            },
        )
        return result.modified_count > 0

    def delete(self, user_id: str) -> bool:
        result = self._users.delete_one({"_id": to_object_id(user_id, "user id")})
        return result.deleted_count > 0
