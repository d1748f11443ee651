"""
Subscriber service: the newsletter subscription lifecycle.

States: unverified -> verified (confirm) -> deactivated (unsubscribe).
Subscribing again from any state rotates the tokens and returns the record
to unverified until the new confirmation link is used.
"""

import logging

from ..auth import generate_token
from ..constants import CATEGORIES, DEFAULT_FREQUENCY
from ..database import Database, DBSubscriber, DBUser
from ..exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    require_subscriber,
)
from .. import mailer as messages
from ..mailer import Mailer
from ..validators import normalize_email, validate_categories, validate_frequency

logger = logging.getLogger(__name__)

INVALID_CONFIRMATION_MESSAGE = "Invalid or expired confirmation link!"


class SubscriberService:
    """Service for newsletter subscriptions."""

    def __init__(self, db: Database, mailer: Mailer):
        self.db = db
        self.mailer = mailer

    def _send_confirmation(self, subscriber: DBSubscriber, locale: str):
        try:
            self.mailer.deliver(
                messages.subscription_confirmation(
                    subscriber.email,
                    subscriber.verification_token or "",
                    subscriber.unsubscribe_token or "",
                    locale,
                )
            )
        except Exception:
            logger.exception(f"Failed to send subscription confirmation to {subscriber.email}")

    def subscribe(
        self,
        email: str,
        categories: list[str] | None = None,
        frequency: str | None = None,
        locale: str = "en",
    ) -> tuple[DBSubscriber, bool]:
        """
        Create or refresh a subscription.

        Returns:
            (subscriber, created) where created is False for a re-subscription

        Raises:
            ConflictError: if a user account owns the email
        """
        email = normalize_email(email)
        preferences = {
            "categories": validate_categories(categories) if categories else list(CATEGORIES),
            "frequency": validate_frequency(frequency) if frequency else DEFAULT_FREQUENCY,
        }

        if self.db.users.get_by_email(email):
            raise ConflictError(
                "This email belongs to a registered account. Manage newsletter preferences from your profile."
            )

        verification_token = generate_token()
        unsubscribe_token = generate_token()

        existing = self.db.subscribers.get_by_email(email)
        if existing:
            subscriber = require_subscriber(
                self.db.subscribers.resubscribe(email, verification_token, unsubscribe_token, preferences)
            )
            created = False
            logger.info(f"Subscriber {subscriber.id} re-subscribed")
        else:
            subscriber = self.db.subscribers.add({
                "email": email,
                "email_verified": False,
                "verification_token": verification_token,
                "unsubscribe_token": unsubscribe_token,
                "user_id": None,
                "subscription_preferences": preferences,
            })
            created = True
            logger.info(f"New subscriber {subscriber.id}")

        self._send_confirmation(subscriber, locale)
        return subscriber, created

    def confirm(self, email: str, token: str) -> DBSubscriber:
        """Verify a subscription if the token matches; otherwise nothing changes."""
        email = normalize_email(email)
        if not token:
            raise ValidationError(INVALID_CONFIRMATION_MESSAGE)
        subscriber = self.db.subscribers.confirm(email, token)
        if subscriber is None:
            raise ValidationError(INVALID_CONFIRMATION_MESSAGE)
        logger.info(f"Subscriber {subscriber.id} confirmed")
        return subscriber

    def unsubscribe(self, email: str, token: str | None = None):
        email = normalize_email(email)
        if self.db.subscribers.get_by_email(email) is None:
            raise NotFoundError("Subscriber not found")
        if not self.db.subscribers.unsubscribe(email, token):
            raise ValidationError("Invalid unsubscribe link")
        logger.info(f"Unsubscribed {email}")

    def _check_access(self, subscriber: DBSubscriber, user: DBUser | None, is_admin: bool):
        if is_admin:
            return
        if user is None:
            raise PermissionDeniedError("Not allowed to manage this subscription")
        if subscriber.user_id != user.id and subscriber.email != user.email:
            raise PermissionDeniedError("Not allowed to manage this subscription")

    def get_subscriber(self, subscriber_id: str, user: DBUser | None, is_admin: bool) -> DBSubscriber:
        subscriber = require_subscriber(self.db.subscribers.get(subscriber_id))
        self._check_access(subscriber, user, is_admin)
        return subscriber

    def update_preferences(
        self,
        subscriber_id: str,
        user: DBUser | None,
        is_admin: bool,
        categories: list[str] | None = None,
        frequency: str | None = None,
    ) -> DBSubscriber:
        subscriber = require_subscriber(self.db.subscribers.get(subscriber_id))
        self._check_access(subscriber, user, is_admin)

        preferences: dict = {}
        if categories is not None:
            preferences["categories"] = validate_categories(categories)
        if frequency is not None:
            preferences["frequency"] = validate_frequency(frequency)
        if not preferences:
            raise ValidationError("No preferences to update")
        return require_subscriber(self.db.subscribers.update_preferences(subscriber_id, preferences))

    def list_verified(self, page: int = 1, limit: int = 50) -> dict:
        subscribers = self.db.subscribers.get_verified(skip=(page - 1) * limit, limit=limit)
        return {
            "subscribers": subscribers,
            "page": page,
            "limit": limit,
            "total_docs": self.db.subscribers.count_verified(),
        }

    def delete_subscriber(self, subscriber_id: str):
        if not self.db.subscribers.delete(subscriber_id):
            raise NotFoundError("Subscriber not found")
        logger.info(f"Deleted subscriber {subscriber_id}")
