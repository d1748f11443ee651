"""
User service: registration, email confirmation, password reset, sign-in
and profile management.
"""

import logging
from datetime import timedelta

from .. import mailer as messages
from ..auth import create_session_token, generate_token, hash_password, verify_password
from ..config import config
from ..database import Database, DBUser, utcnow
from ..exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    require_user,
)
from ..localization import normalize_locale
from ..mailer import EmailMessage, Mailer
from ..schemas import RegisterRequest, UserPreferencesInput, UserUpdateRequest
from ..validators import normalize_email, validate_categories, validate_password, validate_username

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class UserService:
    """Service for user accounts and authentication."""

    def __init__(self, db: Database, mailer: Mailer):
        self.db = db
        self.mailer = mailer

    def _send(self, message: EmailMessage):
        try:
            self.mailer.deliver(message)
        except Exception:
            logger.exception(f"Failed to send '{message.subject}' to {message.to}")

    @staticmethod
    def _preferences_fields(preferences: UserPreferencesInput | None) -> dict:
        if preferences is None:
            return {}
        fields = {}
        if preferences.language:
            fields["language"] = preferences.language
        if preferences.region:
            fields["region"] = preferences.region.strip().upper()
        if preferences.content_language:
            fields["content_language"] = preferences.content_language
        return fields

    # ─────────────────────────────────────────────────────────────
    # Registration & confirmation
    # ─────────────────────────────────────────────────────────────

    def register(self, request: RegisterRequest, locale: str = "en") -> DBUser:
        username = validate_username(request.username)
        email = normalize_email(request.email)
        validate_password(request.password)

        if self.db.users.get_by_email(email):
            raise ConflictError("An account with this email already exists")
        if self.db.users.get_by_username(username):
            raise ConflictError("This username is already taken")

        language = normalize_locale(locale)
        preferences = {"language": language, "region": "US", "content_language": language}
        preferences.update(self._preferences_fields(request.preferences))

        token = generate_token()
        user_id = self.db.users.add({
            "username": username,
            "email": email,
            "password": hash_password(request.password),
            "role": "user",
            "birth_date": request.birth_date,
            "preferences": preferences,
            "category_interests": validate_categories(request.category_interests),
            "email_verified": False,
            "verification_token": token,
            "is_active": True,
            "last_login": None,
        })
        self.db.subscribers.link_user(email, user_id)
        logger.info(f"Registered user {user_id}")

        self._send(messages.account_confirmation(email, username, token, preferences["language"]))
        return require_user(self.db.users.get_by_id(user_id))

    def confirm_email(self, token: str) -> DBUser:
        """Verify an account by its confirmation token; also verifies a linked subscriber."""
        if not token:
            raise ValidationError("Invalid or expired confirmation link!")
        user = self.db.users.confirm_email(token)
        if user is None:
            existing = self.db.users.get_by_verification_token(token)
            if existing and existing.email_verified:
                raise ValidationError("Email is already verified")
            raise ValidationError("Invalid or expired confirmation link!")
        self.db.subscribers.mark_verified(user.email)
        logger.info(f"User {user.id} confirmed email")
        return user

    def request_email_confirmation(self, email: str):
        """Re-send the confirmation link. Unknown emails are ignored silently."""
        email = normalize_email(email)
        user = self.db.users.get_by_email(email)
        if user is None:
            logger.info("Confirmation requested for unknown email")
            return
        if user.email_verified:
            raise ValidationError("Email is already verified")
        token = generate_token()
        self.db.users.update(user.id, {"verification_token": token})
        self._send(messages.account_confirmation(user.email, user.username, token, user.preferences.language))

    def request_password_reset(self, email: str):
        """Issue a reset token. The outcome is the same whether or not the email exists."""
        email = normalize_email(email)
        user = self.db.users.get_by_email(email)
        if user is None or not user.is_active:
            logger.info("Password reset requested for unknown or inactive email")
            return
        token = generate_token()
        ttl = config.PASSWORD_RESET_TTL_MINUTES
        self.db.users.set_reset_token(user.id, token, utcnow() + timedelta(minutes=ttl))
        self._send(messages.password_reset(user.email, token, ttl, user.preferences.language))

    def reset_password(self, token: str, password: str):
        validate_password(password)
        if not token or not self.db.users.reset_password(token, hash_password(password), utcnow()):
            raise ValidationError("Invalid or expired reset link")
        logger.info("Password reset completed")

    # ─────────────────────────────────────────────────────────────
    # Sessions
    # ─────────────────────────────────────────────────────────────

    def sign_in(self, email: str, password: str) -> tuple[DBUser, str]:
        """Check credentials and issue a session token."""
        try:
            email = normalize_email(email)
        except ValidationError:
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        user = self.db.users.get_by_email(email)
        if user is None or not verify_password(password or "", user.password):
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        if not user.is_active:
            raise PermissionDeniedError("This account has been deactivated")
        token = create_session_token(user.id)
        self.db.users.update_last_login(user.id)
        logger.info(f"User {user.id} signed in")
        return user, token

    # ─────────────────────────────────────────────────────────────
    # Profiles
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def _check_self_or_admin(user_id: str, actor: DBUser | None, is_admin: bool):
        if is_admin:
            return
        if actor is None or actor.id != user_id:
            raise PermissionDeniedError("You can only manage your own account")

    def list_users(self, page: int = 1, limit: int = 50) -> dict:
        return {
            "users": self.db.users.get_all(skip=(page - 1) * limit, limit=limit),
            "page": page,
            "limit": limit,
            "total_docs": self.db.users.count(),
        }

    def get_user(self, user_id: str, actor: DBUser | None, is_admin: bool) -> DBUser:
        self._check_self_or_admin(user_id, actor, is_admin)
        return require_user(self.db.users.get_by_id(user_id))

    def update_user(
        self,
        user_id: str,
        request: UserUpdateRequest,
        actor: DBUser | None,
        is_admin: bool,
    ) -> DBUser:
        self._check_self_or_admin(user_id, actor, is_admin)
        user = require_user(self.db.users.get_by_id(user_id))

        if (request.role is not None or request.is_active is not None) and not is_admin:
            raise PermissionDeniedError("Only admins can change role or account status")

        fields: dict = {}
        if request.username is not None:
            username = validate_username(request.username)
            if username != user.username:
                if self.db.users.get_by_username(username):
                    raise ConflictError("This username is already taken")
                fields["username"] = username
        if request.email is not None:
            email = normalize_email(request.email)
            if email != user.email:
                if self.db.users.get_by_email(email):
                    raise ConflictError("An account with this email already exists")
                fields["email"] = email
                fields["email_verified"] = False
                fields["verification_token"] = generate_token()
        if request.birth_date is not None:
            fields["birth_date"] = request.birth_date
        for key, value in self._preferences_fields(request.preferences).items():
            fields[f"preferences.{key}"] = value
        if request.category_interests is not None:
            fields["category_interests"] = validate_categories(request.category_interests)
        if request.role is not None:
            fields["role"] = request.role
        if request.is_active is not None:
            fields["is_active"] = request.is_active

        if not fields:
            raise ValidationError("No fields to update")
        updated = require_user(self.db.users.update(user_id, fields))
        if "verification_token" in fields:
            self._send(messages.account_confirmation(
                updated.email, updated.username, fields["verification_token"], updated.preferences.language
            ))
        logger.info(f"Updated user {user_id}: {', '.join(sorted(fields))}")
        return updated

    def delete_user(self, user_id: str, actor: DBUser | None, is_admin: bool):
        self._check_self_or_admin(user_id, actor, is_admin)
        if not self.db.users.delete(user_id):
            raise NotFoundError("User not found")
        logger.info(f"Deleted user {user_id}")

    def change_password(self, user_id: str, actor: DBUser, current_password: str, new_password: str):
        """Self-service password change; the current password must match."""
        if actor.id != user_id:
            raise PermissionDeniedError("You can only change your own password")
        user = require_user(self.db.users.get_by_id(user_id))
        if not verify_password(current_password or "", user.password):
            raise AuthenticationError("Current password is incorrect")
        if current_password == new_password:
            raise ValidationError("New password must be different from the current one")
        validate_password(new_password)
        self.db.users.update(user_id, {"password": hash_password(new_password)})
        logger.info(f"User {user_id} changed password")
