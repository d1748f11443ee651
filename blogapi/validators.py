"""
Input validation utilities for comments, passwords, emails and slugs.

Each helper returns the cleaned value or raises ValidationError.
"""

import re

from email_validator import EmailNotValidError, validate_email

from .constants import CATEGORIES, COMMENT_MAX_LENGTH, COMMENT_REPORT_REASONS, NEWSLETTER_FREQUENCIES
from .exceptions import ValidationError

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{5,30}$")
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72


def validate_comment(text: str | None) -> str:
    """
    Validate a comment body before storage.

    Returns:
        The trimmed comment

    Raises:
        ValidationError: if empty after trimming, longer than the limit, or
            containing a link
    """
    comment = (text or "").strip()
    if not comment:
        raise ValidationError("Comment cannot be empty")
    if len(comment) > COMMENT_MAX_LENGTH:
        raise ValidationError(f"Comment cannot exceed {COMMENT_MAX_LENGTH} characters")
    if "http" in comment:
        raise ValidationError("Links are not allowed in comments")
    return comment


def validate_report_reason(reason: str | None) -> str:
    if reason not in COMMENT_REPORT_REASONS:
        raise ValidationError(f"Invalid report reason. Allowed: {', '.join(COMMENT_REPORT_REASONS)}")
    return reason


def validate_password(password: str | None) -> str:
    """Enforce the password policy: length plus lower, upper, digit and symbol."""
    password = password or ""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes")
    if not re.search(r"[a-z]", password):
        raise ValidationError("Password must contain a lowercase letter")
    if not re.search(r"[A-Z]", password):
        raise ValidationError("Password must contain an uppercase letter")
    if not re.search(r"\d", password):
        raise ValidationError("Password must contain a number")
    if not re.search(r"[^A-Za-z0-9]", password):
        raise ValidationError("Password must contain a special character")
    return password


def normalize_email(email: str | None) -> str:
    """Trim, lowercase and syntax-check an email address."""
    value = (email or "").strip().lower()
    if not value:
        raise ValidationError("Email is required")
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email address: {e}")
    return value


def validate_username(username: str | None) -> str:
    value = (username or "").strip()
    if not USERNAME_PATTERN.match(value):
        raise ValidationError(
            "Username must be 5-30 characters of letters, numbers, underscores or hyphens"
        )
    return value


def validate_slug(slug: str | None) -> str:
    value = (slug or "").strip()
    if not SLUG_PATTERN.match(value):
        raise ValidationError(f"Invalid slug: {slug!r}")
    return value


def validate_category(category: str | None) -> str:
    if category not in CATEGORIES:
        raise ValidationError(f"Invalid category: {category}")
    return category


def validate_categories(categories: list[str]) -> list[str]:
    """Validate and de-duplicate a category list, keeping order."""
    seen: list[str] = []
    for category in categories:
        validate_category(category)
        if category not in seen:
            seen.append(category)
    return seen


def validate_frequency(frequency: str | None) -> str:
    if frequency not in NEWSLETTER_FREQUENCIES:
        raise ValidationError(f"Invalid frequency. Allowed: {', '.join(NEWSLETTER_FREQUENCIES)}")
    return frequency
