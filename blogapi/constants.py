"""
Shared enumerations for categories, roles, statuses and report reasons.
"""

CATEGORIES = (
    "health",
    "fitness",
    "nutrition",
    "intimacy",
    "beauty",
    "weight-loss",
    "life",
)

ROLES = ("admin", "user")

ARTICLE_STATUSES = ("published", "archived")

NEWSLETTER_FREQUENCIES = ("daily", "weekly", "monthly")
DEFAULT_FREQUENCY = "weekly"

COMMENT_REPORT_REASONS = (
    "bad_language",
    "racist",
    "spam",
    "harassment",
    "inappropriate_content",
    "false_information",
    "other",
)

COMMENT_MAX_LENGTH = 600
