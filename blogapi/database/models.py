"""
Database models - dataclasses for stored documents.

Ids are exposed as strings; repositories convert them back to ObjectIds.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class DBSeo:
    meta_title: str | None = None
    meta_description: str | None = None
    keywords: list[str] = field(default_factory=list)
    slug: str | None = None
    hreflang: str | None = None
    url_pattern: str | None = None
    canonical_url: str | None = None
    type: str | None = None


@dataclass
class DBArticleSection:
    sub_title: str
    article_paragraphs: list[str] = field(default_factory=list)


@dataclass
class DBLanguageContent:
    main_title: str | None = None
    article_contents: list[DBArticleSection] = field(default_factory=list)
    seo: DBSeo = field(default_factory=DBSeo)


@dataclass
class DBCommentReport:
    user_id: str
    reason: str
    reported_at: datetime | None = None


@dataclass
class DBComment:
    id: str
    user_id: str
    comment: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    comment_likes: list[str] = field(default_factory=list)
    comment_reports: list[DBCommentReport] = field(default_factory=list)


@dataclass
class DBArticle:
    id: str
    contents_by_language: list[DBLanguageContent]
    category: str | None = None
    article_images: list[str] = field(default_factory=list)
    likes: list[str] = field(default_factory=list)
    comments: list[DBComment] = field(default_factory=list)
    views: int = 0
    status: str = "published"
    unpublished_at: datetime | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class DBUserPreferences:
    language: str = "en"
    region: str = "US"
    content_language: str = "en"


@dataclass
class DBUser:
    id: str
    username: str
    email: str
    password: str
    role: str = "user"
    preferences: DBUserPreferences = field(default_factory=DBUserPreferences)
    category_interests: list[str] = field(default_factory=list)
    birth_date: datetime | None = None
    email_verified: bool = False
    verification_token: str | None = None
    reset_password_token: str | None = None
    reset_password_expires: datetime | None = None
    is_active: bool = True
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass
class DBSubscriptionPreferences:
    categories: list[str] = field(default_factory=list)
    frequency: str = "weekly"


@dataclass
class DBSubscriber:
    id: str
    email: str
    email_verified: bool = False
    verification_token: str | None = None
    unsubscribe_token: str | None = None
    user_id: str | None = None
    subscription_preferences: DBSubscriptionPreferences = field(default_factory=DBSubscriptionPreferences)
    created_at: datetime | None = None
    updated_at: datetime | None = None
