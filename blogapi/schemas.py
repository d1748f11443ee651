"""
Pydantic models for API request/response validation.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, model_serializer

from .database import DBArticle, DBComment, DBSubscriber, DBUser
from .localization import alternate_urls

Locale = Literal["en", "pt", "es", "fr", "de", "it"]


def ok(data: Any = None, message: str | None = None) -> dict:
    """Success envelope returned by every route."""
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body


# ─────────────────────────────────────────────────────────────
# Article Schemas
# ─────────────────────────────────────────────────────────────

class SeoInput(BaseModel):
    meta_title: str | None = None
    meta_description: str | None = None
    keywords: list[str] = []
    slug: str
    hreflang: Locale
    url_pattern: str | None = None
    canonical_url: str | None = None
    type: str = "article"


class ArticleSectionInput(BaseModel):
    sub_title: str
    article_paragraphs: list[str] = []


class LanguageContentInput(BaseModel):
    main_title: str = Field(min_length=1)
    article_contents: list[ArticleSectionInput] = []
    seo: SeoInput


class ArticleCreateRequest(BaseModel):
    contents_by_language: list[LanguageContentInput] = Field(min_length=1)
    category: str
    article_images: list[str] = []


class ArticleUpdateRequest(BaseModel):
    contents_by_language: list[LanguageContentInput] | None = Field(default=None, min_length=1)
    category: str | None = None
    article_images: list[str] | None = None


class SeoResponse(BaseModel):
    meta_title: str | None = None
    meta_description: str | None = None
    keywords: list[str] = []
    slug: str | None = None
    hreflang: str | None = None
    url_pattern: str | None = None
    canonical_url: str | None = None
    type: str | None = None


class ArticleSectionResponse(BaseModel):
    sub_title: str
    article_paragraphs: list[str]


class LanguageContentResponse(BaseModel):
    main_title: str | None
    article_contents: list[ArticleSectionResponse] | None = None
    seo: SeoResponse

    @model_serializer(mode="wrap")
    def serialize_loaded_fields(self, handler):
        data = handler(self)
        if "article_contents" not in self.model_fields_set:
            data.pop("article_contents", None)
        return data


# Response fields each projection tier leaves out
TIER_OMITTED_FIELDS: dict[str, frozenset[str]] = {
    "featured": frozenset({
        "likes_count", "is_liked", "comments_count", "views", "status", "created_by", "unpublished_at",
    }),
    "dashboard": frozenset({"article_images", "created_by", "unpublished_at"}),
    "full": frozenset(),
}


class ArticleResponse(BaseModel):
    """Article with its resolved language block(s)."""
    id: str
    category: str | None
    article_images: list[str] | None = None
    contents_by_language: list[LanguageContentResponse]
    likes_count: int | None = None
    is_liked: bool | None = None
    comments_count: int | None = None
    views: int | None = None
    status: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    unpublished_at: datetime | None = None
    alternates: dict[str, str] | None = None

    @model_serializer(mode="wrap")
    def serialize_loaded_fields(self, handler):
        data = handler(self)
        for name in TIER_OMITTED_FIELDS["featured"] | TIER_OMITTED_FIELDS["dashboard"]:
            if name not in self.model_fields_set:
                data.pop(name, None)
        return data

    @classmethod
    def from_db(
        cls,
        article: DBArticle,
        user_id: str | None = None,
        base_url: str | None = None,
        fields: str = "full",
    ) -> "ArticleResponse":
        """Build a response carrying only what the ``fields`` projection loaded."""
        omitted = TIER_OMITTED_FIELDS[fields]
        blocks = []
        for block in article.contents_by_language:
            content: dict[str, Any] = {"main_title": block.main_title, "seo": SeoResponse(**vars(block.seo))}
            if fields != "dashboard":
                content["article_contents"] = [
                    ArticleSectionResponse(
                        sub_title=section.sub_title,
                        article_paragraphs=section.article_paragraphs,
                    )
                    for section in block.article_contents
                ]
            blocks.append(LanguageContentResponse(**content))

        values: dict[str, Any] = {
            "id": article.id,
            "category": article.category,
            "article_images": article.article_images,
            "contents_by_language": blocks,
            "likes_count": len(article.likes),
            "is_liked": bool(user_id and user_id in article.likes),
            "comments_count": len(article.comments),
            "views": article.views,
            "status": article.status,
            "created_by": article.created_by,
            "created_at": article.created_at,
            "updated_at": article.updated_at,
            "unpublished_at": article.unpublished_at,
            "alternates": alternate_urls(article, base_url) if base_url else None,
        }
        return cls(**{name: value for name, value in values.items() if name not in omitted})


# ─────────────────────────────────────────────────────────────
# Comment Schemas
# ─────────────────────────────────────────────────────────────

class CommentCreateRequest(BaseModel):
    article_id: str
    comment: str


class CommentUpdateRequest(BaseModel):
    comment: str


class CommentReportRequest(BaseModel):
    reason: str


class CommentResponse(BaseModel):
    id: str
    article_id: str
    user_id: str
    username: str | None = None
    comment: str
    likes_count: int
    is_liked: bool = False
    reports_count: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_db(
        cls,
        comment: DBComment,
        article_id: str,
        username: str | None = None,
        user_id: str | None = None,
        include_reports: bool = False,
    ) -> "CommentResponse":
        return cls(
            id=comment.id,
            article_id=article_id,
            user_id=comment.user_id,
            username=username,
            comment=comment.comment,
            likes_count=len(comment.comment_likes),
            is_liked=bool(user_id and user_id in comment.comment_likes),
            reports_count=len(comment.comment_reports) if include_reports else None,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )


class ToggleResponse(BaseModel):
    liked: bool
    like_count: int


# ─────────────────────────────────────────────────────────────
# Subscriber Schemas
# ─────────────────────────────────────────────────────────────

class SubscribeRequest(BaseModel):
    email: str
    categories: list[str] | None = None
    frequency: str | None = None
    locale: Locale | None = None


class ConfirmSubscriptionRequest(BaseModel):
    email: str
    token: str


class UnsubscribeRequest(BaseModel):
    email: str
    token: str | None = None


class SubscriptionPreferencesRequest(BaseModel):
    categories: list[str] | None = None
    frequency: str | None = None


class SubscriptionPreferencesResponse(BaseModel):
    categories: list[str]
    frequency: str


class SubscriberResponse(BaseModel):
    """Subscriber without its tokens."""
    id: str
    email: str
    email_verified: bool
    user_id: str | None = None
    subscription_preferences: SubscriptionPreferencesResponse
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_db(cls, subscriber: DBSubscriber) -> "SubscriberResponse":
        prefs = subscriber.subscription_preferences
        return cls(
            id=subscriber.id,
            email=subscriber.email,
            email_verified=subscriber.email_verified,
            user_id=subscriber.user_id,
            subscription_preferences=SubscriptionPreferencesResponse(
                categories=prefs.categories,
                frequency=prefs.frequency,
            ),
            created_at=subscriber.created_at,
            updated_at=subscriber.updated_at,
        )


class NewsletterSendRequest(BaseModel):
    frequency: str = "weekly"
    category: str | None = None
    days: int = Field(default=7, ge=1, le=90)
    max_articles: int = Field(default=5, ge=1, le=20)


class NewsletterSendResponse(BaseModel):
    recipients: int
    sent: int
    failed: int


# ─────────────────────────────────────────────────────────────
# User & Auth Schemas
# ─────────────────────────────────────────────────────────────

class UserPreferencesInput(BaseModel):
    language: Locale | None = None
    region: str | None = None
    content_language: Locale | None = None


class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str
    birth_date: datetime | None = None
    preferences: UserPreferencesInput | None = None
    category_interests: list[str] = []


class TokenRequest(BaseModel):
    token: str


class EmailRequest(BaseModel):
    email: str


class PasswordResetConfirmRequest(BaseModel):
    token: str
    password: str


class SignInRequest(BaseModel):
    email: str
    password: str


class UserUpdateRequest(BaseModel):
    username: str | None = None
    email: str | None = None
    birth_date: datetime | None = None
    preferences: UserPreferencesInput | None = None
    category_interests: list[str] | None = None
    role: Literal["admin", "user"] | None = None
    is_active: bool | None = None


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str


class UserPreferencesResponse(BaseModel):
    language: str
    region: str
    content_language: str


class UserResponse(BaseModel):
    """User profile without password or tokens."""
    id: str
    username: str
    email: str
    role: str
    preferences: UserPreferencesResponse
    category_interests: list[str]
    birth_date: datetime | None = None
    email_verified: bool
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_db(cls, user: DBUser) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            role=user.role,
            preferences=UserPreferencesResponse(**vars(user.preferences)),
            category_interests=user.category_interests,
            birth_date=user.birth_date,
            email_verified=user.email_verified,
            is_active=user.is_active,
            last_login=user.last_login,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class SessionResponse(BaseModel):
    token: str
    user: UserResponse


# ─────────────────────────────────────────────────────────────
# Misc Schemas
# ─────────────────────────────────────────────────────────────

class StatusResponse(BaseModel):
    status: str
    version: str
    database: bool


class RegionResponse(BaseModel):
    region: str
    locale: str
