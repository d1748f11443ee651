"""
Document converters - convert MongoDB documents to dataclasses.

Projected queries return partial documents, so every field is optional here.
"""

from typing import Any

from .models import (
    DBArticle,
    DBArticleSection,
    DBComment,
    DBCommentReport,
    DBLanguageContent,
    DBSeo,
    DBSubscriber,
    DBSubscriptionPreferences,
    DBUser,
    DBUserPreferences,
)


def _id_str(value: Any) -> str | None:
    return str(value) if value is not None else None


def _id_list(values: list | None) -> list[str]:
    return [str(v) for v in values or []]


def doc_to_seo(doc: dict | None) -> DBSeo:
    doc = doc or {}
    return DBSeo(
        meta_title=doc.get("meta_title"),
        meta_description=doc.get("meta_description"),
        keywords=list(doc.get("keywords") or []),
        slug=doc.get("slug"),
        hreflang=doc.get("hreflang"),
        url_pattern=doc.get("url_pattern"),
        canonical_url=doc.get("canonical_url"),
        type=doc.get("type"),
    )


def doc_to_language_content(doc: dict) -> DBLanguageContent:
    sections = [
        DBArticleSection(
            sub_title=section.get("sub_title", ""),
            article_paragraphs=list(section.get("article_paragraphs") or []),
        )
        for section in doc.get("article_contents") or []
    ]
    return DBLanguageContent(
        main_title=doc.get("main_title"),
        article_contents=sections,
        seo=doc_to_seo(doc.get("seo")),
    )


def doc_to_comment(doc: dict) -> DBComment:
    reports = [
        DBCommentReport(
            user_id=str(report["user_id"]),
            reason=report.get("reason", "other"),
            reported_at=report.get("reported_at"),
        )
        for report in doc.get("comment_reports") or []
    ]
    return DBComment(
        id=str(doc["_id"]),
        user_id=_id_str(doc.get("user_id")) or "",
        comment=doc.get("comment", ""),
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
        comment_likes=_id_list(doc.get("comment_likes")),
        comment_reports=reports,
    )


def doc_to_article(doc: dict) -> DBArticle:
    """Convert an article document (full or projected) to a DBArticle."""
    return DBArticle(
        id=str(doc["_id"]),
        contents_by_language=[
            doc_to_language_content(block) for block in doc.get("contents_by_language") or []
        ],
        category=doc.get("category"),
        article_images=list(doc.get("article_images") or []),
        likes=_id_list(doc.get("likes")),
        comments=[doc_to_comment(c) for c in doc.get("comments") or [] if "_id" in c],
        views=int(doc.get("views") or 0),
        status=doc.get("status") or "published",
        unpublished_at=doc.get("unpublished_at"),
        created_by=_id_str(doc.get("created_by")),
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
    )


def doc_to_user(doc: dict) -> DBUser:
    """Convert a user document to a DBUser."""
    prefs = doc.get("preferences") or {}
    return DBUser(
        id=str(doc["_id"]),
        username=doc.get("username", ""),
        email=doc.get("email", ""),
        password=doc.get("password", ""),
        role=doc.get("role") or "user",
        preferences=DBUserPreferences(
            language=prefs.get("language") or "en",
            region=prefs.get("region") or "US",
            content_language=prefs.get("content_language") or "en",
        ),
        category_interests=list(doc.get("category_interests") or []),
        birth_date=doc.get("birth_date"),
        email_verified=bool(doc.get("email_verified", False)),
        verification_token=doc.get("verification_token"),
        reset_password_token=doc.get("reset_password_token"),
        reset_password_expires=doc.get("reset_password_expires"),
        is_active=bool(doc.get("is_active", True)),
        last_login=doc.get("last_login"),
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
    )


def doc_to_subscriber(doc: dict) -> DBSubscriber:
    """Convert a subscriber document to a DBSubscriber."""
    prefs = doc.get("subscription_preferences") or {}
    return DBSubscriber(
        id=str(doc["_id"]),
        email=doc.get("email", ""),
        email_verified=bool(doc.get("email_verified", False)),
        verification_token=doc.get("verification_token"),
        unsubscribe_token=doc.get("unsubscribe_token"),
        user_id=_id_str(doc.get("user_id")),
        subscription_preferences=DBSubscriptionPreferences(
            categories=list(prefs.get("categories") or []),
            frequency=prefs.get("frequency") or "weekly",
        ),
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
    )
