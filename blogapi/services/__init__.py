"""
Service layer for business logic.

Services encapsulate business logic, keeping routes as thin HTTP adapters.
Each service receives its dependencies via constructor injection.

Usage in routes:
    from ..services import ArticleServiceDep

    @router.get("/articles")
    async def list_articles(service: ArticleServiceDep, ...):
        return ok(service.list_articles(query).to_dict())
"""

from typing import Annotated

from fastapi import Depends

from ..config import get_db, get_mailer
from ..database import Database
from ..mailer import Mailer

from .article_service import ArticleQuery, ArticleService, Page, parse_exclude_ids
from .engagement_service import EngagementService
from .newsletter_service import NewsletterService
from .subscriber_service import SubscriberService
from .user_service import UserService

__all__ = [
    # Services
    "ArticleService",
    "EngagementService",
    "NewsletterService",
    "SubscriberService",
    "UserService",
    # Query helpers
    "ArticleQuery",
    "Page",
    "parse_exclude_ids",
    # Dependency factories
    "get_article_service",
    "get_engagement_service",
    "get_newsletter_service",
    "get_subscriber_service",
    "get_user_service",
    # Type aliases for dependency injection
    "ArticleServiceDep",
    "EngagementServiceDep",
    "NewsletterServiceDep",
    "SubscriberServiceDep",
    "UserServiceDep",
]


def get_article_service(db: Annotated[Database, Depends(get_db)]) -> ArticleService:
    """Dependency to get ArticleService instance."""
    return ArticleService(db=db)


def get_engagement_service(
    db: Annotated[Database, Depends(get_db)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> EngagementService:
    """Dependency to get EngagementService instance."""
    return EngagementService(db=db, mailer=mailer)


def get_subscriber_service(
    db: Annotated[Database, Depends(get_db)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> SubscriberService:
    """Dependency to get SubscriberService instance."""
    return SubscriberService(db=db, mailer=mailer)


def get_newsletter_service(
    db: Annotated[Database, Depends(get_db)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> NewsletterService:
    """Dependency to get NewsletterService instance."""
    return NewsletterService(db=db, mailer=mailer)


def get_user_service(
    db: Annotated[Database, Depends(get_db)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> UserService:
    """Dependency to get UserService instance."""
    return UserService(db=db, mailer=mailer)


# Re-export the service factories for convenience
ArticleServiceDep = Annotated[ArticleService, Depends(get_article_service)]
EngagementServiceDep = Annotated[EngagementService, Depends(get_engagement_service)]
NewsletterServiceDep = Annotated[NewsletterService, Depends(get_newsletter_service)]
SubscriberServiceDep = Annotated[SubscriberService, Depends(get_subscriber_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
