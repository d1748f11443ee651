"""
Newsletter service: builds and delivers one digest batch on demand.

Scheduling is external (a cron job calling the send endpoint with the
internal API key); this service only assembles and sends.
"""

import logging
from datetime import timedelta

from .. import mailer as messages
from ..config import config
from ..content_resolver import resolve_content
from ..database import Database, DBArticle, DBSubscriber, utcnow
from ..localization import article_url
from ..mailer import Mailer
from ..validators import validate_category, validate_frequency

logger = logging.getLogger(__name__)


class NewsletterService:
    """Service for newsletter delivery."""

    def __init__(self, db: Database, mailer: Mailer, base_url: str | None = None):
        self.db = db
        self.mailer = mailer
        self.base_url = base_url or config.BASE_URL

    def _recent_articles(self, days: int) -> list[DBArticle]:
        since = utcnow() - timedelta(days=days)
        return self.db.articles.find(
            {"status": "published", "created_at": {"$gte": since}},
            sort="created_at",
            order="desc",
            limit=100,
            fields="featured",
        )

    def _digest_for(
        self,
        subscriber: DBSubscriber,
        articles: list[DBArticle],
        max_articles: int,
    ) -> list[tuple[str, str]]:
        """(title, url) pairs of recent articles in the subscriber's categories."""
        wanted = set(subscriber.subscription_preferences.categories)
        items: list[tuple[str, str]] = []
        for article in articles:
            if wanted and article.category not in wanted:
                continue
            block = resolve_content(article.contents_by_language, "en")
            if block is None or not block.seo.slug:
                continue
            locale = block.seo.hreflang or "en"
            items.append((
                block.main_title or block.seo.slug,
                article_url(block.seo.slug, locale, article.category or "", self.base_url),
            ))
            if len(items) >= max_articles:
                break
        return items

    def send(
        self,
        frequency: str = "weekly",
        category: str | None = None,
        days: int = 7,
        max_articles: int = 5,
    ) -> dict[str, int]:
        """
        Deliver the digest to every verified subscriber on a frequency.

        Returns:
            {"recipients", "sent", "failed"}; subscribers with no matching
            articles count as recipients but are not sent anything
        """
        frequency = validate_frequency(frequency)
        if category:
            category = validate_category(category)

        recipients = self.db.subscribers.get_newsletter_recipients(frequency, category)
        articles = self._recent_articles(days)
        if category:
            articles = [a for a in articles if a.category == category]

        sent = failed = 0
        for subscriber in recipients:
            digest = self._digest_for(subscriber, articles, max_articles)
            if not digest:
                continue
            try:
                self.mailer.deliver(
                    messages.newsletter_digest(subscriber.email, subscriber.unsubscribe_token, digest)
                )
                sent += 1
            except Exception:
                failed += 1
                logger.exception(f"Newsletter delivery failed for subscriber {subscriber.id}")

        logger.info(f"Newsletter ({frequency}): {len(recipients)} recipients, {sent} sent, {failed} failed")
        return {"recipients": len(recipients), "sent": sent, "failed": failed}
