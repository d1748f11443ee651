"""
Pytest fixtures for backend tests.
"""

import httpx
import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from blogapi.auth import create_session_token, hash_password
from blogapi.config import config, state
from blogapi.database import Database, DBUser
from blogapi.geolocation import GeoLocator
from blogapi.localization import URL_PATTERNS
from blogapi.mailer import EmailMessage, Mailer
from blogapi.rate_limit import limiter
from blogapi.server import app

INTERNAL_KEY = "internal-test-key"
DEFAULT_PASSWORD = "Secret1!"


class RecordingMailer(Mailer):
    """Mailer that keeps every message in memory."""

    def __init__(self):
        self.sent: list[EmailMessage] = []

    def send(self, to: str, subject: str, body: str) -> None:
        self.sent.append(EmailMessage(to, subject, body))

    def to(self, address: str) -> list[EmailMessage]:
        return [m for m in self.sent if m.to == address]


class FailingMailer(Mailer):
    """Mailer whose transport is always down."""

    def send(self, to: str, subject: str, body: str) -> None:
        raise ConnectionError("SMTP relay unavailable")


@pytest.fixture(autouse=True)
def test_config(monkeypatch):
    """Deterministic settings; rate limiting off."""
    monkeypatch.setattr(config, "SESSION_SECRET", "test-session-secret")
    monkeypatch.setattr(config, "INTERNAL_API_KEY", INTERNAL_KEY)
    monkeypatch.setattr(config, "BASE_URL", "https://blog.example")
    monkeypatch.setattr(config, "SESSION_COOKIE_SECURE", False)
    monkeypatch.setattr(config, "BCRYPT_ROUNDS", 4)
    monkeypatch.setattr(limiter, "enabled", False)
    return config


@pytest.fixture
def test_db():
    """Create a fresh in-memory MongoDB database."""
    return Database(client=mongomock.MongoClient(), database_name="blog_test")


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def geo_transport():
    """Geolocation provider stub: the primary provider answers PT."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"country_code": "pt"})
    return httpx.MockTransport(handler)


@pytest.fixture
def client(test_db, mailer, geo_transport):
    """Create a test client with isolated database, mailer and geolocator."""
    # Store original state
    original_db = state.db
    original_mailer = state.mailer
    original_geolocator = state.geolocator

    # Set up test state with fresh instances
    state.db = test_db
    state.mailer = mailer
    state.geolocator = GeoLocator(transport=geo_transport)

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    # Restore original state
    state.db = original_db
    state.mailer = original_mailer
    state.geolocator = original_geolocator


# ─────────────────────────────────────────────────────────────
# Data factories
# ─────────────────────────────────────────────────────────────

@pytest.fixture
def make_user(test_db):
    """Insert a verified, active user and return it."""
    counter = {"n": 0}

    def _make(
        username: str | None = None,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        role: str = "user",
        is_active: bool = True,
        language: str = "en",
    ) -> DBUser:
        counter["n"] += 1
        username = username or f"reader{counter['n']:03d}"
        user_id = test_db.users.add({
            "username": username,
            "email": email or f"{username}@example.com",
            "password": hash_password(password),
            "role": role,
            "preferences": {"language": language, "region": "US", "content_language": language},
            "category_interests": [],
            "email_verified": True,
            "is_active": is_active,
        })
        return test_db.users.get_by_id(user_id)

    return _make


@pytest.fixture
def make_article(test_db):
    """
    Insert an article. ``blocks`` is a list of (hreflang, slug, title).
    """
    def _make(
        blocks: list[tuple[str, str, str]] | None = None,
        category: str = "health",
        status: str = "published",
        created_by: DBUser | None = None,
        views: int = 0,
    ) -> str:
        blocks = blocks or [("en", "sample-article", "Sample Article")]
        document = {
            "contents_by_language": [
                {
                    "main_title": title,
                    "article_contents": [
                        {"sub_title": "Intro", "article_paragraphs": [f"{title} body."]}
                    ],
                    "seo": {
                        "meta_title": title,
                        "meta_description": f"About {title}",
                        "keywords": [],
                        "slug": slug,
                        "hreflang": locale,
                        "url_pattern": URL_PATTERNS[locale],
                        "canonical_url": f"https://blog.example/{locale}/{category}/{slug}",
                        "type": "article",
                    },
                }
                for locale, slug, title in blocks
            ],
            "category": category,
            "article_images": [],
            "status": status,
            "views": views,
            "created_by": ObjectId(created_by.id) if created_by else None,
        }
        return test_db.articles.add(document)

    return _make


@pytest.fixture
def auth_headers():
    """Build a Bearer session header for a user."""
    def _headers(user: DBUser) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_session_token(user.id)}"}
    return _headers


@pytest.fixture
def admin_key_headers():
    """Headers authenticating as the internal (admin) caller."""
    return {"X-API-Key": INTERNAL_KEY}


@pytest.fixture
def failing_mailer(client):
    """Swap in a mailer whose every send fails."""
    state.mailer = FailingMailer()
    return state.mailer
