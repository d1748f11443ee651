"""
API route modules.
"""

from .articles import router as articles_router
from .auth import router as auth_router
from .comments import router as comments_router
from .misc import router as misc_router
from .subscribers import newsletter_router, router as subscribers_router
from .users import router as users_router

__all__ = [
    "articles_router",
    "auth_router",
    "comments_router",
    "misc_router",
    "newsletter_router",
    "subscribers_router",
    "users_router",
]
