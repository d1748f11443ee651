"""
Article routes: listings, detail by slug or id, admin CRUD, likes and views.
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request

from ..auth import get_current_user, get_optional_user, is_admin_request, require_admin
from ..database import DBUser
from ..exceptions import PermissionDeniedError
from ..localization import get_request_locale
from ..schemas import ArticleCreateRequest, ArticleUpdateRequest, ok
from ..services import ArticleQuery, ArticleServiceDep, parse_exclude_ids

router = APIRouter(prefix="/articles", tags=["articles"])


def article_query(
    request: Request,
    is_admin: Annotated[bool, Depends(is_admin_request)],
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort: Literal["created_at", "updated_at", "views"] = "created_at",
    order: Literal["asc", "desc"] = "desc",
    locale: str | None = None,
    category: str | None = None,
    slug: str | None = None,
    query: str | None = None,
    exclude_ids: str | None = None,
    fields: Literal["featured", "dashboard", "full"] = "full",
    skip_count: bool = False,
    include_archived: bool = False,
) -> ArticleQuery:
    """Build an ArticleQuery from the query string."""
    if include_archived and not is_admin:
        raise PermissionDeniedError("Only admins can list archived articles")
    return ArticleQuery(
        page=page,
        limit=limit,
        sort=sort,
        order=order,
        locale=get_request_locale(request, locale),
        category=category,
        slug=slug,
        query=query,
        exclude_ids=parse_exclude_ids(exclude_ids),
        fields=fields,
        skip_count=skip_count,
        include_archived=include_archived,
    )


def _user_id(user: DBUser | None) -> str | None:
    return user.id if user else None


# ─────────────────────────────────────────────────────────────
# Listings (static paths first)
# ─────────────────────────────────────────────────────────────

@router.get("")
async def list_articles(
    service: ArticleServiceDep,
    q: Annotated[ArticleQuery, Depends(article_query)],
    user: Annotated[DBUser | None, Depends(get_optional_user)],
):
    """Filtered, paginated listing; each article is served in one language."""
    return ok(service.list_articles(q, _user_id(user)).to_dict())


@router.get("/paginated")
async def search_articles(
    service: ArticleServiceDep,
    q: Annotated[ArticleQuery, Depends(article_query)],
    user: Annotated[DBUser | None, Depends(get_optional_user)],
):
    """Paginated search; requires `query` or `category`."""
    return ok(service.search_articles(q, _user_id(user)).to_dict())


@router.get("/counts")
async def article_counts(
    service: ArticleServiceDep,
    locale: Annotated[str, Depends(get_request_locale)],
):
    """Published article count per category."""
    return ok(service.counts_by_category(locale))


@router.get("/stats")
async def article_stats(
    service: ArticleServiceDep,
    _admin: Annotated[DBUser | None, Depends(require_admin)],
):
    return ok(service.statistics())


@router.get("/dashboard")
async def dashboard_articles(
    service: ArticleServiceDep,
    q: Annotated[ArticleQuery, Depends(article_query)],
    _admin: Annotated[DBUser | None, Depends(require_admin)],
):
    return ok(service.dashboard(q).to_dict())


@router.get("/category/{category}")
async def articles_by_category(
    category: str,
    service: ArticleServiceDep,
    locale: Annotated[str, Depends(get_request_locale)],
    user: Annotated[DBUser | None, Depends(get_optional_user)],
    limit: int = Query(default=10, ge=1, le=100),
    exclude_ids: str | None = None,
):
    """Category listing without pagination, for carousels."""
    articles = service.list_by_category(
        category,
        locale,
        limit=limit,
        exclude_ids=parse_exclude_ids(exclude_ids),
        user_id=_user_id(user),
    )
    return ok(articles)


@router.get("/by-slug/{slug}")
async def get_article_by_slug(
    slug: str,
    service: ArticleServiceDep,
    locale: Annotated[str, Depends(get_request_locale)],
    user: Annotated[DBUser | None, Depends(get_optional_user)],
):
    return ok(service.get_by_slug(slug, locale, _user_id(user)))


# ─────────────────────────────────────────────────────────────
# Single article by id
# ─────────────────────────────────────────────────────────────

@router.post("", status_code=201)
async def create_article(
    body: ArticleCreateRequest,
    service: ArticleServiceDep,
    admin: Annotated[DBUser | None, Depends(require_admin)],
):
    return ok(service.create_article(body, admin), "Article created successfully")


@router.get("/by-id/{article_id}")
async def get_article_by_id(
    article_id: str,
    service: ArticleServiceDep,
    user: Annotated[DBUser | None, Depends(get_optional_user)],
    is_admin: Annotated[bool, Depends(is_admin_request)],
    locale: str | None = None,
):
    """Article by id; pass `locale` to get a single resolved language block."""
    return ok(service.get_by_id(article_id, locale, _user_id(user), is_admin))


@router.patch("/by-id/{article_id}")
async def update_article(
    article_id: str,
    body: ArticleUpdateRequest,
    service: ArticleServiceDep,
    _admin: Annotated[DBUser | None, Depends(require_admin)],
):
    return ok(service.update_article(article_id, body), "Article updated successfully")


@router.delete("/by-id/{article_id}")
async def delete_article(
    article_id: str,
    service: ArticleServiceDep,
    _admin: Annotated[DBUser | None, Depends(require_admin)],
    hard: bool = False,
):
    """Archive an article; `hard=true` deletes it permanently."""
    if hard:
        service.delete_article(article_id)
        return ok(message="Article deleted permanently")
    return ok(service.archive_article(article_id), "Article archived")


@router.post("/by-id/{article_id}/restore")
async def restore_article(
    article_id: str,
    service: ArticleServiceDep,
    _admin: Annotated[DBUser | None, Depends(require_admin)],
):
    return ok(service.restore_article(article_id), "Article restored")


@router.post("/by-id/{article_id}/likes")
async def toggle_article_like(
    article_id: str,
    service: ArticleServiceDep,
    user: Annotated[DBUser, Depends(get_current_user)],
):
    return ok(service.toggle_like(article_id, user.id))


@router.post("/by-id/{article_id}/views")
async def increment_article_views(article_id: str, service: ArticleServiceDep):
    return ok({"views": service.increment_views(article_id)})
