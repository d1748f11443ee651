"""
User routes: profiles, password changes and liked articles.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from ..auth import get_current_user, get_optional_user, is_admin_request, require_admin
from ..database import DBUser
from ..exceptions import PermissionDeniedError
from ..localization import get_request_locale
from ..schemas import PasswordChangeRequest, UserResponse, UserUpdateRequest, ok
from ..services import ArticleQuery, ArticleServiceDep, UserServiceDep

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def list_users(
    service: UserServiceDep,
    _admin: Annotated[DBUser | None, Depends(require_admin)],
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=100),
):
    result = service.list_users(page, limit)
    result["users"] = [UserResponse.from_db(u) for u in result["users"]]
    return ok(result)


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    service: UserServiceDep,
    user: Annotated[DBUser | None, Depends(get_optional_user)],
    is_admin: Annotated[bool, Depends(is_admin_request)],
):
    return ok(UserResponse.from_db(service.get_user(user_id, user, is_admin)))


@router.patch("/{user_id}")
async def update_user(
    user_id: str,
    body: UserUpdateRequest,
    service: UserServiceDep,
    user: Annotated[DBUser | None, Depends(get_optional_user)],
    is_admin: Annotated[bool, Depends(is_admin_request)],
):
    updated = service.update_user(user_id, body, user, is_admin)
    return ok(UserResponse.from_db(updated), "Profile updated")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    service: UserServiceDep,
    user: Annotated[DBUser | None, Depends(get_optional_user)],
    is_admin: Annotated[bool, Depends(is_admin_request)],
):
    service.delete_user(user_id, user, is_admin)
    return ok(message="Account deleted")


@router.patch("/{user_id}/password")
async def change_password(
    user_id: str,
    body: PasswordChangeRequest,
    service: UserServiceDep,
    user: Annotated[DBUser, Depends(get_current_user)],
):
    service.change_password(user_id, user, body.current_password, body.new_password)
    return ok(message="Password changed")


@router.get("/{user_id}/liked-articles")
async def liked_articles(
    user_id: str,
    request: Request,
    articles: ArticleServiceDep,
    user: Annotated[DBUser, Depends(get_current_user)],
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    locale: str | None = None,
    skip_count: bool = False,
):
    """Articles the user liked; visible to that user and admins."""
    if user.id != user_id and not user.is_admin:
        raise PermissionDeniedError("You can only view your own liked articles")
    q = ArticleQuery(
        page=page,
        limit=limit,
        locale=get_request_locale(request, locale),
        fields="featured",
        skip_count=skip_count,
    )
    return ok(articles.liked_articles(user_id, q).to_dict())
