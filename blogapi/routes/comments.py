"""
Comment routes: list, create, edit, delete, like and report.
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends

from ..auth import get_current_user, get_optional_user, is_admin_request
from ..database import DBUser
from ..schemas import CommentCreateRequest, CommentReportRequest, CommentUpdateRequest, ok
from ..services import EngagementServiceDep

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/by-article/{article_id}")
async def list_comments(
    article_id: str,
    service: EngagementServiceDep,
    user: Annotated[DBUser | None, Depends(get_optional_user)],
    is_admin: Annotated[bool, Depends(is_admin_request)],
):
    """Comments of an article, newest first."""
    return ok(service.list_comments(article_id, user, is_admin))


@router.post("", status_code=201)
async def create_comment(
    body: CommentCreateRequest,
    service: EngagementServiceDep,
    user: Annotated[DBUser, Depends(get_current_user)],
):
    comment = service.add_comment(body.article_id, user, body.comment)
    return ok(comment, "Comment created successfully")


@router.patch("/{comment_id}")
async def edit_comment(
    comment_id: str,
    body: CommentUpdateRequest,
    service: EngagementServiceDep,
    user: Annotated[DBUser, Depends(get_current_user)],
):
    return ok(service.edit_comment(comment_id, user, body.comment), "Comment updated successfully")


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: str,
    service: EngagementServiceDep,
    user: Annotated[DBUser, Depends(get_current_user)],
):
    service.delete_comment(comment_id, user, is_admin=user.is_admin)
    return ok(message="Comment deleted successfully")


@router.post("/{comment_id}/likes")
async def toggle_comment_like(
    comment_id: str,
    service: EngagementServiceDep,
    user: Annotated[DBUser, Depends(get_current_user)],
):
    return ok(service.toggle_comment_like(comment_id, user))


@router.post("/{comment_id}/reports", status_code=201)
async def report_comment(
    comment_id: str,
    body: CommentReportRequest,
    background_tasks: BackgroundTasks,
    service: EngagementServiceDep,
    user: Annotated[DBUser, Depends(get_current_user)],
):
    """Report a comment; its author is notified in the background."""
    service.report_comment(comment_id, user, body.reason, background_tasks)
    return ok(message="Comment reported successfully")
