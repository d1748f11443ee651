"""
Newsletter subscriber routes and the newsletter send endpoint.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from ..auth import get_optional_user, is_admin_request, require_admin
from ..database import DBUser
from ..localization import get_request_locale
from ..rate_limit import EMAIL_RATE_LIMIT, limiter
from ..schemas import (
    ConfirmSubscriptionRequest,
    NewsletterSendRequest,
    NewsletterSendResponse,
    SubscribeRequest,
    SubscriberResponse,
    SubscriptionPreferencesRequest,
    UnsubscribeRequest,
    ok,
)
from ..services import NewsletterServiceDep, SubscriberServiceDep

router = APIRouter(prefix="/subscribers", tags=["subscribers"])
newsletter_router = APIRouter(prefix="/newsletter", tags=["newsletter"])


@router.get("")
async def list_subscribers(
    service: SubscriberServiceDep,
    _admin: Annotated[DBUser | None, Depends(require_admin)],
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=100),
):
    """Verified subscribers (tokens hidden)."""
    result = service.list_verified(page, limit)
    result["subscribers"] = [SubscriberResponse.from_db(s) for s in result["subscribers"]]
    return ok(result)


@router.post("")
@limiter.limit(EMAIL_RATE_LIMIT)
async def subscribe(request: Request, body: SubscribeRequest, service: SubscriberServiceDep):
    """Subscribe, or re-subscribe an existing email (201 for new, 200 otherwise)."""
    locale = body.locale or get_request_locale(request)
    subscriber, created = service.subscribe(body.email, body.categories, body.frequency, locale)
    message = (
        "Subscription created. Check your email to confirm it."
        if created
        else "Subscription renewed. Check your email to confirm it."
    )
    return JSONResponse(
        status_code=201 if created else 200,
        content=ok(SubscriberResponse.from_db(subscriber).model_dump(mode="json"), message),
    )


@router.delete("")
async def unsubscribe(body: UnsubscribeRequest, service: SubscriberServiceDep):
    service.unsubscribe(body.email, body.token)
    return ok(message="You have been unsubscribed")


@router.post("/confirm")
async def confirm_subscription(body: ConfirmSubscriptionRequest, service: SubscriberServiceDep):
    subscriber = service.confirm(body.email, body.token)
    return ok(SubscriberResponse.from_db(subscriber), "Subscription confirmed")


@router.get("/{subscriber_id}")
async def get_subscriber(
    subscriber_id: str,
    service: SubscriberServiceDep,
    user: Annotated[DBUser | None, Depends(get_optional_user)],
    is_admin: Annotated[bool, Depends(is_admin_request)],
):
    return ok(SubscriberResponse.from_db(service.get_subscriber(subscriber_id, user, is_admin)))


@router.patch("/{subscriber_id}")
async def update_subscriber_preferences(
    subscriber_id: str,
    body: SubscriptionPreferencesRequest,
    service: SubscriberServiceDep,
    user: Annotated[DBUser | None, Depends(get_optional_user)],
    is_admin: Annotated[bool, Depends(is_admin_request)],
):
    subscriber = service.update_preferences(
        subscriber_id, user, is_admin, categories=body.categories, frequency=body.frequency
    )
    return ok(SubscriberResponse.from_db(subscriber), "Preferences updated")


@router.delete("/{subscriber_id}")
async def delete_subscriber(
    subscriber_id: str,
    service: SubscriberServiceDep,
    _admin: Annotated[DBUser | None, Depends(require_admin)],
):
    service.delete_subscriber(subscriber_id)
    return ok(message="Subscriber deleted")


@newsletter_router.post("/send")
async def send_newsletter(
    service: NewsletterServiceDep,
    _admin: Annotated[DBUser | None, Depends(require_admin)],
    body: NewsletterSendRequest | None = None,
):
    """Send one digest batch; called by an external scheduler with the internal key."""
    body = body or NewsletterSendRequest()
    result = service.send(body.frequency, body.category, body.days, body.max_articles)
    return ok(NewsletterSendResponse(**result))
