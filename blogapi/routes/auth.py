"""
Auth routes: registration, email confirmation, password reset and sessions.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from ..auth import clear_session_cookie, get_current_user, set_session_cookie
from ..database import DBUser
from ..localization import get_request_locale
from ..rate_limit import EMAIL_RATE_LIMIT, limiter
from ..schemas import (
    EmailRequest,
    PasswordResetConfirmRequest,
    RegisterRequest,
    SessionResponse,
    SignInRequest,
    TokenRequest,
    UserResponse,
    ok,
)
from ..services import UserServiceDep

router = APIRouter(prefix="/auth", tags=["auth"])

PASSWORD_RESET_MESSAGE = "If an account exists for this email, a reset link has been sent"


@router.post("/register", status_code=201)
@limiter.limit(EMAIL_RATE_LIMIT)
async def register(request: Request, body: RegisterRequest, service: UserServiceDep):
    user = service.register(body, get_request_locale(request))
    return ok(UserResponse.from_db(user), "Account created. Check your email to confirm it.")


@router.post("/confirm-email")
async def confirm_email(body: TokenRequest, service: UserServiceDep):
    user = service.confirm_email(body.token)
    return ok(UserResponse.from_db(user), "Email confirmed")


@router.post("/request-email-confirmation")
@limiter.limit(EMAIL_RATE_LIMIT)
async def request_email_confirmation(request: Request, body: EmailRequest, service: UserServiceDep):
    service.request_email_confirmation(body.email)
    return ok(message="If the account exists, a confirmation link has been sent")


@router.post("/request-password-reset")
@limiter.limit(EMAIL_RATE_LIMIT)
async def request_password_reset(request: Request, body: EmailRequest, service: UserServiceDep):
    service.request_password_reset(body.email)
    return ok(message=PASSWORD_RESET_MESSAGE)


@router.post("/reset-password/confirm")
async def reset_password(body: PasswordResetConfirmRequest, service: UserServiceDep):
    service.reset_password(body.token, body.password)
    return ok(message="Password has been reset")


@router.post("/signin")
async def sign_in(body: SignInRequest, response: Response, service: UserServiceDep):
    """Check credentials, set the session cookie and return the token."""
    user, token = service.sign_in(body.email, body.password)
    set_session_cookie(response, token)
    return ok(SessionResponse(token=token, user=UserResponse.from_db(user)), "Signed in")


@router.post("/signout")
async def sign_out(response: Response):
    clear_session_cookie(response)
    return ok(message="Signed out")


@router.get("/me")
async def me(user: Annotated[DBUser, Depends(get_current_user)]):
    return ok(UserResponse.from_db(user))
