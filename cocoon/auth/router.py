"""Auth domain router.

Thin HTTP handlers for registration, email verification, login, token
refresh and OAuth sign-in. Business rules live in AuthService.
"""

import logging
import secrets
from urllib.parse import urlencode

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import RedirectResponse

from cocoon.auth.dependencies import AuthServiceDep, CurrentUserDep, OAuthClientDep
from cocoon.auth.exceptions import VerificationTokenExpiredError
from cocoon.auth.schemas import (
    AuthRegister,
    EmailCheck,
    LoginRequest,
    LoginResponse,
    MeResponse,
    RefreshTokenRequest,
    ResendVerificationRequest,
    TokenResponse,
)
from cocoon.auth.tokens import TokenPair
from cocoon.core.constants import CommonResponses, Routes
from cocoon.core.deps import SettingsDep
from cocoon.core.exceptions import AppException, BadRequestError
from cocoon.core.responses import Envelope, MessageEnvelope, message, ok
from cocoon.user.models import OAuthProvider
from cocoon.user.schemas import UserRead

logger = logging.getLogger(__name__)

OAUTH_STATE_COOKIE = "oauth_state"

router = APIRouter(
    prefix=Routes.AUTH.prefix,
    tags=[Routes.AUTH.tag],
    responses={**CommonResponses.BAD_REQUEST},
)


def _token_response(pair: TokenPair) -> TokenResponse:
    return TokenResponse(
        token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_in=pair.expires_in,
    )


@router.post(
    "/register",
    response_model=MessageEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.CONFLICT},
)
async def register(payload: AuthRegister, auth: AuthServiceDep):
    """Register a local account in pending_verification state."""
    auth.register(
        email=payload.email, password=payload.password, name=payload.user_name
    )
    return message("User registered. Please check your email to verify your account.")


@router.get(
    "/verify-email",
    response_class=RedirectResponse,
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    responses={**CommonResponses.NOT_FOUND},
)
async def verify_email(
    settings: SettingsDep,
    auth: AuthServiceDep,
    token: str = Query(min_length=1),
):
    """Confirm an email address from the link in the verification email.

    Redirects to the storefront login page on success. An expired link
    redirects to the storefront error page offering a new link; other
    failures answer with the error envelope.
    """
    client_url = settings.client_url.rstrip("/")
    try:
        auth.verify_email(token)
    except VerificationTokenExpiredError as e:
        query = urlencode({"message": e.message, "action": "resend"})
        return RedirectResponse(f"{client_url}/error?{query}")
    return RedirectResponse(f"{client_url}/login")


@router.post("/resend-verification", response_model=MessageEnvelope)
async def resend_verification(payload: ResendVerificationRequest, auth: AuthServiceDep):
    """Send a new verification link.

    Answers the same whether or not the email exists.
    """
    auth.resend_verification(payload.email)
    return message(
        "If an unverified account with that email exists, a new link has been sent"
    )


@router.get("/check-email", response_model=Envelope[EmailCheck])
async def check_email(auth: AuthServiceDep, email: str = Query(default="")):
    """Report whether an email is already registered."""
    email = email.strip()
    if not email:
        raise BadRequestError("Email is required")

    if auth.check_email(email):
        return ok(EmailCheck(exists=True, message="Email is already registered"))
    return ok(EmailCheck(exists=False, message="Email is available"))


@router.post(
    "/login",
    response_model=Envelope[LoginResponse],
    responses={**CommonResponses.UNAUTHORIZED},
)
async def login(payload: LoginRequest, auth: AuthServiceDep):
    """Login with email/password; returns an access token and a refresh token.

    A new login invalidates the refresh token of any previous session.
    """
    result = auth.login(payload.email, payload.password)
    tokens = result.tokens
    return ok(
        LoginResponse(
            token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=tokens.expires_in,
            user=UserRead.from_user(result.user),
        )
    )


@router.post(
    "/refresh-token",
    response_model=Envelope[TokenResponse],
    responses={**CommonResponses.UNAUTHORIZED},
)
async def refresh_token(payload: RefreshTokenRequest, auth: AuthServiceDep):
    """Exchange the current refresh token for a new token pair."""
    return ok(_token_response(auth.refresh(payload.refresh_token)))


@router.post(
    "/logout",
    response_model=MessageEnvelope,
    responses={**CommonResponses.UNAUTHORIZED},
)
async def logout(user: CurrentUserDep, auth: AuthServiceDep):
    """Revoke the stored refresh token of the current user."""
    auth.logout(user)
    return message("Logout successful")


@router.get(
    "/me",
    response_model=Envelope[MeResponse],
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.NOT_FOUND},
)
async def get_me(user: CurrentUserDep, settings: SettingsDep):
    """Get current authenticated user."""
    return ok(
        MeResponse(
            user=UserRead.from_user(user),
            expires_in=int(settings.access_token_expires_in.total_seconds()),
            refresh_token=user.refresh_token,
        )
    )


@router.get("/{provider}", response_class=RedirectResponse)
async def oauth_start(
    provider: OAuthProvider,
    oauth: OAuthClientDep,
    settings: SettingsDep,
):
    """Redirect to the provider's consent screen."""
    state = secrets.token_urlsafe(24)
    response = RedirectResponse(oauth.authorization_url(provider, state))
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        max_age=600,
        httponly=True,
        secure=settings.env_name.lower() not in {"dev", "development", "local", "test"},
        samesite="lax",
    )
    return response


@router.get("/{provider}/callback", response_class=RedirectResponse)
async def oauth_callback(
    provider: OAuthProvider,
    request: Request,
    oauth: OAuthClientDep,
    auth: AuthServiceDep,
    settings: SettingsDep,
    code: str | None = None,
    state: str | None = None,
):
    """Complete provider sign-in and hand the access token to the storefront."""
    client_url = settings.client_url.rstrip("/")
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)

    if not code or not state or not expected_state or not secrets.compare_digest(
        state, expected_state
    ):
        logger.info(
            "OAuth callback rejected for %s: missing code or state", provider.value
        )
        response = RedirectResponse(f"{client_url}/login?error=oauth_failed")
    else:
        try:
            profile = await oauth.authenticate(provider, code)
            result = auth.oauth_login(profile)
        except AppException as e:
            logger.info(
                "OAuth sign-in via %s failed: %s - %s",
                provider.value,
                e.error_type,
                e.message,
            )
            response = RedirectResponse(f"{client_url}/login?error=oauth_failed")
        else:
            query = urlencode({"token": result.tokens.access_token})
            response = RedirectResponse(f"{client_url}/?{query}")

    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response
