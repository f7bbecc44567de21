"""OAuth2 authorization-code flow for Google and Facebook.

The provider proves the user's identity; this module only builds the
authorization redirect, exchanges the callback code for a provider access
token and reads the profile. Account creation and token issuance happen in
AuthService.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, TypedDict
from urllib.parse import urlencode

import httpx

from cocoon.auth.exceptions import UnsupportedProviderError
from cocoon.core.exceptions import ProviderError
from cocoon.core.http import get_oauth_client
from cocoon.core.settings import Settings, get_settings
from cocoon.user.models import OAuthProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderEndpoints:
    authorize_url: str
    token_url: str
    profile_url: str
    scope: tuple[str, ...]
    scope_separator: str = " "


PROVIDER_ENDPOINTS: dict[OAuthProvider, ProviderEndpoints] = {
    OAuthProvider.google: ProviderEndpoints(
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
        profile_url="https://openidconnect.googleapis.com/v1/userinfo",
        scope=("openid", "profile", "email"),
    ),
    OAuthProvider.facebook: ProviderEndpoints(
        authorize_url="https://www.facebook.com/v19.0/dialog/oauth",
        token_url="https://graph.facebook.com/v19.0/oauth/access_token",
        profile_url="https://graph.facebook.com/me",
        scope=("email",),
        scope_separator=",",
    ),
}


class TokenResponse(TypedDict, total=False):
    access_token: str
    token_type: str
    expires_in: int
    id_token: str


class GoogleUserInfo(TypedDict, total=False):
    sub: str
    email: str
    email_verified: bool
    name: str


class FacebookUser(TypedDict, total=False):
    id: str
    email: str
    name: str


@dataclass(frozen=True)
class OAuthProfile:
    """Identity asserted by a provider."""

    provider: OAuthProvider
    subject: str
    email: str
    name: str
    email_verified: bool


class OAuthClient:
    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[[], httpx.AsyncClient] = get_oauth_client,
    ):
        self._settings = settings
        self._client_factory = client_factory

    def _credentials(self, provider: OAuthProvider) -> tuple[str, str]:
        if provider == OAuthProvider.google:
            pair = (
                self._settings.google_client_id,
                self._settings.google_client_secret,
            )
        else:
            pair = (
                self._settings.facebook_client_id,
                self._settings.facebook_client_secret,
            )
        client_id, client_secret = pair
        if not client_id or not client_secret:
            raise UnsupportedProviderError(f"{provider.value} login is not configured")
        return client_id, client_secret

    def authorization_url(self, provider: OAuthProvider, state: str) -> str:
        endpoints = PROVIDER_ENDPOINTS[provider]
        client_id, _ = self._credentials(provider)
        params = {
            "client_id": client_id,
            "redirect_uri": self._settings.oauth_callback_url(provider.value),
            "response_type": "code",
            "scope": endpoints.scope_separator.join(endpoints.scope),
            "state": state,
        }
        return f"{endpoints.authorize_url}?{urlencode(params)}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        client = self._client_factory()
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise ProviderError("Identity provider unavailable") from e

        if response.status_code != 200:
            logger.info(
                "OAuth provider error: url=%s status=%s", url, response.status_code
            )
            raise ProviderError("Identity provider rejected the request")

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError() from e

    async def exchange_code(self, provider: OAuthProvider, code: str) -> str:
        """Exchange an authorization code for a provider access token."""
        endpoints = PROVIDER_ENDPOINTS[provider]
        client_id, client_secret = self._credentials(provider)
        params = {
            "code": code,
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": self._settings.oauth_callback_url(provider.value),
        }
        if provider == OAuthProvider.google:
            data: TokenResponse = await self._request(
                "POST",
                endpoints.token_url,
                data={**params, "grant_type": "authorization_code"},
            )
        else:
            data = await self._request("GET", endpoints.token_url, params=params)

        access_token = data.get("access_token")
        if not access_token:
            raise ProviderError("Identity provider did not return an access token")
        return access_token

    async def fetch_profile(
        self, provider: OAuthProvider, access_token: str
    ) -> OAuthProfile:
        endpoints = PROVIDER_ENDPOINTS[provider]
        if provider == OAuthProvider.google:
            info: GoogleUserInfo = await self._request(
                "GET",
                endpoints.profile_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            subject = info.get("sub")
            email_verified = bool(info.get("email_verified", False))
        else:
            info: FacebookUser = await self._request(  # type: ignore[no-redef]
                "GET",
                endpoints.profile_url,
                params={"fields": "id,name,email", "access_token": access_token},
            )
            subject = info.get("id")
            # Graph API only returns confirmed addresses.
            email_verified = True

        email = info.get("email")
        if not subject or not email:
            raise ProviderError("Identity provider did not return an email address")

        return OAuthProfile(
            provider=provider,
            subject=str(subject),
            email=email,
            name=info.get("name", ""),
            email_verified=email_verified,
        )

    async def authenticate(self, provider: OAuthProvider, code: str) -> OAuthProfile:
        access_token = await self.exchange_code(provider, code)
        return await self.fetch_profile(provider, access_token)


@lru_cache
def get_oauth_service() -> OAuthClient:
    return OAuthClient(get_settings())
