"""
Google OAuth 2.0 authorisation-code client.

Only the three calls the sign-in flow needs: build the consent URL, swap
the code for an access token and read the verified email from userinfo.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import httpx

from dyc_api import config

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = "openid email profile"


class OAuthError(Exception):
    """The provider rejected the exchange or returned an unusable profile."""


@dataclass
class OAuthProfile:
    provider: str
    provider_id: str
    email: str
    name: Optional[str] = None


class GoogleOAuthClient:
    provider = "google"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._transport = transport
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": SCOPES,
            "state": state,
            "access_type": "online",
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"

    def fetch_profile(self, code: str) -> OAuthProfile:
        with httpx.Client(transport=self._transport, timeout=self._timeout) as client:
            access_token = self._exchange_code(client, code)
            return self._userinfo(client, access_token)

    def _exchange_code(self, client: httpx.Client, code: str) -> str:
        try:
            response = client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "authorization_code",
                },
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise OAuthError(f"token exchange failed: {e}") from e

        access_token = response.json().get("access_token")
        if not access_token:
            raise OAuthError("token response without access_token")
        return access_token

    def _userinfo(self, client: httpx.Client, access_token: str) -> OAuthProfile:
        try:
            response = client.get(GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise OAuthError(f"userinfo request failed: {e}") from e

        info = response.json()
        email = info.get("email")
        if not email:
            raise OAuthError("Email no disponible en el perfil de Google")
        if info.get("email_verified") is False:
            raise OAuthError(f"Google email {email} is not verified")
        return OAuthProfile(
            provider=self.provider,
            provider_id=str(info.get("sub", "")),
            email=email.lower(),
            name=info.get("name"),
        )


def get_oauth_client() -> GoogleOAuthClient:
    """FastAPI dependency; tests replace it with a client on a mock transport."""
    return GoogleOAuthClient(
        client_id=config.GOOGLE_CLIENT_ID,
        client_secret=config.GOOGLE_CLIENT_SECRET,
        redirect_uri=f"{config.API_URL}{config.GOOGLE_CALLBACK_PATH}",
    )
