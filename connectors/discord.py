"""
DiscordConnector — OAuth2 login via Discord.

Token exchange is a form-encoded POST; the profile is read from
``/users/@me`` with the bearer token.  Both calls honour the configured
timeout and are never retried.
"""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import urlencode

import httpx

from auth.errors import ExchangeError, InvalidCodeError, ProfileFetchError
from auth.schemas import ACCOUNT_DISCORD, ExternalIdentity
from config.settings import Settings
from connectors.base import BaseConnector

logger = logging.getLogger(__name__)

# Discord OAuth2 endpoints
_DISCORD_AUTH_URL = "https://discord.com/oauth2/authorize"
_DISCORD_API = "https://discord.com/api/v10"
_DISCORD_TOKEN_URL = f"{_DISCORD_API}/oauth2/token"
_DISCORD_ME_URL = f"{_DISCORD_API}/users/@me"


class DiscordConnector(BaseConnector):
    """OAuth2 connector for Discord login."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return ACCOUNT_DISCORD

    @property
    def display_name(self) -> str:
        return "Discord"

    @property
    def scopes(self) -> List[str]:
        return ["identify", "email"]

    def is_configured(self) -> bool:
        return self._settings.discord_configured and bool(self._settings.discord_redirect_uri)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._settings.oauth_timeout_seconds,
            transport=self._transport,
        )

    def get_auth_url(self, state: str) -> str:
        params = {
            "client_id": self._settings.discord_client_id,
            "redirect_uri": self._settings.discord_redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "state": state,
        }
        return f"{_DISCORD_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        """Exchange auth code for an access token."""
        if not code or not code.strip():
            raise InvalidCodeError()

        form = {
            "client_id": self._settings.discord_client_id,
            "client_secret": self._settings.discord_client_secret,
            "grant_type": "authorization_code",
            "code": code.strip(),
            "redirect_uri": self._settings.discord_redirect_uri,
        }
        try:
            async with self._client() as client:
                resp = await client.post(
                    _DISCORD_TOKEN_URL,
                    data=form,
                    headers={"Accept": "application/json"},
                )
                resp.raise_for_status()
                token_data = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Discord token exchange rejected: %s %s",
                exc.response.status_code,
                exc.response.text[:200],
            )
            raise ExchangeError() from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Discord token exchange failed: %s", exc)
            raise ExchangeError() from exc

        access_token = token_data.get("access_token") if isinstance(token_data, dict) else None
        if not access_token:
            logger.warning("Discord token response has no access_token: %s", token_data)
            raise ExchangeError()
        return access_token

    async def fetch_profile(self, access_token: str) -> ExternalIdentity:
        """Fetch ``/users/@me`` and map it to an ``ExternalIdentity``."""
        try:
            async with self._client() as client:
                resp = await client.get(
                    _DISCORD_ME_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                resp.raise_for_status()
                user = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("Discord profile request rejected: %s", exc.response.status_code)
            raise ProfileFetchError() from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Discord profile request failed: %s", exc)
            raise ProfileFetchError() from exc

        if not isinstance(user, dict) or not user.get("id"):
            raise ProfileFetchError("Discord profile has no user id")
        if not user.get("email"):
            raise ProfileFetchError("Discord account has no email address")

        return ExternalIdentity(
            provider=self.provider_name,
            provider_user_id=str(user["id"]),
            email=user["email"],
            username=user.get("username") or user.get("global_name") or "",
            avatar=user.get("avatar"),
            verified=bool(user.get("verified", False)),
        )
