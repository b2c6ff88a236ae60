"""
BaseConnector — abstract interface for OAuth2 identity providers.

A provider turns an authorization code into an access token and the
access token into an ``ExternalIdentity``.  Discord is the only one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from auth.schemas import ExternalIdentity


class BaseConnector(ABC):
    """Abstract base for OAuth2 login providers."""

    # ── Identity ────────────────────────────────────────────────────────
    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique slug, e.g. 'discord'."""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        ...

    @property
    @abstractmethod
    def scopes(self) -> List[str]:
        """OAuth scopes required by this connector."""
        ...

    # ── OAuth flow ──────────────────────────────────────────────────────

    @abstractmethod
    def get_auth_url(self, state: str) -> str:
        """
        Build the provider's OAuth2 authorization URL.

        Parameters
        ----------
        state : str
            Opaque CSRF state string echoed back on the redirect.

        Returns
        -------
        The full URL to redirect the user to.
        """
        ...

    @abstractmethod
    async def exchange_code(self, code: str) -> str:
        """
        Exchange the authorization code for an access token.

        Raises ``InvalidCodeError`` for an empty code (before any network
        call) and ``ExchangeError`` for provider or transport failures.
        """
        ...

    @abstractmethod
    async def fetch_profile(self, access_token: str) -> ExternalIdentity:
        """
        Fetch the provider profile for *access_token*.

        Raises ``ProfileFetchError`` on any failure.
        """
        ...

    # ── Helpers ─────────────────────────────────────────────────────────

    def is_configured(self) -> bool:
        """
        Return True if this connector has all required config
        (client id, client secret, redirect uri).
        """
        return True
