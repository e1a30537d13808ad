"""
Credential header providers used by the HTTP client login step.

Supports OAuth 2.0 client-credentials, basic auth and API-key auth.
Each adapter client picks the strategy its vendor expects; this module
caches the resulting token until it expires.
"""

from __future__ import annotations

import abc
import base64
import time
from dataclasses import dataclass

import httpx


@dataclass
class TokenInfo:
    """Cached token with expiry tracking."""

    access_token: str
    token_type: str = "Bearer"
    expires_at: float = 0.0  # epoch seconds; 0 → never expires

    @property
    def is_expired(self) -> bool:
        if self.expires_at == 0.0:
            return False
        return time.time() >= (self.expires_at - 30)  # 30-second buffer


class AuthProvider(abc.ABC):
    """Base class for all auth strategies."""

    def __init__(self) -> None:
        self._cached: TokenInfo | None = None

    @abc.abstractmethod
    async def acquire_token(self) -> TokenInfo:
        """Obtain a fresh token (or credentials wrapper)."""

    async def get_token(self) -> TokenInfo:
        """Return a valid token, acquiring a new one if necessary."""
        if self._cached is None or self._cached.is_expired:
            self._cached = await self.acquire_token()
        return self._cached

    def auth_header(self, token: TokenInfo) -> dict[str, str]:
        return {"Authorization": f"{token.token_type} {token.access_token}"}


class OAuth2ClientCredentials(AuthProvider):
    """Standard OAuth 2.0 client-credentials flow."""

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        scope: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__()
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.scope = scope
        self._transport = transport

    async def acquire_token(self) -> TokenInfo:
        payload = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        if self.scope:
            payload["scope"] = self.scope

        async with httpx.AsyncClient(transport=self._transport) as client:
            resp = await client.post(self.token_url, data=payload)
            resp.raise_for_status()
            body = resp.json()

        return TokenInfo(
            access_token=body["access_token"],
            token_type=body.get("token_type", "Bearer"),
            expires_at=time.time() + body.get("expires_in", 3600),
        )


class BasicAuth(AuthProvider):
    """HTTP Basic authentication (username + password encoded as a token)."""

    def __init__(self, username: str, password: str) -> None:
        super().__init__()
        self._token_value = base64.b64encode(
            f"{username}:{password}".encode()
        ).decode()

    async def acquire_token(self) -> TokenInfo:
        return TokenInfo(access_token=self._token_value, token_type="Basic")


class APIKeyAuth(AuthProvider):
    """Simple API-key / static-token authentication."""

    def __init__(self, api_key: str, header_name: str = "Authorization", prefix: str = "Bearer") -> None:
        super().__init__()
        self._api_key = api_key
        self._header_name = header_name
        self._prefix = prefix

    async def acquire_token(self) -> TokenInfo:
        return TokenInfo(access_token=self._api_key, token_type=self._prefix)

    def auth_header(self, token: TokenInfo) -> dict[str, str]:
        value = f"{self._prefix} {token.access_token}" if self._prefix else token.access_token
        return {self._header_name: value}

