"""
Zendesk client: talks to the Zendesk Support / Guide REST API.

Authenticates with an API token (``<email>/token:<token>``) or a
password over HTTP basic auth.
"""

from __future__ import annotations

from typing import Any

import httpx

from config_bridge.core.auth import AuthProvider, BasicAuth
from config_bridge.core.config import (
    ClientConfig,
    ClientPageSizeConfig,
    ClientRateLimitConfig,
    ClientRetryConfig,
)
from config_bridge.core.http_client import AdapterHTTPClient
from config_bridge.adapters.zendesk.constants import ZENDESK


class ZendeskClient(AdapterHTTPClient):
    """Client for a single Zendesk account (subdomain)."""

    defaults = ClientConfig(
        retry=ClientRetryConfig(max_attempts=5, retry_delay=5.0),
        rate_limit=ClientRateLimitConfig(total=100, get=100, deploy=100),
        max_requests_per_minute=600,
        page_size=ClientPageSizeConfig(get=100),
    )
    login_check_url = "/api/v2/account"

    def __init__(
        self,
        credentials: dict[str, Any],
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(ZENDESK, credentials, config, transport)
        username = credentials["username"]
        if credentials.get("api_key"):
            self._auth: AuthProvider = BasicAuth(f"{username}/token", credentials["api_key"])
        else:
            self._auth = BasicAuth(username, credentials["password"])

    @property
    def base_url(self) -> str:
        if self.credentials.get("base_url"):
            return self.credentials["base_url"].rstrip("/")
        return f"https://{self.credentials['subdomain']}.zendesk.com"

    async def auth_headers(self) -> dict[str, str]:
        return self._auth.auth_header(await self._auth.get_token())
