"""Microsoft Graph client used by the Entra / Intune adapter."""

from __future__ import annotations

from typing import Any

import httpx

from config_bridge.core.auth import OAuth2ClientCredentials
from config_bridge.core.config import ClientConfig, ClientRateLimitConfig, ClientRetryConfig
from config_bridge.core.http_client import AdapterHTTPClient
from config_bridge.adapters.microsoft_security.constants import MICROSOFT_SECURITY

GRAPH_BASE_URL = "https://graph.microsoft.com"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"


class MicrosoftSecurityClient(AdapterHTTPClient):
    defaults = ClientConfig(
        retry=ClientRetryConfig(max_attempts=5, retry_delay=3.0),
        rate_limit=ClientRateLimitConfig(total=50, get=50, deploy=10),
    )
    login_check_url = "/v1.0/organization"

    def __init__(
        self,
        credentials: dict[str, Any],
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(MICROSOFT_SECURITY, credentials, config, transport)
        self._auth = OAuth2ClientCredentials(
            token_url=credentials["token_url"],
            client_id=credentials["client_id"],
            client_secret=credentials["client_secret"],
            scope=GRAPH_SCOPE,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self.credentials.get("base_url", GRAPH_BASE_URL).rstrip("/")

    async def auth_headers(self) -> dict[str, str]:
        return self._auth.auth_header(await self._auth.get_token())
