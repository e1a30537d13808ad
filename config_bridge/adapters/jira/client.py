"""Jira client: talks to the Jira Cloud REST API (v3)."""

from __future__ import annotations

from typing import Any

import httpx

from config_bridge.core.auth import BasicAuth
from config_bridge.core.config import (
    ClientConfig,
    ClientPageSizeConfig,
    ClientRateLimitConfig,
    ClientRetryConfig,
)
from config_bridge.core.http_client import AdapterHTTPClient
from config_bridge.adapters.jira.constants import JIRA


class JiraClient(AdapterHTTPClient):
    defaults = ClientConfig(
        retry=ClientRetryConfig(max_attempts=5, retry_delay=5.0),
        rate_limit=ClientRateLimitConfig(total=60, get=60, deploy=2),
        page_size=ClientPageSizeConfig(get=1000),
    )
    login_check_url = "/rest/api/3/myself"

    def __init__(
        self,
        credentials: dict[str, Any],
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(JIRA, credentials, config, transport)
        self._auth = BasicAuth(credentials["username"], credentials["api_key"])

    @property
    def base_url(self) -> str:
        return self.credentials["base_url"].rstrip("/")

    async def auth_headers(self) -> dict[str, str]:
        return self._auth.auth_header(await self._auth.get_token())
