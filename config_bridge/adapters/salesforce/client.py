"""
Salesforce client: talks to the Salesforce REST API (sObject / SOQL).

Authenticates through an OAuth 2.0 client-credentials connected app.
"""

from __future__ import annotations

from typing import Any

import httpx

from config_bridge.core.auth import OAuth2ClientCredentials
from config_bridge.core.config import ClientConfig, ClientRateLimitConfig, ClientRetryConfig
from config_bridge.core.http_client import AdapterHTTPClient

SALESFORCE = "salesforce"
DEFAULT_API_VERSION = "v59.0"


class SalesforceClient(AdapterHTTPClient):
    """Client for a Salesforce org."""

    defaults = ClientConfig(
        retry=ClientRetryConfig(max_attempts=3, retry_delay=1.0),
        rate_limit=ClientRateLimitConfig(total=100, get=50, deploy=25),
    )

    def __init__(
        self,
        credentials: dict[str, Any],
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(SALESFORCE, credentials, config, transport)
        self.api_version: str = credentials.get("api_version", DEFAULT_API_VERSION)
        self._auth = OAuth2ClientCredentials(
            token_url=credentials["token_url"],
            client_id=credentials["client_id"],
            client_secret=credentials["client_secret"],
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self.credentials["base_url"].rstrip("/")

    @property
    def api_base(self) -> str:
        return f"/services/data/{self.api_version}"

    @property
    def login_check_url(self) -> str:  # type: ignore[override]
        return f"{self.api_base}/limits"

    async def auth_headers(self) -> dict[str, str]:
        return self._auth.auth_header(await self._auth.get_token())

    async def query(self, soql: str) -> list[dict[str, Any]]:
        """Run a SOQL query, following ``nextRecordsUrl`` until done."""
        res = await self.get(f"{self.api_base}/query", query_params={"q": soql})
        body = res.data or {}
        records = list(body.get("records", []))
        while not body.get("done", True) and body.get("nextRecordsUrl"):
            res = await self.get(body["nextRecordsUrl"])
            body = res.data or {}
            records.extend(body.get("records", []))
        return records
