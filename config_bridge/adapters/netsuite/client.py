"""
NetSuite client: talks to the NetSuite REST Web Services API.

The account id doubles as the host prefix: ``TSTDRV123456_SB`` is served
from ``tstdrv123456-sb.suitetalk.api.netsuite.com``.
"""

from __future__ import annotations

from typing import Any

import httpx

from config_bridge.core.auth import APIKeyAuth
from config_bridge.core.config import ClientConfig, ClientRateLimitConfig, ClientRetryConfig
from config_bridge.core.http_client import AdapterHTTPClient
from config_bridge.adapters.netsuite.constants import NETSUITE


def account_host(account_id: str) -> str:
    return account_id.lower().replace("_", "-")


class NetsuiteClient(AdapterHTTPClient):
    """Client for NetSuite REST record / SuiteQL endpoints."""

    defaults = ClientConfig(
        retry=ClientRetryConfig(max_attempts=3, retry_delay=2.0),
        rate_limit=ClientRateLimitConfig(total=4, get=4, deploy=4),
    )
    login_check_url = "/services/rest/record/v1/metadata-catalog"

    def __init__(
        self,
        credentials: dict[str, Any],
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(NETSUITE, credentials, config, transport)
        self._auth = APIKeyAuth(credentials["access_token"])

    @property
    def account_id(self) -> str:
        return self.credentials["account_id"]

    @property
    def base_url(self) -> str:
        return f"https://{account_host(self.account_id)}.suitetalk.api.netsuite.com"

    async def auth_headers(self) -> dict[str, str]:
        headers = self._auth.auth_header(await self._auth.get_token())
        headers["Prefer"] = "transient"
        return headers

    async def run_suiteql(self, query: str, limit: int | None = None, offset: int = 0) -> list[dict[str, Any]]:
        """Run a SuiteQL query and return its rows."""
        res = await self.post(
            "/services/rest/query/v1/suiteql",
            data={"q": query},
            query_params={"limit": limit or self.get_page_size(), "offset": offset},
        )
        return (res.data or {}).get("items", [])
