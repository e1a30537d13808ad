"""
Shared HTTP client for every adapter.

Wraps an httpx.AsyncClient with the three concerns all vendor APIs need:
lazy login (a single shared login per client), throttling through a
RateLimiter, and retries for throttled / failing requests.  Responses are
returned as a small Response envelope; failures surface as HTTPError,
HTTPTimeoutError or ClientError.
"""

from __future__ import annotations

import abc
import asyncio
import functools
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from config_bridge.core.config import ClientConfig
from config_bridge.core.rate_limit import RateLimiter, throttle

logger = logging.getLogger("config_bridge.http_client")

RATE_LIMIT_HEADER_PREFIXES = ("rate-", "x-rate-", "retry-")
ARRAYBUFFER = "arraybuffer"

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


@dataclass
class Response:
    """Standardised response envelope returned by every client call."""

    data: Any
    status: int
    headers: dict[str, str] | None = None


class ClientError(Exception):
    """A request failed before the server answered."""


class HTTPError(ClientError):
    """The server answered with an error status."""

    def __init__(self, message: str, response: Response) -> None:
        super().__init__(message)
        self.response = response


class HTTPTimeoutError(ClientError):
    pass


# ── Decorators ──────────────────────────────────────────────────────────


def requires_login() -> Callable[[F], F]:
    """Log in (once, shared) before running the decorated client method."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(self: "AdapterHTTPClient", *args: Any, **kwargs: Any) -> Any:
            await self.ensure_logged_in()
            return await func(self, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def log_decorator(keys: tuple[str, ...] = ("url", "query_params")) -> Callable[[F], F]:
    """Log the call (with the selected keyword arguments) and its duration."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(self: "AdapterHTTPClient", *args: Any, **kwargs: Any) -> Any:
            printable = {k: kwargs[k] for k in keys if kwargs.get(k) is not None}
            if args:
                printable.setdefault("url", args[0])
            desc = f"{self.client_name}:{func.__name__}({json.dumps(printable, default=str)})"
            started = time.monotonic()
            logger.debug("Running %s", desc)
            try:
                return await func(self, *args, **kwargs)
            finally:
                logger.debug("Finished %s in %.3fs", desc, time.monotonic() - started)

        return wrapper  # type: ignore[return-value]

    return decorator


def _body_kwargs(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if isinstance(data, (bytes, bytearray, str)):
        return {"content": data}
    return {"json": data}


def _loggable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return f"<omitted buffer of length {len(value)}>"
    return value


class AdapterHTTPClient(abc.ABC):
    """Base class for all vendor clients."""

    defaults: ClientConfig = ClientConfig()
    login_check_url: str | None = None

    def __init__(
        self,
        client_name: str,
        credentials: dict[str, Any],
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_name = client_name
        self.credentials = credentials
        self.config = config or self.defaults
        self.rate_limiter = RateLimiter(
            self.config.rate_limit, self.config.max_requests_per_minute
        )
        self._transport = transport
        self._api_client: httpx.AsyncClient | None = None
        self._login_task: asyncio.Future[httpx.AsyncClient] | None = None

    # -- login ------------------------------------------------------------

    @property
    @abc.abstractmethod
    def base_url(self) -> str:
        """Root URL all request paths are relative to."""

    @property
    def is_logged_in(self) -> bool:
        return self._api_client is not None

    async def auth_headers(self) -> dict[str, str]:
        return {}

    async def validate_credentials(self, client: httpx.AsyncClient) -> None:
        """Send a lightweight authenticated call proving the login works."""
        if self.login_check_url is None:
            return
        try:
            resp = await client.get(self.login_check_url)
        except httpx.HTTPError as exc:
            raise ClientError(f"Failed to login to {self.client_name}: {exc}") from exc
        if resp.is_error:
            raise HTTPError(
                f"Failed to login to {self.client_name}: status {resp.status_code}",
                Response(data=resp.text, status=resp.status_code),
            )

    async def login(self) -> httpx.AsyncClient:
        headers = {"Accept": "application/json", **(await self.auth_headers())}
        max_duration = self.config.timeout.max_duration
        client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=max_duration if max_duration > 0 else None,
            transport=self._transport,
        )
        try:
            await self.validate_credentials(client)
        except BaseException:
            await client.aclose()
            raise
        logger.info("Logged in to %s at %s", self.client_name, self.base_url)
        return client

    async def ensure_logged_in(self) -> None:
        if self._api_client is not None:
            return
        if self._login_task is None:
            self._login_task = asyncio.ensure_future(self.login())
        task = self._login_task
        try:
            api_client = await asyncio.shield(task)
        except Exception:
            if self._login_task is task:
                self._login_task = None
            raise
        if self._api_client is None:
            self._api_client = api_client

    async def close(self) -> None:
        if self._api_client is not None and not self._api_client.is_closed:
            await self._api_client.aclose()
        self._api_client = None
        self._login_task = None

    def get_page_size(self) -> int:
        return self.config.page_size.get

    # -- hooks ------------------------------------------------------------

    def clear_values_from_response_data(self, response_data: Any, url: str) -> Any:
        return response_data

    def extract_headers(self, headers: httpx.Headers | dict[str, str] | None) -> dict[str, str] | None:
        """Keep only the headers related to rate limits."""
        if headers is None:
            return None
        return {
            key: value
            for key, value in headers.items()
            if key.lower().startswith(RATE_LIMIT_HEADER_PREFIXES)
        }

    # -- public verbs ---------------------------------------------------

    @throttle("get")
    @log_decorator()
    @requires_login()
    async def get(
        self,
        url: str,
        query_params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        response_type: str | None = None,
    ) -> Response:
        return await self.send_request("get", url, query_params, headers, response_type)

    @throttle("get")
    @log_decorator()
    @requires_login()
    async def head(
        self,
        url: str,
        query_params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response:
        return await self.send_request("head", url, query_params, headers)

    @throttle("get")
    @log_decorator()
    @requires_login()
    async def options(
        self,
        url: str,
        query_params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response:
        return await self.send_request("options", url, query_params, headers)

    @throttle("deploy")
    @log_decorator()
    @requires_login()
    async def post(
        self,
        url: str,
        data: Any = None,
        query_params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response:
        return await self.send_request("post", url, query_params, headers, data=data)

    @throttle("deploy")
    @log_decorator()
    @requires_login()
    async def put(
        self,
        url: str,
        data: Any = None,
        query_params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response:
        return await self.send_request("put", url, query_params, headers, data=data)

    @throttle("deploy")
    @log_decorator()
    @requires_login()
    async def patch(
        self,
        url: str,
        data: Any = None,
        query_params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response:
        return await self.send_request("patch", url, query_params, headers, data=data)

    @throttle("deploy")
    @log_decorator()
    @requires_login()
    async def delete(
        self,
        url: str,
        data: Any = None,
        query_params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response:
        return await self.send_request("delete", url, query_params, headers, data=data)

    # -- transport ------------------------------------------------------

    def _should_retry(self, status: int) -> bool:
        return (
            status == 429
            or status >= 500
            or status in self.config.retry.additional_status_codes_to_retry
        )

    def _retry_delay(self, response: httpx.Response | None) -> float:
        if response is not None:
            retry_after = response.headers.get("retry-after")
            if retry_after is not None:
                try:
                    return max(float(retry_after), 0.0)
                except ValueError:
                    pass
        return self.config.retry.retry_delay

    def _log_response(
        self,
        method: str,
        url: str,
        query_params: dict[str, Any] | None,
        status: int | None,
        response_data: Any,
        headers: httpx.Headers | None,
        request_data: Any,
        error: Exception | None = None,
    ) -> None:
        logger.debug(
            "Received response for %s on %s (%s) with status %s",
            method.upper(),
            url,
            json.dumps({"url": url, "queryParams": query_params}, default=str),
            status,
        )
        response_text = json.dumps(
            {
                "url": url,
                "method": method.upper(),
                "status": status,
                "queryParams": query_params,
                "response": _loggable(
                    self.clear_values_from_response_data(response_data, url)
                ),
                "headers": self.extract_headers(headers),
                "data": _loggable(request_data),
            },
            default=str,
        )
        if error is None:
            logger.debug(
                "Full HTTP response for %s on %s (size %d): %s",
                method.upper(),
                url,
                len(response_text),
                response_text,
            )
        else:
            logger.warning("failed to %s %s with error: %s, %s", method, url, error, response_text)

    async def send_request(
        self,
        method: str,
        url: str,
        query_params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        response_type: str | None = None,
        data: Any = None,
    ) -> Response:
        if self._api_client is None:
            # initialized by requires_login
            raise ClientError(f"uninitialized {self.client_name} client")

        retry = self.config.retry
        max_attempts = max(retry.max_attempts, 1)
        attempt = 0
        while True:
            attempt += 1
            try:
                res = await self._api_client.request(
                    method.upper(),
                    url,
                    params=query_params,
                    headers=headers,
                    **_body_kwargs(data),
                )
            except httpx.TimeoutException as exc:
                if self.config.timeout.retry_on_timeout and attempt < max_attempts:
                    logger.warning(
                        "Timeout on %s %s, retrying (attempt %d/%d)",
                        method.upper(), url, attempt, max_attempts,
                    )
                    await asyncio.sleep(retry.retry_delay)
                    continue
                self._log_response(method, url, query_params, None, None, headers, data, exc)
                raise HTTPTimeoutError(f"Failed to {method} {url} with error: {exc}") from exc
            except httpx.TransportError as exc:
                if attempt < max_attempts:
                    logger.warning(
                        "Connection error on %s %s: %s, retrying (attempt %d/%d)",
                        method.upper(), url, exc, attempt, max_attempts,
                    )
                    await asyncio.sleep(retry.retry_delay)
                    continue
                self._log_response(method, url, query_params, None, None, headers, data, exc)
                raise ClientError(f"Failed to {method} {url} with error: {exc}") from exc

            if self._should_retry(res.status_code) and attempt < max_attempts:
                delay = self._retry_delay(res)
                logger.warning(
                    "Received status %d on %s %s, retrying in %.2fs (attempt %d/%d)",
                    res.status_code, method.upper(), url, delay, attempt, max_attempts,
                )
                await asyncio.sleep(delay)
                continue
            break

        if response_type == ARRAYBUFFER:
            body: Any = res.content
        elif not res.content:
            body = None
        else:
            try:
                body = res.json()
            except ValueError:
                body = res.text

        if res.is_error:
            error = HTTPError(
                f"Failed to {method} {url} with error: "
                f"Request failed with status code {res.status_code}",
                Response(
                    data=body,
                    status=res.status_code,
                    headers=self.extract_headers(res.headers),
                ),
            )
            self._log_response(method, url, query_params, res.status_code, body, res.headers, data, error)
            raise error

        self._log_response(method, url, query_params, res.status_code, body, res.headers, data)
        return Response(
            data=body,
            status=res.status_code,
            headers=self.extract_headers(res.headers),
        )
