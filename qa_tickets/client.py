"""
Zendesk API client for the QA Ticket Automation System.

Wraps an ``httpx.AsyncClient`` with bearer authentication, optional
impersonation through ``X-On-Behalf-Of``, and rate limit handling: a 429
response is retried after the number of seconds in ``Retry-After``.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    stop_never,
)

from .config import ZendeskConfig
from .models import Brand


logger = logging.getLogger(__name__)


DEFAULT_RETRY_AFTER = 1


class ZendeskAPIError(Exception):
    """Error when communicating with the Zendesk API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def parse_retry_after(value: Optional[str]) -> int:
    """
    Seconds to wait before retrying a rate limited request.

    Falls back to one second when the header is absent, not an integer,
    or not positive.
    """
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER
    return seconds if seconds > 0 else DEFAULT_RETRY_AFTER


def _is_rate_limited(response: httpx.Response) -> bool:
    return response.status_code == 429


def _wait_retry_after(retry_state: RetryCallState) -> float:
    response = retry_state.outcome.result()
    return float(parse_retry_after(response.headers.get("Retry-After")))


def _log_rate_limit(retry_state: RetryCallState) -> None:
    response = retry_state.outcome.result()
    logger.warning(
        f"Rate limited on {response.request.method} {response.request.url}, "
        f"retrying in {retry_state.next_action.sleep:.0f}s "
        f"(attempt {retry_state.attempt_number})"
    )


def _give_up(retry_state: RetryCallState) -> httpx.Response:
    # Hand the last 429 back so the caller raises a ZendeskAPIError for it
    return retry_state.outcome.result()


class ZendeskClient:
    """
    Async client for the Zendesk Support and Help Center APIs.

    Must be used as an async context manager.
    """

    def __init__(
        self,
        config: ZendeskConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the Zendesk client.

        Args:
            config: Zendesk configuration with subdomain and credentials.
            transport: Optional httpx transport (used by tests).
            sleep: Coroutine used to wait out rate limits.
        """
        self._config = config
        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "ZendeskClient":
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            timeout=self._config.request_timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _stop_strategy(self):
        if self._config.max_rate_limit_retries > 0:
            return stop_after_attempt(self._config.max_rate_limit_retries + 1)
        return stop_never

    def _headers(self, on_behalf_of: Optional[int]) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._config.oauth_token}",
        }
        if on_behalf_of:
            headers["X-On-Behalf-Of"] = str(on_behalf_of)
        return headers

    async def request(
        self,
        method: str,
        url: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
        on_behalf_of: Optional[int] = None,
    ) -> Any:
        """
        Send an authenticated request and return the parsed JSON body.

        Args:
            method: HTTP method.
            url: Absolute URL.
            json: Optional JSON body.
            params: Optional query parameters.
            on_behalf_of: Optional user id to impersonate.

        Returns:
            Decoded JSON response.

        Raises:
            ZendeskAPIError: On a non-2xx response or a network failure.
        """
        if not self._client:
            raise RuntimeError("Client must be used within a context manager")

        headers = self._headers(on_behalf_of)
        retrying = AsyncRetrying(
            retry=retry_if_result(_is_rate_limited),
            wait=_wait_retry_after,
            stop=self._stop_strategy(),
            sleep=self._sleep,
            before_sleep=_log_rate_limit,
            retry_error_callback=_give_up,
        )

        try:
            response = await retrying(
                self._client.request,
                method,
                url,
                headers=headers,
                json=json,
                params=params,
            )
        except httpx.RequestError as e:
            logger.error(f"Request error for {method} {url}: {e}")
            raise ZendeskAPIError(f"Request failed: {str(e)}") from e

        if not response.is_success:
            raise ZendeskAPIError(
                f"HTTP error! Status: {response.status_code} for {method} {url}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ZendeskAPIError(
                f"Invalid JSON in response from {method} {url}",
                status_code=response.status_code,
            ) from e

    def api_url(self, path: str) -> str:
        """URL on the main Zendesk instance."""
        return f"{self._config.base_url}/api/v2/{path.lstrip('/')}"

    async def list_brands(self) -> list[Brand]:
        """Fetch every brand of the instance."""
        data = await self.request("GET", self.api_url("brands.json"))
        if not isinstance(data, dict):
            raise ZendeskAPIError("Unexpected brand list payload")
        try:
            brands = [Brand.model_validate(brand) for brand in data.get("brands") or []]
        except ValidationError as e:
            raise ZendeskAPIError(f"Invalid brand in brand list: {e}") from e
        logger.info(f"Fetched {len(brands)} brands")
        return brands

    async def search_tickets(self, query: str) -> list[dict]:
        """
        Run a ticket search and return every result across all pages.

        Args:
            query: Zendesk search query, e.g. ``type:ticket tags:qa_oct_2026``.
        """
        results: list[dict] = []
        data = await self.request(
            "GET", self.api_url("search.json"), params={"query": query}
        )
        while True:
            results.extend(data.get("results") or [])
            next_page = data.get("next_page")
            if not next_page:
                break
            logger.debug(f"Following search page: {next_page}")
            data = await self.request("GET", next_page)
        return results

    async def get_json(self, url: str) -> Any:
        """GET an absolute URL, e.g. a pagination link."""
        return await self.request("GET", url)

    async def create_ticket(self, payload: dict, on_behalf_of: int) -> dict:
        """
        Create a ticket while impersonating a user.

        Returns:
            The created ticket object.
        """
        data = await self.request(
            "POST",
            self.api_url("tickets.json"),
            json=payload,
            on_behalf_of=on_behalf_of,
        )
        ticket = data.get("ticket") if isinstance(data, dict) else None
        if not isinstance(ticket, dict) or ticket.get("id") is None:
            raise ZendeskAPIError(
                "Ticket creation response has no ticket id",
                status_code=None,
            )
        return ticket
