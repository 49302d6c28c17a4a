"""Shared fixtures: a fake Zendesk API served through httpx.MockTransport."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from qa_tickets.config import (
    AppConfig,
    ExclusionConfig,
    TicketConfig,
    WindowConfig,
    ZendeskConfig,
)
from qa_tickets.context import RunContext
from qa_tickets.time_window import compute_window


NOW = datetime(2026, 10, 17, 15, 30, tzinfo=timezone.utc)
API_USER_ID = 99

ARTICLES_PATH = "/api/v2/help_center/incremental/articles.json"


def make_config(**overrides) -> AppConfig:
    """Build a valid AppConfig without touching the environment."""
    values = dict(
        zendesk=ZendeskConfig(
            subdomain="acme",
            oauth_token="test-token",
            api_user_id=API_USER_ID,
            request_timeout=5,
            max_rate_limit_retries=0,
        ),
        window=WindowConfig(unit="months", value=1),
        tickets=TicketConfig(
            per_author=2,
            brand_id=1,
            ticket_form_id=55,
            priority="normal",
            group_id=77,
            custom_fields=(),
        ),
        exclusions=ExclusionConfig(
            names=frozenset({"Permanently deleted user", "API User", "Content Block Edit"}),
            brands=frozenset(),
        ),
        read_only=False,
        verbose=False,
        log_level="INFO",
    )
    values.update(overrides)
    return AppConfig(**values)


def make_context(config: AppConfig = None, existing_subjects=frozenset()) -> RunContext:
    config = config or make_config()
    return RunContext(
        config=config,
        window=compute_window(config.window, NOW),
        existing_subjects=frozenset(existing_subjects),
    )


def article(article_id, title, updated_at, updated_by_id, subdomain="help"):
    """Article payload with a single translation, as the export returns it."""
    url = f"https://{subdomain}.zendesk.com/hc/en-us/articles/{article_id}"
    return {
        "id": article_id,
        "title": title,
        "html_url": url,
        "translations": [
            {
                "title": title,
                "html_url": url,
                "locale": "en-us",
                "updated_at": updated_at,
                "updated_by_id": updated_by_id,
            }
        ],
    }


def malformed_next_page(subdomain: str, page: int) -> str:
    """A next_page link as the API returns it."""
    return (
        f"https://{subdomain}.zendesk.com/hc/api/v2/incremental/articles.json"
        f"?include=users%2Ctranslations&start_time=1788220800&page={page}"
    )


class FakeZendesk:
    """
    In-memory Zendesk API.

    Article pages are keyed by (host, page number); the fake only answers on
    the corrected Help Center path, so uncorrected pagination links 404.
    """

    def __init__(self):
        self.brands: list[dict] = []
        self.pages: dict[tuple[str, str], dict] = {}
        self.search_results: list[dict] = []
        self.search_status = 200
        self.failing_hosts: dict[str, int] = {}
        self.failing_pages: dict[tuple[str, str], int] = {}
        self.failing_subjects: set[str] = set()
        self.created: list[dict] = []
        self.requests: list[httpx.Request] = []
        self._next_ticket_id = 1000

    def add_page(self, subdomain, page, articles, users, next_page=None):
        self.pages[(f"{subdomain}.zendesk.com", str(page))] = {
            "articles": articles,
            "users": users,
            "next_page": next_page,
        }

    def hosts_requested(self) -> set[str]:
        return {request.url.host for request in self.requests}

    def posts(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        path = request.url.path

        if path == "/api/v2/brands.json":
            return httpx.Response(200, json={"brands": self.brands})

        if path == "/api/v2/search.json":
            if self.search_status != 200:
                return httpx.Response(self.search_status, json={"error": "nope"})
            return httpx.Response(
                200, json={"results": self.search_results, "next_page": None}
            )

        if path == "/api/v2/tickets.json" and request.method == "POST":
            ticket = json.loads(request.content)["ticket"]
            if ticket["subject"] in self.failing_subjects:
                return httpx.Response(422, json={"error": "RecordInvalid"})
            self._next_ticket_id += 1
            self.created.append(ticket)
            return httpx.Response(
                201, json={"ticket": {"id": self._next_ticket_id, **ticket}}
            )

        if path == ARTICLES_PATH:
            if host in self.failing_hosts:
                return httpx.Response(self.failing_hosts[host])
            key = (host, request.url.params.get("page", "1"))
            if key in self.failing_pages:
                return httpx.Response(self.failing_pages[key])
            if key in self.pages:
                return httpx.Response(200, json=self.pages[key])

        return httpx.Response(404, json={"error": "InvalidEndpoint"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_api() -> FakeZendesk:
    return FakeZendesk()


@pytest.fixture
def config() -> AppConfig:
    return make_config()


@pytest.fixture
def context(config) -> RunContext:
    return make_context(config)
