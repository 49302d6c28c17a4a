"""
Configuration module for the QA Ticket Automation System.

Handles all configuration through environment variables with secure defaults.
Never stores sensitive data directly in code.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


# Load environment variables from .env file
load_dotenv()


VALID_WINDOW_UNITS = ("months", "weeks", "days")

DEFAULT_EXCLUDED_NAMES = "Permanently deleted user,API User,Content Block Edit"


def _split_list(raw: str) -> tuple[str, ...]:
    """Split a comma-separated environment value into trimmed items."""
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def parse_custom_fields(raw: str) -> tuple[tuple[int, str], ...]:
    """
    Parse custom ticket fields from an ``id=value,id=value`` string.

    Args:
        raw: Raw environment value.

    Returns:
        Tuple of (field_id, value) pairs.

    Raises:
        ValueError: If an entry is not of the form ``id=value``.
    """
    fields = []
    for item in _split_list(raw):
        field_id, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Invalid custom field entry: '{item}'")
        fields.append((int(field_id.strip()), value.strip()))
    return tuple(fields)


@dataclass(frozen=True)
class ZendeskConfig:
    """Configuration for the Zendesk API."""

    # Instance subdomain; Help Center subdomains come from each brand
    subdomain: str = field(
        default_factory=lambda: os.getenv("ZENDESK_SUBDOMAIN", "")
    )
    # OAuth token with scopes {read, tickets:write, impersonate}
    oauth_token: str = field(
        default_factory=lambda: os.getenv("ZENDESK_OAUTH_TOKEN", "")
    )
    # Tickets are created on behalf of this user
    api_user_id: int = field(
        default_factory=lambda: int(os.getenv("ZENDESK_API_USER_ID", "0"))
    )

    # Request timeout in seconds
    request_timeout: int = field(
        default_factory=lambda: int(os.getenv("REQUEST_TIMEOUT", "30"))
    )

    # 0 retries rate limited requests forever
    max_rate_limit_retries: int = field(
        default_factory=lambda: int(os.getenv("ZENDESK_MAX_RATE_LIMIT_RETRIES", "0"))
    )

    @property
    def base_url(self) -> str:
        """Base URL of the Zendesk instance."""
        return f"https://{self.subdomain}.zendesk.com"


@dataclass(frozen=True)
class WindowConfig:
    """
    Relative range used to find articles to QA.

    ``value`` counts back from today: with ``unit="months"``, 0 is the
    current calendar month, 1 the previous calendar month, and so on.
    """

    unit: str = field(
        default_factory=lambda: os.getenv("QA_WINDOW_UNIT", "months").lower()
    )
    value: int = field(
        default_factory=lambda: int(os.getenv("QA_WINDOW_VALUE", "1"))
    )


@dataclass(frozen=True)
class TicketConfig:
    """Static fields applied to every QA ticket."""

    per_author: int = field(
        default_factory=lambda: int(os.getenv("QA_TICKETS_PER_AUTHOR", "2"))
    )
    brand_id: int = field(
        default_factory=lambda: int(os.getenv("QA_TICKET_BRAND_ID", "0"))
    )
    ticket_form_id: int = field(
        default_factory=lambda: int(os.getenv("QA_TICKET_FORM_ID", "0"))
    )
    priority: str = field(
        default_factory=lambda: os.getenv("QA_TICKET_PRIORITY", "normal")
    )
    group_id: int = field(
        default_factory=lambda: int(os.getenv("QA_TICKET_GROUP_ID", "0"))
    )
    custom_fields: tuple[tuple[int, str], ...] = field(
        default_factory=lambda: parse_custom_fields(
            os.getenv("QA_TICKET_CUSTOM_FIELDS", "")
        )
    )

    def static_fields(self) -> dict:
        """Routing fields merged into every ticket payload."""
        return {
            "brand_id": self.brand_id,
            "ticket_form_id": self.ticket_form_id,
            "priority": self.priority,
            "group_id": self.group_id,
        }


@dataclass(frozen=True)
class ExclusionConfig:
    """Authors and brands skipped during QA selection."""

    names: frozenset[str] = field(
        default_factory=lambda: frozenset(
            _split_list(os.getenv("QA_EXCLUDED_NAMES", DEFAULT_EXCLUDED_NAMES))
        )
    )
    brands: frozenset[int] = field(
        default_factory=lambda: frozenset(
            int(b) for b in _split_list(os.getenv("QA_EXCLUDED_BRANDS", ""))
        )
    )


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration aggregating all config sections."""

    zendesk: ZendeskConfig = field(default_factory=ZendeskConfig)
    window: WindowConfig = field(default_factory=WindowConfig)
    tickets: TicketConfig = field(default_factory=TicketConfig)
    exclusions: ExclusionConfig = field(default_factory=ExclusionConfig)

    # Log the tickets that would be created without creating them
    read_only: bool = field(default_factory=lambda: _env_bool("QA_READ_ONLY"))
    # Extra logging of pagination, sampling and payloads
    verbose: bool = field(default_factory=lambda: _env_bool("QA_VERBOSE"))

    # Logging level
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO")
    )

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.verbose else self.log_level

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors = []

        if not self.zendesk.subdomain:
            errors.append("ZENDESK_SUBDOMAIN is required")
        if not self.zendesk.oauth_token:
            errors.append("ZENDESK_OAUTH_TOKEN is required")
        if self.zendesk.api_user_id <= 0:
            errors.append("ZENDESK_API_USER_ID must be a positive user id")
        if self.zendesk.max_rate_limit_retries < 0:
            errors.append("ZENDESK_MAX_RATE_LIMIT_RETRIES cannot be negative")

        if self.window.unit not in VALID_WINDOW_UNITS:
            errors.append(
                f"QA_WINDOW_UNIT must be one of {', '.join(VALID_WINDOW_UNITS)}"
            )
        if self.window.value < 0:
            errors.append("QA_WINDOW_VALUE cannot be negative")

        if self.tickets.per_author < 1:
            errors.append("QA_TICKETS_PER_AUTHOR must be at least 1")

        return errors


def get_config() -> AppConfig:
    """
    Get application configuration.

    Returns:
        AppConfig instance with all settings loaded from environment.
    """
    return AppConfig()
