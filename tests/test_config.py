"""Tests for configuration module."""

import os
from unittest.mock import patch

import pytest

from qa_tickets.config import (
    AppConfig,
    ExclusionConfig,
    TicketConfig,
    WindowConfig,
    ZendeskConfig,
    get_config,
    parse_custom_fields,
)


class TestZendeskConfig:
    """Tests for ZendeskConfig."""

    def test_default_values(self):
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            config = ZendeskConfig()
            assert config.subdomain == ""
            assert config.request_timeout == 30
            assert config.max_rate_limit_retries == 0

    def test_env_override(self):
        """Test environment variable override."""
        env = {"ZENDESK_SUBDOMAIN": "acme", "ZENDESK_API_USER_ID": "99"}
        with patch.dict(os.environ, env):
            config = ZendeskConfig()
            assert config.base_url == "https://acme.zendesk.com"
            assert config.api_user_id == 99


class TestWindowConfig:
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = WindowConfig()
            assert (config.unit, config.value) == ("months", 1)

    def test_unit_lowercased(self):
        with patch.dict(os.environ, {"QA_WINDOW_UNIT": "Weeks", "QA_WINDOW_VALUE": "2"}):
            config = WindowConfig()
            assert (config.unit, config.value) == ("weeks", 2)


class TestTicketConfig:
    """Tests for TicketConfig."""

    def test_default_cap(self):
        with patch.dict(os.environ, {}, clear=True):
            assert TicketConfig().per_author == 2

    def test_static_fields(self):
        config = TicketConfig(brand_id=1, ticket_form_id=2, priority="high", group_id=3)
        assert config.static_fields() == {
            "brand_id": 1,
            "ticket_form_id": 2,
            "priority": "high",
            "group_id": 3,
        }

    def test_custom_fields_from_env(self):
        with patch.dict(os.environ, {"QA_TICKET_CUSTOM_FIELDS": "360001=kb_qa, 360002 = yes"}):
            assert TicketConfig().custom_fields == ((360001, "kb_qa"), (360002, "yes"))


class TestParseCustomFields:
    def test_empty(self):
        assert parse_custom_fields("") == ()

    def test_invalid_entry(self):
        with pytest.raises(ValueError, match="Invalid custom field"):
            parse_custom_fields("360001")


class TestExclusionConfig:
    """Tests for ExclusionConfig."""

    def test_default_names(self):
        with patch.dict(os.environ, {}, clear=True):
            config = ExclusionConfig()
            assert "API User" in config.names
            assert "Content Block Edit" in config.names
            assert config.brands == frozenset()

    def test_env_lists(self):
        env = {"QA_EXCLUDED_NAMES": "Bot, Robot ,", "QA_EXCLUDED_BRANDS": "1, 2"}
        with patch.dict(os.environ, env):
            config = ExclusionConfig()
            assert config.names == frozenset({"Bot", "Robot"})
            assert config.brands == frozenset({1, 2})


class TestAppConfig:
    """Tests for AppConfig."""

    @pytest.fixture
    def valid(self):
        return AppConfig(
            zendesk=ZendeskConfig(subdomain="acme", oauth_token="tok", api_user_id=99),
            window=WindowConfig(unit="months", value=1),
            tickets=TicketConfig(per_author=2),
        )

    def test_validate_all_valid(self, valid):
        assert valid.validate() == []

    def test_validate_missing_credentials(self):
        config = AppConfig(
            zendesk=ZendeskConfig(subdomain="", oauth_token="", api_user_id=0),
            window=WindowConfig(unit="months", value=1),
            tickets=TicketConfig(per_author=2),
        )
        errors = config.validate()
        assert any("ZENDESK_SUBDOMAIN" in e for e in errors)
        assert any("ZENDESK_OAUTH_TOKEN" in e for e in errors)
        assert any("ZENDESK_API_USER_ID" in e for e in errors)

    def test_validate_window(self, valid):
        config = AppConfig(zendesk=valid.zendesk, window=WindowConfig(unit="years", value=-1),
                           tickets=valid.tickets)
        errors = config.validate()
        assert any("QA_WINDOW_UNIT" in e for e in errors)
        assert any("QA_WINDOW_VALUE" in e for e in errors)

    def test_validate_cap(self, valid):
        config = AppConfig(zendesk=valid.zendesk, window=valid.window,
                           tickets=TicketConfig(per_author=0))
        assert any("QA_TICKETS_PER_AUTHOR" in e for e in config.validate())

    def test_verbose_switches_to_debug(self, valid):
        assert AppConfig(zendesk=valid.zendesk, verbose=True, log_level="INFO") \
            .effective_log_level == "DEBUG"


class TestGetConfig:
    def test_returns_app_config(self):
        assert isinstance(get_config(), AppConfig)
