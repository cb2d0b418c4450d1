"""Tests for the validation orchestrator state machine.

Fetcher and providers are mocks; the rate limiter is real but driven by a
fake clock.
"""

from unittest.mock import MagicMock

import pytest

from sourcevalidator.errors import ProviderConfigurationError, ProviderRequestError
from sourcevalidator.fetching.content_fetcher import ContentFetcher, FetchResult
from sourcevalidator.judging.provider_base import MatchJudgement, ProviderAdapter, ProviderName
from sourcevalidator.orchestrator import (
    INVALID_URL_ERROR,
    MISSING_FIELDS_ERROR,
    UNEXPECTED_ERROR_MESSAGE,
    UNSUPPORTED_PROVIDER_ERROR,
    ValidationOrchestrator,
    compose_message,
)

BODY = {"url": "https://example.com", "query": "example domain"}


# ── Fixtures ─────────────────────────────────────────────────────────


def _mock_provider(name: ProviderName, matches: bool = True) -> MagicMock:
    provider = MagicMock(spec=ProviderAdapter)
    provider.provider_name = name
    provider.validate.return_value = MatchJudgement(
        matches=matches, reasoning=f"{name.value} says so."
    )
    return provider


@pytest.fixture
def mock_fetcher():
    fetcher = MagicMock(spec=ContentFetcher)
    fetcher.fetch.return_value = FetchResult(
        success=True, content="Example Domain. This domain is for use in examples."
    )
    return fetcher


@pytest.fixture
def providers():
    return {
        ProviderName.OPENAI: _mock_provider(ProviderName.OPENAI),
        ProviderName.HUGGINGFACE: _mock_provider(ProviderName.HUGGINGFACE, matches=False),
    }


@pytest.fixture
def orchestrator(limiter, mock_fetcher, providers):
    return ValidationOrchestrator(
        limiter=limiter,
        fetcher=mock_fetcher,
        providers=providers,
        default_provider=ProviderName.OPENAI,
    )


# ── Happy path ───────────────────────────────────────────────────────


class TestSuccess:
    def test_matching_content(self, orchestrator, mock_fetcher, providers):
        outcome = orchestrator.handle("1.2.3.4", BODY)

        assert outcome.status_code == 200
        body = outcome.response.to_json()
        assert body["success"] is True
        assert body["isValidLink"] is True
        assert body["contentMatchesQuery"] is True
        assert body["provider"] == "openai"
        assert body["message"] == "Link is valid and content matches query! openai says so."
        assert "error" not in body
        assert "retryAfter" not in body

        mock_fetcher.fetch.assert_called_once_with("https://example.com")
        providers[ProviderName.OPENAI].validate.assert_called_once_with(
            "Example Domain. This domain is for use in examples.", "example domain"
        )
        providers[ProviderName.HUGGINGFACE].validate.assert_not_called()

    def test_explicit_provider(self, orchestrator, providers):
        outcome = orchestrator.handle("c", {**BODY, "provider": "huggingface"})
        body = outcome.response.to_json()
        assert outcome.status_code == 200
        assert body["provider"] == "huggingface"
        assert body["contentMatchesQuery"] is False
        assert body["message"].startswith("Link is valid, but content does not match query.")
        providers[ProviderName.OPENAI].validate.assert_not_called()

    def test_configured_default_provider(self, limiter, mock_fetcher, providers):
        orchestrator = ValidationOrchestrator(
            limiter, mock_fetcher, providers, default_provider=ProviderName.HUGGINGFACE
        )
        assert orchestrator.handle("c", BODY).response.provider == "huggingface"

    def test_compose_message(self):
        assert compose_message(MatchJudgement(True, "R")) == "Link is valid and content matches query! R"
        assert compose_message(MatchJudgement(False, "R")) == (
            "Link is valid, but content does not match query. R"
        )


# ── Input errors ─────────────────────────────────────────────────────


class TestInputErrors:
    @pytest.mark.parametrize("body", [
        {"query": "q"},
        {"url": "https://example.com"},
        {"url": "", "query": "q"},
        {"url": "   ", "query": "q"},
        {"url": "https://example.com", "query": "   "},
        {},
        None,
        ["https://example.com", "q"],
        {"url": 123, "query": "q"},
    ])
    def test_missing_fields(self, orchestrator, mock_fetcher, body):
        outcome = orchestrator.handle("c", body)
        assert outcome.status_code == 400
        data = outcome.response.to_json()
        assert data["success"] is False
        assert data["isValidLink"] is False
        assert data["contentMatchesQuery"] is False
        assert data["error"] == MISSING_FIELDS_ERROR
        assert data["message"] == "URL and query are required"
        mock_fetcher.fetch.assert_not_called()

    @pytest.mark.parametrize("url", ["ftp://example.com", "not a url", "example.com"])
    def test_invalid_url(self, orchestrator, mock_fetcher, url):
        outcome = orchestrator.handle("c", {"url": url, "query": "q"})
        assert outcome.status_code == 400
        assert outcome.response.error == INVALID_URL_ERROR
        assert outcome.response.message == INVALID_URL_ERROR
        mock_fetcher.fetch.assert_not_called()

    def test_unknown_provider(self, orchestrator, mock_fetcher):
        outcome = orchestrator.handle("c", {**BODY, "provider": "anthropic"})
        assert outcome.status_code == 400
        assert outcome.response.error == UNSUPPORTED_PROVIDER_ERROR
        assert "openai" in outcome.response.message
        mock_fetcher.fetch.assert_not_called()


# ── Rate limiting ────────────────────────────────────────────────────


class TestRateLimiting:
    def test_eleventh_request_rejected(self, orchestrator, mock_fetcher):
        for _ in range(10):
            assert orchestrator.handle("1.2.3.4", BODY).status_code == 200

        outcome = orchestrator.handle("1.2.3.4", BODY)

        assert outcome.status_code == 429
        data = outcome.response.to_json()
        assert data["success"] is False
        assert data["error"] == "Too many requests"
        assert data["retryAfter"] > 0
        assert outcome.headers["Retry-After"] == str(data["retryAfter"])
        assert mock_fetcher.fetch.call_count == 10

    def test_rate_limit_checked_before_input(self, orchestrator):
        for _ in range(10):
            orchestrator.handle("c", {})
        assert orchestrator.handle("c", {}).status_code == 429

    def test_window_reset_allows_again(self, orchestrator, fake_clock):
        for _ in range(11):
            orchestrator.handle("c", BODY)
        fake_clock.advance(61)
        assert orchestrator.handle("c", BODY).status_code == 200


# ── Fetch and provider failures ──────────────────────────────────────


class TestFailures:
    def test_fetch_failure_is_200(self, orchestrator, mock_fetcher, providers):
        mock_fetcher.fetch.return_value = FetchResult(success=False, error="HTTP 404: Not Found")

        outcome = orchestrator.handle("c", BODY)

        assert outcome.status_code == 200
        data = outcome.response.to_json()
        assert data["success"] is False
        assert data["isValidLink"] is False
        assert data["error"] == "HTTP 404: Not Found"
        assert data["message"] == "HTTP 404: Not Found"
        providers[ProviderName.OPENAI].validate.assert_not_called()

    def test_provider_configuration_error(self, orchestrator, providers):
        providers[ProviderName.OPENAI].validate.side_effect = ProviderConfigurationError(
            "OPENAI_API_KEY not configured"
        )
        outcome = orchestrator.handle("c", BODY)
        assert outcome.status_code == 500
        data = outcome.response.to_json()
        assert data["success"] is False
        assert data["isValidLink"] is True
        assert data["message"] == "LLM validation failed"
        assert data["error"] == "OPENAI_API_KEY not configured"
        assert data["provider"] == "openai"

    def test_provider_request_error(self, orchestrator, providers):
        providers[ProviderName.OPENAI].validate.side_effect = ProviderRequestError("OpenAI API error: boom")
        outcome = orchestrator.handle("c", BODY)
        assert outcome.status_code == 500
        assert outcome.response.error == "OpenAI API error: boom"

    def test_missing_adapter(self, limiter, mock_fetcher):
        orchestrator = ValidationOrchestrator(limiter, mock_fetcher, providers={})
        outcome = orchestrator.handle("c", BODY)
        assert outcome.status_code == 500
        assert outcome.response.is_valid_link is True
        assert "not available" in outcome.response.error

    def test_unexpected_error_is_generic_500(self, orchestrator, mock_fetcher):
        mock_fetcher.fetch.side_effect = RuntimeError("disk on fire")
        outcome = orchestrator.handle("c", BODY)
        assert outcome.status_code == 500
        data = outcome.response.to_json()
        assert data["success"] is False
        assert data["isValidLink"] is False
        assert data["message"] == UNEXPECTED_ERROR_MESSAGE
        assert data["error"] == "disk on fire"
