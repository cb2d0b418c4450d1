"""Shared pytest fixtures for SourceValidator tests."""

from unittest.mock import MagicMock

import pytest

from sourcevalidator.api.rate_limit import RateLimiter
from sourcevalidator.config import Config


class FakeClock:
    """Manually advanced clock for deterministic rate-limit tests."""

    def __init__(self, start: float = 1000.0):
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(fake_clock) -> RateLimiter:
    """10 requests per 60s, driven by the fake clock."""
    return RateLimiter(max_requests=10, window_seconds=60, clock=fake_clock)


@pytest.fixture
def config() -> Config:
    """Config with both providers configured, independent of the environment."""
    return Config(
        llm_provider="openai",
        openai_api_key="sk-test",
        openai_model="gpt-4o-mini",
        openai_base_url="https://api.openai.test/v1",
        huggingface_api_key="hf-test",
        huggingface_model="mistralai/Mistral-7B-Instruct-v0.2",
        huggingface_base_url="https://hf.test",
        llm_timeout_seconds=30.0,
        fetch_timeout_seconds=10.0,
        max_content_chars=4000,
        rate_limit_max_requests=10,
        rate_limit_window_seconds=60.0,
    )


@pytest.fixture
def sample_html() -> str:
    """A small page with scripts, styles and nested markup."""
    return (
        "<html><head><title>Example Domain</title>"
        "<style>body { color: red; }</style>"
        "<script type='text/javascript'>var x = '<b>not text</b>';</script>"
        "</head><body>\n"
        "<h1>Example Domain</h1>\n"
        "<p>This domain is for use in   illustrative examples.</p>"
        "</body></html>"
    )


def make_http_response(
    status_code: int = 200,
    reason: str = "OK",
    content_type: str = "text/html; charset=utf-8",
    body: bytes = b"",
) -> MagicMock:
    """A mock ``requests.Response`` usable as a context manager.

    ``encoding`` follows requests: the header charset, else ISO-8859-1 for text.
    """
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = reason
    resp.headers = {"content-type": content_type}
    charset = content_type.lower().partition("charset=")[2].split(";")[0].strip()
    resp.encoding = charset or ("ISO-8859-1" if content_type.startswith("text/") else None)
    resp.iter_content.return_value = [body]
    resp.__enter__.return_value = resp
    return resp


def make_json_response(status_code: int = 200, payload=None, text: str = "") -> MagicMock:
    """A mock ``requests.Response`` for provider API calls."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    resp.text = text
    return resp


@pytest.fixture
def http_response():
    """Factory fixture for mock fetch responses."""
    return make_http_response


@pytest.fixture
def json_response():
    """Factory fixture for mock provider responses."""
    return make_json_response
