"""Validation orchestrator for the end-to-end request lifecycle.

Composes the rate limiter, URL validator, content fetcher and provider
adapters into one request lifecycle. Every outcome, including unexpected
failures, is returned as a ``ValidationOutcome`` carrying the HTTP status
and the response envelope; nothing is raised to the web layer.
"""

import logging
from dataclasses import dataclass, field

from pydantic import ValidationError

from sourcevalidator.api.models import ValidateRequest, ValidateResponse
from sourcevalidator.api.rate_limit import RateLimiter
from sourcevalidator.errors import InputError, ProviderConfigurationError, RateLimitError
from sourcevalidator.fetching.content_fetcher import ContentFetcher, is_valid_url
from sourcevalidator.judging.provider_base import (
    MatchJudgement,
    ProviderAdapter,
    ProviderName,
)
from sourcevalidator.judging.registry import FALLBACK_PROVIDER, parse_provider_name

logger = logging.getLogger(__name__)

MISSING_FIELDS_ERROR = "Missing required fields"
INVALID_URL_ERROR = "Invalid URL format"
UNSUPPORTED_PROVIDER_ERROR = "Unsupported provider"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred during validation"


@dataclass
class ValidationOutcome:
    """HTTP status, response body and extra headers for one request."""

    status_code: int
    response: ValidateResponse
    headers: dict[str, str] = field(default_factory=dict)


def compose_message(judgement: MatchJudgement) -> str:
    """Human-readable summary of a successful validation."""
    if judgement.matches:
        return f"Link is valid and content matches query! {judgement.reasoning}"
    return f"Link is valid, but content does not match query. {judgement.reasoning}"


class ValidationOrchestrator:
    """End-to-end link validation for a single request."""

    def __init__(
        self,
        limiter: RateLimiter,
        fetcher: ContentFetcher,
        providers: dict[ProviderName, ProviderAdapter],
        default_provider: ProviderName = FALLBACK_PROVIDER,
    ):
        self.limiter = limiter
        self.fetcher = fetcher
        self.providers = providers
        self.default_provider = default_provider

    def handle(self, client_id: str, body) -> ValidationOutcome:
        """Run the pipeline for ``body`` (decoded JSON) sent by ``client_id``."""
        try:
            return self._run(client_id, body)
        except Exception as exc:
            logger.exception("Validation error for client %s", client_id)
            return ValidationOutcome(
                status_code=500,
                response=ValidateResponse(
                    success=False,
                    message=UNEXPECTED_ERROR_MESSAGE,
                    error=str(exc) or type(exc).__name__,
                ),
            )

    def _run(self, client_id: str, body) -> ValidationOutcome:
        try:
            self._check_rate_limit(client_id)
            request = self._parse_request(body)
            provider_name = self._select_provider(request.provider)
        except RateLimitError as exc:
            return ValidationOutcome(
                status_code=429,
                response=ValidateResponse(
                    success=False,
                    message="Rate limit exceeded. Please try again later.",
                    error="Too many requests",
                    retry_after=exc.retry_after,
                ),
                headers={"Retry-After": str(exc.retry_after)},
            )
        except InputError as exc:
            logger.info("Rejected request from %s: %s", client_id, exc.error)
            return ValidationOutcome(
                status_code=400,
                response=ValidateResponse(
                    success=False, message=exc.message, error=exc.error
                ),
            )

        fetch = self.fetcher.fetch(request.url)
        if not fetch.success:
            error = fetch.error or "Could not fetch URL content"
            return ValidationOutcome(
                status_code=200,
                response=ValidateResponse(success=False, message=error, error=error),
            )

        try:
            judgement = self._judge(provider_name, fetch.content, request.query)
        except Exception as exc:
            if isinstance(exc, ProviderConfigurationError):
                logger.error("Provider %s not configured: %s", provider_name.value, exc)
            else:
                logger.exception("Provider %s failed", provider_name.value)
            return ValidationOutcome(
                status_code=500,
                response=ValidateResponse(
                    success=False,
                    message="LLM validation failed",
                    is_valid_link=True,
                    error=str(exc) or type(exc).__name__,
                    provider=provider_name.value,
                ),
            )

        return ValidationOutcome(
            status_code=200,
            response=ValidateResponse(
                success=True,
                message=compose_message(judgement),
                is_valid_link=True,
                content_matches_query=judgement.matches,
                provider=provider_name.value,
            ),
        )

    def _check_rate_limit(self, client_id: str) -> None:
        result = self.limiter.check(client_id)
        if not result.allowed:
            retry_after = self.limiter.retry_after(result)
            logger.warning("Rate limit hit for %s, retry in %ds", client_id, retry_after)
            raise RateLimitError(retry_after)

    @staticmethod
    def _parse_request(body) -> ValidateRequest:
        if not isinstance(body, dict):
            raise InputError(MISSING_FIELDS_ERROR, "URL and query are required")
        try:
            request = ValidateRequest.model_validate(body)
        except ValidationError as exc:
            raise InputError(MISSING_FIELDS_ERROR, "URL and query are required") from exc

        # Whitespace-only fields count as missing, not as an invalid URL
        if not (request.url or "").strip() or not (request.query or "").strip():
            raise InputError(MISSING_FIELDS_ERROR, "URL and query are required")
        if not is_valid_url(request.url):
            raise InputError(INVALID_URL_ERROR)
        return request

    def _select_provider(self, requested: str | None) -> ProviderName:
        if not requested:
            return self.default_provider
        name = parse_provider_name(requested)
        if name is None:
            raise InputError(
                UNSUPPORTED_PROVIDER_ERROR,
                f"Unsupported provider {requested!r}. "
                f"Choose one of: {', '.join(p.value for p in ProviderName)}",
            )
        return name

    def _judge(self, provider_name: ProviderName, content: str, query: str) -> MatchJudgement:
        adapter = self.providers.get(provider_name)
        if adapter is None:
            raise ProviderConfigurationError(f"Provider {provider_name.value} is not available")
        return adapter.validate(content, query)
