"""FastAPI dependency injection — shared component singletons.

Builds the rate limiter, content fetcher, provider adapters and the
orchestrator once from configuration, then provides them via Depends().
"""

import logging

from sourcevalidator.api.rate_limit import RateLimiter
from sourcevalidator.config import Config, get_config
from sourcevalidator.fetching.content_fetcher import ContentFetcher
from sourcevalidator.judging.registry import build_providers, default_provider_name
from sourcevalidator.orchestrator import ValidationOrchestrator

logger = logging.getLogger(__name__)

# ── Singletons (populated by init_components) ───────────────────────

_config: Config | None = None
_orchestrator: ValidationOrchestrator | None = None


def init_components(config: Config | None = None) -> None:
    """Initialize all components. Call once at startup."""
    global _config, _orchestrator

    _config = config or get_config()

    limiter = RateLimiter(
        max_requests=_config.rate_limit_max_requests,
        window_seconds=_config.rate_limit_window_seconds,
    )
    fetcher = ContentFetcher(
        timeout=_config.fetch_timeout_seconds,
        max_chars=_config.max_content_chars,
    )
    providers = build_providers(_config)
    default_provider = default_provider_name(_config.llm_provider)

    for name, adapter in providers.items():
        if adapter.is_configured:
            logger.info("Provider %s ready (model=%s)", name.value, adapter.model)
        else:
            logger.warning("Provider %s has no API key configured", name.value)

    _orchestrator = ValidationOrchestrator(
        limiter=limiter,
        fetcher=fetcher,
        providers=providers,
        default_provider=default_provider,
    )
    logger.info(
        "Components initialized (default provider=%s, limit=%d/%ss)",
        default_provider.value,
        limiter.max_requests,
        limiter.window,
    )


def is_initialized() -> bool:
    """Check if components have been initialized (or mocked for testing)."""
    return _config is not None and _orchestrator is not None


def get_settings() -> Config:
    assert _config is not None, "Components not initialized — call init_components()"
    return _config


def get_orchestrator() -> ValidationOrchestrator:
    assert _orchestrator is not None, "Components not initialized — call init_components()"
    return _orchestrator
