"""Provider lookup table: ProviderName -> adapter built from config."""

import logging

from sourcevalidator.config import Config
from sourcevalidator.judging.huggingface_provider import HuggingFaceProvider
from sourcevalidator.judging.openai_provider import OpenAIProvider
from sourcevalidator.judging.provider_base import ProviderAdapter, ProviderName

logger = logging.getLogger(__name__)

FALLBACK_PROVIDER = ProviderName.OPENAI


def build_providers(config: Config) -> dict[ProviderName, ProviderAdapter]:
    """Instantiate every supported provider from configuration.

    Adapters are built even without credentials; they report
    ``is_configured`` and fail on ``validate`` instead.
    """
    return {
        ProviderName.OPENAI: OpenAIProvider(
            api_key=config.openai_api_key,
            model=config.openai_model,
            base_url=config.openai_base_url,
            timeout=config.llm_timeout_seconds,
        ),
        ProviderName.HUGGINGFACE: HuggingFaceProvider(
            api_key=config.huggingface_api_key,
            model=config.huggingface_model,
            base_url=config.huggingface_base_url,
            timeout=config.llm_timeout_seconds,
        ),
    }


def parse_provider_name(value: str | None) -> ProviderName | None:
    """Map a loosely-typed provider string onto the enum, ``None`` if unknown."""
    if not value:
        return None
    try:
        return ProviderName(value.strip().lower())
    except ValueError:
        return None


def default_provider_name(configured: str | None) -> ProviderName:
    """Configured default provider, falling back to OpenAI."""
    name = parse_provider_name(configured)
    if name is None:
        if configured:
            logger.warning(
                "LLM_PROVIDER=%r is not supported — falling back to %s",
                configured,
                FALLBACK_PROVIDER.value,
            )
        return FALLBACK_PROVIDER
    return name
