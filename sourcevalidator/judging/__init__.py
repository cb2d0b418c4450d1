"""Judging module — LLM provider adapters and response parsing."""

from sourcevalidator.judging.huggingface_provider import HuggingFaceProvider
from sourcevalidator.judging.openai_provider import OpenAIProvider
from sourcevalidator.judging.provider_base import MatchJudgement, ProviderAdapter, ProviderName
from sourcevalidator.judging.registry import build_providers, default_provider_name

__all__ = [
    "HuggingFaceProvider",
    "MatchJudgement",
    "OpenAIProvider",
    "ProviderAdapter",
    "ProviderName",
    "build_providers",
    "default_provider_name",
]
