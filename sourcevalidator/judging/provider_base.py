"""Abstract LLM provider interface.

All providers (OpenAI, Hugging Face) implement this interface so the
orchestrator never sees provider-specific request or response details.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class ProviderName(str, Enum):
    """Closed set of supported LLM providers."""

    OPENAI = "openai"
    HUGGINGFACE = "huggingface"


@dataclass
class MatchJudgement:
    """Relevance verdict for one (content, query) pair."""

    matches: bool
    reasoning: str


class ProviderAdapter(ABC):
    """Abstract interface for LLM-backed content judges."""

    model: str

    @abstractmethod
    def validate(self, content: str, query: str) -> MatchJudgement:
        """Ask the provider whether ``content`` satisfies ``query``.

        Args:
            content: Sanitized page text (already truncated).
            query: The caller's natural-language query.

        Returns:
            MatchJudgement; unparseable model output yields a
            non-matching judgement rather than an exception.

        Raises:
            ProviderConfigurationError: the provider's API key is not set.
            ProviderRequestError: the HTTP call failed or returned non-2xx.
        """
        ...

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True if the provider has the credentials it needs."""
        ...

    @property
    @abstractmethod
    def provider_name(self) -> ProviderName:
        """Return the provider identifier."""
        ...
