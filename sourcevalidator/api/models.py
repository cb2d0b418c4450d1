"""Pydantic models for API request/response schemas."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# ── Request models ───────────────────────────────────────────────────


class ValidateRequest(BaseModel):
    """Link validation request.

    Fields are optional at the schema level; the orchestrator reports
    missing values with its own 400 response.
    """

    url: str | None = None
    query: str | None = None
    provider: str | None = None


# ── Response models ──────────────────────────────────────────────────


class ValidateResponse(BaseModel):
    """Result envelope returned for every /validate outcome."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    message: str
    is_valid_link: bool = False
    content_matches_query: bool = False
    error: str | None = None
    provider: str | None = None
    retry_after: int | None = None

    def to_json(self) -> dict:
        """camelCase payload with unset optional keys dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ProviderStatus(BaseModel):
    """Configuration presence for one LLM provider."""

    configured: bool
    model: str | None


class HealthResponse(BaseModel):
    """Service health and provider configuration."""

    ok: bool = True
    provider: str
    openai: ProviderStatus
    huggingface: ProviderStatus
