"""Central configuration for SourceValidator."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from sourcevalidator.fetching.content_fetcher import MAX_CONTENT_CHARS

load_dotenv()

# Project root is the sourcevalidator/ checkout directory
PROJECT_ROOT = Path(__file__).parent.parent

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_HUGGINGFACE_MODEL = "mistralai/Mistral-7B-Instruct-v0.2"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw.strip() else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw.strip() else default
    except ValueError:
        return default


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # Provider selection
    llm_provider: str = field(
        default_factory=lambda: os.getenv("LLM_PROVIDER", "openai")
    )

    # OpenAI
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    openai_model: str = field(
        default_factory=lambda: os.getenv("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL
    )
    openai_base_url: str = field(
        default_factory=lambda: os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    )

    # Hugging Face
    huggingface_api_key: str = field(
        default_factory=lambda: os.getenv("HUGGINGFACE_API_KEY", "")
    )
    huggingface_model: str = field(
        default_factory=lambda: os.getenv("HUGGINGFACE_MODEL") or DEFAULT_HUGGINGFACE_MODEL
    )
    huggingface_base_url: str = field(
        default_factory=lambda: os.getenv(
            "HUGGINGFACE_BASE_URL", "https://api-inference.huggingface.co"
        )
    )

    # Timeouts and bounds
    llm_timeout_seconds: float = field(
        default_factory=lambda: _env_float("LLM_TIMEOUT_SECONDS", 30.0)
    )
    fetch_timeout_seconds: float = field(
        default_factory=lambda: _env_float("FETCH_TIMEOUT_SECONDS", 10.0)
    )
    max_content_chars: int = field(
        default_factory=lambda: _env_int("MAX_CONTENT_CHARS", 4000)
    )

    # Rate limiting
    rate_limit_max_requests: int = field(
        default_factory=lambda: _env_int("RATE_LIMIT_MAX_REQUESTS", 10)
    )
    rate_limit_window_seconds: float = field(
        default_factory=lambda: _env_float("RATE_LIMIT_WINDOW_SECONDS", 60.0)
    )

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    def __post_init__(self):
        self.llm_provider = (self.llm_provider or "openai").strip().lower()
        self.log_level = self.log_level.upper()
        # Page text is a hard bound on prompt size
        self.max_content_chars = max(1, min(self.max_content_chars, MAX_CONTENT_CHARS))

    @property
    def has_openai_key(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def has_huggingface_key(self) -> bool:
        return bool(self.huggingface_api_key)


def get_config() -> Config:
    """Get a Config instance. Call this instead of constructing directly."""
    return Config()
