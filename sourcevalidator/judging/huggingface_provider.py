"""Hugging Face Inference API provider.

Text-generation models return free-form text, so the verdict is recovered
in stages: an embedded JSON object first, a keyword heuristic otherwise.
Requires a HUGGINGFACE_API_KEY.
"""

import logging

import requests

from sourcevalidator.errors import ProviderConfigurationError, ProviderRequestError
from sourcevalidator.judging.parsing import (
    extract_matches_object,
    keyword_heuristic,
    parse_failure,
    parse_strict,
)
from sourcevalidator.judging.prompts import SHORT_REASONING_HINT, build_prompt
from sourcevalidator.judging.provider_base import (
    MatchJudgement,
    ProviderAdapter,
    ProviderName,
)

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "mistralai/Mistral-7B-Instruct-v0.2"
DEFAULT_BASE_URL = "https://api-inference.huggingface.co"
EMPTY_GENERATION = "{}"


def _generated_text(item: dict) -> str:
    text = item.get("generated_text")
    if text is None or text == "":
        return EMPTY_GENERATION
    if not isinstance(text, str):
        raise ProviderRequestError("Hugging Face API error: generated_text is not text")
    return text


def decode_generated_text(data) -> str:
    """Pull ``generated_text`` out of an inference response.

    The API answers either with a list of generations or with a single
    generation object; any other shape is a provider error.
    """
    if isinstance(data, list):
        if not data:
            return EMPTY_GENERATION
        first = data[0]
        if not isinstance(first, dict):
            raise ProviderRequestError("Hugging Face API error: unexpected generation item")
        return _generated_text(first)
    if isinstance(data, dict):
        return _generated_text(data)
    raise ProviderRequestError(
        f"Hugging Face API error: unexpected response type {type(data).__name__}"
    )


def judge_generated_text(text: str) -> MatchJudgement:
    """Embedded JSON object first, keyword heuristic as the fallback."""
    candidate = extract_matches_object(text)
    if candidate is not None:
        return parse_strict(candidate) or parse_failure()
    return keyword_heuristic(text)


class HuggingFaceProvider(ProviderAdapter):
    """Content judge backed by the Hugging Face Inference API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        max_new_tokens: int = 200,
        temperature: float = 0.3,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_new_tokens = max_new_tokens
        self.temperature = temperature

    @property
    def provider_name(self) -> ProviderName:
        return ProviderName.HUGGINGFACE

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def validate(self, content: str, query: str) -> MatchJudgement:
        if not self.api_key:
            raise ProviderConfigurationError("HUGGINGFACE_API_KEY not configured")

        payload = {
            "inputs": build_prompt(query, content, reasoning_hint=SHORT_REASONING_HINT),
            "parameters": {
                "max_new_tokens": self.max_new_tokens,
                "temperature": self.temperature,
                "return_full_text": False,
            },
        }

        logger.info(
            "Hugging Face request: model=%s, content=%d chars", self.model, len(content)
        )

        try:
            resp = requests.post(
                f"{self.base_url}/models/{self.model}",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Hugging Face request failed: %s", exc)
            raise ProviderRequestError(f"Hugging Face request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            logger.error("Hugging Face returned HTTP %d", resp.status_code)
            raise ProviderRequestError(f"Hugging Face API error: {resp.text}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderRequestError(
                "Hugging Face API error: response was not JSON"
            ) from exc

        generated = decode_generated_text(data)
        judgement = judge_generated_text(generated)
        logger.info("Hugging Face verdict: matches=%s", judgement.matches)
        return judgement
