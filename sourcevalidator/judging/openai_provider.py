"""OpenAI chat-completions provider.

Calls the ``/chat/completions`` REST endpoint directly and expects the model
to answer with a strict JSON object. Requires an OPENAI_API_KEY.
"""

import logging

import requests

from sourcevalidator.errors import ProviderConfigurationError, ProviderRequestError
from sourcevalidator.judging.parsing import parse_failure, parse_strict
from sourcevalidator.judging.prompts import SYSTEM_PROMPT, build_prompt
from sourcevalidator.judging.provider_base import (
    MatchJudgement,
    ProviderAdapter,
    ProviderName,
)

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAIProvider(ProviderAdapter):
    """Content judge backed by the OpenAI chat-completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        max_tokens: int = 200,
        temperature: float = 0.3,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature

    @property
    def provider_name(self) -> ProviderName:
        return ProviderName.OPENAI

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def validate(self, content: str, query: str) -> MatchJudgement:
        if not self.api_key:
            raise ProviderConfigurationError("OPENAI_API_KEY not configured")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(query, content)},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        logger.info("OpenAI request: model=%s, content=%d chars", self.model, len(content))

        try:
            resp = requests.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("OpenAI request failed: %s", exc)
            raise ProviderRequestError(f"OpenAI request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            logger.error("OpenAI returned HTTP %d", resp.status_code)
            raise ProviderRequestError(f"OpenAI API error: {resp.text}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderRequestError("OpenAI API error: response was not JSON") from exc

        message_content = _first_message_content(data)
        judgement = parse_strict(message_content)
        if judgement is None:
            logger.warning("Unparseable OpenAI output: %s", message_content[:200])
            return parse_failure()

        logger.info("OpenAI verdict: matches=%s", judgement.matches)
        return judgement


def _first_message_content(data) -> str:
    """Content of the first choice's message, ``"{}"`` if absent.

    A payload that has the fields but with the wrong types is a provider
    error rather than an empty answer.
    """
    if not isinstance(data, dict):
        raise ProviderRequestError("OpenAI API error: unexpected response shape")
    choices = data.get("choices") or []
    if not isinstance(choices, list):
        raise ProviderRequestError("OpenAI API error: unexpected choices field")
    if not choices:
        return "{}"
    if not isinstance(choices[0], dict):
        raise ProviderRequestError("OpenAI API error: unexpected choice item")
    message = choices[0].get("message")
    if message is None:
        return "{}"
    if not isinstance(message, dict):
        raise ProviderRequestError("OpenAI API error: unexpected message field")
    content = message.get("content")
    if content is None or content == "":
        return "{}"
    if not isinstance(content, str):
        raise ProviderRequestError("OpenAI API error: message content is not text")
    return content
