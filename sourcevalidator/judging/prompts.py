"""Prompt templates shared by the provider adapters."""

SYSTEM_PROMPT = (
    "You are a helpful content validation assistant. Always respond with valid JSON."
)

VALIDATION_PROMPT = """\
You are a content validation assistant. Analyze if the following content is relevant to and matches the given query.

Query: "{query}"

Content: "{content}"

Respond in JSON format only:
{{
  "matches": true/false,
  "reasoning": "{reasoning_hint}"
}}"""

DETAILED_REASONING_HINT = (
    "Brief explanation of why the content does or doesn't match the query"
)
SHORT_REASONING_HINT = "Brief explanation"


def build_prompt(query: str, content: str, reasoning_hint: str = DETAILED_REASONING_HINT) -> str:
    """Embed the query and page text into the validation prompt."""
    return VALIDATION_PROMPT.format(
        query=query, content=content, reasoning_hint=reasoning_hint
    )
