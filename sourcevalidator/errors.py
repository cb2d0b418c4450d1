"""Exception hierarchy for the validation pipeline.

Each class maps to one failure kind of a validation request. Input and
rate-limit errors stop the pipeline before any outbound call; content errors
are folded into a non-success ``FetchResult``; provider errors propagate to
the orchestrator, which reports them as HTTP 500.
"""


class SourceValidatorError(Exception):
    """Base class for all pipeline errors."""


class InputError(SourceValidatorError):
    """Request body is missing fields or carries malformed values."""

    def __init__(self, error: str, message: str | None = None):
        super().__init__(error)
        self.error = error
        self.message = message or error


class RateLimitError(SourceValidatorError):
    """Client exceeded its request quota for the current window."""

    def __init__(self, retry_after: int):
        super().__init__(f"Rate limit exceeded, retry after {retry_after}s")
        self.retry_after = retry_after


class UnreachableContentError(SourceValidatorError):
    """The target URL could not be fetched (timeout, HTTP error, transport)."""


class UnsupportedContentError(SourceValidatorError):
    """The target URL served something other than HTML or plain text."""


class ProviderConfigurationError(SourceValidatorError):
    """An LLM provider is missing its credentials."""


class ProviderRequestError(SourceValidatorError):
    """An LLM provider call failed or returned an unusable response."""
