"""Fetch a URL and reduce it to plain text for the LLM.

Only HTML and plain-text responses are accepted. Markup is stripped with
regular expressions and the result is capped at ``MAX_CONTENT_CHARS`` so the
downstream prompt stays within a predictable size.

The download runs on a worker thread and the caller waits at most
``timeout`` seconds for it. Per-read socket timeouts alone do not bound a
server that trickles bytes.
"""

import html
import logging
import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from urllib.parse import urlparse

import requests
from urllib3.exceptions import ReadTimeoutError

from sourcevalidator.errors import UnreachableContentError, UnsupportedContentError

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; SourceValidator/1.0)"
DEFAULT_TIMEOUT = 10.0
MAX_CONTENT_CHARS = 4000
MAX_BODY_BYTES = 2 * 1024 * 1024
CHUNK_SIZE = 1024
SUPPORTED_CONTENT_TYPES = ("text/html", "text/plain")

TIMEOUT_ERROR = "Request timeout - URL took too long to respond"
UNSUPPORTED_TYPE_ERROR = "Unsupported content type. Only HTML and plain text are supported."

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class FetchResult:
    """Outcome of fetching one URL. ``content`` is set only on success."""

    success: bool
    content: str | None = None
    error: str | None = None


def is_valid_url(value: str) -> bool:
    """True if ``value`` is an absolute http(s) URL."""
    if not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def sanitize_html(raw: str, max_chars: int = MAX_CONTENT_CHARS) -> str:
    """Strip scripts, styles and tags, collapse whitespace, truncate.

    ``max_chars`` is clamped to ``0..MAX_CONTENT_CHARS``.
    """
    limit = max(0, min(max_chars, MAX_CONTENT_CHARS))
    text = _SCRIPT_RE.sub("", raw)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = html.unescape(text)
    text = _WHITESPACE_RE.sub(" ", text).strip()
    return text[:limit]


def _body_encoding(resp: requests.Response) -> str:
    """Header charset if one is declared, UTF-8 otherwise.

    requests reports ISO-8859-1 for any text/* response without a charset,
    which garbles UTF-8 pages that only declare it in a <meta> tag.
    """
    content_type = resp.headers.get("content-type", "")
    if "charset=" in content_type.lower() and resp.encoding:
        return resp.encoding
    return "utf-8"


def _read_body(resp: requests.Response, cancelled: threading.Event, max_bytes: int) -> str:
    """Read at most ``max_bytes`` of the body, stopping once ``cancelled`` is set."""
    chunks: list[bytes] = []
    size = 0
    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
        if cancelled.is_set():
            raise UnreachableContentError(TIMEOUT_ERROR)
        if not chunk:
            continue
        chunks.append(chunk)
        size += len(chunk)
        if size >= max_bytes:
            logger.info("Body truncated at %d bytes", max_bytes)
            break
    body = b"".join(chunks)[:max_bytes]
    try:
        return body.decode(_body_encoding(resp), errors="replace")
    except LookupError:
        # Server declared a charset Python does not know
        return body.decode("utf-8", errors="replace")


def _is_read_timeout(exc: BaseException) -> bool:
    """True if ``exc`` wraps a socket read timeout.

    requests re-raises urllib3's ReadTimeoutError from ``iter_content`` as
    a ConnectionError rather than a Timeout.
    """
    seen = set()
    pending = [exc]
    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, (ReadTimeoutError, TimeoutError)):
            return True
        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))
        pending.extend([current.__cause__, current.__context__])
    return False


def _download(url: str, timeout: float, max_bytes: int, cancelled: threading.Event) -> str:
    """GET ``url`` and return its raw text body, or raise a content error."""
    try:
        with requests.get(
            url,
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            stream=True,
        ) as resp:
            if not 200 <= resp.status_code < 300:
                raise UnreachableContentError(f"HTTP {resp.status_code}: {resp.reason}")

            content_type = resp.headers.get("content-type", "")
            if not any(t in content_type for t in SUPPORTED_CONTENT_TYPES):
                raise UnsupportedContentError(UNSUPPORTED_TYPE_ERROR)

            return _read_body(resp, cancelled, max_bytes)
    except requests.Timeout as exc:
        raise UnreachableContentError(TIMEOUT_ERROR) from exc
    except requests.RequestException as exc:
        if _is_read_timeout(exc):
            raise UnreachableContentError(TIMEOUT_ERROR) from exc
        raise UnreachableContentError(str(exc) or "Failed to fetch URL") from exc


def _fetch_text(url: str, timeout: float, max_bytes: int) -> str:
    """Run ``_download`` on a worker thread, giving up after ``timeout`` seconds."""
    deadline = time.monotonic() + timeout
    cancelled = threading.Event()
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fetch")
    try:
        future = executor.submit(_download, url, timeout, max_bytes, cancelled)
        try:
            return future.result(timeout=max(0.0, deadline - time.monotonic()))
        except FutureTimeoutError as exc:
            # The worker stops at its next chunk or socket timeout
            cancelled.set()
            raise UnreachableContentError(TIMEOUT_ERROR) from exc
    finally:
        executor.shutdown(wait=False)


def fetch_url_content(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    max_chars: int = MAX_CONTENT_CHARS,
    max_bytes: int = MAX_BODY_BYTES,
) -> FetchResult:
    """Fetch ``url`` and return its sanitized text.

    Args:
        url: Absolute http(s) URL.
        timeout: Overall deadline in seconds for connecting and reading.
        max_chars: Upper bound on the returned text length.
        max_bytes: Upper bound on the number of body bytes read.

    Returns:
        FetchResult with ``content`` on success, ``error`` otherwise.
    """
    logger.info("Fetching %s", url)
    try:
        raw = _fetch_text(url, timeout, max_bytes)
    except (UnreachableContentError, UnsupportedContentError) as exc:
        logger.warning("Fetch failed for %s: %s", url, exc)
        return FetchResult(success=False, error=str(exc))

    content = sanitize_html(raw, max_chars=max_chars)
    logger.info("Fetched %s: %d chars of text", url, len(content))
    return FetchResult(success=True, content=content)


class ContentFetcher:
    """Fetcher bound to configured limits, injected into the orchestrator."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_chars: int = MAX_CONTENT_CHARS,
        max_bytes: int = MAX_BODY_BYTES,
    ):
        self.timeout = timeout
        self.max_chars = max_chars
        self.max_bytes = max_bytes

    def fetch(self, url: str) -> FetchResult:
        return fetch_url_content(
            url,
            timeout=self.timeout,
            max_chars=self.max_chars,
            max_bytes=self.max_bytes,
        )
