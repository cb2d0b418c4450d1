"""Fetching module — URL vetting and bounded content retrieval."""

from sourcevalidator.fetching.content_fetcher import (
    ContentFetcher,
    FetchResult,
    fetch_url_content,
    is_valid_url,
    sanitize_html,
)

__all__ = [
    "ContentFetcher",
    "FetchResult",
    "fetch_url_content",
    "is_valid_url",
    "sanitize_html",
]
