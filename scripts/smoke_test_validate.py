"""Smoke test: fetch a real URL and judge it with a real provider.

Usage:
    python scripts/smoke_test_validate.py                                # example.com, default provider
    python scripts/smoke_test_validate.py --provider huggingface         # Hugging Face
    python scripts/smoke_test_validate.py --url https://... --query "..." # Custom input
    python scripts/smoke_test_validate.py --fetch-only                   # Skip the LLM step
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sourcevalidator.config import get_config
from sourcevalidator.errors import SourceValidatorError
from sourcevalidator.fetching.content_fetcher import ContentFetcher, is_valid_url
from sourcevalidator.judging.provider_base import ProviderName
from sourcevalidator.judging.registry import build_providers, default_provider_name
from sourcevalidator.orchestrator import compose_message

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def test_fetch(fetcher: ContentFetcher, url: str) -> str | None:
    """Fetch and sanitize the URL, printing a preview."""
    print("=" * 60)
    print(f"1. FETCH TEST — {url}")
    print("=" * 60)

    result = fetcher.fetch(url)
    if not result.success:
        print(f"ERROR: {result.error}")
        return None

    print(f"Length:  {len(result.content)} chars")
    print(f"Preview: {result.content[:300]}...")
    return result.content


def test_provider(provider_name: ProviderName, content: str, query: str) -> bool:
    """Ask the provider for a judgement on the fetched content."""
    print("\n" + "=" * 60)
    print(f"2. PROVIDER TEST — {provider_name.value}")
    print("=" * 60)

    adapter = build_providers(get_config())[provider_name]
    print(f"Model:      {adapter.model}")
    print(f"Configured: {adapter.is_configured}")

    try:
        judgement = adapter.validate(content, query)
    except SourceValidatorError as exc:
        print(f"ERROR: {exc}")
        return False

    print(f"Query:   {query}")
    print(f"Matches: {judgement.matches}")
    print(f"Message: {compose_message(judgement)}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Smoke test for the validation pipeline")
    parser.add_argument("--url", type=str, default="https://example.com", help="URL to validate")
    parser.add_argument("--query", type=str, default="example domain", help="Query to check")
    parser.add_argument(
        "--provider",
        choices=[p.value for p in ProviderName],
        help="LLM provider (default: LLM_PROVIDER or openai)",
    )
    parser.add_argument("--fetch-only", action="store_true", help="Only test the fetcher")
    args = parser.parse_args()

    if not is_valid_url(args.url):
        print(f"ERROR: not an http(s) URL: {args.url}")
        sys.exit(1)

    config = get_config()
    fetcher = ContentFetcher(
        timeout=config.fetch_timeout_seconds, max_chars=config.max_content_chars
    )
    content = test_fetch(fetcher, args.url)
    if content is None:
        sys.exit(1)

    if args.fetch_only:
        return

    provider_name = (
        ProviderName(args.provider) if args.provider
        else default_provider_name(config.llm_provider)
    )
    if not test_provider(provider_name, content, args.query):
        sys.exit(1)

    print("\n" + "=" * 60)
    print("ALL TESTS PASSED")
    print("=" * 60)


if __name__ == "__main__":
    main()
