"""
Keyword search against the NewsAPI `everything` endpoint.
"""

import time
from datetime import datetime, timezone
from typing import Any, List, Optional

import requests

from competitor_intel.constants import NEWS_API_PAGE_SIZE, NEWS_API_SOURCE_NAME, NEWS_API_URL
from competitor_intel.models import NewsArticle, ParseResult
from util.logging_util import setup_logger
from util.secrets import get_http_timeout, get_news_api_key

logger = setup_logger(__name__)


def _parse_published_at(value: Any, default: int) -> int:
    """Parse an ISO 8601 timestamp such as 2024-01-15T10:00:00Z into epoch seconds.

    Timestamps without an offset are taken as UTC.
    """
    if not isinstance(value, str) or not value:
        return default
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return default
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def _parse_article(raw: Any, fetched_at: int) -> Optional[NewsArticle]:
    """Build a NewsArticle from one raw result, or None if it has no title or url."""
    if not isinstance(raw, dict):
        return None

    title = raw.get("title")
    url = raw.get("url")
    if not isinstance(title, str) or not title.strip():
        return None
    if not isinstance(url, str) or not url.strip():
        return None

    source = raw.get("source")
    source_name = source.get("name") if isinstance(source, dict) else None
    description = raw.get("description")
    content = raw.get("content")

    return NewsArticle(
        title=title.strip(),
        url=url.strip(),
        source=source_name or NEWS_API_SOURCE_NAME,
        published_at=_parse_published_at(raw.get("publishedAt"), fetched_at),
        description=description if isinstance(description, str) else "",
        content=content if isinstance(content, str) else None,
    )


def parse_news_api_response(payload: Any, fetched_at: Optional[int] = None) -> ParseResult[List[NewsArticle]]:
    """Validate a NewsAPI response body and convert it to articles.

    Results without a title or url are dropped. A body that is not a successful
    NewsAPI response gives a failed ParseResult.
    """
    fetched_at = fetched_at or int(time.time())

    if not isinstance(payload, dict):
        return ParseResult.failure(f"expected a JSON object, got {type(payload).__name__}")
    if payload.get("status") == "error":
        return ParseResult.failure(f"{payload.get('code', 'error')}: {payload.get('message', '')}")

    raw_articles = payload.get("articles")
    if not isinstance(raw_articles, list):
        return ParseResult.failure("response has no 'articles' list")

    articles = []
    for raw in raw_articles:
        article = _parse_article(raw, fetched_at)
        if article is not None:
            articles.append(article)
    return ParseResult.success(articles)


def fetch_news_api(
    competitor_name: str,
    api_key: Optional[str] = None,
    timeout: Optional[float] = None,
) -> List[NewsArticle]:
    """
    Search recent news mentioning a competitor.

    Args:
        competitor_name: Query string, usually the competitor's name.
        api_key: NewsAPI key. Defaults to the NEWS_API_KEY setting.
        timeout: Request timeout in seconds. Defaults to the HTTP_TIMEOUT_SECONDS setting.

    Returns:
        Up to 20 articles, newest first. Empty if the key is missing or the request fails.
    """
    api_key = api_key or get_news_api_key()
    if not api_key:
        logger.warning("NEWS_API_KEY not configured, skipping news search")
        return []

    params = {
        "q": competitor_name,
        "sortBy": "publishedAt",
        "language": "en",
        "pageSize": NEWS_API_PAGE_SIZE,
        "apiKey": api_key,
    }

    try:
        response = requests.get(
            NEWS_API_URL,
            params=params,
            timeout=timeout if timeout is not None else get_http_timeout(),
        )
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Error fetching news for {competitor_name}: {e}")
        return []

    result = parse_news_api_response(payload)
    if not result.ok:
        logger.error(f"Unexpected NewsAPI response for {competitor_name}: {result.error}")
        return []

    logger.info(f"NewsAPI returned {len(result.value)} articles for {competitor_name}")
    return result.value
