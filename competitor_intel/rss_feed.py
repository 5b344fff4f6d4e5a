"""
Generic RSS/Atom feed fetching for competitor news.
"""

import calendar
import time
from typing import List, Optional

import feedparser  # type: ignore
import html2text
import requests

from competitor_intel.constants import DEFAULT_FEED_SOURCE_NAME
from competitor_intel.models import NewsArticle
from util.logging_util import setup_logger
from util.secrets import get_http_timeout

logger = setup_logger(__name__)

USER_AGENT = "competitor-intel/0.1 (+feed reader)"


def _html_to_text(html: str) -> str:
    """Convert HTML to a single line of plain text (no Markdown markup or hard wraps)."""
    if not html:
        return ""
    converter = html2text.HTML2Text()
    converter.body_width = 0
    converter.ignore_emphasis = True
    converter.ignore_links = True
    converter.ignore_images = True
    return " ".join(converter.handle(html).split())


def _extract_description(entry: dict) -> str:
    """Extract a plain-text description, falling back to the full content."""
    summary = entry.get("summary", "") or entry.get("description", "")
    if summary:
        return _html_to_text(summary)
    return _extract_content(entry) or ""


def _extract_content(entry: dict) -> Optional[str]:
    """Extract the full entry body (content:encoded / atom content) as plain text."""
    for block in entry.get("content", []) or []:
        value = block.get("value", "") if isinstance(block, dict) else ""
        if value:
            return _html_to_text(value)
    return None


def _extract_published_at(entry: dict, default: int) -> int:
    """Get the entry's publish time in epoch seconds, or `default` if it has none."""
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if parsed is None:
        return default
    return calendar.timegm(parsed)


def _download_feed(feed_url: str, timeout: float) -> bytes:
    response = requests.get(feed_url, timeout=timeout, headers={"User-Agent": USER_AGENT})
    response.raise_for_status()
    return response.content


def parse_feed_entries(parsed_feed: dict, fetched_at: int) -> List[NewsArticle]:
    """Convert a parsed feed into articles, dropping entries without a title or link."""
    feed_info = parsed_feed.get("feed", {}) or {}
    source = (feed_info.get("title") or "").strip() or DEFAULT_FEED_SOURCE_NAME

    articles = []
    for entry in parsed_feed.get("entries", []):
        title = (entry.get("title") or "").strip()
        link = (entry.get("link") or "").strip()
        if not title or not link:
            continue

        articles.append(NewsArticle(
            title=title,
            url=link,
            source=source,
            published_at=_extract_published_at(entry, fetched_at),
            description=_extract_description(entry),
            content=_extract_content(entry),
        ))
    return articles


def fetch_rss_feeds(feed_urls: List[str], timeout: Optional[float] = None) -> List[NewsArticle]:
    """
    Fetch articles from a list of RSS/Atom feeds.

    Each feed is fetched independently; a feed that cannot be downloaded or
    parsed is logged and skipped.

    Args:
        feed_urls: Feed URLs to read.
        timeout: Per-feed request timeout in seconds. Defaults to the HTTP_TIMEOUT_SECONDS setting.

    Returns:
        Articles from all feeds, in feed order.
    """
    if timeout is None:
        timeout = get_http_timeout()

    articles = []
    fetched_at = int(time.time())

    for feed_url in feed_urls:
        try:
            raw = _download_feed(feed_url, timeout)
            parsed = feedparser.parse(raw)
        except Exception as e:
            logger.error(f"Error fetching RSS feed {feed_url}: {e}")
            continue

        if parsed.get("bozo") and not parsed.get("entries"):
            logger.warning(f"Could not parse feed {feed_url}: {parsed.get('bozo_exception')}")
            continue

        feed_articles = parse_feed_entries(parsed, fetched_at)
        logger.debug(f"Feed {feed_url} gave {len(feed_articles)} articles")
        articles.extend(feed_articles)

    logger.info(f"Fetched {len(articles)} articles from {len(feed_urls)} RSS feeds")
    return articles
