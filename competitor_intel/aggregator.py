"""
Gathers candidate articles for a competitor from every source.
"""

from typing import Callable, List

from competitor_intel.blog_feed import fetch_company_blog
from competitor_intel.models import Competitor, NewsArticle
from competitor_intel.news_api import fetch_news_api
from competitor_intel.rss_feed import fetch_rss_feeds
from util.logging_util import setup_logger

logger = setup_logger(__name__)


def dedupe_by_url(articles: List[NewsArticle]) -> List[NewsArticle]:
    """Drop articles whose URL was already seen, keeping the first occurrence."""
    seen_urls = set()
    unique = []
    for article in articles:
        if article.url in seen_urls:
            continue
        seen_urls.add(article.url)
        unique.append(article)
    return unique


def gather_competitor_news(
    competitor: Competitor,
    fetch_news: Callable[[str], List[NewsArticle]] = fetch_news_api,
    fetch_feeds: Callable[[List[str]], List[NewsArticle]] = fetch_rss_feeds,
    fetch_blog: Callable[[str], List[NewsArticle]] = fetch_company_blog,
) -> List[NewsArticle]:
    """
    Collect articles about a competitor from news search, its feeds and its blog.

    Sources are queried in that order, so when two sources return the same URL
    the news search result is the one kept.

    Returns:
        Articles with unique URLs.
    """
    all_articles = list(fetch_news(competitor.name))

    if competitor.rss_feeds:
        all_articles.extend(fetch_feeds(competitor.rss_feeds))

    if competitor.website:
        all_articles.extend(fetch_blog(competitor.website))

    unique_articles = dedupe_by_url(all_articles)
    logger.info(
        f"Found {len(unique_articles)} articles for {competitor.name} "
        f"({len(all_articles) - len(unique_articles)} duplicate URLs dropped)"
    )
    return unique_articles
