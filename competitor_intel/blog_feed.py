"""
Company blog fetching.

This module is a placeholder: blogs without a feed would need per-site
scraping, which is not implemented. Blogs that publish RSS can be added to a
competitor's feed list instead.
"""

from typing import List

from competitor_intel.models import NewsArticle
from util.logging_util import setup_logger

logger = setup_logger(__name__)


def fetch_company_blog(website_url: str) -> List[NewsArticle]:
    """
    Fetch recent posts from a competitor's website.

    Args:
        website_url: The competitor's website.

    Returns:
        Always an empty list for now.
    """
    logger.debug(f"Blog fetching not implemented, skipping {website_url}")
    return []
