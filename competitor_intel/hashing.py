"""
Content hashing for signal deduplication.
"""

import hashlib

from competitor_intel.models import NewsArticle


def generate_content_hash(content: str) -> str:
    """Return the 32 character hex MD5 digest of `content`.

    Used as the global deduplication key for signals, not for security.
    """
    return hashlib.md5(content.encode("utf-8")).hexdigest()


def article_content_hash(article: NewsArticle) -> str:
    """Hash an article by its title followed by its URL."""
    return generate_content_hash(article.title + article.url)
