"""
Constants for the competitor intelligence pipeline.
"""

from pathlib import Path

MODULE_ROOT = Path(__file__).parent

PROMPTS_DIR = MODULE_ROOT / "prompts"
TEMPLATES_DIR = MODULE_ROOT / "templates"

# Signal type labels, in the order they are offered to users
SIGNAL_TYPES = (
    "product_launch",
    "funding",
    "leadership_change",
    "earnings_report",
    "social_media",
    "blog_post",
    "other",
)

SENTIMENTS = ("positive", "negative", "neutral")

# Selected for new users unless they choose otherwise
DEFAULT_SIGNAL_TYPES = (
    "product_launch",
    "funding",
    "leadership_change",
    "earnings_report",
)

# Keyword fallback for when the LLM is unavailable. Checked top to bottom,
# first match wins, so the order is part of the behaviour.
FALLBACK_KEYWORD_RULES = (
    ("funding", ("fund", "raised", "investment", "series")),
    ("leadership_change", ("ceo", "cto", "cfo", "appointed", "joins", "executive")),
    ("earnings_report", ("earnings", "quarterly", "revenue", "profit")),
    ("product_launch", ("launch", "release", "announce", "unveil", "feature")),
    ("social_media", ("tweet", "twitter", "linkedin")),
    ("blog_post", ("blog",)),
)
FALLBACK_SIGNAL_TYPE = "other"

# News search
NEWS_API_URL = "https://newsapi.org/v2/everything"
NEWS_API_PAGE_SIZE = 20
NEWS_API_SOURCE_NAME = "NewsAPI"

# Feeds
DEFAULT_FEED_SOURCE_NAME = "RSS Feed"

# Classification
MAX_CONTENT_CHARS = 2000

# Setup limits
MAX_COMPETITORS_PER_USER = 6
DEFAULT_CHECKS_PER_DAY = 6
DEFAULT_DIGEST_FREQUENCY_HOURS = 12

# Dashboard
DASHBOARD_LOOKBACK_DAYS = 30

# Email delivery
RESEND_API_URL = "https://api.resend.com/emails"
