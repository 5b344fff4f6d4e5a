"""
User setup: profile, tracked competitors and signal preferences.

Mirrors what the setup form collects, so accounts can be created from a YAML
file or a script.
"""

import time
from pathlib import Path
from typing import Iterable, List, Optional

import yaml

from competitor_intel.constants import (
    DASHBOARD_LOOKBACK_DAYS,
    DEFAULT_CHECKS_PER_DAY,
    DEFAULT_DIGEST_FREQUENCY_HOURS,
    DEFAULT_SIGNAL_TYPES,
    MAX_COMPETITORS_PER_USER,
    SIGNAL_TYPES,
)
from competitor_intel.database import (
    get_recent_signals,
    insert_competitor,
    upsert_user_preferences,
    upsert_user_profile,
)
from competitor_intel.models import Competitor, Signal, UserPreferences
from util.logging_util import setup_logger

logger = setup_logger(__name__)


def parse_feed_list(feeds) -> List[str]:
    """Accept feeds as a comma separated string or a list, return clean URLs."""
    if not feeds:
        return []
    if isinstance(feeds, str):
        feeds = feeds.split(",")
    return [feed.strip() for feed in feeds if feed and feed.strip()]


def register_competitors(user_id: int, entries: Iterable[dict]) -> List[int]:
    """
    Add competitors for a user.

    Each entry has a `name` and optionally `website` and `rss_feeds`. Entries
    with a blank name are ignored.

    Returns:
        The ids of the new competitors.
    """
    competitors = []
    for entry in entries:
        name = (entry.get("name") or "").strip()
        if not name:
            continue
        website = (entry.get("website") or "").strip() or None
        competitors.append(Competitor(
            user_id=user_id,
            name=name,
            website=website,
            rss_feeds=parse_feed_list(entry.get("rss_feeds")),
        ))

    if not competitors:
        raise ValueError("Please add at least one competitor")
    if len(competitors) > MAX_COMPETITORS_PER_USER:
        raise ValueError(f"At most {MAX_COMPETITORS_PER_USER} competitors can be tracked")

    ids = [insert_competitor(competitor) for competitor in competitors]
    logger.info(f"Registered {len(ids)} competitors for user {user_id}")
    return ids


def save_preferences(
    user_id: int,
    signal_types: Iterable[str] = DEFAULT_SIGNAL_TYPES,
    delivery_email: bool = True,
    delivery_dashboard: bool = True,
    checks_per_day: int = DEFAULT_CHECKS_PER_DAY,
) -> int:
    """Save a user's preferences. Returns the preferences id."""
    signal_types = list(signal_types)
    unknown = [t for t in signal_types if t not in SIGNAL_TYPES]
    if unknown:
        raise ValueError(f"Unknown signal types: {', '.join(unknown)}")
    if checks_per_day < 1 or checks_per_day > 24:
        raise ValueError("checks_per_day must be between 1 and 24")

    preferences = UserPreferences(
        user_id=user_id,
        signal_types=signal_types,
        delivery_email=delivery_email,
        delivery_dashboard=delivery_dashboard,
        check_frequency_hours=24 // checks_per_day,
        email_digest_frequency_hours=DEFAULT_DIGEST_FREQUENCY_HOURS,
    )
    return upsert_user_preferences(preferences)


def load_setup_config(config_path: Path) -> dict:
    """Load a setup file. See scripts/setup_competitors.py for the format."""
    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}
    if "user" not in data:
        raise ValueError(f"{config_path} has no 'user' section")
    return data


def apply_setup(config: dict) -> List[int]:
    """Create the user, competitors and preferences described by a setup config.

    Returns the new competitor ids.
    """
    user = config["user"]
    user_id = int(user["id"])
    upsert_user_profile(user_id, user["email"])

    competitor_ids = register_competitors(user_id, config.get("competitors", []))

    prefs = config.get("preferences") or {}
    save_preferences(
        user_id,
        signal_types=prefs.get("signal_types", DEFAULT_SIGNAL_TYPES),
        delivery_email=prefs.get("delivery_email", True),
        delivery_dashboard=prefs.get("delivery_dashboard", True),
        checks_per_day=prefs.get("checks_per_day", DEFAULT_CHECKS_PER_DAY),
    )
    return competitor_ids


def get_dashboard_signals(user_id: int, competitor_id: Optional[int] = None,
                          days: int = DASHBOARD_LOOKBACK_DAYS, now: Optional[int] = None) -> List[Signal]:
    """Signals shown on a user's dashboard: the last `days` days, newest first."""
    now = now or int(time.time())
    return get_recent_signals(user_id, now - days * 24 * 3600, competitor_id)
