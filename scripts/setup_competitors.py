#!/usr/bin/env python3
"""CLI tool for setting up a user and the competitors they track.

Reads a YAML file like:

    user:
      id: 1
      email: me@example.com
    competitors:
      - name: Acme
        website: https://acme.example
        rss_feeds: https://acme.example/feed.xml, https://news.example/acme.rss
      - name: Globex
    preferences:
      signal_types: [product_launch, funding, leadership_change, earnings_report]
      delivery_email: true
      delivery_dashboard: true
      checks_per_day: 6

Usage:
    python scripts/setup_competitors.py path/to/setup.yaml
"""

import argparse
import sys
from pathlib import Path

# Add repo root to path so we can import project modules
REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT))


def main():
    parser = argparse.ArgumentParser(
        description="Create a user's profile, competitors and preferences from a YAML file"
    )
    parser.add_argument("config", type=Path, help="Path to the setup YAML file")
    args = parser.parse_args()

    from competitor_intel.database import init_db
    from competitor_intel.onboarding import apply_setup, load_setup_config

    if not args.config.exists():
        print(f"File not found: {args.config}")
        sys.exit(1)

    init_db()
    try:
        competitor_ids = apply_setup(load_setup_config(args.config))
    except ValueError as e:
        print(f"Error saving setup: {e}")
        sys.exit(1)

    print(f"Saved setup with {len(competitor_ids)} competitors")


if __name__ == "__main__":
    main()
