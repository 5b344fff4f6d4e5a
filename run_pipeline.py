#!/usr/bin/env python3
"""
Entrypoint for running the scheduled jobs from cron or a shell.

Usage:
    python run_pipeline.py collect
    python run_pipeline.py digest

No shared secret is needed here; whoever can run this already has the
database credentials.
"""
import sys

from competitor_intel.collector import collect_signals
from competitor_intel.database import init_db
from competitor_intel.digest import send_digests

USAGE = "Usage: python run_pipeline.py <collect|digest>"


def main(argv) -> int:
    if len(argv) != 2 or argv[1] not in ("collect", "digest"):
        print(USAGE)
        return 1

    init_db()
    if argv[1] == "collect":
        report = collect_signals()
        print(f"Created {report.signals_created} new signals ({len(report.failures)} failures)")
    else:
        report = send_digests()
        print(f"Sent {report.emails_sent} emails ({len(report.failures)} failures)")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
